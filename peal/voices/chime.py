"""
Chime voice: stacked sine partials at integer multiples of the base frequency.
Partial k starts k * spread seconds late, rises over 10 ms and rings out
exponentially over chime_decay.
"""
import logging

import torch

from peal.dsp.envelopes import Envelope
from peal.dsp.oscillators import Oscillator
from peal.voices.base import Voice

logger = logging.getLogger(__name__)

MIN_HARMONICS = 2
MAX_HARMONICS = 4
PARTIAL_ATTACK = 0.01
RING_FLOOR = 0.001


def partial_weights(count: int) -> list:
    """1/(k+1) per partial, normalized to sum to 1."""
    raw = [1.0 / (k + 1) for k in range(count)]
    total = sum(raw)
    return [w / total for w in raw]


class ChimeVoice(Voice):
    name = "chime"

    def compose(self, params, sample_index, sample_rate, generator=None):
        t = self.times(sample_index, sample_rate)
        count = min(max(params.voice.harmonics, MIN_HARMONICS), MAX_HARMONICS)
        if count != params.voice.harmonics:
            logger.warning("Chime harmonics %d clamped to %d", params.voice.harmonics, count)

        ring = max(params.voice.chime_decay - PARTIAL_ATTACK, 1e-3)
        out = torch.zeros_like(t)
        for k, weight in enumerate(partial_weights(count)):
            tk = t - k * params.voice.spread
            rise = torch.clamp(tk / PARTIAL_ATTACK, 0.0, 1.0)
            tail = Envelope.exponential_ramp(tk - PARTIAL_ATTACK, 1.0, RING_FLOOR, ring)
            amp = torch.where(tk < PARTIAL_ATTACK, rise, tail)
            amp = torch.where(tk < 0.0, torch.zeros_like(amp), amp)
            partial = Oscillator.sine(params.frequency * (k + 1), torch.clamp(tk, min=0.0)).double()
            out = out + weight * amp * partial
        return out.float()
