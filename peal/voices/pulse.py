"""
Pulse voice: a train of square-wave bursts. Only whole pulses that fit in the
duration sound; each burst restarts the oscillator phase and has 1 ms linear
edges so the gate itself does not click.
"""
import math

import torch

from peal.dsp.oscillators import Oscillator
from peal.voices.base import Voice

EDGE_TIME = 0.001


def pulse_count(duration: float, rate: float) -> int:
    return int(math.floor(duration * rate))


class PulseVoice(Voice):
    name = "pulse"

    def compose(self, params, sample_index, sample_rate, generator=None):
        t = self.times(sample_index, sample_rate)
        rate = params.voice.pulse_rate
        period = 1.0 / rate
        length = period * params.voice.pulse_width
        edge = min(EDGE_TIME, length / 2.0)

        index = torch.floor(t * rate)
        pos = t - index * period

        gate = torch.minimum(pos / edge, (length - pos) / edge)
        gate = torch.clamp(gate, 0.0, 1.0)
        gate = torch.where(pos < length, gate, torch.zeros_like(gate))
        gate = torch.where(index < pulse_count(params.duration, rate), gate, torch.zeros_like(gate))

        amp = torch.exp(-index * params.voice.pulse_decay)
        burst = Oscillator.wave("square", params.frequency, pos)
        return (burst * gate * amp).float()
