"""
Effects chain in fixed order: filter -> distortion -> delay -> reverb -> compression.
Disabled effects are skipped; with nothing enabled the signal passes through untouched.
"""
import logging

import torch

from peal.core.types import EffectSettings
from peal.dsp.delay import feedback_delay, reverb
from peal.dsp.filters import Filter, Effects

logger = logging.getLogger(__name__)


class FXChain:
    ORDER = ("filter", "distortion", "delay", "reverb", "compression")

    @classmethod
    def process(cls, signal: torch.Tensor, sample_rate: int, effects: EffectSettings) -> torch.Tensor:
        active = cls.enabled(effects)
        if active:
            logger.debug("Effects chain: %s", " -> ".join(active))
        x = signal
        if effects.filter:
            x = Filter.lowpass(x, sample_rate, effects.filter_frequency, effects.filter_q)
        if effects.distortion:
            x = Effects.distortion(x, effects.distortion_amount)
        if effects.delay:
            x = feedback_delay(x, sample_rate, effects.delay_time, effects.delay_feedback)
        if effects.reverb:
            x = reverb(x, sample_rate, effects.reverb_decay)
        if effects.compression:
            x = Effects.compressor(x, sample_rate, effects.compression_ratio)
        return x

    @classmethod
    def enabled(cls, effects: EffectSettings) -> list:
        return [name for name in cls.ORDER if getattr(effects, name)]
