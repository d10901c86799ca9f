"""
Closed-form oscillators. Phase starts at 0 on sample 0 so layered voices line up.
No band-limiting: square/sawtooth/triangle alias audibly at high fundamentals,
and renders are expected to be reproducible sample-for-sample.
"""
import math
from typing import Union

import numpy as np
import torch

from peal.core.errors import InvalidParameterError
from peal.core.types import WAVEFORMS


def _wave_from_cycles(waveform: str, x: torch.Tensor) -> torch.Tensor:
    """Evaluate a waveform at phase x measured in cycles."""
    if waveform == "sine":
        return torch.sin(2 * np.pi * x)
    if waveform == "square":
        return torch.sign(torch.sin(2 * np.pi * x))
    if waveform == "sawtooth":
        return 2 * (x - torch.floor(x + 0.5))
    if waveform == "triangle":
        # 2 * abs(2 * (x - floor(x + 0.5))) - 1
        return 2 * torch.abs(2 * (x - torch.floor(x + 0.5))) - 1
    raise InvalidParameterError("waveform", waveform, f"must be one of {', '.join(WAVEFORMS)}")


class Oscillator:
    @staticmethod
    def wave(waveform: str, frequency: Union[float, torch.Tensor], t: torch.Tensor, phase: float = 0.0) -> torch.Tensor:
        """
        Fixed-frequency oscillator evaluated at times t (seconds).

        Args:
            waveform: "sine", "square", "triangle" or "sawtooth"
            frequency: Frequency (Hz)
            t: Sample times in seconds
            phase: Initial phase offset in cycles
        """
        return _wave_from_cycles(waveform, frequency * t + phase).float()

    @staticmethod
    def swept(waveform: str, inst_freq: torch.Tensor, sample_rate: int) -> torch.Tensor:
        """
        Oscillator driven by a per-sample frequency curve (phase accumulator).
        Phase is 0 at sample 0 regardless of the starting frequency.
        """
        increments = inst_freq.double() / sample_rate
        cycles = torch.cumsum(increments, dim=0) - increments[0]
        return _wave_from_cycles(waveform, cycles).float()

    @staticmethod
    def sine(frequency: Union[float, torch.Tensor], t: torch.Tensor) -> torch.Tensor:
        return Oscillator.wave("sine", frequency, t)


def synthesize_raw(waveform: str, frequency: float, sample_index: int, sample_rate: int) -> float:
    """
    Single sample of a fixed-frequency oscillator, in [-1, 1].

    This is the per-sample form of the tone voice. Composition for the other
    sound types (click, chime, sweep, pulse) lives in `peal.voices`, keyed by
    type through `peal.voices.get_voice`.
    """
    x = frequency * sample_index / sample_rate
    if waveform == "sine":
        return math.sin(2 * math.pi * x)
    if waveform == "square":
        s = math.sin(2 * math.pi * x)
        return float((s > 0) - (s < 0))
    if waveform == "sawtooth":
        return 2 * (x - math.floor(x + 0.5))
    if waveform == "triangle":
        return 2 * abs(2 * (x - math.floor(x + 0.5))) - 1
    raise InvalidParameterError("waveform", waveform, f"must be one of {', '.join(WAVEFORMS)}")
