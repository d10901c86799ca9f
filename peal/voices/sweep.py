import torch

from peal.dsp.oscillators import Oscillator
from peal.voices.base import Voice


def sweep_bounds(frequency: float, sweep_range: float, direction: str):
    """(start, end) in Hz. "up" climbs from frequency to frequency * sweep_range."""
    high = frequency * sweep_range
    if direction == "down":
        return high, frequency
    return frequency, high


class SweepVoice(Voice):
    """Oscillator whose frequency glides across the whole duration."""
    name = "sweep"

    def compose(self, params, sample_index, sample_rate, generator=None):
        t = self.times(sample_index, sample_rate)
        start, end = sweep_bounds(params.frequency, params.voice.sweep_range, params.voice.direction)
        progress = torch.clamp(t / params.duration, 0.0, 1.0)
        if params.voice.sweep_type == "exponential":
            inst_freq = start * torch.pow(torch.tensor(end / start, dtype=t.dtype), progress)
        else:
            inst_freq = start + (end - start) * progress
        return Oscillator.swept(params.waveform, inst_freq, sample_rate)
