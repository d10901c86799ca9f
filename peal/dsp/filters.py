"""
Filters and waveshaping for the effects chain.
Filters are torchaudio biquads (IIR, minimum-phase), so there is no pre-ringing
ahead of click transients.
"""
import math

import torch
import torchaudio.functional as F

from peal.dsp.envelopes import db_to_lin, ms_to_s


class Filter:
    @staticmethod
    def _nyquist_safe(freq: float, sample_rate: int) -> float:
        return max(1.0, min(float(freq), sample_rate / 2 - 1))

    @staticmethod
    def lowpass(waveform: torch.Tensor, sample_rate: int, cutoff_freq: float, q: float = 0.707) -> torch.Tensor:
        """LowPass biquad; cutoff is clamped below Nyquist."""
        cutoff_freq = Filter._nyquist_safe(cutoff_freq, sample_rate)
        return F.lowpass_biquad(waveform, sample_rate, cutoff_freq, q)

    @staticmethod
    def bandpass(waveform: torch.Tensor, sample_rate: int, center_freq: float, q: float = 0.707) -> torch.Tensor:
        """BandPass biquad (constant skirt gain off). Used by the noise click."""
        center_freq = Filter._nyquist_safe(center_freq, sample_rate)
        return F.bandpass_biquad(waveform, sample_rate, center_freq, q)


class Effects:
    @staticmethod
    def distortion(waveform: torch.Tensor, amount: float) -> torch.Tensor:
        """
        Waveshaper: y = ((3 + k) * x * 20 * pi/180) / (pi + k * |x|), k = amount.
        Input is clamped to [-1, 1] first, as a shaping curve only covers that domain.
        """
        k = float(amount)
        x = torch.clamp(waveform, -1.0, 1.0)
        deg = math.pi / 180.0
        return ((3.0 + k) * x * 20.0 * deg) / (math.pi + k * torch.abs(x))

    @staticmethod
    def compressor(
        waveform: torch.Tensor,
        sample_rate: int,
        ratio: float,
        attack_ms: float = 3.0,
        release_ms: float = 250.0,
        threshold_db: float = -12.0,
    ) -> torch.Tensor:
        """
        Feed-forward compressor with a one-pole peak follower.
        ratio: 1.0 (no compression) upwards.
        The follower uses a single time constant (mean of attack and release)
        so it stays a linear filter and can run through lfilter.
        """
        if ratio <= 1.0 or waveform.numel() == 0:
            return waveform

        threshold_lin = db_to_lin(threshold_db)
        time_ms = max(0.1, 0.5 * (attack_ms + release_ms))
        coeff = math.exp(-1.0 / (ms_to_s(time_ms) * sample_rate))

        a = torch.tensor([1.0, -coeff], dtype=waveform.dtype)
        b = torch.tensor([1.0 - coeff, 0.0], dtype=waveform.dtype)
        env = F.lfilter(torch.abs(waveform), a, b, clamp=False)

        gain = torch.ones_like(waveform)
        over = env > threshold_lin
        if torch.any(over):
            target = threshold_lin + (env[over] - threshold_lin) / ratio
            gain[over] = torch.clamp(target / env[over], 0.1, 1.0)
        return waveform * gain
