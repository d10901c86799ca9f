"""
Tests for DSP guardrails: effects chain order and passthrough, bounded feedback,
biquad filtering, output stage.
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import math

import torch
import numpy as np
from peal.core.types import EffectSettings
from peal.dsp.delay import MAX_FEEDBACK, feedback_delay, reverb
from peal.dsp.filters import Filter, Effects
from peal.dsp.fxchain import FXChain
from peal.dsp.noise import Noise
from peal.dsp.postchain import PostChain


def _sine(freq, sample_rate, duration, amplitude=1.0):
    t = torch.arange(int(duration * sample_rate), dtype=torch.float64) / sample_rate
    return (amplitude * torch.sin(2 * np.pi * freq * t)).float()


def _rms(x):
    return float(torch.sqrt(torch.mean(x ** 2)))


class TestEffectsChain:
    """Chain order and the no-effects passthrough."""

    def test_no_effects_is_passthrough(self):
        signal = _sine(440, 44100, 0.1)
        out = FXChain.process(signal, 44100, EffectSettings())
        assert torch.equal(out, signal)

    def test_enabled_lists_in_chain_order(self):
        effects = EffectSettings(compression=True, filter=True, reverb=True)
        assert FXChain.enabled(effects) == ["filter", "reverb", "compression"]

    def test_all_effects_stay_finite(self):
        effects = EffectSettings(filter=True, distortion=True, delay=True, reverb=True, compression=True)
        out = FXChain.process(_sine(880, 44100, 0.3), 44100, effects)
        assert out.shape == (13230,)
        assert torch.all(torch.isfinite(out))


class TestDelay:
    """Feedback delay impulse response and the feedback ceiling."""

    def test_impulse_echoes(self):
        x = torch.zeros(400)
        x[0] = 1.0
        y = feedback_delay(x, 1000, 0.1, 0.3)
        assert abs(float(y[0]) - 1.0) < 1e-6
        assert abs(float(y[50])) < 1e-6
        assert abs(float(y[100]) - 1.0) < 1e-6
        assert abs(float(y[200]) - 0.3) < 1e-6
        assert abs(float(y[300]) - 0.09) < 1e-6

    def test_feedback_above_one_is_clamped(self):
        x = torch.zeros(400)
        x[0] = 1.0
        y = feedback_delay(x, 1000, 0.1, 5.0)
        assert abs(float(y[200]) - MAX_FEEDBACK) < 1e-6
        assert float(y[300]) < float(y[200])

    def test_delay_shorter_than_one_sample_is_dry(self):
        x = _sine(440, 1000, 0.1)
        torch.testing.assert_close(feedback_delay(x, 1000, 0.0001, 0.5), x)

    def test_reverb_keeps_dry_head_and_adds_tail(self):
        x = torch.zeros(44100)
        x[0] = 1.0
        y = reverb(x, 44100, 0.5)
        assert abs(float(y[0]) - 0.7) < 1e-6
        assert torch.all(torch.isfinite(y))
        assert float(torch.sum(torch.abs(y[2000:]))) > 0.0


class TestFilters:
    """Biquads and waveshaping."""

    def test_lowpass_attenuates_high_frequency(self):
        high = _sine(10000, 44100, 0.2)
        out = Filter.lowpass(high, 44100, 1000.0, 0.707)
        assert _rms(out[2000:]) < 0.1 * _rms(high[2000:])

    def test_lowpass_passes_low_frequency(self):
        low = _sine(100, 44100, 0.2)
        out = Filter.lowpass(low, 44100, 5000.0, 0.707)
        assert _rms(out[2000:]) > 0.9 * _rms(low[2000:])

    def test_cutoff_above_nyquist_does_not_blow_up(self):
        out = Filter.lowpass(_sine(440, 44100, 0.05), 44100, 50000.0)
        assert torch.all(torch.isfinite(out))

    def test_distortion_is_odd_and_bounded(self):
        x = torch.linspace(-2.0, 2.0, 401)
        y = Effects.distortion(x, 50.0)
        torch.testing.assert_close(y, -torch.flip(y, dims=[0]))
        limit = (53.0 * 20.0 * math.pi / 180.0) / (math.pi + 50.0)
        assert float(torch.max(torch.abs(y))) <= limit + 1e-6

    def test_compressor_ratio_one_is_identity(self):
        x = _sine(440, 44100, 0.1)
        assert torch.equal(Effects.compressor(x, 44100, 1.0), x)

    def test_compressor_reduces_loud_signal(self):
        x = _sine(440, 44100, 1.0)
        y = Effects.compressor(x, 44100, 4.0)
        assert float(torch.max(torch.abs(y[22050:]))) < 0.9


class TestOutputStage:
    """PostChain clamp, normalize and summary."""

    def test_process_clamps_and_flattens(self):
        x = torch.tensor([[2.0, -3.0, 0.5]])
        out = PostChain.process(x)
        assert out.shape == (3,)
        assert out.dtype == torch.float32
        torch.testing.assert_close(out, torch.tensor([1.0, -1.0, 0.5]))

    def test_peak_normalize_only_when_over(self):
        quiet = torch.tensor([0.2, -0.5])
        torch.testing.assert_close(PostChain.peak_normalize(quiet), quiet)
        loud = torch.tensor([0.8, -1.6])
        torch.testing.assert_close(PostChain.peak_normalize(loud), torch.tensor([0.5, -1.0]))

    def test_summary_has_fixed_length(self):
        summary = PostChain.waveform_summary(_sine(440, 44100, 0.5))
        assert len(summary) == 100
        assert all(0.0 <= v <= 1.0 for v in summary)

    def test_summary_of_short_buffer_pads_with_zeros(self):
        summary = PostChain.waveform_summary(torch.ones(30))
        assert len(summary) == 100
        assert summary[:30] == [1.0] * 30
        assert summary[30:] == [0.0] * 70

    def test_seeded_noise_repeats(self):
        a = Noise.white(1000, Noise.seeded(7))
        b = Noise.white(1000, Noise.seeded(7))
        c = Noise.white(1000, Noise.seeded(8))
        assert torch.equal(a, b)
        assert not torch.equal(a, c)
        assert float(a.min()) >= -1.0 and float(a.max()) < 1.0
