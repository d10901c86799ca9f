"""
Click voice: a very short burst. Tonal clicks are a sine that drops from twice
the base frequency to the base frequency while decaying exponentially; noise
clicks are decaying white noise through a resonant band-pass.
"""
import torch

from peal.dsp.envelopes import Envelope
from peal.dsp.filters import Filter
from peal.dsp.noise import Noise
from peal.dsp.oscillators import Oscillator
from peal.voices.base import Voice

# Tonal burst falls from CLICK_GAIN to CLICK_FLOOR over click_duration
CLICK_GAIN = 0.6
CLICK_FLOOR = 0.001
# Noise burst decay rate across click_duration
NOISE_DECAY_RATE = 10.0


class ClickVoice(Voice):
    name = "click"

    def compose(self, params, sample_index, sample_rate, generator=None):
        t = self.times(sample_index, sample_rate)
        click_duration = params.voice.click_duration

        if params.voice.click_type == "noise":
            return self._noise_click(params, t, sample_rate, click_duration, generator)

        # Pitch drops 2x -> 1x within the first third of the burst
        inst_freq = params.frequency * (1.0 + torch.exp(-t / (click_duration / 3.0)))
        tone = Oscillator.swept("sine", inst_freq, sample_rate)
        burst = Envelope.exponential_ramp(t, CLICK_GAIN, CLICK_FLOOR, click_duration)
        return (tone * burst).float()

    @staticmethod
    def _noise_click(params, t, sample_rate, click_duration, generator):
        noise = Noise.white(t.shape[-1], generator=generator).double()
        progress = t / click_duration
        burst = torch.where(progress < 1.0, torch.exp(-progress * NOISE_DECAY_RATE), torch.zeros_like(t))
        shaped = (noise * burst).float()
        return Filter.bandpass(shaped, sample_rate, params.frequency, params.voice.resonance)
