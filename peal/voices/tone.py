from peal.dsp.oscillators import Oscillator
from peal.voices.base import Voice


class ToneVoice(Voice):
    """Single fixed-frequency oscillator; all shaping comes from the ADSR."""
    name = "tone"

    def compose(self, params, sample_index, sample_rate, generator=None):
        t = self.times(sample_index, sample_rate)
        return Oscillator.wave(params.waveform, params.frequency, t)
