"""
One composition strategy per sound type. VOICES is the closed registry the
synthesizer dispatches on.
"""
from peal.core.errors import InvalidParameterError
from peal.core.types import SOUND_TYPES
from peal.voices.base import Voice
from peal.voices.chime import ChimeVoice
from peal.voices.click import ClickVoice
from peal.voices.pulse import PulseVoice
from peal.voices.sweep import SweepVoice
from peal.voices.tone import ToneVoice

VOICES = {
    "click": ClickVoice(),
    "tone": ToneVoice(),
    "chime": ChimeVoice(),
    "sweep": SweepVoice(),
    "pulse": PulseVoice(),
}


def get_voice(sound_type: str) -> Voice:
    voice = VOICES.get(sound_type)
    if voice is None:
        raise InvalidParameterError("type", sound_type, f"must be one of {', '.join(SOUND_TYPES)}")
    return voice
