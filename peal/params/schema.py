"""
Parameter schema and per-type defaults.
PARAM_SCHEMA carries UI metadata (type, default, min, max, group, description);
DEFAULT_PRESET is the nested dict every request is merged onto.
"""
from dataclasses import asdict
from typing import Any, Dict, Literal

from peal.core.types import EffectSettings, SoundParameters, VoiceSettings

# Type definitions
ParamType = Literal["float", "int", "bool", "choice"]
ParamGroup = Literal["core", "envelope", "effect", "voice"]

# Schema entry structure: type, default, min, max, group, description
ParamSchemaEntry = Dict[str, Any]


def _make_param(
    param_type: ParamType,
    default: Any,
    min_val: Any,
    max_val: Any,
    group: ParamGroup,
    description: str,
) -> ParamSchemaEntry:
    """Helper to create a schema entry. For "choice", min_val holds the options."""
    return {
        "type": param_type,
        "default": default,
        "min": min_val,
        "max": max_val,
        "group": group,
        "description": description,
    }


# -----------------------------------------------------------------------------
# PARAM_SCHEMA: Metadata for UI (type, default, min, max, group, description)
# Keys are dotted paths into the resolved params dict.
# -----------------------------------------------------------------------------

_COMMON: Dict[str, ParamSchemaEntry] = {
    "waveform": _make_param(
        "choice", "sine", ["sine", "square", "triangle", "sawtooth"], None, "core", "Oscillator shape"
    ),
    "frequency": _make_param("float", 440.0, 20.0, 8000.0, "core", "Base frequency (Hz)"),
    "duration": _make_param("float", 0.5, 0.01, 5.0, "core", "Length (s)"),
    "volume": _make_param("float", 0.5, 0.0, 1.0, "core", "Peak level"),
    "attack": _make_param("float", 0.01, 0.0, 1.0, "envelope", "Attack time (s)"),
    "decay": _make_param("float", 0.1, 0.0, 1.0, "envelope", "Decay time (s)"),
    "sustain": _make_param("float", 0.7, 0.0, 1.0, "envelope", "Sustain level"),
    "release": _make_param("float", 0.1, 0.0, 2.0, "envelope", "Release time (s)"),
    "effects.filter": _make_param("bool", False, False, True, "effect", "Low-pass filter on/off"),
    "effects.filter_frequency": _make_param("float", 1000.0, 20.0, 20000.0, "effect", "Filter cutoff (Hz)"),
    "effects.filter_q": _make_param("float", 1.0, 0.1, 20.0, "effect", "Filter resonance"),
    "effects.distortion": _make_param("bool", False, False, True, "effect", "Waveshaper on/off"),
    "effects.distortion_amount": _make_param("float", 50.0, 0.0, 400.0, "effect", "Waveshaper drive"),
    "effects.delay": _make_param("bool", False, False, True, "effect", "Feedback delay on/off"),
    "effects.delay_time": _make_param("float", 0.1, 0.0, 1.0, "effect", "Delay time (s)"),
    "effects.delay_feedback": _make_param("float", 0.3, 0.0, 0.95, "effect", "Delay feedback"),
    "effects.reverb": _make_param("bool", False, False, True, "effect", "Comb reverb on/off"),
    "effects.reverb_decay": _make_param("float", 0.5, 0.05, 5.0, "effect", "Reverb decay to -60 dB (s)"),
    "effects.compression": _make_param("bool", False, False, True, "effect", "Compressor on/off"),
    "effects.compression_ratio": _make_param("float", 4.0, 1.0, 20.0, "effect", "Compression ratio"),
}

PARAM_SCHEMA: Dict[str, Dict[str, ParamSchemaEntry]] = {
    "tone": dict(_COMMON),
    "click": {
        **_COMMON,
        "voice.click_type": _make_param("choice", "tonal", ["tonal", "noise"], None, "voice", "Burst source"),
        "voice.click_duration": _make_param("float", 0.01, 0.001, 0.1, "voice", "Burst length (s)"),
        "voice.resonance": _make_param("float", 5.0, 0.5, 20.0, "voice", "Noise band-pass Q"),
    },
    "chime": {
        **_COMMON,
        "voice.harmonics": _make_param("int", 3, 2, 4, "voice", "Number of partials"),
        "voice.spread": _make_param("float", 0.05, 0.0, 0.2, "voice", "Onset stagger per partial (s)"),
        "voice.chime_decay": _make_param("float", 0.3, 0.02, 2.0, "voice", "Partial ring time (s)"),
    },
    "sweep": {
        **_COMMON,
        "voice.direction": _make_param("choice", "up", ["up", "down"], None, "voice", "Glide direction"),
        "voice.sweep_range": _make_param("float", 2.0, 0.5, 4.0, "voice", "End/start frequency ratio"),
        "voice.sweep_type": _make_param(
            "choice", "linear", ["linear", "exponential"], None, "voice", "Glide curve"
        ),
    },
    "pulse": {
        **_COMMON,
        "voice.pulse_rate": _make_param("float", 8.0, 2.0, 20.0, "voice", "Pulses per second"),
        "voice.pulse_width": _make_param("float", 0.5, 0.05, 1.0, "voice", "Duty cycle"),
        "voice.pulse_decay": _make_param("float", 0.2, 0.0, 1.0, "voice", "Per-pulse level falloff"),
    },
}


# -----------------------------------------------------------------------------
# DEFAULT_PRESET: full nested params per sound type
# -----------------------------------------------------------------------------

def _preset(voice: Dict[str, Any] = None, **overrides) -> Dict[str, Any]:
    base = asdict(SoundParameters())
    base.update(overrides)
    base["effects"] = asdict(EffectSettings())
    base["voice"] = {**asdict(VoiceSettings()), **(voice or {})}
    return base


DEFAULT_PRESET: Dict[str, Dict[str, Any]] = {
    "tone": _preset(),
    # Percussive types carry their shape in the voice; the ADSR only gates them
    "click": _preset(
        frequency=1000.0, duration=0.05, attack=0.0, decay=0.0, sustain=1.0, release=0.005,
    ),
    "chime": _preset(
        frequency=600.0, duration=0.5, attack=0.0, decay=0.0, sustain=1.0, release=0.05,
    ),
    "sweep": _preset(
        frequency=400.0, duration=0.4, attack=0.01, decay=0.0, sustain=1.0, release=0.05,
    ),
    "pulse": _preset(
        frequency=200.0, duration=0.3, attack=0.0, decay=0.0, sustain=1.0, release=0.01,
        voice={"pulse_rate": 10.0},
    ),
}
