from dataclasses import dataclass, field, fields, asdict
from datetime import datetime
import math
import uuid
from typing import Dict, Any, List, Optional

import torch

from peal.core.errors import InvalidParameterError

WAVEFORMS = ("sine", "square", "triangle", "sawtooth")
SOUND_TYPES = ("click", "tone", "chime", "sweep", "pulse")
EFFECT_NAMES = ("filter", "distortion", "delay", "reverb", "compression")


def _finite(name: str, value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(name, value, "not a number")
    if not math.isfinite(v):
        raise InvalidParameterError(name, value, "must be finite")
    return v


def _positive(name: str, value: Any) -> float:
    v = _finite(name, value)
    if v <= 0:
        raise InvalidParameterError(name, value, "must be > 0")
    return v


def _non_negative(name: str, value: Any) -> float:
    v = _finite(name, value)
    if v < 0:
        raise InvalidParameterError(name, value, "must be >= 0")
    return v


def _unit(name: str, value: Any) -> float:
    v = _finite(name, value)
    if v < 0.0 or v > 1.0:
        raise InvalidParameterError(name, value, "must be within [0, 1]")
    return v


def _choice(name: str, value: Any, choices: tuple) -> str:
    if value not in choices:
        raise InvalidParameterError(name, value, f"must be one of {', '.join(choices)}")
    return value


def _known_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


# -----------------------------------------------------------------------------
# Parameter records
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EffectSettings:
    """Effect flags plus the sub-parameters each effect reads when enabled."""
    filter: bool = False
    distortion: bool = False
    delay: bool = False
    reverb: bool = False
    compression: bool = False
    filter_frequency: float = 1000.0
    filter_q: float = 1.0
    distortion_amount: float = 50.0
    delay_time: float = 0.1
    delay_feedback: float = 0.3
    reverb_decay: float = 0.5
    compression_ratio: float = 4.0

    def __post_init__(self):
        for name in EFFECT_NAMES:
            object.__setattr__(self, name, bool(getattr(self, name)))
        object.__setattr__(self, "filter_frequency", _positive("effects.filter_frequency", self.filter_frequency))
        object.__setattr__(self, "filter_q", _positive("effects.filter_q", self.filter_q))
        object.__setattr__(self, "distortion_amount", _non_negative("effects.distortion_amount", self.distortion_amount))
        object.__setattr__(self, "delay_time", _non_negative("effects.delay_time", self.delay_time))
        object.__setattr__(self, "delay_feedback", _non_negative("effects.delay_feedback", self.delay_feedback))
        object.__setattr__(self, "reverb_decay", _non_negative("effects.reverb_decay", self.reverb_decay))
        ratio = _finite("effects.compression_ratio", self.compression_ratio)
        if ratio < 1.0:
            raise InvalidParameterError("effects.compression_ratio", ratio, "must be >= 1")
        object.__setattr__(self, "compression_ratio", ratio)

    def flags(self) -> Dict[str, bool]:
        return {name: getattr(self, name) for name in EFFECT_NAMES}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EffectSettings":
        return cls(**_known_keys(cls, data or {}))


@dataclass(frozen=True)
class VoiceSettings:
    """Type-specific knobs; each voice reads only its own fields."""
    # chime
    harmonics: int = 3
    spread: float = 0.05
    chime_decay: float = 0.3
    # click
    click_type: str = "tonal"
    click_duration: float = 0.01
    resonance: float = 5.0
    # sweep
    direction: str = "up"
    sweep_range: float = 2.0
    sweep_type: str = "linear"
    # pulse
    pulse_rate: float = 8.0
    pulse_width: float = 0.5
    pulse_decay: float = 0.2

    def __post_init__(self):
        harmonics = _finite("voice.harmonics", self.harmonics)
        if harmonics < 1:
            raise InvalidParameterError("voice.harmonics", self.harmonics, "must be >= 1")
        object.__setattr__(self, "harmonics", int(round(harmonics)))
        object.__setattr__(self, "spread", _non_negative("voice.spread", self.spread))
        object.__setattr__(self, "chime_decay", _positive("voice.chime_decay", self.chime_decay))
        _choice("voice.click_type", self.click_type, ("tonal", "noise"))
        object.__setattr__(self, "click_duration", _positive("voice.click_duration", self.click_duration))
        object.__setattr__(self, "resonance", _positive("voice.resonance", self.resonance))
        _choice("voice.direction", self.direction, ("up", "down"))
        object.__setattr__(self, "sweep_range", _positive("voice.sweep_range", self.sweep_range))
        _choice("voice.sweep_type", self.sweep_type, ("linear", "exponential"))
        object.__setattr__(self, "pulse_rate", _positive("voice.pulse_rate", self.pulse_rate))
        width = _positive("voice.pulse_width", self.pulse_width)
        if width > 1.0:
            raise InvalidParameterError("voice.pulse_width", width, "must be within (0, 1]")
        object.__setattr__(self, "pulse_width", width)
        object.__setattr__(self, "pulse_decay", _non_negative("voice.pulse_decay", self.pulse_decay))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "VoiceSettings":
        return cls(**_known_keys(cls, data or {}))


@dataclass(frozen=True)
class SoundParameters:
    """
    Immutable parameter set for one render. Construction validates every field
    and raises InvalidParameterError, so a SoundParameters that exists is renderable.
    """
    waveform: str = "sine"
    frequency: float = 440.0
    duration: float = 0.5
    attack: float = 0.01
    decay: float = 0.1
    sustain: float = 0.7
    release: float = 0.1
    volume: float = 0.5
    effects: EffectSettings = field(default_factory=EffectSettings)
    voice: VoiceSettings = field(default_factory=VoiceSettings)

    def __post_init__(self):
        _choice("waveform", self.waveform, WAVEFORMS)
        object.__setattr__(self, "frequency", _positive("frequency", self.frequency))
        object.__setattr__(self, "duration", _positive("duration", self.duration))
        object.__setattr__(self, "attack", _non_negative("attack", self.attack))
        object.__setattr__(self, "decay", _non_negative("decay", self.decay))
        object.__setattr__(self, "sustain", _unit("sustain", self.sustain))
        object.__setattr__(self, "release", _non_negative("release", self.release))
        object.__setattr__(self, "volume", _unit("volume", self.volume))
        if isinstance(self.effects, dict):
            object.__setattr__(self, "effects", EffectSettings.from_dict(self.effects))
        if isinstance(self.voice, dict):
            object.__setattr__(self, "voice", VoiceSettings.from_dict(self.voice))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SoundParameters":
        """Build from a snake_case dict. Unknown keys are ignored."""
        return cls(**_known_keys(cls, data or {}))


# -----------------------------------------------------------------------------
# Entities
# -----------------------------------------------------------------------------

@dataclass
class Sound:
    type: str
    parameters: SoundParameters = field(default_factory=SoundParameters)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    rendered_buffer: Optional[torch.Tensor] = None
    waveform_summary: Optional[List[float]] = None
    tags: List[str] = field(default_factory=list)
    favorite: bool = False
    created: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        _choice("type", self.type, SOUND_TYPES)


@dataclass
class Track:
    """Positioned, gain-scaled wrapper around a rendered buffer (mixdown only)."""
    buffer: Optional[torch.Tensor]
    name: str = "Track"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_position: float = 0.0
    end_position: float = 1.0
    muted: bool = False
    solo: bool = False
    volume: float = 1.0

    def __post_init__(self):
        self.start_position = _unit("track.start_position", self.start_position)
        self.end_position = _unit("track.end_position", self.end_position)
        self.volume = _non_negative("track.volume", self.volume)


@dataclass(frozen=True)
class VarianceProfile:
    """Percentage bounds for variation. All variances are 0-100."""
    duration_variance: float = 20.0
    frequency_variance: float = 20.0
    envelope_variance: float = 0.0
    effect_probability: float = 0.0
    preserve_character: bool = False
    duration_bias: str = "balanced"
    frequency_bias: str = "balanced"
    harmonic_variance: float = 0.0
    pulse_rate_variance: float = 0.0
    sweep_range_variance: float = 0.0

    def __post_init__(self):
        for name in (
            "duration_variance",
            "frequency_variance",
            "envelope_variance",
            "effect_probability",
            "harmonic_variance",
            "pulse_rate_variance",
            "sweep_range_variance",
        ):
            v = _finite(name, getattr(self, name))
            if v < 0.0 or v > 100.0:
                raise InvalidParameterError(name, v, "must be within [0, 100]")
            object.__setattr__(self, name, v)
        _choice("duration_bias", self.duration_bias, ("shorter", "longer", "balanced"))
        _choice("frequency_bias", self.frequency_bias, ("higher", "lower", "balanced"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VarianceProfile":
        return cls(**_known_keys(cls, data or {}))


@dataclass(frozen=True)
class GenerationRange:
    """Ranges for random proposals. Durations are milliseconds, as the library UI shows them."""
    duration_min: float = 200.0
    duration_max: float = 1500.0
    frequency_min: float = 200.0
    frequency_max: float = 2000.0
    enabled_types: tuple = SOUND_TYPES
    enabled_effects: tuple = ()

    def __post_init__(self):
        lo = _positive("duration_min", self.duration_min)
        hi = _positive("duration_max", self.duration_max)
        if hi < lo:
            raise InvalidParameterError("duration_max", hi, "must be >= duration_min")
        lo = _positive("frequency_min", self.frequency_min)
        hi = _positive("frequency_max", self.frequency_max)
        if hi < lo:
            raise InvalidParameterError("frequency_max", hi, "must be >= frequency_min")
        if not self.enabled_types:
            raise InvalidParameterError("enabled_types", self.enabled_types, "at least one type required")
        for t in self.enabled_types:
            _choice("enabled_types", t, SOUND_TYPES)
        for e in self.enabled_effects:
            _choice("enabled_effects", e, EFFECT_NAMES)
        object.__setattr__(self, "enabled_types", tuple(self.enabled_types))
        object.__setattr__(self, "enabled_effects", tuple(self.enabled_effects))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationRange":
        return cls(**_known_keys(cls, data or {}))
