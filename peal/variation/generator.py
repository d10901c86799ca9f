"""
Bounded random variations of a seed SoundParameters.

Each output draws a multiplicative factor per varied field:
    value' = value * (1 + u / 100)
with u uniform over [-v, v] ("balanced"), [0, v] ("higher"/"longer") or
[-v, 0] ("lower"/"shorter"). Results are clamped to sanity bounds that are
widened to include the seed value, so clamping can only pull a value back
toward the seed, never past the [1 - v, 1 + v] envelope.
"""
import dataclasses
import logging
import random
from typing import List, Optional, Tuple, Union

from peal.core.errors import InvalidParameterError
from peal.core.params import clamp_if_bounds
from peal.core.types import EFFECT_NAMES, SOUND_TYPES, SoundParameters, VarianceProfile
from peal.voices.chime import MAX_HARMONICS, MIN_HARMONICS

logger = logging.getLogger(__name__)

# Sanity bounds per varied field
BOUNDS = {
    "duration": (0.05, 2.0),
    "frequency": (100.0, 4000.0),
    "attack": (0.001, 0.1),
    "decay": (0.001, 0.2),
    "sustain": (0.0, 1.0),
    "release": (0.001, 0.5),
    "harmonics": (MIN_HARMONICS, MAX_HARMONICS),
    "pulse_rate": (2.0, 20.0),
    "sweep_range": (0.5, 4.0),
}

RngLike = Union[random.Random, int, None]


def as_rng(rng: RngLike) -> random.Random:
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def bias_range(variance: float, bias: str) -> Tuple[float, float]:
    """Percentage range u is drawn from."""
    if bias in ("higher", "longer"):
        return 0.0, variance
    if bias in ("lower", "shorter"):
        return -variance, 0.0
    return -variance, variance


def bounded(name: str, seed_value: float, value: float) -> float:
    lo, hi = BOUNDS[name]
    return clamp_if_bounds(value, min(lo, seed_value), max(hi, seed_value))


class VariationGenerator:
    """
    Produces parameter sets only; rendering them is the synthesizer's job.
    Draws come from a single random.Random, so a fixed seed repeats a batch exactly.
    """

    def __init__(self, profile: VarianceProfile, sound_type: str = "tone", rng: RngLike = None):
        if sound_type not in SOUND_TYPES:
            raise InvalidParameterError("type", sound_type, f"must be one of {', '.join(SOUND_TYPES)}")
        self.profile = profile
        self.sound_type = sound_type
        self.rng = as_rng(rng)
        # preserve_character narrows every variance; the effect toggle chance is kept
        self.scale = 0.5 if profile.preserve_character else 1.0

    def _vary(self, name: str, seed_value: float, variance: float, bias: str = "balanced") -> float:
        lo, hi = bias_range(variance * self.scale, bias)
        u = self.rng.uniform(lo, hi)
        return bounded(name, seed_value, seed_value * (1.0 + u / 100.0))

    def variation(self, seed: SoundParameters) -> SoundParameters:
        p = self.profile
        changes = {}

        if p.duration_variance > 0:
            changes["duration"] = self._vary("duration", seed.duration, p.duration_variance, p.duration_bias)
        if p.frequency_variance > 0:
            changes["frequency"] = self._vary("frequency", seed.frequency, p.frequency_variance, p.frequency_bias)

        if self.sound_type == "tone" and p.envelope_variance > 0:
            for name in ("attack", "decay", "sustain", "release"):
                changes[name] = self._vary(name, getattr(seed, name), p.envelope_variance)

        voice_changes = {}
        if self.sound_type == "chime" and p.harmonic_variance > 0:
            harmonics = self._vary("harmonics", seed.voice.harmonics, p.harmonic_variance)
            voice_changes["harmonics"] = int(round(harmonics))
        elif self.sound_type == "pulse" and p.pulse_rate_variance > 0:
            voice_changes["pulse_rate"] = self._vary("pulse_rate", seed.voice.pulse_rate, p.pulse_rate_variance)
        elif self.sound_type == "sweep" and p.sweep_range_variance > 0:
            voice_changes["sweep_range"] = self._vary("sweep_range", seed.voice.sweep_range, p.sweep_range_variance)
        if voice_changes:
            changes["voice"] = dataclasses.replace(seed.voice, **voice_changes)

        if p.effect_probability > 0:
            flips = {}
            for name in EFFECT_NAMES:
                if self.rng.random() * 100.0 < p.effect_probability:
                    flips[name] = not getattr(seed.effects, name)
            if flips:
                changes["effects"] = dataclasses.replace(seed.effects, **flips)

        return dataclasses.replace(seed, **changes)

    def batch(self, seed: SoundParameters, count: int) -> List[SoundParameters]:
        return [self.variation(seed) for _ in range(count)]


def generate_batch(
    seed: SoundParameters,
    profile: Optional[VarianceProfile],
    count: int,
    sound_type: str = "tone",
    rng: RngLike = None,
) -> List[SoundParameters]:
    """
    `count` independent variations of `seed`.

    Args:
        seed: Parameter set to vary
        profile: VarianceProfile (None uses the default profile)
        count: Number of outputs (>= 0)
        sound_type: Type of the seed sound; selects the type-specific knobs
        rng: random.Random, an int seed, or None for an unseeded source
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidParameterError("count", count, "must be a non-negative integer")
    if isinstance(profile, dict):
        profile = VarianceProfile.from_dict(profile)
    generator = VariationGenerator(profile or VarianceProfile(), sound_type, rng)
    logger.debug("Generating %d %s variations", count, sound_type)
    return generator.batch(seed, count)
