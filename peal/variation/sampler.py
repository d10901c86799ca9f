"""
Random proposals from a GenerationRange: pick a type, draw a duration and base
frequency inside the ranges, then fill the type's voice knobs with random values.
"""
import logging
import random
from typing import List, Tuple

from peal.core.errors import InvalidParameterError
from peal.core.types import EFFECT_NAMES, WAVEFORMS, GenerationRange, SoundParameters
from peal.params.resolve import build_parameters
from peal.variation.generator import RngLike, as_rng

logger = logging.getLogger(__name__)


def _voice_params(sound_type: str, rng: random.Random) -> dict:
    if sound_type == "tone":
        return {
            "waveform": rng.choice(WAVEFORMS),
            "attack": rng.random() * 0.05,
            "decay": rng.random() * 0.1,
            "sustain": 0.3 + rng.random() * 0.5,
            "release": rng.random() * 0.2 + 0.1,
        }
    if sound_type == "chime":
        return {"voice": {
            "harmonics": rng.randrange(2, 5),
            "spread": rng.random() * 0.1,
            "chime_decay": rng.random() * 0.3 + 0.1,
        }}
    if sound_type == "click":
        return {"voice": {
            "click_type": "noise" if rng.random() > 0.5 else "tonal",
            "click_duration": rng.random() * 0.02 + 0.005,
            "resonance": rng.random() * 10 + 1,
        }}
    if sound_type == "sweep":
        return {"voice": {
            "direction": "up" if rng.random() > 0.5 else "down",
            "sweep_range": rng.random() * 2 + 0.5,
            "sweep_type": "linear" if rng.random() > 0.5 else "exponential",
        }}
    return {"voice": {
        "pulse_rate": rng.random() * 10 + 2,
        "pulse_width": rng.random() * 0.8 + 0.1,
        "pulse_decay": rng.random() * 0.5,
    }}


def propose(generation_range: GenerationRange, rng: random.Random) -> Tuple[str, SoundParameters]:
    r = generation_range
    sound_type = rng.choice(r.enabled_types)
    duration_ms = rng.uniform(r.duration_min, r.duration_max)
    frequency = rng.uniform(r.frequency_min, r.frequency_max)

    params = {"duration": duration_ms / 1000.0, "frequency": frequency}
    # Each allowed effect is a coin flip
    params["effects"] = {name: name in r.enabled_effects and rng.random() > 0.5 for name in EFFECT_NAMES}
    params.update(_voice_params(sound_type, rng))
    return sound_type, build_parameters(sound_type, params)


def propose_batch(
    generation_range: GenerationRange,
    count: int,
    rng: RngLike = None,
) -> List[Tuple[str, SoundParameters]]:
    """`count` random (sound_type, parameters) pairs drawn from the range."""
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidParameterError("count", count, "must be a non-negative integer")
    if isinstance(generation_range, dict):
        generation_range = GenerationRange.from_dict(generation_range)
    rng = as_rng(rng)
    logger.debug("Proposing %d sounds from %s", count, generation_range.enabled_types)
    return [propose(generation_range, rng) for _ in range(count)]
