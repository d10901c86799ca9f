"""
Peal: procedural UI sound engine.

Functional API over the engine components. Buffers are 1-D float32 tensors
at SAMPLE_RATE unless a sample_rate is passed.
"""
from typing import List, Optional, Sequence, Union

import torch

from peal.core.config import SAMPLE_RATE
from peal.core.errors import InvalidParameterError, PealError
from peal.core.types import (
    EffectSettings,
    GenerationRange,
    Sound,
    SoundParameters,
    Track,
    VarianceProfile,
    VoiceSettings,
)
from peal.dsp.mixer import mix_tracks as _mix_tracks
from peal.edit.regions import extract_time_region, insert_region, paste_region_into_original
from peal.synth import Synthesizer
from peal.variation.generator import RngLike, generate_batch


def synthesize(
    parameters: Union[SoundParameters, dict],
    sound_type: str = "tone",
    sample_rate: int = SAMPLE_RATE,
    seed: int = 0,
) -> torch.Tensor:
    return Synthesizer(sample_rate).render(parameters, sound_type, seed=seed)


def extract_region(
    buffer: torch.Tensor,
    start_ratio: float,
    end_ratio: float,
    reference_duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> torch.Tensor:
    return extract_time_region(buffer, start_ratio, end_ratio, reference_duration, sample_rate)


def paste_region(
    original: torch.Tensor,
    extracted: torch.Tensor,
    start_ratio: float,
    end_ratio: float,
) -> torch.Tensor:
    return paste_region_into_original(original, extracted, start_ratio, end_ratio)


def mix_tracks(
    tracks: Sequence[Track],
    composition_duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> Optional[torch.Tensor]:
    return _mix_tracks(tracks, composition_duration, sample_rate)


def generate_variations(
    seed: SoundParameters,
    profile: Optional[VarianceProfile],
    count: int,
    sound_type: str = "tone",
    rng: RngLike = None,
) -> List[SoundParameters]:
    return generate_batch(seed, profile, count, sound_type, rng)


__all__ = [
    "SAMPLE_RATE",
    "PealError",
    "InvalidParameterError",
    "EffectSettings",
    "VoiceSettings",
    "SoundParameters",
    "Sound",
    "Track",
    "VarianceProfile",
    "GenerationRange",
    "Synthesizer",
    "synthesize",
    "extract_region",
    "paste_region",
    "insert_region",
    "mix_tracks",
    "generate_variations",
]
