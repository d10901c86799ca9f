"""Named variance profiles offered next to the free-form controls."""
from typing import Dict

from peal.core.errors import InvalidParameterError
from peal.core.types import VarianceProfile

PRESETS: Dict[str, VarianceProfile] = {
    "subtle": VarianceProfile(
        duration_variance=10,
        frequency_variance=5,
        envelope_variance=10,
        effect_probability=0,
        preserve_character=True,
    ),
    "moderate": VarianceProfile(
        duration_variance=25,
        frequency_variance=15,
        envelope_variance=20,
        effect_probability=20,
        preserve_character=True,
    ),
    "wild": VarianceProfile(
        duration_variance=50,
        frequency_variance=40,
        envelope_variance=40,
        effect_probability=50,
        preserve_character=False,
    ),
    "shorterVariants": VarianceProfile(
        duration_variance=30,
        duration_bias="shorter",
        frequency_variance=10,
        frequency_bias="higher",
        envelope_variance=15,
        effect_probability=10,
        preserve_character=True,
    ),
    "longerVariants": VarianceProfile(
        duration_variance=30,
        duration_bias="longer",
        frequency_variance=10,
        frequency_bias="lower",
        envelope_variance=15,
        effect_probability=10,
        preserve_character=True,
    ),
}


def get_preset(name: str) -> VarianceProfile:
    try:
        return PRESETS[name]
    except KeyError:
        raise InvalidParameterError("preset", name, f"must be one of {', '.join(PRESETS)}")
