"""
Parameter resolution: deep-merge DEFAULT_PRESET[type] with incoming params,
apply safety clamps, then validate into SoundParameters.
Incoming params override defaults at any nesting level.
"""
import logging
from typing import Any, Dict

from peal.core.config import SAMPLE_RATE
from peal.core.errors import InvalidParameterError
from peal.core.types import SOUND_TYPES, SoundParameters
from peal.params.clamp import clamp_params
from peal.params.engine_params import to_engine_params
from peal.params.schema import DEFAULT_PRESET

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dicts. override values take precedence.
    Returns a new dict (does not mutate inputs).
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def resolve_params(sound_type: str, params: dict, sample_rate: int = SAMPLE_RATE) -> dict:
    """
    Resolve params by:
    1. Normalizing the request shape (camelCase aliases, dropped fields)
    2. Merging onto DEFAULT_PRESET[sound_type] (user params override defaults)
    3. Clamping to safe ranges

    Args:
        sound_type: "click", "tone", "chime", "sweep" or "pulse"
        params: Incoming params dict (may be partial)

    Returns:
        Fully resolved nested params dict.
    """
    if sound_type not in DEFAULT_PRESET:
        raise InvalidParameterError("type", sound_type, f"must be one of {', '.join(SOUND_TYPES)}")
    engine = to_engine_params(params or {}, sound_type)
    merged = _deep_merge(DEFAULT_PRESET[sound_type], engine)
    return clamp_params(sound_type, merged, sample_rate)


def build_parameters(sound_type: str, params: dict, sample_rate: int = SAMPLE_RATE) -> SoundParameters:
    """resolve_params, then validate. Raises InvalidParameterError with the offending field."""
    return SoundParameters.from_dict(resolve_params(sound_type, params, sample_rate))
