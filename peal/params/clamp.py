"""
Safety clamps applied to resolved params before validation. These keep
accepted-but-dangerous values renderable (runaway feedback, cutoffs above
Nyquist, more chime partials than the voice renders) and log a warning.
"""
import logging
import math
from typing import Any, Dict

from peal.core.config import SAMPLE_RATE
from peal.core.params import get_param, set_param
from peal.dsp.delay import MAX_FEEDBACK
from peal.voices.chime import MAX_HARMONICS, MIN_HARMONICS

logger = logging.getLogger(__name__)


def _clamp_path(params: dict, path: str, lo: float, hi: float) -> None:
    value = get_param(params, path)
    if value is None:
        return
    try:
        v = float(value)
    except (TypeError, ValueError):
        # Left for SoundParameters validation to reject with a reason
        return
    if math.isnan(v):
        return
    clamped = min(max(v, lo), hi)
    if clamped != v:
        logger.warning("%s=%r clamped to %r", path, value, clamped)
        set_param(params, path, clamped)


def clamp_params(sound_type: str, params: dict, sample_rate: int = SAMPLE_RATE) -> Dict[str, Any]:
    """
    Clamp params to safe ranges. Returns a new dict (does not mutate input).

    Clamps:
    - effects.delay_feedback <= 0.95 (feedback >= 1 never decays)
    - effects.filter_frequency below Nyquist
    - chime voice.harmonics to 2..4
    """
    result = {k: (dict(v) if isinstance(v, dict) else v) for k, v in params.items()}

    _clamp_path(result, "effects.delay_feedback", 0.0, MAX_FEEDBACK)
    _clamp_path(result, "effects.filter_frequency", 1.0, sample_rate / 2 - 1)

    if sound_type == "chime":
        _clamp_path(result, "voice.harmonics", MIN_HARMONICS, MAX_HARMONICS)

    return result
