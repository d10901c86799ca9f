"""
Region editing on rendered buffers: extract a time window, paste it back over
an original with short crossfades, or layer a new sound inside a window.

Ratios are positions in [0, 1] of a buffer's duration. Out-of-range values are
clamped and inverted windows collapse, so none of these operations raise for
odd ratios. Every operation returns a new tensor.
"""
import logging
import math
from typing import Tuple

import torch
import torch.nn.functional as F

from peal.core.config import (
    INSERT_CROSSFADE_FRACTION,
    MAX_CROSSFADE_SAMPLES,
    MIN_REGION_SAMPLES,
    PASTE_CROSSFADE_FRACTION,
    SAMPLE_RATE,
)
from peal.core.errors import InvalidParameterError
from peal.dsp.envelopes import clamp01

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Window math
# -----------------------------------------------------------------------------

def _ratio(value: float) -> float:
    v = float(value)
    if math.isnan(v):
        return 0.0
    return float(clamp01(v))


def clamp_ratios(start_ratio: float, end_ratio: float) -> Tuple[float, float]:
    """Clamp both ratios to [0, 1]; an inverted pair collapses onto start."""
    start = _ratio(start_ratio)
    end = _ratio(end_ratio)
    return start, max(start, end)


def ratio_to_sample(ratio: float, length: int) -> int:
    return int(math.floor(_ratio(ratio) * length))


def widen_window(start: int, end: int, length: int, minimum: int = MIN_REGION_SAMPLES) -> Tuple[int, int]:
    """
    Grow [start, end) to `minimum` samples around its center, kept inside [0, length).
    Buffers shorter than `minimum` give the whole buffer.
    """
    if length < minimum:
        logger.debug("Buffer of %d samples below %d; using whole buffer", length, minimum)
        return 0, length
    if end - start >= minimum:
        return start, end

    center = (start + end) // 2
    new_start = max(0, center - minimum // 2)
    new_end = min(length, new_start + minimum)
    new_start = max(0, new_end - minimum)
    logger.debug("Window [%d, %d) widened to [%d, %d)", start, end, new_start, new_end)
    return new_start, new_end


def _flat(buffer: torch.Tensor, name: str) -> torch.Tensor:
    if not isinstance(buffer, torch.Tensor):
        raise InvalidParameterError(name, type(buffer).__name__, "expected a tensor")
    return buffer.reshape(-1).float()


def _fade_curve(count: int, fraction: float, inclusive_tail: bool) -> torch.Tensor:
    """
    Per-sample blend weight for a pasted/inserted run of `count` samples:
    linear 0 -> 1 over the first crossfade samples, 1 in the middle, back down at the end.
    """
    cf = min(MAX_CROSSFADE_SAMPLES, int(math.floor(count * fraction)))
    fade = torch.ones(count, dtype=torch.float32)
    if cf <= 0 or count == 0:
        return fade
    i = torch.arange(count, dtype=torch.float32)
    tail_start = count - cf if inclusive_tail else count - cf + 1
    fade = torch.where(i >= tail_start, (count - i) / cf, fade)
    fade = torch.where(i < cf, i / cf, fade)
    return fade


def target_window(length: int, start_ratio: float, end_ratio: float) -> Tuple[int, int]:
    start_ratio, end_ratio = clamp_ratios(start_ratio, end_ratio)
    return widen_window(ratio_to_sample(start_ratio, length), ratio_to_sample(end_ratio, length), length)


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------

def extract_time_region(
    source: torch.Tensor,
    start_ratio: float,
    end_ratio: float,
    reference_duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> torch.Tensor:
    """
    Copy the [start_ratio, end_ratio] window of `source`.

    Ratios are taken against `reference_duration` (the duration the caller's
    selection was made on), converted to seconds and re-mapped onto the
    source's own duration, which can differ when parameters changed the
    rendered length.
    """
    x = _flat(source, "source")
    length = x.shape[-1]
    if length == 0:
        return x.clone()

    try:
        reference = float(reference_duration)
    except (TypeError, ValueError):
        raise InvalidParameterError("reference_duration", reference_duration, "not a number")
    if not math.isfinite(reference) or reference <= 0:
        raise InvalidParameterError("reference_duration", reference_duration, "must be finite and > 0")

    start_ratio, end_ratio = clamp_ratios(start_ratio, end_ratio)
    source_duration = length / float(sample_rate)
    source_start = _ratio(start_ratio * reference / source_duration)
    source_end = _ratio(end_ratio * reference / source_duration)

    start, end = widen_window(ratio_to_sample(source_start, length), ratio_to_sample(source_end, length), length)
    # Short sources come back whole, padded with silence up to the minimum window
    count = max(end - start, MIN_REGION_SAMPLES)

    region = x[start:start + count].clone()
    if region.shape[-1] < count:
        region = F.pad(region, (0, count - region.shape[-1]))
    return region


def paste_region_into_original(
    original: torch.Tensor,
    extracted: torch.Tensor,
    start_ratio: float,
    end_ratio: float,
) -> torch.Tensor:
    """
    Copy of `original` with [start, end) overwritten by `extracted`, blended
    over min(256, 1% of the region) samples at each edge:
    out = original * (1 - fade) + extracted * fade
    """
    orig = _flat(original, "original")
    ext = _flat(extracted, "extracted")
    out = orig.clone()

    start, end = target_window(orig.shape[-1], start_ratio, end_ratio)
    count = min(ext.shape[-1], end - start)
    if count <= 0:
        return out

    fade = _fade_curve(count, PASTE_CROSSFADE_FRACTION, inclusive_tail=True)
    segment = orig[start:start + count]
    out[start:start + count] = segment * (1.0 - fade) + ext[:count] * fade
    return out


def insert_region(
    original: torch.Tensor,
    insert: torch.Tensor,
    start_ratio: float,
    end_ratio: float,
) -> torch.Tensor:
    """
    Layer `insert` over `original` inside [start, end):
    out = original * (1 - mix) + insert * mix + original * mix * 0.5
    with `mix` ramping over min(256, 5% of the region) samples at each edge.
    The region is clamped to [-1, 1]; samples outside it are copied unchanged.
    """
    orig = _flat(original, "original")
    ins = _flat(insert, "insert")
    out = orig.clone()

    start, end = target_window(orig.shape[-1], start_ratio, end_ratio)
    count = min(ins.shape[-1], end - start)
    if count <= 0:
        return out

    mix = _fade_curve(count, INSERT_CROSSFADE_FRACTION, inclusive_tail=False)
    segment = orig[start:start + count]
    layered = segment * (1.0 - mix) + ins[:count] * mix + segment * mix * 0.5
    out[start:start + count] = torch.clamp(layered, -1.0, 1.0)
    return out
