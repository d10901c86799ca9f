"""
Dotted-path access into nested parameter dicts ("effects.filter_frequency"),
shared by request normalization, safety clamps and variation bounds.
"""
from typing import Any, Optional


def get_param(params: dict, path: str, default: Any = None) -> Any:
    """Value at `path`, or default when any segment is missing or not a dict."""
    if not params or not path:
        return default
    *parents, leaf = path.split(".")
    node = params
    for key in parents:
        node = node.get(key)
        if not isinstance(node, dict):
            return default
    return node.get(leaf, default)


def set_param(params: dict, path: str, value: Any) -> None:
    """Write `value` at `path` in place, creating (or replacing non-dict) parents."""
    *parents, leaf = path.split(".")
    node = params
    for key in parents:
        child = node.get(key)
        if not isinstance(child, dict):
            child = node[key] = {}
        node = child
    node[leaf] = value


def clamp_if_bounds(value: float, lo: Optional[float] = None, hi: Optional[float] = None) -> float:
    """Clamp to whichever of lo/hi is given. Non-numeric values pass through."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return value
    if lo is not None and v < lo:
        return lo
    if hi is not None and v > hi:
        return hi
    return v
