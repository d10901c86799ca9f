"""
Default QC thresholds. Per-type entries override DEFAULT_THRESHOLDS.
"""
DEFAULT_THRESHOLDS = {
    "peak_dbfs_max": 0.0,  # Above full scale means the clamp engaged
    "clip_level": 1.0,  # |x| at or above sits on the output clamp
    "clipped_samples_max": 0,
    "max_step_max": 0.5,  # Largest sample-to-sample jump (click risk)
    "tail_peak_max": 0.05,  # Peak of the last 10 samples
    "aliasing_proxy_max": 0.5,  # Max aliasing proxy
}

QC_THRESHOLDS = {
    "tone": {},
    "chime": {},
    "sweep": {},
    # Square bursts jump by design; gate edges keep steps below full scale
    "pulse": {"max_step_max": 1.0, "aliasing_proxy_max": 2.0},
    # Clicks are broadband transients
    "click": {"max_step_max": 1.0, "aliasing_proxy_max": 2.0},
    # Mixdowns and edits
    "mix": {"max_step_max": 1.0},
}


def thresholds_for(kind: str) -> dict:
    return {**DEFAULT_THRESHOLDS, **QC_THRESHOLDS.get(kind, {})}
