"""
Engine-wide constants. Values can be overridden through the environment
(PEAL_SAMPLE_RATE, PEAL_RENDER_WORKERS, ENV) before the package is imported.
"""
import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


SAMPLE_RATE = _env_int("PEAL_SAMPLE_RATE", 44100)

# Worker count for batch renders; 0 lets the executor pick.
RENDER_WORKERS = _env_int("PEAL_RENDER_WORKERS", 0)

DEV = os.environ.get("ENV", "development").lower() in ("development", "dev", "test")

# -----------------------------------------------------------------------------
# Region editing
# -----------------------------------------------------------------------------

MIN_REGION_SAMPLES = 256
MAX_CROSSFADE_SAMPLES = 256
PASTE_CROSSFADE_FRACTION = 0.01
INSERT_CROSSFADE_FRACTION = 0.05

# -----------------------------------------------------------------------------
# Display
# -----------------------------------------------------------------------------

SUMMARY_POINTS = 100
