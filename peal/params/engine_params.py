"""
Engine params contract: request bodies arrive in the library's camelCase shape
(flat filterFrequency, clickType, ... next to an `effects` flag object).
Everything is rewritten to the nested snake_case layout of DEFAULT_PRESET here,
before resolution. Unsupported fields are dropped; in dev mode that is logged.
"""
import logging
from typing import Any, Dict

from peal.core.config import DEV
from peal.core.params import set_param

logger = logging.getLogger(__name__)

# camelCase / flat key -> dotted path in the resolved dict
KEY_ALIASES: Dict[str, str] = {
    "filterFrequency": "effects.filter_frequency",
    "filterQ": "effects.filter_q",
    "distortionAmount": "effects.distortion_amount",
    "delayTime": "effects.delay_time",
    "delayFeedback": "effects.delay_feedback",
    "reverbDecay": "effects.reverb_decay",
    "compressionRatio": "effects.compression_ratio",
    "harmonics": "voice.harmonics",
    "spread": "voice.spread",
    "chimeDecay": "voice.chime_decay",
    "clickType": "voice.click_type",
    "clickDuration": "voice.click_duration",
    "resonance": "voice.resonance",
    "direction": "voice.direction",
    "sweepRange": "voice.sweep_range",
    "sweepType": "voice.sweep_type",
    "pulseRate": "voice.pulse_rate",
    "pulseWidth": "voice.pulse_width",
    "pulseDecay": "voice.pulse_decay",
}

# Nested snake_case keys that are also accepted flat at the top level
for _path in list(KEY_ALIASES.values()):
    KEY_ALIASES.setdefault(_path.split(".", 1)[1], _path)

# Effects the library UI offered that the engine does not implement
UNSUPPORTED_EFFECTS = frozenset({"modulation"})

# Display-only fields of a library sound
IGNORED_KEYS = frozenset({"type", "id", "brightness", "tags", "favorite", "created"})


def to_engine_params(raw: Dict[str, Any], sound_type: str) -> Dict[str, Any]:
    """
    Normalize a raw request body to nested engine params. Returns a new dict.
    Aliased keys override the same field given in nested form.
    """
    out: Dict[str, Any] = {}
    dropped = []
    aliased = []

    for key, value in (raw or {}).items():
        if key in IGNORED_KEYS:
            continue
        if key in ("effects", "voice") and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if key == "effects" and sub_key in UNSUPPORTED_EFFECTS:
                    dropped.append(f"effects.{sub_key}")
                    continue
                path = KEY_ALIASES.get(sub_key, f"{key}.{sub_key}")
                set_param(out, path, sub_value)
        elif key in KEY_ALIASES:
            aliased.append((KEY_ALIASES[key], value))
        else:
            out[key] = value

    for path, value in aliased:
        set_param(out, path, value)

    if dropped and DEV:
        logger.warning(
            "[Parameter Contract] Unsupported fields dropped before engine: %s (type=%s)",
            dropped,
            sound_type,
        )
    return out
