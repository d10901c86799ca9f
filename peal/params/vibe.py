"""
Vibe prompts: short phrases like "two short beeps" or "metallic ping followed
by a low buzz" turned into positioned parameter sets, then rendered and mixed
into one buffer.
"""
from dataclasses import dataclass, field
import logging
import re
from typing import Any, Dict, List, Optional

import torch

from peal.core.config import SAMPLE_RATE
from peal.core.types import SoundParameters, Track
from peal.dsp.mixer import mix_tracks
from peal.params.resolve import build_parameters
from peal.synth import Synthesizer

logger = logging.getLogger(__name__)

# Sound words -> type plus base params (library camelCase shape)
SOUND_WORDS: Dict[str, Dict[str, Any]] = {
    "beep": {"type": "tone", "duration": 0.2, "frequency": 800, "waveform": "sine"},
    "beeps": {"type": "tone", "duration": 0.2, "frequency": 800, "waveform": "sine"},
    "chime": {"type": "chime", "duration": 0.5, "frequency": 600},
    "chimes": {"type": "chime", "duration": 0.5, "frequency": 600},
    "click": {"type": "click", "duration": 0.05, "frequency": 1000, "clickDuration": 0.05},
    "clicks": {"type": "click", "duration": 0.05, "frequency": 1000, "clickDuration": 0.05},
    "ding": {"type": "tone", "duration": 0.3, "frequency": 1200, "waveform": "triangle"},
    "dings": {"type": "tone", "duration": 0.3, "frequency": 1200, "waveform": "triangle"},
    "ping": {"type": "tone", "duration": 0.15, "frequency": 1500, "waveform": "sine"},
    "pings": {"type": "tone", "duration": 0.15, "frequency": 1500, "waveform": "sine"},
    "swoosh": {"type": "sweep", "duration": 0.4, "frequency": 400, "direction": "down", "sweepRange": 2, "sweepType": "linear"},
    "whoosh": {"type": "sweep", "duration": 0.5, "frequency": 300, "direction": "down", "sweepRange": 2, "sweepType": "linear"},
    "buzz": {"type": "pulse", "duration": 0.3, "frequency": 200},
    "bell": {"type": "chime", "duration": 0.8, "frequency": 800},
    "bells": {"type": "chime", "duration": 0.8, "frequency": 800},
}

MODIFIERS: Dict[str, Dict[str, Any]] = {
    # Duration
    "short": {"duration_multiplier": 0.5},
    "long": {"duration_multiplier": 2.0},
    "quick": {"duration_multiplier": 0.7},
    "slow": {"duration_multiplier": 1.5},
    # Pitch
    "high": {"frequency_multiplier": 1.5},
    "low": {"frequency_multiplier": 0.5},
    "deep": {"frequency_multiplier": 0.3},
    "bright": {"frequency_multiplier": 1.8},
    # Character
    "soft": {"volume": 0.5, "attack": 0.05},
    "loud": {"volume": 1.5},
    "gentle": {"attack": 0.05, "volume": 0.7},
    "harsh": {"attack": 0.001, "volume": 1.2},
    "sharp": {"attack": 0.001, "decay": 0.01},
    "smooth": {"attack": 0.1, "release": 0.2},
    "punchy": {"attack": 0.001, "decay": 0.05, "sustain": 0.8},
    "metallic": {"waveform": "square", "effects": {"filter": True}},
    "warm": {"waveform": "triangle", "effects": {"reverb": True}},
    "digital": {"waveform": "square"},
    "organic": {"waveform": "sine", "effects": {"reverb": True}},
}

NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "a": 1, "an": 1, "twice": 2, "thrice": 3,
}

# Longest first so "and then" wins over "then"
SEQUENCE_WORDS = ("followed by", "and then", "then", "after", "next")
_SEQUENCE_RE = re.compile(r"\b(?:" + "|".join(re.escape(w) for w in SEQUENCE_WORDS) + r")\b")

TEMPLATES = (
    "two short beeps",
    "a metallic ping",
    "three quick clicks",
    "a soft ding",
    "a deep whoosh",
    "metallic ping followed by two beeps",
    "a gentle bell",
    "four punchy clicks",
    "a bright chime",
    "low buzz then high ping",
)

# Gap after each sound in a sequence, and spacing of repeats in one segment
SEQUENCE_GAP = 0.1
REPEAT_SPACING = 0.15
PITCH_STEP = 0.1
MAX_QUANTITY = 16


@dataclass
class ParsedSound:
    word: str
    base: Dict[str, Any]
    quantity: int = 1
    modifiers: List[str] = field(default_factory=list)


@dataclass
class VibeIntent:
    sounds: List[ParsedSound]
    is_sequence: bool = False


@dataclass
class VibeEvent:
    """One sound of a rendered prompt, placed `offset` seconds into the result."""
    sound_type: str
    parameters: SoundParameters
    offset: float
    word: str


class VibeParser:
    @staticmethod
    def parse_prompt(prompt: str) -> VibeIntent:
        normalized = (prompt or "").lower()
        is_sequence = _SEQUENCE_RE.search(normalized) is not None
        segments = _SEQUENCE_RE.split(normalized) if is_sequence else [normalized]

        sounds = []
        for segment in segments:
            parsed = VibeParser.parse_segment(segment.strip())
            if parsed is not None:
                sounds.append(parsed)

        if not sounds:
            logger.debug("No sound words in %r; falling back to a beep", prompt)
            sounds.append(ParsedSound("beep", dict(SOUND_WORDS["beep"])))
        return VibeIntent(sounds, is_sequence)

    @staticmethod
    def parse_segment(segment: str) -> Optional[ParsedSound]:
        words = segment.split()

        quantity = 1
        for word in words:
            digits = re.match(r"\d+", word)
            if digits:
                quantity = int(digits.group())
            elif word in NUMBER_WORDS:
                quantity = NUMBER_WORDS[word]

        sound_word = next((w for w in words if w in SOUND_WORDS), None)
        if sound_word is None:
            # Loose match on the stem ("beepy", "chiming")
            sound_word = next((w for w in SOUND_WORDS if w[:-1] and w[:-1] in segment), None)
        if sound_word is None:
            return None

        if quantity > MAX_QUANTITY:
            logger.warning("Vibe quantity %d capped at %d", quantity, MAX_QUANTITY)
        quantity = min(max(quantity, 1), MAX_QUANTITY)
        modifiers = [w for w in words if w in MODIFIERS]
        return ParsedSound(sound_word, dict(SOUND_WORDS[sound_word]), quantity, modifiers)

    @staticmethod
    def apply_modifiers(base: Dict[str, Any], modifiers: List[str]) -> Dict[str, Any]:
        params = dict(base)
        for name in modifiers:
            mod = MODIFIERS[name]
            if "duration_multiplier" in mod:
                params["duration"] = params.get("duration", 0.5) * mod["duration_multiplier"]
            if "frequency_multiplier" in mod:
                params["frequency"] = params.get("frequency", 440) * mod["frequency_multiplier"]
            for key in ("attack", "decay", "sustain", "release", "waveform"):
                if key in mod:
                    params[key] = mod[key]
            if "volume" in mod:
                params["volume"] = min(mod["volume"], 1.0)
            if "effects" in mod:
                params["effects"] = {**params.get("effects", {}), **mod["effects"]}
        return params

    @staticmethod
    def events(intent: VibeIntent, sample_rate: int = SAMPLE_RATE) -> List[VibeEvent]:
        """Expand quantities and assign start offsets. Sequences play back to back."""
        out = []
        cursor = 0.0
        for sound in intent.sounds:
            for i in range(sound.quantity):
                raw = VibeParser.apply_modifiers(sound.base, sound.modifiers)
                sound_type = raw.pop("type")
                if sound.quantity > 1:
                    raw["frequency"] = raw["frequency"] * (1.0 + i * PITCH_STEP)
                params = build_parameters(sound_type, raw, sample_rate)

                if intent.is_sequence:
                    offset = cursor
                    cursor += params.duration + SEQUENCE_GAP
                else:
                    offset = i * REPEAT_SPACING
                out.append(VibeEvent(sound_type, params, offset, sound.word))
        return out

    @staticmethod
    def suggestions(partial: str, limit: int = 5) -> List[str]:
        normalized = (partial or "").lower()
        return [t for t in TEMPLATES if not normalized or normalized in t][:limit]


@dataclass
class VibeRender:
    events: List[VibeEvent]
    tracks: List[Track]
    buffer: torch.Tensor
    duration: float


def render_vibe(prompt: str, synth: Optional[Synthesizer] = None) -> VibeRender:
    """
    Parse, render every event and mix them through the mixdown.
    Each event becomes a Track positioned at offset / total duration.
    """
    synth = synth or Synthesizer()
    events = VibeParser.events(VibeParser.parse_prompt(prompt), synth.sample_rate)
    total = max(e.offset + e.parameters.duration for e in events)

    buffers = [synth.render(e.parameters, e.sound_type, seed=i) for i, e in enumerate(events)]
    tracks = [
        Track(buffer=buf, name=f"{e.word} {i + 1}", start_position=e.offset / total)
        for i, (e, buf) in enumerate(zip(events, buffers))
    ]
    mixed = mix_tracks(tracks, total, synth.sample_rate)
    logger.info("Vibe %r -> %d sounds over %.3fs", prompt, len(events), total)
    return VibeRender(events, tracks, mixed, total)
