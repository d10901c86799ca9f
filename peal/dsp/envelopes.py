"""
ADSR amplitude envelope. The scalar `envelope` and the vectorized `adsr_curve`
evaluate the same piecewise-linear function; segment boundaries are clamped to
the sound duration. The release window is reserved first (at least 1 ms when
release > 0), so short sounds lose sustain, then decay, then attack, and always
fade to 0 by the end.
"""
from dataclasses import dataclass
import math
from typing import Union

import torch


# -----------------------------------------------------------------------------
# Helpers (reusable across envelopes and voices)
# -----------------------------------------------------------------------------

def db_to_lin(db: float) -> float:
    """Convert decibels to linear gain. 0 dB -> 1.0."""
    return 10.0 ** (db / 20.0)


def ms_to_s(ms: float) -> float:
    """Convert milliseconds to seconds."""
    return ms / 1000.0


def clamp01(x: Union[float, torch.Tensor]) -> Union[float, torch.Tensor]:
    """Clamp value(s) to [0, 1]. Accepts scalar or tensor."""
    if isinstance(x, torch.Tensor):
        return torch.clamp(x, 0.0, 1.0)
    return max(0.0, min(1.0, float(x)))


def sample_times(num_samples: int, sample_rate: int) -> torch.Tensor:
    """Elapsed time of each sample index: n / sample_rate."""
    return torch.arange(num_samples, dtype=torch.float64) / float(sample_rate)


# -----------------------------------------------------------------------------
# Segment layout
# -----------------------------------------------------------------------------

MIN_RELEASE = 0.001


@dataclass(frozen=True)
class Segments:
    """
    ADSR layout in seconds. `attack` and `decay` keep their requested lengths
    (they set the slopes); the release window is carved out of the duration
    first and cuts attack/decay short when they overrun it.
    attack_end <= decay_end <= release_start <= duration.
    """
    attack: float
    decay: float
    sustain: float
    release: float
    duration: float

    @property
    def release_start(self) -> float:
        return self.duration - self.release

    @property
    def attack_end(self) -> float:
        return min(self.attack, self.release_start)

    @property
    def decay_end(self) -> float:
        return min(self.attack + self.decay, self.release_start)


def segments(attack: float, decay: float, sustain: float, release: float, duration: float) -> Segments:
    duration = max(0.0, float(duration))
    a = max(0.0, float(attack))
    d = max(0.0, float(decay))
    release = max(0.0, float(release))
    r = min(release, max(0.0, duration - a))
    if release > 0.0 and r < MIN_RELEASE:
        r = min(release, MIN_RELEASE, duration)
    return Segments(a, d, float(clamp01(sustain)), r, duration)


# -----------------------------------------------------------------------------
# Scalar envelope
# -----------------------------------------------------------------------------

def _pre_release(t: float, seg: Segments) -> float:
    if t < seg.attack:
        return t / seg.attack
    if t < seg.attack + seg.decay:
        progress = (t - seg.attack) / seg.decay
        return 1.0 + (seg.sustain - 1.0) * progress
    return seg.sustain


def envelope(t: float, attack: float, decay: float, sustain: float, release: float, duration: float) -> float:
    """
    Amplitude multiplier in [0, 1] at elapsed time t.
    attack == 0 starts at full level; t outside [0, duration) is silent.
    """
    seg = segments(attack, decay, sustain, release, duration)
    if t < 0.0 or t >= seg.duration:
        return 0.0
    if seg.release > 0.0 and t >= seg.release_start:
        level = _pre_release(seg.release_start, seg)
        remaining = 1.0 - (t - seg.release_start) / seg.release
        return float(clamp01(level * remaining))
    return float(clamp01(_pre_release(t, seg)))


# -----------------------------------------------------------------------------
# Vectorized envelope (one value per sample)
# -----------------------------------------------------------------------------

def adsr_curve(
    num_samples: int,
    sample_rate: int,
    attack: float,
    decay: float,
    sustain: float,
    release: float,
    duration: float,
) -> torch.Tensor:
    """Evaluate `envelope` at every sample time n / sample_rate. Returns float32 tensor."""
    seg = segments(attack, decay, sustain, release, duration)
    t = sample_times(num_samples, sample_rate)
    env = torch.full_like(t, seg.sustain)

    if seg.decay > 0.0:
        progress = (t - seg.attack) / seg.decay
        decay_part = 1.0 + (seg.sustain - 1.0) * progress
        env = torch.where(t < seg.attack + seg.decay, decay_part, env)

    if seg.attack > 0.0:
        env = torch.where(t < seg.attack, t / seg.attack, env)

    if seg.release > 0.0:
        level = _pre_release(seg.release_start, seg)
        release_part = level * (1.0 - (t - seg.release_start) / seg.release)
        env = torch.where(t >= seg.release_start, release_part, env)

    env = torch.where(t >= seg.duration, torch.zeros_like(env), env)
    return torch.clamp(env, 0.0, 1.0).float()


# -----------------------------------------------------------------------------
# Exponential ramps (voice-internal shaping)
# -----------------------------------------------------------------------------

class Envelope:
    @staticmethod
    def exponential_ramp(t: torch.Tensor, start: float, end: float, length: float) -> torch.Tensor:
        """
        Exponential ramp from start to end over `length` seconds, silent afterwards.
        y(t) = start * (end / start) ^ (t / length)
        """
        length = max(float(length), 1e-6)
        ramp = start * torch.exp(math.log(end / start) * t / length)
        return torch.where(t < length, ramp, torch.zeros_like(ramp))
