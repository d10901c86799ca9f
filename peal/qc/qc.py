"""
Quality Control analysis for rendered buffers.
Detects the failure modes a UI sound can ship with: clipping, clicks
(large sample-to-sample steps, e.g. at splice points), tails that do not
reach silence, and aliasing from the unband-limited oscillators.
"""
from typing import Dict, Iterable, List

import numpy as np
import torch

from peal.qc.thresholds import thresholds_for

TAIL_SAMPLES = 10
DB_FLOOR = -120.0


def _db(x: float) -> float:
    """Convert linear to dB, floored at DB_FLOOR so results stay JSON-safe."""
    if abs(x) <= 10.0 ** (DB_FLOOR / 20.0):
        return DB_FLOOR
    return float(20.0 * np.log10(abs(x)))


def _band_energy(audio: torch.Tensor, sample_rate: int, low_hz: float, high_hz: float) -> float:
    """Compute energy in frequency band using FFT magnitude."""
    n = len(audio)
    if n < 2:
        return 0.0

    n_fft = 2 ** int(np.ceil(np.log2(n)))
    magnitude = torch.abs(torch.fft.rfft(audio, n=n_fft))
    freqs = torch.fft.rfftfreq(n_fft, 1.0 / sample_rate)

    mask = (freqs >= low_hz) & (freqs <= high_hz)
    return float(torch.sum(magnitude[mask] ** 2))


def _aliasing_proxy(audio: torch.Tensor, sample_rate: int) -> float:
    """
    Detect likely aliasing: excess energy above 12kHz relative to 5-10kHz.
    Returns ratio (higher = more aliasing).
    """
    energy_high = _band_energy(audio, sample_rate, 12000.0, sample_rate / 2.0)
    energy_mid = _band_energy(audio, sample_rate, 5000.0, 10000.0)

    if energy_mid < 1e-12:
        return 0.0

    return float(energy_high / energy_mid)


def max_step(audio: torch.Tensor) -> float:
    """Largest |x[n+1] - x[n]|."""
    x = audio.reshape(-1).float()
    if x.numel() < 2:
        return 0.0
    return float(torch.max(torch.abs(torch.diff(x))))


def splice_steps(audio: torch.Tensor, positions: Iterable[int], radius: int = 2) -> List[float]:
    """Largest step within `radius` samples of each position (splice points of an edit)."""
    x = audio.reshape(-1).float()
    steps = []
    for pos in positions:
        lo = max(0, int(pos) - radius)
        hi = min(x.numel(), int(pos) + radius + 1)
        steps.append(max_step(x[lo:hi]))
    return steps


def analyze(audio: torch.Tensor, sample_rate: int, kind: str = "tone") -> Dict:
    """
    Analyze a rendered buffer for QC issues.

    Args:
        audio: Audio tensor (1D)
        sample_rate: Sample rate in Hz
        kind: Sound type, or "mix" for mixdowns and edits

    Returns:
        Dict with metrics and pass/fail flags
    """
    audio = audio.reshape(-1).float()
    thresholds = thresholds_for(kind)

    if audio.numel() == 0:
        return {
            "kind": kind,
            "status": "FAIL",
            "metrics": {},
            "failures": ["Empty buffer"],
            "warnings": [],
        }

    peak = float(torch.max(torch.abs(audio)))
    rms = float(torch.sqrt(torch.mean(audio ** 2) + 1e-12))
    metrics = {
        "peak_dbfs": _db(peak),
        "rms_dbfs": _db(rms),
        "crest_factor": peak / (rms + 1e-12),
        "peak_linear": peak,
        "rms_linear": rms,
        "dc_offset": float(torch.mean(audio)),
        "clipped_samples": int(torch.sum(torch.abs(audio) >= thresholds["clip_level"])),
        "max_step": max_step(audio),
        "tail_peak": float(torch.max(torch.abs(audio[-TAIL_SAMPLES:]))),
        "aliasing_proxy": _aliasing_proxy(audio, sample_rate),
    }

    failures = []
    warnings = []

    if metrics["peak_dbfs"] > thresholds["peak_dbfs_max"]:
        failures.append(f"Peak above full scale: {metrics['peak_dbfs']:.2f} dBFS")
    if metrics["clipped_samples"] > thresholds["clipped_samples_max"]:
        failures.append(f"Clipped samples: {metrics['clipped_samples']}")
    if metrics["max_step"] > thresholds["max_step_max"]:
        warnings.append(f"Step discontinuity: {metrics['max_step']:.4f} > {thresholds['max_step_max']:.4f}")
    if metrics["tail_peak"] > thresholds["tail_peak_max"]:
        warnings.append(f"Tail not silent: {metrics['tail_peak']:.4f} > {thresholds['tail_peak_max']:.4f}")
    if metrics["aliasing_proxy"] > thresholds["aliasing_proxy_max"]:
        warnings.append(
            f"Aliasing proxy high: {metrics['aliasing_proxy']:.4f} > {thresholds['aliasing_proxy_max']:.4f}"
        )

    status = "PASS"
    if failures:
        status = "FAIL"
    elif warnings:
        status = "WARN"

    return {
        "kind": kind,
        "status": status,
        "metrics": metrics,
        "failures": failures,
        "warnings": warnings,
    }
