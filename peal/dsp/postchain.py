"""
Output stage shared by the synthesizer and the mixdown: clamp, peak-normalize,
display summary. Deterministic; no randomness.
"""
from typing import List

import torch

from peal.core.config import SUMMARY_POINTS


class PostChain:
    @staticmethod
    def clamp_unit(buffer: torch.Tensor) -> torch.Tensor:
        """Hard clamp to [-1, 1] (single-sound renders may clip; this bounds them)."""
        return torch.clamp(buffer, -1.0, 1.0)

    @staticmethod
    def peak(buffer: torch.Tensor) -> float:
        if buffer.numel() == 0:
            return 0.0
        return float(torch.max(torch.abs(buffer)))

    @classmethod
    def peak_normalize(cls, buffer: torch.Tensor, ceiling: float = 1.0) -> torch.Tensor:
        """Divide by the peak only when it exceeds `ceiling`; quieter buffers pass through."""
        peak = cls.peak(buffer)
        if peak > ceiling:
            return buffer * (ceiling / peak)
        return buffer.clone()

    @staticmethod
    def waveform_summary(buffer: torch.Tensor, points: int = SUMMARY_POINTS) -> List[float]:
        """
        Peak |x| of `points` near-equal windows. Buffers shorter than `points`
        yield trailing zeros for the empty windows.
        """
        x = buffer.reshape(-1)
        summary = []
        for window in torch.tensor_split(x, points):
            summary.append(float(torch.max(torch.abs(window))) if window.numel() else 0.0)
        return summary

    @classmethod
    def process(cls, buffer: torch.Tensor) -> torch.Tensor:
        """Write stage for a single-sound render: float32, mono, clamped."""
        x = buffer.reshape(-1).float()
        return cls.clamp_unit(x)
