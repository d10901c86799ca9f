"""
In-memory WAV encoding for handing buffers to callers outside the engine
(HTTP responses, the developer render tool). The engine itself never writes files.
"""
import base64
import io
from typing import Union

import numpy as np
import soundfile as sf
import torch

from peal.core.config import SAMPLE_RATE


def _to_numpy(waveform: Union[torch.Tensor, np.ndarray]) -> np.ndarray:
    if isinstance(waveform, torch.Tensor):
        data = waveform.detach().cpu().numpy()
    else:
        data = np.asarray(waveform)
    # Clamp to avoid wrap-around in 16-bit conversion
    return np.clip(data.astype(np.float32), -1.0, 1.0)


class AudioIO:
    @staticmethod
    def to_bytes(waveform: torch.Tensor, sample_rate: int = SAMPLE_RATE, format: str = "WAV") -> bytes:
        """Encode a mono buffer as 16-bit PCM and return the file bytes."""
        buffer = io.BytesIO()
        sf.write(buffer, _to_numpy(waveform), sample_rate, format=format, subtype="PCM_16")
        return buffer.getvalue()

    @staticmethod
    def to_base64(waveform: torch.Tensor, sample_rate: int = SAMPLE_RATE) -> str:
        return base64.b64encode(AudioIO.to_bytes(waveform, sample_rate)).decode("utf-8")

    @staticmethod
    def save_wav(waveform: torch.Tensor, path: str, sample_rate: int = SAMPLE_RATE) -> None:
        """Write a buffer to disk (developer tooling only)."""
        sf.write(path, _to_numpy(waveform), sample_rate, subtype="PCM_16")
