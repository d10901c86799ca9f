"""
Mixdown of positioned tracks into one buffer.
Tracks are placed at start_position * composition_duration, scaled by their
volume and summed; the sum is peak-normalized only when it would clip.
"""
import logging
import math
from typing import List, Optional, Sequence

import torch

from peal.core.config import SAMPLE_RATE
from peal.core.errors import InvalidParameterError
from peal.core.types import Track
from peal.dsp.postchain import PostChain

logger = logging.getLogger(__name__)


class Mixdown:
    """
    Sum tracks against a composition timeline.

    Selection: tracks with a buffer that are not muted; if any of those is
    soloed, only the soloed ones. A muted track stays out even when soloed.
    """

    def __init__(self, composition_duration: float, sample_rate: int = SAMPLE_RATE):
        try:
            duration = float(composition_duration)
        except (TypeError, ValueError):
            raise InvalidParameterError("composition_duration", composition_duration, "not a number")
        if not math.isfinite(duration) or duration < 0:
            raise InvalidParameterError("composition_duration", composition_duration, "must be finite and >= 0")
        self.composition_duration = duration
        self.sample_rate = int(sample_rate)

    @staticmethod
    def select(tracks: Sequence[Track]) -> List[Track]:
        playable = [t for t in tracks if t.buffer is not None and not t.muted]
        soloed = [t for t in playable if t.solo]
        return soloed if soloed else playable

    def offset(self, track: Track) -> int:
        """First output sample of a track."""
        return int(math.floor(track.start_position * self.composition_duration * self.sample_rate))

    def length(self, tracks: Sequence[Track]) -> int:
        """ceil of the latest track end (start time + buffer duration), in samples."""
        end = 0
        for track in tracks:
            start = track.start_position * self.composition_duration * self.sample_rate
            end = max(end, int(math.ceil(start - 1e-9)) + track.buffer.reshape(-1).shape[-1])
        return end

    def mix(self, tracks: Sequence[Track]) -> Optional[torch.Tensor]:
        """
        Returns the mixed buffer, or None when no track is playable.
        None means "nothing to play", not silence.
        """
        selected = self.select(tracks)
        if not selected:
            logger.debug("Mixdown: no playable tracks out of %d", len(tracks))
            return None

        out = torch.zeros(self.length(selected), dtype=torch.float32)
        for track in selected:
            layer = track.buffer.reshape(-1).float()
            start = self.offset(track)
            end = min(start + layer.shape[-1], out.shape[-1])
            if end > start:
                out[start:end] += layer[: end - start] * track.volume

        peak = PostChain.peak(out)
        if peak > 1.0:
            logger.info("Mixdown peak %.3f over %d tracks; normalizing", peak, len(selected))
        return PostChain.peak_normalize(out)


def mix_tracks(
    tracks: Sequence[Track],
    composition_duration: float,
    sample_rate: int = SAMPLE_RATE,
) -> Optional[torch.Tensor]:
    return Mixdown(composition_duration, sample_rate).mix(tracks)
