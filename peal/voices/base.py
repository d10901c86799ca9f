"""
Voice contract: each sound type turns SoundParameters into a raw signal
(before effects, ADSR and volume). Voices are stateless; per-render state such
as a noise generator is passed in.
"""
from typing import Optional

import torch

from peal.core.types import SoundParameters


class Voice:
    name: str = ""

    def compose(
        self,
        params: SoundParameters,
        sample_index: torch.Tensor,
        sample_rate: int,
        generator: Optional[torch.Generator] = None,
    ) -> torch.Tensor:
        """
        Raw signal at each sample index, roughly within [-1, 1].

        Args:
            params: Validated parameter set
            sample_index: 1-D long tensor of sample indices (usually arange(n))
            sample_rate: Sample rate
            generator: Random source for stochastic voices
        """
        raise NotImplementedError

    @staticmethod
    def times(sample_index: torch.Tensor, sample_rate: int) -> torch.Tensor:
        return sample_index.double() / float(sample_rate)
