from typing import Optional

import torch


class Noise:
    @staticmethod
    def white(num_samples: int, generator: Optional[torch.Generator] = None) -> torch.Tensor:
        """Uniform white noise in [-1, 1). Pass a seeded generator for repeatable renders."""
        return torch.rand(num_samples, generator=generator) * 2.0 - 1.0

    @staticmethod
    def seeded(seed: int) -> torch.Generator:
        generator = torch.Generator()
        generator.manual_seed(int(seed))
        return generator
