from peal.variation.generator import VariationGenerator, generate_batch
from peal.variation.presets import PRESETS, get_preset
from peal.variation.sampler import propose_batch

__all__ = ["VariationGenerator", "generate_batch", "PRESETS", "get_preset", "propose_batch"]
