"""
Synthesizer: parameter set + sound type -> mono float32 buffer.

Pipeline per render:
  voice.compose -> FXChain (filter, distortion, delay, reverb, compression)
  -> * ADSR envelope * volume -> clamp to [-1, 1]
The buffer is exactly round(duration * sample_rate) samples. There is no
normalization, so volume maps directly to peak level for full-scale voices.
"""
import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

import torch

from peal.core.config import RENDER_WORKERS, SAMPLE_RATE
from peal.core.errors import InvalidParameterError
from peal.core.types import Sound, SoundParameters
from peal.dsp.envelopes import adsr_curve
from peal.dsp.fxchain import FXChain
from peal.dsp.noise import Noise
from peal.dsp.postchain import PostChain
from peal.voices import get_voice

logger = logging.getLogger(__name__)


def _as_parameters(parameters: Union[SoundParameters, dict]) -> SoundParameters:
    if isinstance(parameters, SoundParameters):
        return parameters
    if isinstance(parameters, dict):
        return SoundParameters.from_dict(parameters)
    raise InvalidParameterError("parameters", type(parameters).__name__, "expected SoundParameters or dict")


class Synthesizer:
    def __init__(self, sample_rate: int = SAMPLE_RATE):
        if int(sample_rate) <= 0:
            raise InvalidParameterError("sample_rate", sample_rate, "must be > 0")
        self.sample_rate = int(sample_rate)

    def num_samples(self, duration: float) -> int:
        return int(round(duration * self.sample_rate))

    def render(
        self,
        parameters: Union[SoundParameters, dict],
        sound_type: str = "tone",
        seed: int = 0,
    ) -> torch.Tensor:
        """
        Render one sound.

        Args:
            parameters: SoundParameters (or a snake_case dict validated into one)
            sound_type: "click", "tone", "chime", "sweep" or "pulse"
            seed: Seed for stochastic voices (noise click); same seed, same samples

        Returns:
            1-D float32 tensor in [-1, 1]
        """
        params = _as_parameters(parameters)
        voice = get_voice(sound_type)
        n = self.num_samples(params.duration)
        if n == 0:
            logger.debug("Duration %.6fs rounds to zero samples", params.duration)
            return torch.zeros(0, dtype=torch.float32)

        sample_index = torch.arange(n)
        raw = voice.compose(params, sample_index, self.sample_rate, Noise.seeded(seed))
        wet = FXChain.process(raw.float(), self.sample_rate, params.effects)
        env = adsr_curve(
            n,
            self.sample_rate,
            params.attack,
            params.decay,
            params.sustain,
            params.release,
            params.duration,
        )
        return PostChain.process(wet * env * params.volume)

    def render_sound(self, sound: Sound, seed: int = 0) -> Sound:
        """New Sound carrying the rendered buffer and its summary; the input is untouched."""
        buffer = self.render(sound.parameters, sound.type, seed=seed)
        return dataclasses.replace(
            sound,
            rendered_buffer=buffer,
            waveform_summary=PostChain.waveform_summary(buffer),
        )

    def render_batch(
        self,
        parameter_list: Sequence[Union[SoundParameters, dict]],
        sound_type: str = "tone",
        max_workers: Optional[int] = None,
        seed: int = 0,
    ) -> List[torch.Tensor]:
        """
        Render independent parameter sets on a thread pool. Output order matches
        input order; element i uses seed + i.
        """
        # Validate everything before any work is scheduled
        params = [_as_parameters(p) for p in parameter_list]
        get_voice(sound_type)
        if not params:
            return []

        workers = max_workers or RENDER_WORKERS or None
        logger.debug("Rendering batch of %d %s sounds", len(params), sound_type)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="peal-render") as executor:
            futures = [executor.submit(self.render, p, sound_type, seed + i) for i, p in enumerate(params)]
            return [f.result() for f in futures]

    @staticmethod
    def waveform_summary(buffer: torch.Tensor, points: int = 100) -> List[float]:
        return PostChain.waveform_summary(buffer, points)
