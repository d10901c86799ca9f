import math

import torch

# Feedback at or above 1.0 never decays
MAX_FEEDBACK = 0.95

# Schroeder comb delays (seconds), mutually prime in samples at 44.1k
REVERB_COMB_TIMES = (0.0297, 0.0371, 0.0411, 0.0437)
REVERB_WET = 0.3


class DelayLine:
    """Ring buffer read with linear interpolation for fractional delays."""

    def __init__(self, max_delay_samples: int, device: torch.device = None):
        if device is None:
            device = torch.device('cpu')
        # Headroom so a full block can be written without lapping unread samples
        self.buffer_size = int(max_delay_samples) + 4096
        self.buffer = torch.zeros(self.buffer_size, device=device)
        self.write_ptr = 0
        self.device = device

    def write_block(self, input_block: torch.Tensor):
        """Write a block of samples at write_ptr and advance it."""
        block_len = input_block.shape[-1]
        end_ptr = self.write_ptr + block_len

        if end_ptr <= self.buffer_size:
            self.buffer[self.write_ptr:end_ptr] = input_block
        else:
            first_chunk = self.buffer_size - self.write_ptr
            self.buffer[self.write_ptr:] = input_block[:first_chunk]
            self.buffer[:end_ptr - self.buffer_size] = input_block[first_chunk:]

        self.write_ptr = (self.write_ptr + block_len) % self.buffer_size

    def read_block(self, delay_samples: float, count: int) -> torch.Tensor:
        """
        Read `count` samples, each `delay_samples` behind the sample about to be written.
        Call before write_block for the same block. count must not exceed delay_samples
        or the read reaches slots that have not been written yet.
        """
        grid = torch.arange(count, device=self.device)
        read_centers = (self.write_ptr + grid) - delay_samples

        indices_floor = torch.floor(read_centers).long()
        indices_ceil = indices_floor + 1
        frac = read_centers - indices_floor

        indices_floor = indices_floor % self.buffer_size
        indices_ceil = indices_ceil % self.buffer_size

        sample_floor = self.buffer[indices_floor]
        sample_ceil = self.buffer[indices_ceil]

        return sample_floor * (1.0 - frac) + sample_ceil * frac


def _comb(signal: torch.Tensor, sample_rate: int, delay_time: float, feedback: float) -> torch.Tensor:
    """
    Delayed path of a feedback comb: d[n] = x[n-D] + feedback * d[n-D].
    Processed in blocks no longer than D so every read sees finished writes.
    """
    n = signal.shape[-1]
    delay_samples = float(delay_time) * sample_rate
    if delay_samples < 1.0 or n == 0:
        return torch.zeros_like(signal)

    feedback = min(max(0.0, float(feedback)), MAX_FEEDBACK)
    line = DelayLine(int(math.ceil(delay_samples)) + 1)
    block_size = max(1, min(1024, int(delay_samples)))
    delayed = torch.zeros_like(signal)

    for start in range(0, n, block_size):
        end = min(start + block_size, n)
        chunk = signal[start:end]
        d_chunk = line.read_block(delay_samples, end - start)
        line.write_block(chunk + feedback * d_chunk)
        delayed[start:end] = d_chunk

    return delayed


def feedback_delay(signal: torch.Tensor, sample_rate: int, delay_time: float, feedback: float) -> torch.Tensor:
    """Dry signal plus the feedback delay tap: y = x + d."""
    return signal + _comb(signal, sample_rate, delay_time, feedback)


def reverb(signal: torch.Tensor, sample_rate: int, decay: float) -> torch.Tensor:
    """
    Small parallel-comb reverb. `decay` is the time (s) for the tail to fall 60 dB.
    """
    rt60 = max(0.05, float(decay))
    wet = torch.zeros_like(signal)
    for comb_time in REVERB_COMB_TIMES:
        g = 10.0 ** (-3.0 * comb_time / rt60)
        wet = wet + _comb(signal, sample_rate, comb_time, g)
    wet = wet / len(REVERB_COMB_TIMES)
    return (1.0 - REVERB_WET) * signal + REVERB_WET * wet
