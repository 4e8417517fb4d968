"""Whole-sample delay line backed by a power-of-two ring buffer."""

import numpy as np


class DelayFilter:
    """Delays a stream of samples by a whole number of samples."""

    def __init__(self, delay=0):
        self._buffer = []
        self._input_index = 0
        self._output_index = 0
        self._mask = 0
        self._delay = 0
        self.delay = delay

    @property
    def delay(self):
        return self._delay

    @delay.setter
    def delay(self, delay):
        delay = int(delay)
        if delay < 0:
            raise ValueError(f"delay cannot be negative: {delay}")
        self._delay = delay
        size = 1 << delay.bit_length()
        if len(self._buffer) < size:
            self._buffer.extend([0.0] * (size - len(self._buffer)))
        else:
            del self._buffer[size:]
        self._mask = size - 1
        self._input_index &= self._mask
        self._output_index = (self._input_index + size - delay) & self._mask

    def reset(self):
        """Clear the delayed samples."""
        self._buffer = [0.0] * len(self._buffer)

    def process_sample(self, sample):
        """Push one sample and return the delayed one."""
        self._buffer[self._input_index] = sample
        output = self._buffer[self._output_index]
        self._input_index = (self._input_index + 1) & self._mask
        self._output_index = (self._output_index + 1) & self._mask
        return output

    def process(self, samples):
        """Delay a block of samples and return them as an array."""
        return np.array([self.process_sample(float(sample)) for sample in samples], dtype=float)