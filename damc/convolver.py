"""Streaming FIR convolution with a bounded history."""

import cmath
import math

import numpy as np

HISTORY_SIZE = 8192


class Convolver:
    """Convolves a continuous stream of blocks with an impulse response."""

    def __init__(self, pulse=()):
        self._signal = np.zeros(0)
        self._tail = np.zeros(0)
        self.set_pulse(pulse)

    @property
    def pulse(self):
        """The impulse response, in time order."""
        return self._signal[::-1].copy()

    def set_pulse(self, samples):
        """Load a new impulse response and clear the history.

        Raises ValueError when the pulse does not fit in the history.
        """
        pulse = np.array(samples, dtype=float)
        if pulse.ndim != 1:
            raise ValueError("the pulse must be one-dimensional")
        if 2 * len(pulse) + 1 > HISTORY_SIZE:
            raise ValueError(f"Pulse or buffer size too large: {2 * len(pulse) + 1} > {HISTORY_SIZE}")
        # Stored reversed, as the sums run over the history forwards
        self._signal = pulse[::-1].copy()
        self._tail = np.zeros(max(len(pulse) - 1, 0))

    def process(self, samples):
        """Convolve a block, continuing from the previous blocks."""
        block = np.array(samples, dtype=float)
        if block.ndim != 1:
            raise ValueError("samples must be one-dimensional")
        length = len(self._signal)
        if len(block) + max(length - 1, 0) > HISTORY_SIZE:
            raise ValueError(f"block of {len(block)} samples does not fit in the history")
        if length == 0:
            return np.zeros(len(block))
        if len(block) == 0:
            return block
        stream = np.concatenate([self._tail, block])
        output = np.convolve(stream, self.pulse, mode="valid")
        self._tail = stream[len(stream) - (length - 1) :].copy() if length > 1 else np.zeros(0)
        return output

    def gain(self, freq, sample_rate):
        """Sum of the magnitudes of the pulse taps phase-shifted at ``freq``."""
        length = len(self._signal)
        w = 2 * math.pi * freq / sample_rate
        return float(
            sum(
                abs(coefficient * cmath.exp(complex(0, -w * (length - index))))
                for index, coefficient in enumerate(self._signal)
            )
        )

    def scale(self, multiplier):
        """Multiply the pulse by ``multiplier``."""
        self._signal = self._signal * multiplier

    def normalize(self, normalizer):
        """Convolve the pulse with ``normalizer``, excluding its zero-lag term.

        The result keeps the pulse length and replaces it; the history is cleared.
        """
        normalizer = np.array(normalizer, dtype=float)
        length = len(self._signal)
        if normalizer.ndim != 1 or len(normalizer) < length:
            raise ValueError(f"the normalizer needs at least {length} samples")
        if length == 0:
            self.set_pulse([])
            return
        pulse = self.pulse
        head = normalizer[:length]
        result = np.convolve(pulse, head)[:length] - pulse[0] * head
        self.set_pulse(result)