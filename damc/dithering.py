"""Bit-depth reduction with high-pass shaped triangular dither."""

import math
import random

import numpy as np


class DitheringFilter:
    """Quantizes samples to ``bit_reduction`` bits, adding dither when ``scale`` is not 0."""

    def __init__(self, scale=1.0, bit_reduction=0, seed=None):
        self._random = random.Random(seed)
        self._previous_random = 0.0
        self._previous_quantization_error = 0.0
        self._scale = 1.0
        self._bit_reduction = 0
        self._bit_ratio = 0.0
        self.set_parameters(scale, bit_reduction)

    @property
    def scale(self):
        return self._scale

    @property
    def bit_reduction(self):
        return self._bit_reduction

    @property
    def bit_ratio(self):
        """Number of quantization steps per unit of amplitude."""
        return self._bit_ratio

    def reset(self, fs=None):
        """Forget the dither and error history; ``fs`` is unused."""
        self._previous_random = 0.0
        self._previous_quantization_error = 0.0

    def set_parameters(self, scale, bit_reduction):
        if bit_reduction < 0:
            raise ValueError(f"bit reduction cannot be negative: {bit_reduction}")
        self._scale = scale
        self._bit_reduction = bit_reduction
        self._bit_ratio = 2.0 ** (bit_reduction - 1) if bit_reduction > 0 else 0.0

    def process(self, samples):
        """Return the samples quantized, unchanged when no bit reduction is set."""
        samples = np.array(samples, dtype=float)
        if not self._bit_reduction:
            return samples

        ratio = self._bit_ratio
        error = self._previous_quantization_error
        output = np.empty_like(samples)
        for index, sample in enumerate(samples):
            r = (self._random.random() - 0.5) / ratio
            dither = self._previous_random - r
            self._previous_random = r
            if self._scale == 0:
                dither = 0.0
            unquantized = sample - dither
            output[index] = math.floor(unquantized * ratio) / ratio
            error = output[index] - unquantized
        self._previous_quantization_error = error
        return output