"""Real-input discrete Fourier transforms with unnormalised inverse."""

import numpy as np


def dft(time_domain):
    """Return the full length-n spectrum of a real signal."""
    samples = np.asarray(time_domain, dtype=float)
    if samples.ndim != 1:
        raise ValueError("time_domain must be one-dimensional")
    return np.fft.fft(samples)


def idft(freq_domain):
    """Return the real signal of a length-n Hermitian spectrum, scaled by n.

    Only the first n // 2 + 1 bins are used. The result is not divided by n.
    """
    spectrum = np.asarray(freq_domain, dtype=complex)
    if spectrum.ndim != 1 or len(spectrum) == 0:
        raise ValueError("freq_domain must be a non-empty one-dimensional array")
    n = len(spectrum)
    return np.fft.irfft(spectrum[: n // 2 + 1], n) * n