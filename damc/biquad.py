"""Second order IIR filter with the classic audio EQ designs."""

import cmath
import enum
import math

_IDENTITY = ((1.0, 0.0, 0.0), (1.0, 0.0, 0.0))


class FilterType(enum.IntEnum):
    NONE = 0
    LOW_PASS = 1
    HIGH_PASS = 2
    BAND_PASS_CONSTANT_SKIRT = 3
    BAND_PASS_CONSTANT_PEAK = 4
    NOTCH = 5
    ALL_PASS = 6
    PEAK = 7
    LOW_SHELF = 8
    HIGH_SHELF = 9


def compute_coefficients(enabled, filter_type, f0, fs, gain, q):
    """Return ``(a_coefs, b_coefs)`` for the filter; unknown types give the identity."""
    if not enabled or q == 0 or fs == 0:
        return _IDENTITY
    try:
        filter_type = FilterType(filter_type)
    except ValueError:
        return _IDENTITY

    a_gain = 10 ** (gain / 40)
    w0 = 2 * math.pi * f0 / fs
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2 * q)
    shelf = 2 * math.sqrt(a_gain) * alpha
    common_a = (1 + alpha, -2 * cos_w0, 1 - alpha)

    if filter_type is FilterType.LOW_PASS:
        b = ((1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2)
        a = common_a
    elif filter_type is FilterType.HIGH_PASS:
        b = ((1 + cos_w0) / 2, -(1 + cos_w0), (1 + cos_w0) / 2)
        a = common_a
    elif filter_type is FilterType.BAND_PASS_CONSTANT_SKIRT:
        b = (q * alpha, 0.0, -q * alpha)
        a = common_a
    elif filter_type is FilterType.BAND_PASS_CONSTANT_PEAK:
        b = (alpha, 0.0, -alpha)
        a = common_a
    elif filter_type is FilterType.NOTCH:
        b = (1.0, -2 * cos_w0, 1.0)
        a = common_a
    elif filter_type is FilterType.ALL_PASS:
        b = (1 - alpha, -2 * cos_w0, 1 + alpha)
        a = common_a
    elif filter_type is FilterType.PEAK:
        b = (1 + alpha * a_gain, -2 * cos_w0, 1 - alpha * a_gain)
        a = (1 + alpha / a_gain, -2 * cos_w0, 1 - alpha / a_gain)
    elif filter_type is FilterType.LOW_SHELF:
        b = (
            a_gain * ((a_gain + 1) - (a_gain - 1) * cos_w0 + shelf),
            2 * a_gain * ((a_gain - 1) - (a_gain + 1) * cos_w0),
            a_gain * ((a_gain + 1) - (a_gain - 1) * cos_w0 - shelf),
        )
        a = (
            (a_gain + 1) + (a_gain - 1) * cos_w0 + shelf,
            -2 * ((a_gain - 1) + (a_gain + 1) * cos_w0),
            (a_gain + 1) + (a_gain - 1) * cos_w0 - shelf,
        )
    elif filter_type is FilterType.HIGH_SHELF:
        b = (
            a_gain * ((a_gain + 1) + (a_gain - 1) * cos_w0 + shelf),
            -2 * a_gain * ((a_gain - 1) + (a_gain + 1) * cos_w0),
            a_gain * ((a_gain + 1) + (a_gain - 1) * cos_w0 - shelf),
        )
        a = (
            (a_gain + 1) - (a_gain - 1) * cos_w0 + shelf,
            2 * ((a_gain - 1) - (a_gain + 1) * cos_w0),
            (a_gain + 1) - (a_gain - 1) * cos_w0 - shelf,
        )
    else:
        return _IDENTITY
    return a, b


class BiquadFilter:
    """Transposed direct form II biquad."""

    def __init__(self, a_coefs=None, b_coefs=None):
        # An offset of 0.5 in the state keeps it away from denormals
        self._s1 = 0.5
        self._s2 = 0.5
        self._b = (0.0, 0.0, 0.0)
        self._a = (0.0, 0.0)
        if (a_coefs is None) != (b_coefs is None):
            raise ValueError("a_coefs and b_coefs must be given together")
        if a_coefs is not None:
            self.update(a_coefs, b_coefs)

    @property
    def coefficients(self):
        """The normalised ``(a1, a2)`` and ``(b0, b1, b2)`` coefficients."""
        return self._a, self._b

    def update(self, a_coefs, b_coefs):
        """Load new coefficients, normalised by ``a_coefs[0]``."""
        a0 = a_coefs[0]
        self._b = (b_coefs[0] / a0, b_coefs[1] / a0, b_coefs[2] / a0)
        self._a = (a_coefs[1] / a0, a_coefs[2] / a0)

    def put(self, sample):
        """Filter one sample and return the output."""
        a, b = self._a, self._b
        y = b[0] * sample + self._s1 - 0.5
        self._s1 = self._s2 + b[1] * sample - a[0] * y
        self._s2 = b[2] * sample - a[1] * y + 0.5
        return y

    def response(self, f0, fs):
        """Return the complex frequency response at ``f0`` for sample rate ``fs``."""
        a, b = self._a, self._b
        w = 2 * math.pi * f0 / fs
        z1 = cmath.exp(complex(0, -w))
        z2 = cmath.exp(complex(0, -2 * w))
        return (b[0] + b[1] * z1 + b[2] * z2) / (1 + a[0] * z1 + a[1] * z2)

    def configure(self, enabled, filter_type, f0, fs, gain, q):
        """Design the filter and load its coefficients."""
        a_coefs, b_coefs = compute_coefficients(enabled, filter_type, f0, fs, gain, q)
        self.update(a_coefs, b_coefs)