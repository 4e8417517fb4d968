"""Multi-channel equaliser band built on a biquad per channel."""

import numpy as np

from .biquad import BiquadFilter, FilterType, compute_coefficients
from .osc_node import OscContainer
from .osc_variables import OscVariable


class EqFilter(OscContainer):
    """One EQ band whose settings are OSC variables."""

    def __init__(self, parent, name):
        self._fs = 48000.0
        self._biquads = []
        super().__init__(parent, name)
        self.enabled = OscVariable(self, "enable", False)
        self.filter_type = OscVariable(self, "type", int(FilterType.NONE))
        self.f0 = OscVariable(self, "f0", 1000.0)
        self.gain = OscVariable(self, "gain", 0.0)
        self.q = OscVariable(self, "Q", 0.5)

        for variable in (self.enabled, self.filter_type, self.f0, self.gain, self.q):
            variable.add_change_callback(lambda value: self._compute_filter())

    def init(self, num_channels):
        """Set the number of channels; new channels keep empty coefficients until reset."""
        del self._biquads[num_channels:]
        self._biquads.extend(BiquadFilter() for _ in range(num_channels - len(self._biquads)))

    def reset(self, fs):
        """Set the sample rate and recompute the coefficients."""
        self._fs = fs
        self._compute_filter()

    def process(self, channels):
        """Filter a block given as one row of samples per channel."""
        data = np.array(channels, dtype=float)
        if data.ndim != 2 or data.shape[0] != len(self._biquads):
            raise ValueError(
                f"expected {len(self._biquads)} channels of samples, got shape {data.shape}"
            )
        if not self.enabled.value:
            return data
        for row, biquad in zip(data, self._biquads):
            row[:] = [biquad.put(float(sample)) for sample in row]
        return data

    def response(self, f0):
        """Return the complex response of the band at frequency ``f0``."""
        if not self._biquads:
            raise RuntimeError(f"{self.full_address}: no channel initialised")
        return self._biquads[0].response(f0, self._fs)

    def _compute_filter(self):
        a_coefs, b_coefs = compute_coefficients(
            self.enabled.value,
            self.filter_type.value,
            self.f0.value,
            self._fs,
            self.gain.value,
            self.q.value,
        )
        for biquad in self._biquads:
            biquad.update(a_coefs, b_coefs)

    def set_parameters(self, enabled, filter_type, f0, gain, q):
        self.enabled.set(bool(enabled))
        self.filter_type.set(int(filter_type))
        self.f0.set(float(f0))
        self.gain.set(float(gain))
        self.q.set(float(q))
        self._compute_filter()

    @property
    def parameters(self):
        """The ``(enabled, filter_type, f0, gain, q)`` settings."""
        try:
            filter_type = FilterType(self.filter_type.value)
        except ValueError:
            filter_type = self.filter_type.value
        return (self.enabled.value, filter_type, self.f0.value, self.gain.value, self.q.value)