"""Schroeder all-pass reverberator with optionally nested inner stages."""

import numpy as np

from .delay_filter import DelayFilter
from .osc_arrays import OscContainerArray
from .osc_node import OscContainer
from .osc_variables import OscVariable


class ReverbFilter(OscContainer):
    """All-pass stage whose delay line is followed by inner all-pass stages."""

    def __init__(self, parent, name):
        self._delay_filter = DelayFilter()
        self._previous_delay_output = 0.0
        super().__init__(parent, name)
        self.enabled = OscVariable(self, "enabled", False)
        self.delay = OscVariable(self, "delay", 1440)
        self.gain = OscVariable(self, "gain", 0.893)
        self.reverberators = OscContainerArray(
            self, "innerReverberators", lambda parent, key: ReverbFilter(parent, str(key))
        )
        self.delay.add_change_callback(self._on_delay)

    def _on_delay(self, value):
        self._delay_filter.delay = value

    def reset(self, depth=1, inner_count=5):
        """Clear the delay line and build ``depth`` levels of ``inner_count`` inner stages."""
        self._delay_filter.reset()
        if depth > 0:
            self.reverberators.resize(inner_count)
            for inner in self.reverberators.values():
                inner.reset(depth - 1, inner_count)

    def process(self, samples):
        """Process a block; it comes back unchanged when the filter is disabled."""
        samples = np.array(samples, dtype=float)
        if not self.enabled.value:
            return samples
        return np.array([self.process_sample(float(sample)) for sample in samples], dtype=float)

    def process_sample(self, sample):
        """Process one sample, whether or not the filter is enabled."""
        gain = self.gain.value
        delayed = self._delay_filter.process_sample(sample + self._previous_delay_output * gain)
        for inner in self.reverberators.values():
            delayed = inner.process_sample(delayed)
        self._previous_delay_output = delayed
        return -gain * sample + (1 - gain * gain) * delayed