"""Per-strip processing chain: delay, EQ, dynamics, reverb, volume and metering."""

import math

import numpy as np

from .delay_filter import DelayFilter
from .dynamics import CompressorFilter, ExpanderFilter
from .eq_filter import EqFilter
from .osc_arrays import OscArray, OscContainerArray
from .osc_node import OscContainer
from .osc_variables import OscVariable
from .peak_meter import PeakMeter
from .reverb import ReverbFilter

EQ_BAND_COUNT = 6


def log_scale_from_osc(value):
    """Convert a level in dB to a linear gain."""
    return 10 ** (value / 20.0)


def log_scale_to_osc(value):
    """Convert a linear gain to a level in dB."""
    if value == 0:
        return -math.inf
    if value < 0:
        return math.nan
    return 20.0 * math.log10(value)


class FilterChain(OscContainer):
    """The filters applied to one audio strip, configured through OSC."""

    def __init__(self, parent, num_channels_variable, sample_rate_variable):
        self._delay_filters = []
        self._num_channels = 0
        super().__init__(parent, "filterChain")
        self.reverb_filters = OscContainerArray(
            self, "reverbFilter", lambda container, key: ReverbFilter(container, str(key))
        )
        self.eq_filters = OscContainerArray(
            self, "eqFilters", lambda container, key: EqFilter(container, str(key))
        )
        self.compressor = CompressorFilter(self)
        self.expander = ExpanderFilter(self)
        self.peak_meter = PeakMeter(parent, num_channels_variable, sample_rate_variable)

        self.delay = OscVariable(self, "delay", 0)
        self.balance = OscArray(self, "balance", 1.0)
        self.master_volume = OscVariable(self, "volume", 1.0)
        self.mute = OscVariable(self, "mute", False)
        self.reverse_audio_signal = OscVariable(self, "reverseAudioSignal", False)

        self.delay.add_change_callback(self._on_delay)
        self.balance.set_osc_converters(log_scale_to_osc, log_scale_from_osc)
        self.master_volume.set_osc_converters(log_scale_to_osc, log_scale_from_osc)

        num_channels_variable.add_change_callback(self._on_num_channels)

    @property
    def num_channels(self):
        return self._num_channels

    def _on_delay(self, value):
        for delay_filter in self._delay_filters:
            delay_filter.delay = value

    def _on_num_channels(self, value):
        if value > 0:
            self._update_num_channels(value)

    def _update_num_channels(self, num_channels):
        self._num_channels = num_channels
        # One extra delay line for the side channel
        size = num_channels + 1
        del self._delay_filters[size:]
        self._delay_filters.extend(DelayFilter() for _ in range(size - len(self._delay_filters)))
        self.reverb_filters.resize(num_channels)
        self.balance.resize(num_channels)

        self.eq_filters.resize(EQ_BAND_COUNT)
        for eq_filter in self.eq_filters.values():
            eq_filter.init(num_channels)

        self.compressor.init(num_channels)
        self.expander.init(num_channels)

    def reset(self, fs):
        """Clear every filter's state and set the sample rate."""
        for delay_filter in self._delay_filters:
            delay_filter.reset()
        for reverb in self.reverb_filters.values():
            reverb.reset()
        for eq_filter in self.eq_filters.values():
            eq_filter.reset(fs)
        self.compressor.reset(fs)
        self.expander.reset(fs)

    def process(self, channels):
        """Process a block given as one row of samples per channel and return it."""
        data = np.array(channels, dtype=float)
        if data.ndim != 2 or data.shape[0] != self._num_channels or self._num_channels == 0:
            raise ValueError(
                f"expected {self._num_channels} channels of samples, got shape {data.shape}"
            )
        count = data.shape[1]

        master = self.master_volume.value
        if self.reverse_audio_signal.value:
            master = -master

        output = np.array(
            [delay_filter.process(row) for delay_filter, row in zip(self._delay_filters, data)],
            dtype=float,
        ).reshape(data.shape)

        for eq_filter in self.eq_filters.values():
            output = eq_filter.process(output)

        output = self.expander.process(output)
        output = self.compressor.process(output)

        for channel in range(self._num_channels):
            output[channel] = self.reverb_filters[channel].process(output[channel])

        peaks = []
        for channel in range(self._num_channels):
            output[channel] *= self.balance[channel].value * master
            peaks.append(float(np.max(np.abs(output[channel]))) if count else 0.0)

        self.peak_meter.add_peaks(peaks, count)

        if self.mute.value:
            output[:] = 0.0
        return output

    def process_side_channel_sample(self, sample):
        """Delay one side-channel sample by the chain's delay."""
        if not self._delay_filters:
            raise RuntimeError(f"{self.full_address}: no channel configured")
        return self._delay_filters[-1].process_sample(sample)

    def on_fast_timer(self):
        """Publish the peak meter levels."""
        self.peak_meter.on_fast_timer()