"""Peak level meter with decaying per-channel levels published over OSC."""

import math
import threading

from .osc_variables import OscVariable

FLOOR_DB = -192.0
DECAY_DB_PER_SECOND = 11.76470588235294  # -20 dB over 1.7 s


def _resize(values, size, fill):
    size = max(0, size)
    del values[size:]
    values.extend([fill] * (size - len(values)))


class PeakMeter:
    """Accumulates peaks from the audio side and publishes levels on a timer."""

    def __init__(self, parent, num_channels_variable, sample_rate_variable):
        self._root = parent.get_root()
        self._sample_rate = sample_rate_variable
        self._lock = threading.Lock()
        self._levels_db = []
        self._peaks = []
        self._samples_in_peaks = 0
        self.global_path = parent.full_address + "/meter"
        self.per_channel_path = parent.full_address + "/meter_per_channel"
        self.enable_peak_update = OscVariable(parent, "meter_enable_per_channel", False)
        num_channels_variable.add_change_callback(self._on_num_channels)

    def _on_num_channels(self, num_channels):
        _resize(self._levels_db, num_channels, FLOOR_DB)
        with self._lock:
            _resize(self._peaks, num_channels, 0.0)

    @property
    def levels_db(self):
        """The current level of each channel in dB."""
        return list(self._levels_db)

    def add_peaks(self, peaks, sample_count):
        """Record the peak of each channel over ``sample_count`` samples."""
        peaks = list(peaks)
        with self._lock:
            if len(peaks) > len(self._peaks):
                raise ValueError(f"{len(peaks)} peaks given for {len(self._peaks)} channels")
            self._samples_in_peaks += sample_count
            for channel, peak in enumerate(peaks):
                self._peaks[channel] = max(peak, self._peaks[channel])

    def on_fast_timer(self):
        """Fold the recorded peaks into the decaying levels and publish them."""
        sample_rate = self._sample_rate.value
        with self._lock:
            peaks = self._peaks
            self._peaks = [0.0] * len(peaks)
            samples = self._samples_in_peaks
            self._samples_in_peaks = 0

        if sample_rate == 0:
            return

        decay = DECAY_DB_PER_SECOND * samples / sample_rate
        for channel, peak in enumerate(peaks[: len(self._levels_db)]):
            peak_db = 20.0 * math.log10(peak) if peak > 0 else -math.inf
            level = max(self._levels_db[channel] - decay, peak_db)
            self._levels_db[channel] = level if level > FLOOR_DB else FLOOR_DB
        max_level = max(self._levels_db, default=0.0)

        if self._root is None:
            return
        if self.enable_peak_update.value:
            self._root.send_message(self.global_path, [float(max_level)])
        self._root.send_message(self.per_channel_path, [float(level) for level in self._levels_db])