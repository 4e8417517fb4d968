"""Feed-forward compressor and expander acting on linked channels."""

import math
from collections import deque
from dataclasses import dataclass, field

import numpy as np

from .osc_node import OscContainer
from .osc_variables import OscVariable

_LOG10_DIV_20 = math.log(10) / 20
_HISTORY_SIZE = 1024


def _smoothing(time_constant, fs):
    """One-pole smoothing coefficient for a time constant in seconds; 0 means instant."""
    return math.exp(-1 / (time_constant * fs)) if time_constant != 0 else 0.0


def _as_channels(channels, expected):
    data = np.array(channels, dtype=float)
    if data.ndim != 2 or data.shape[0] != expected:
        raise ValueError(f"expected {expected} channels of samples, got shape {data.shape}")
    return data


@dataclass
class _CompressorChannel:
    y1: float = 0.0
    yl: float = 0.0
    history: list = field(default_factory=lambda: [0.0] * _HISTORY_SIZE)
    position: int = 0
    window: deque = field(default_factory=deque)

    def moving_max(self, db_compression):
        """Push a value and return the largest of the last history-size values."""
        window, history = self.window, self.history
        if window and window[0] == self.position:
            window.popleft()
        while window and db_compression >= history[window[-1]]:
            window.pop()
        window.append(self.position)
        history[self.position] = db_compression
        self.position = (self.position + 1) % len(history)
        return history[window[0]]


class CompressorFilter(OscContainer):
    """Compressor whose gain reduction is the largest one among all channels."""

    def __init__(self, parent):
        self._fs = 48000.0
        self._alpha_a = 0.0
        self._alpha_r = 0.0
        self._gain_diff_ratio = 0.0
        self._num_channels = 0
        self._channels = []
        self.gain_hold_samples = 48000 // 20
        super().__init__(parent, "compressorFilter")
        self.enable = OscVariable(self, "enable", False)
        self.attack_time = OscVariable(self, "attackTime", 0.0)
        self.release_time = OscVariable(self, "releaseTime", 2.0)
        self.threshold = OscVariable(self, "threshold", -50.0)
        self.make_up_gain = OscVariable(self, "makeUpGain", 0.0)
        self.ratio = OscVariable(self, "ratio", 1000.0)
        self.knee_width = OscVariable(self, "kneeWidth", 0.0)
        self.use_moving_max = OscVariable(self, "useMovingMax", True)

        self.attack_time.add_change_callback(self._on_attack_time)
        self.release_time.add_change_callback(self._on_release_time)
        self.ratio.add_change_callback(self._on_ratio)

    def _on_attack_time(self, value):
        self._alpha_a = _smoothing(value, self._fs)

    def _on_release_time(self, value):
        self._alpha_r = _smoothing(value, self._fs)

    def _on_ratio(self, value):
        self._gain_diff_ratio = 1 - 1 / value if value else -math.inf

    @property
    def num_channels(self):
        return self._num_channels

    def init(self, num_channels):
        """Set the number of channels, keeping the state of existing ones."""
        self._num_channels = num_channels
        del self._channels[num_channels:]
        self._channels.extend(_CompressorChannel() for _ in range(num_channels - len(self._channels)))

    def reset(self, fs):
        """Set the sample rate and clear every channel's state."""
        self._fs = fs
        self.gain_hold_samples = int(fs / 20)
        self._channels = [_CompressorChannel() for _ in range(self._num_channels)]

    def process(self, channels):
        """Compress a block given as one row of samples per channel."""
        data = _as_channels(channels, self._num_channels)
        output = data.copy()
        if not self.enable.value:
            return output

        static_gain = self.gain_computer(0.0) + self.make_up_gain.value
        for index, frame in enumerate(data.T):
            larger_compression = 0.0
            for sample, state in zip(frame, self._channels):
                larger_compression = min(larger_compression, self._compress(float(sample), state))
            output[:, index] = frame * math.exp(_LOG10_DIV_20 * (larger_compression + static_gain))
        return output

    def _compress(self, sample, state):
        if sample == 0:
            return 0.0
        db_sample = math.log(abs(sample)) / _LOG10_DIV_20
        self._level_detector(self.gain_computer(db_sample), state)
        return -state.yl

    def gain_computer(self, db_sample):
        """Return the gain reduction in dB wanted for a level in dB."""
        threshold = self.threshold.value
        knee = self.knee_width.value
        zone = 2 * (db_sample - threshold)
        if zone == -math.inf or zone <= -knee:
            return 0.0
        if zone >= knee:
            return self._gain_diff_ratio * (db_sample - threshold)
        a = db_sample - threshold + knee / 2
        return self._gain_diff_ratio * (a * a) / (2 * knee)

    def _level_detector(self, db_compression, state):
        alpha_r = self._alpha_r
        decayed = alpha_r * state.y1 + (1 - alpha_r) * db_compression
        if self.use_moving_max.value:
            state.y1 = max(state.moving_max(db_compression), decayed)
        else:
            state.y1 = max(db_compression, decayed)
        state.yl = self._alpha_a * state.yl + (1 - self._alpha_a) * state.y1


@dataclass
class _ExpanderChannel:
    y1: float = 0.0
    yl: float = 0.0


class ExpanderFilter(OscContainer):
    """Downward expander whose gain follows the loudest channel."""

    def __init__(self, parent):
        self._fs = 48000.0
        self._alpha_a = 0.0
        self._alpha_r = 0.0
        self._gain_diff_ratio = 0.0
        self._num_channels = 0
        self._channels = []
        super().__init__(parent, "expanderFilter")
        self.enable = OscVariable(self, "enable", False)
        self.attack_time = OscVariable(self, "attackTime", 0.0)
        self.release_time = OscVariable(self, "releaseTime", 8.0)
        self.threshold = OscVariable(self, "threshold", -50.0)
        self.make_up_gain = OscVariable(self, "makeUpGain", 0.0)
        self.ratio = OscVariable(self, "ratio", 4.0)
        self.knee_width = OscVariable(self, "kneeWidth", 0.0)

        self.attack_time.add_change_callback(self._on_attack_time)
        self.release_time.add_change_callback(self._on_release_time)
        self.ratio.add_change_callback(self._on_ratio)

    def _on_attack_time(self, value):
        self._alpha_a = _smoothing(value, self._fs)

    def _on_release_time(self, value):
        self._alpha_r = _smoothing(value, self._fs)

    def _on_ratio(self, value):
        self._gain_diff_ratio = value - 1

    @property
    def num_channels(self):
        return self._num_channels

    def init(self, num_channels):
        """Set the number of channels, keeping the state of existing ones."""
        self._num_channels = num_channels
        del self._channels[num_channels:]
        self._channels.extend(_ExpanderChannel() for _ in range(num_channels - len(self._channels)))

    def reset(self, fs):
        """Set the sample rate and clear every channel's state."""
        self._fs = fs
        self._channels = [_ExpanderChannel() for _ in range(self._num_channels)]

    def process(self, channels):
        """Expand a block given as one row of samples per channel."""
        data = _as_channels(channels, self._num_channels)
        output = data.copy()
        if not self.enable.value:
            return output

        make_up_gain = self.make_up_gain.value
        for index, frame in enumerate(data.T):
            lowest_compression = -math.inf
            for sample, state in zip(frame, self._channels):
                lowest_compression = max(lowest_compression, self._expand(float(sample), state))
            if lowest_compression != -math.inf:
                ratio = 10 ** ((lowest_compression + make_up_gain) / 20)
            else:
                ratio = 0.0
            output[:, index] = frame * ratio
        return output

    def _expand(self, sample, state):
        if sample == 0:
            return -math.inf
        db_sample = 20 * math.log10(abs(sample))
        self._level_detector(self.gain_computer(db_sample), state)
        return -state.yl

    def gain_computer(self, db_sample):
        """Return the attenuation in dB wanted for a level in dB."""
        threshold = self.threshold.value
        knee = self.knee_width.value
        zone = 2 * (db_sample - threshold)
        if zone == -math.inf or zone <= -knee:
            return self._gain_diff_ratio * (threshold - db_sample)
        if zone >= knee:
            return 0.0
        a = threshold - db_sample + knee / 2
        return self._gain_diff_ratio * (a * a) / (2 * knee)

    def _level_detector(self, db_sample, state):
        alpha_r = self._alpha_r
        state.y1 = min(db_sample, alpha_r * state.y1 + (1 - alpha_r) * db_sample)
        state.yl = self._alpha_a * state.yl + (1 - self._alpha_a) * state.y1