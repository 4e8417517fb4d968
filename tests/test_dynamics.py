import numpy as np
import pytest

from damc.dynamics import CompressorFilter, ExpanderFilter
from damc.osc_root import OscRoot
from damc.oscwire import write_message


def make_compressor(num_channels=1):
    compressor = CompressorFilter(None)
    compressor.init(num_channels)
    compressor.reset(48000.0)
    compressor.enable.set(True)
    return compressor


def make_expander(num_channels=1):
    expander = ExpanderFilter(None)
    expander.init(num_channels)
    expander.reset(48000.0)
    expander.enable.set(True)
    expander.release_time.set(0.0)
    return expander


def test_compressor_disabled_passes_through():
    compressor = CompressorFilter(None)
    compressor.init(2)
    compressor.reset(48000.0)
    block = [[0.5, -0.25, 0.1], [1.0, 0.0, -1.0]]
    assert np.array_equal(compressor.process(block), np.array(block))


def test_compressor_below_threshold_gives_no_reduction():
    compressor = make_compressor()
    assert compressor.gain_computer(-60.0) == 0.0


def test_compressor_ratio_changes_slope():
    compressor = make_compressor()
    compressor.ratio.set(2.0)
    assert compressor.gain_computer(-40.0) == pytest.approx(5.0)


def test_compressor_knee_is_continuous():
    compressor = make_compressor()
    compressor.ratio.set(2.0)
    compressor.knee_width.set(10.0)
    upper = compressor.gain_computer(-45.0)
    assert compressor.gain_computer(-45.0 - 1e-6) == pytest.approx(upper, abs=1e-5)
    assert compressor.gain_computer(-55.0 + 1e-6) == pytest.approx(0.0, abs=1e-5)


def test_compressor_full_scale_constant_is_unity():
    compressor = make_compressor()
    out = compressor.process([[1.0] * 8])
    assert out[0] == pytest.approx([1.0] * 8)


def test_compressor_moving_max_holds_reduction():
    compressor = make_compressor()
    compressor.release_time.set(0.0)
    out = compressor.process([[1.0, 0.01]])
    assert out[0][1] == pytest.approx(0.01, rel=1e-4)


def test_compressor_without_moving_max_releases():
    compressor = make_compressor()
    compressor.release_time.set(0.0)
    compressor.use_moving_max.set(False)
    out = compressor.process([[1.0, 0.01]])
    assert out[0][1] > 0.1


def test_compressor_channels_are_linked():
    compressor = make_compressor(2)
    block = np.array([[1.0, 0.5], [0.01, 0.02]])
    out = compressor.process(block)
    assert out[1] / block[1] == pytest.approx(out[0] / block[0])


def test_compressor_channel_mismatch_raises():
    compressor = make_compressor(2)
    with pytest.raises(ValueError):
        compressor.process([[1.0, 2.0]])


def test_compressor_enable_over_osc():
    root = OscRoot(False)
    compressor = CompressorFilter(root)
    root.on_packet_received(write_message("/compressorFilter/enable", "T"))
    assert compressor.enable.value is True


def test_expander_disabled_passes_through():
    expander = ExpanderFilter(None)
    expander.init(1)
    expander.reset(48000.0)
    block = [[0.0001, 0.5, -0.3]]
    assert np.array_equal(expander.process(block), np.array(block))


def test_expander_gain_computer():
    expander = make_expander()
    assert expander.gain_computer(-40.0) == 0.0
    assert expander.gain_computer(-60.0) == pytest.approx(30.0)


def test_expander_attenuates_quiet_signal():
    expander = make_expander()
    out = expander.process([[1e-4, 1e-4]])
    assert out.shape == (1, 2)
    assert float(np.max(np.abs(out))) < 1e-8


def test_expander_follows_loudest_channel():
    expander = make_expander(2)
    out = expander.process([[1.0], [0.0]])
    assert out[0][0] == pytest.approx(1.0)
    assert out[1][0] == 0.0


def test_expander_silence_stays_silent():
    expander = make_expander()
    out = expander.process([[0.0, 0.0, 0.0]])
    assert np.array_equal(out, np.zeros((1, 3)))


def test_expander_channel_mismatch_raises():
    expander = make_expander(1)
    with pytest.raises(ValueError):
        expander.process([[1.0], [1.0]])