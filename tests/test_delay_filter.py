import numpy as np
import pytest

from damc.delay_filter import DelayFilter


def test_zero_delay_is_identity():
    delay = DelayFilter()
    samples = [0.5, -1.0, 2.0, 0.25]
    assert delay.process(samples).tolist() == samples


def test_delay_shifts_samples():
    delay = DelayFilter(3)
    out = delay.process([1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert out.tolist() == [0.0, 0.0, 0.0, 1.0, 2.0, 3.0]


@pytest.mark.parametrize("amount", [1, 2, 4, 7, 8])
def test_single_sample_delay(amount):
    delay = DelayFilter(amount)
    outputs = [delay.process_sample(1.0 if i == 0 else 0.0) for i in range(amount + 2)]
    assert outputs.index(1.0) == amount
    assert sum(outputs) == 1.0


def test_streaming_matches_single_block():
    samples = np.linspace(-1, 1, 50)
    whole = DelayFilter(5).process(samples)
    split = DelayFilter(5)
    parts = np.concatenate([split.process(samples[:17]), split.process(samples[17:])])
    assert np.array_equal(whole, parts)


def test_reset_clears_history():
    delay = DelayFilter(2)
    delay.process([1.0, 2.0, 3.0])
    delay.reset()
    assert delay.process([9.0, 9.0]).tolist() == [0.0, 0.0]


def test_delay_property_and_truncation():
    delay = DelayFilter(2.7)
    assert delay.delay == 2
    delay.delay = 4
    assert delay.delay == 4
    out = delay.process([1.0] + [0.0] * 5)
    assert out.tolist().index(1.0) == 4


def test_negative_delay_raises():
    with pytest.raises(ValueError):
        DelayFilter(-1)