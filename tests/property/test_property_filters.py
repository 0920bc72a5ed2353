"""Property tests for the smoothing filters."""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from stocksmooth.data.structs import PriceSeries
from stocksmooth.filters import (
    ExponentialMovingAverage,
    KalmanSmoother,
    Lowess,
    SavitzkyGolay,
    SimpleMovingAverage,
    WeightedMovingAverage,
)
from stocksmooth.utils.error_handling import InvalidWeights

prices_strategy = st.lists(
    st.floats(min_value=1.0, max_value=1000.0, allow_nan=False, allow_infinity=False),
    min_size=25,
    max_size=80,
)


@st.composite
def increasing_weights(draw):
    """Strictly increasing positive weights summing to one."""
    steps = draw(st.lists(st.floats(min_value=0.01, max_value=10.0), min_size=2, max_size=8))
    raw = np.cumsum(steps)
    return raw / raw.sum()


def all_filters():
    return [
        SimpleMovingAverage(20),
        ExponentialMovingAverage(20),
        WeightedMovingAverage(5),
        SavitzkyGolay(3, 21),
        Lowess(0.1),
        KalmanSmoother(15.0, 0.5),
    ]


@given(st.floats(min_value=0.01, max_value=1e5), st.integers(min_value=25, max_value=120))
@settings(max_examples=25, deadline=None)
def test_constant_input_is_fixed_point(level, length):
    """Property: every filter maps a constant series to the same constant where defined."""
    prices = PriceSeries.from_values(np.full(length, level))
    for filt in all_filters():
        defined = filt.apply(prices).defined()
        assert len(defined) > 0
        np.testing.assert_allclose(defined.to_numpy(), level, rtol=1e-9, err_msg=filt.name)


@given(prices_strategy, st.integers(min_value=1, max_value=25))
@settings(max_examples=50, deadline=None)
def test_sma_is_trailing_mean(values, window):
    """Property: SMA(n)[i] is the mean of the n prices ending at i, undefined before n - 1."""
    prices = PriceSeries.from_values(values)
    out = SimpleMovingAverage(window).apply(prices)
    assert out.first_valid_position == window - 1
    x = np.asarray(values)
    for i in range(window - 1, len(x)):
        assert out.values.iloc[i] == pytest.approx(x[i - window + 1:i + 1].mean(), rel=1e-9)


@given(prices_strategy, increasing_weights())
@settings(max_examples=50, deadline=None)
def test_wma_stays_within_window_range(values, weights):
    """Property: a WMA value is a convex combination of its window."""
    window = len(weights)
    out = WeightedMovingAverage(window, weights).apply(PriceSeries.from_values(values)).values
    x = np.asarray(values)
    for i in range(window - 1, len(x)):
        chunk = x[i - window + 1:i + 1]
        assert chunk.min() - 1e-9 <= out.iloc[i] <= chunk.max() + 1e-9


@given(increasing_weights())
@settings(max_examples=50)
def test_wma_rejects_reversed_weights(weights):
    """Property: decreasing weights are rejected even though they sum to one."""
    with pytest.raises(InvalidWeights, match="increase"):
        WeightedMovingAverage(len(weights), weights[::-1])


@given(increasing_weights(), st.floats(min_value=1e-6, max_value=0.5))
@settings(max_examples=50)
def test_wma_rejects_unnormalized_weights(weights, excess):
    """Property: weights whose sum misses one are rejected."""
    with pytest.raises(InvalidWeights, match="sum to 1"):
        WeightedMovingAverage(len(weights), weights * (1 + excess))


@given(prices_strategy)
@settings(max_examples=30, deadline=None)
def test_filters_preserve_length_and_index(values):
    """Property: outputs align one-to-one with the input dates."""
    prices = PriceSeries.from_values(values)
    for filt in all_filters():
        out = filt.apply(prices)
        assert out.values.index.equals(prices.dates)
        assert out.name == filt.name
