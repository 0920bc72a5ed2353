"""Pytest configuration and shared fixtures."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from stocksmooth.data.structs import PriceSeries


class FakeFeed:
    """In-memory stand-in for YahooPriceFeed."""

    name = "fake"

    def __init__(self, frame=None, known=True, error=None, exists_error=None):
        self.frame = frame if frame is not None else pd.DataFrame()
        self.known = known
        self.error = error
        self.exists_error = exists_error
        self.calls = []

    def fetch(self, symbol, start, end):
        self.calls.append((symbol, start, end))
        if self.error is not None:
            raise self.error
        return self.frame

    def exists(self, symbol):
        if self.exists_error is not None:
            raise self.exists_error
        return self.known


def make_bars(closes, start="2023-01-02", tz="America/New_York"):
    """Daily bars shaped like yfinance's history() output."""
    index = pd.date_range(start=start, periods=len(closes), freq="B", tz=tz)
    closes = np.asarray(closes, dtype=float)
    return pd.DataFrame(
        {
            "Open": closes,
            "High": closes * 1.01,
            "Low": closes * 0.99,
            "Close": closes,
            "Volume": np.full(len(closes), 1_000_000.0),
        },
        index=index,
    )


@pytest.fixture
def constant_series():
    """100 prices all equal to 100."""
    return PriceSeries.from_values(np.full(100, 100.0), symbol="FLAT")


@pytest.fixture
def noisy_sine():
    """Noisy sine wave around 100 and its noise-free ground truth."""
    rng = np.random.default_rng(42)
    t = np.linspace(0, 10, 200)
    truth = 100 + 5 * np.sin(t)
    noisy = truth + rng.normal(0, 1.0, size=len(t))
    series = PriceSeries.from_values(noisy, symbol="SINE")
    return series, pd.Series(truth, index=series.dates)


@pytest.fixture
def trending_walk():
    """Random walk with upward drift, clearly non-stationary."""
    rng = np.random.default_rng(7)
    values = 50 + np.cumsum(rng.normal(0.5, 1.0, size=150))
    return PriceSeries.from_values(values, symbol="WALK")


@pytest.fixture
def fake_feed_factory():
    """Build FakeFeed instances inside tests."""
    return FakeFeed


@pytest.fixture
def bars_factory():
    return make_bars
