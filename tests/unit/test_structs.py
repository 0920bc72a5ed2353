"""Unit tests for PriceSeries, SmoothedSeries and ForecastResult."""

from dataclasses import FrozenInstanceError

import numpy as np
import pandas as pd
import pytest

from stocksmooth.data.structs import ForecastResult, ForecastStep, PriceSeries, SmoothedSeries


def _step(i, point, half80, half95):
    return ForecastStep(
        step=i,
        date=pd.Timestamp("2024-01-01") + pd.offsets.BDay(i),
        point=point,
        lower_80=point - half80,
        upper_80=point + half80,
        lower_95=point - half95,
        upper_95=point + half95,
    )


class TestPriceSeries:
    """Tests for PriceSeries validation and immutability."""

    def test_from_values(self):
        series = PriceSeries.from_values([1.0, 2.0, 3.0], symbol="ABC")
        assert len(series) == 3
        assert series.symbol == "ABC"
        assert series.source == "synthetic"
        assert isinstance(series.dates, pd.DatetimeIndex)

    def test_rejects_unsorted_dates(self):
        index = pd.to_datetime(["2024-01-03", "2024-01-02"])
        with pytest.raises(ValueError, match="strictly increasing"):
            PriceSeries(symbol="X", prices=pd.Series([1.0, 2.0], index=index))

    def test_rejects_duplicate_dates(self):
        index = pd.to_datetime(["2024-01-02", "2024-01-02"])
        with pytest.raises(ValueError, match="strictly increasing"):
            PriceSeries(symbol="X", prices=pd.Series([1.0, 2.0], index=index))

    def test_rejects_nan(self):
        with pytest.raises(ValueError, match="finite"):
            PriceSeries.from_values([1.0, np.nan, 3.0])

    def test_rejects_empty(self):
        with pytest.raises(ValueError, match="empty"):
            PriceSeries.from_values([])

    def test_rejects_non_datetime_index(self):
        with pytest.raises(ValueError, match="DatetimeIndex"):
            PriceSeries(symbol="X", prices=pd.Series([1.0, 2.0]))

    def test_decoupled_from_source_series(self):
        source = pd.Series([1.0, 2.0], index=pd.to_datetime(["2024-01-02", "2024-01-03"]))
        series = PriceSeries(symbol="X", prices=source)
        source.iloc[0] = 99.0
        assert series.values[0] == 1.0

    def test_frozen(self):
        series = PriceSeries.from_values([1.0, 2.0])
        with pytest.raises(FrozenInstanceError):
            series.symbol = "Y"


class TestSmoothedSeries:
    """Tests for SmoothedSeries helpers."""

    def test_first_valid_position_and_defined(self):
        index = pd.date_range("2024-01-01", periods=4, freq="B")
        smoothed = SmoothedSeries(name="sma", values=pd.Series([np.nan, np.nan, 2.0, 3.0], index=index))
        assert smoothed.first_valid_position == 2
        assert smoothed.defined().tolist() == [2.0, 3.0]

    def test_params_copied(self):
        params = {"window": 3}
        index = pd.date_range("2024-01-01", periods=1, freq="B")
        smoothed = SmoothedSeries(name="sma", values=pd.Series([1.0], index=index), params=params)
        params["window"] = 99
        assert smoothed.params == {"window": 3}


class TestForecastResult:
    """Tests for ForecastResult accessors."""

    def test_to_frame_and_widths(self):
        result = ForecastResult(
            steps=[_step(1, 10.0, 1.0, 2.0), _step(2, 11.0, 1.5, 3.0)],
            order=(1, 1, 0),
            trend="t",
            coefficients={"drift": 0.5, "ar.L1": 0.2, "sigma2": 1.1},
            criterion_value=123.4,
            sigma2=1.1,
        )
        frame = result.to_frame()
        assert list(frame.columns) == ["step", "point", "lower_80", "upper_80", "lower_95", "upper_95"]
        assert result.horizon == 2
        np.testing.assert_allclose(result.interval_widths(80), [2.0, 3.0])
        np.testing.assert_allclose(result.interval_widths(95), [4.0, 6.0])

    def test_unsupported_level(self):
        result = ForecastResult(steps=[_step(1, 10.0, 1.0, 2.0)], order=(0, 0, 0))
        with pytest.raises(ValueError, match="Unsupported"):
            result.interval_widths(99)

    def test_summary_mentions_order_and_coefficients(self):
        result = ForecastResult(
            steps=[_step(1, 10.0, 1.0, 2.0)],
            order=(2, 1, 1),
            trend="n",
            coefficients={"ar.L1": 0.25},
            criterion="bic",
            criterion_value=10.0,
            sigma2=0.5,
        )
        text = result.summary()
        assert "ARIMA(2,1,1)" in text
        assert "ar.L1" in text
        assert "BIC:" in text
        assert "AICc" not in text
