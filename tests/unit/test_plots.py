"""Unit tests for chart rendering."""

import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib.colors import to_hex

from stocksmooth.evaluation.plots import (
    BAND_ALPHA,
    SERIES_COLORS,
    plot_filter_bank,
    plot_forecast,
    plot_smoothed,
    save_figure,
)
from stocksmooth.filters import ExponentialMovingAverage, FilterBank
from stocksmooth.models import AutoARIMAModel


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestPlotSmoothed:
    """Tests for single-filter overlays."""

    def test_raw_then_filter_with_fixed_colors(self, noisy_sine):
        prices, _ = noisy_sine
        ax = plot_smoothed(prices, ExponentialMovingAverage(10).apply(prices))
        lines = ax.get_lines()
        assert len(lines) == 2
        assert to_hex(lines[0].get_color()) == SERIES_COLORS["raw"]
        assert to_hex(lines[1].get_color()) == SERIES_COLORS["ema"]
        assert "window=10" in lines[1].get_label()

    def test_does_not_mutate_inputs(self, noisy_sine):
        prices, _ = noisy_sine
        smoothed = ExponentialMovingAverage(10).apply(prices)
        before_prices = prices.values.copy()
        before_smoothed = smoothed.values.to_numpy().copy()
        plot_smoothed(prices, smoothed)
        np.testing.assert_array_equal(prices.values, before_prices)
        np.testing.assert_array_equal(smoothed.values.to_numpy(), before_smoothed)


class TestPlotForecast:
    """Tests for forecast charts."""

    def test_bands_and_point_line(self, trending_walk):
        forecast = AutoARIMAModel(hyperparameters={"max_p": 1, "max_q": 1}).fit(trending_walk).forecast(10)
        ax = plot_forecast(trending_walk, forecast, history=60)

        lines = ax.get_lines()
        assert len(lines[0].get_xdata()) == 60
        assert to_hex(lines[-1].get_color()) == SERIES_COLORS["arima"]
        alphas = sorted(c.get_alpha() for c in ax.collections)
        assert alphas == sorted(BAND_ALPHA.values())
        assert "ARIMA(" in ax.get_title()


class TestFigures:
    """Tests for the overview figure and saving."""

    def test_one_panel_per_filter(self, noisy_sine):
        prices, _ = noisy_sine
        outputs = FilterBank.default().apply(prices).outputs
        fig = plot_filter_bank(prices, outputs, ncols=2)
        visible = [ax for ax in fig.axes if ax.get_visible()]
        assert len(visible) == 6

    def test_odd_panel_count_hides_spare_axes(self, noisy_sine):
        prices, _ = noisy_sine
        outputs = dict(list(FilterBank.default().apply(prices).outputs.items())[:3])
        fig = plot_filter_bank(prices, outputs, ncols=2)
        assert sum(ax.get_visible() for ax in fig.axes) == 3

    def test_empty_outputs_raise(self, noisy_sine):
        prices, _ = noisy_sine
        with pytest.raises(ValueError, match="No filter outputs"):
            plot_filter_bank(prices, {})

    def test_save_figure(self, tmp_path, noisy_sine):
        prices, _ = noisy_sine
        fig = plot_filter_bank(prices, FilterBank.default().apply(prices).outputs)
        path = save_figure(fig, tmp_path / "nested" / "overview.png")
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
        assert not plt.fignum_exists(fig.number)
