"""Smoothing diagnostics and plotting utilities."""

from stocksmooth.evaluation.metrics import SmoothingMetrics
from stocksmooth.evaluation.plots import (
    SERIES_COLORS,
    plot_smoothed,
    plot_forecast,
    plot_filter_bank,
    save_figure,
)

__all__ = [
    "SmoothingMetrics",
    "SERIES_COLORS",
    "plot_smoothed",
    "plot_forecast",
    "plot_filter_bank",
    "save_figure",
]
