"""Smoothing filters for daily price series.

This module provides six stateless transforms from PriceSeries to
SmoothedSeries:
- Simple, exponential and weighted moving averages
- Savitzky-Golay polynomial smoothing
- Lowess local regression
- Kalman (local-level) smoothing
"""

from stocksmooth.filters.base import BaseFilter
from stocksmooth.filters.moving_averages import (
    SimpleMovingAverage,
    ExponentialMovingAverage,
    WeightedMovingAverage,
    linear_weights,
)
from stocksmooth.filters.smoothers import SavitzkyGolay, Lowess
from stocksmooth.filters.kalman import KalmanSmoother
from stocksmooth.filters.bank import FilterBank, FilterBankResult

__all__ = [
    "BaseFilter",
    "SimpleMovingAverage",
    "ExponentialMovingAverage",
    "WeightedMovingAverage",
    "linear_weights",
    "SavitzkyGolay",
    "Lowess",
    "KalmanSmoother",
    "FilterBank",
    "FilterBankResult",
]
