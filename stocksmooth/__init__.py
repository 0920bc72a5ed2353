"""Daily price smoothing filters and auto-selected ARIMA forecasts."""

__version__ = "0.1.0"
