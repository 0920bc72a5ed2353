"""Price loading and core data structures."""

from .loaders import PriceLoader, YahooPriceFeed, ValidationResult
from .structs import PriceSeries, SmoothedSeries, ForecastStep, ForecastResult

__all__ = [
    "PriceLoader",
    "YahooPriceFeed",
    "ValidationResult",
    "PriceSeries",
    "SmoothedSeries",
    "ForecastStep",
    "ForecastResult",
]
