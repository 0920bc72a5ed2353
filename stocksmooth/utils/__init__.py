"""Error taxonomy, logging and configuration helpers."""

from stocksmooth.utils.error_handling import (
    StockSmoothError,
    DataUnavailable,
    EmptyRange,
    InvalidFilterParameters,
    InvalidWeights,
    NonConvergent,
    StageFailure,
)

__all__ = [
    "StockSmoothError",
    "DataUnavailable",
    "EmptyRange",
    "InvalidFilterParameters",
    "InvalidWeights",
    "NonConvergent",
    "StageFailure",
]
