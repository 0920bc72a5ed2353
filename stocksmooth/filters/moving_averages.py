"""Simple, exponential and weighted moving averages.

Window conventions:
- SMA and WMA are undefined until `window` prices have been seen.
- EMA is seeded with the first price (``adjust=False``), so it is defined
  from the first index and EMA(1) reproduces the input exactly.
"""

from typing import Any, Dict, Optional, Sequence
import logging

import numpy as np
import pandas as pd

from stocksmooth.filters.base import BaseFilter
from stocksmooth.utils.error_handling import InvalidFilterParameters, InvalidWeights

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-9


def _check_window(window: int) -> int:
    if isinstance(window, bool) or not isinstance(window, (int, np.integer)) or window < 1:
        raise InvalidFilterParameters(f"window must be a positive integer, got {window!r}")
    return int(window)


def linear_weights(window: int) -> np.ndarray:
    """Normalized arithmetic weights 1..n / (n(n+1)/2), newest sample heaviest."""
    window = _check_window(window)
    weights = np.arange(1, window + 1, dtype=float)
    return weights / weights.sum()


class SimpleMovingAverage(BaseFilter):
    """Equal-weighted mean of the last `window` prices."""

    def __init__(self, window: int = 20):
        self.window = _check_window(window)

    @property
    def name(self) -> str:
        return "sma"

    @property
    def params(self) -> Dict[str, Any]:
        return {"window": self.window}

    def _transform(self, values: pd.Series) -> pd.Series:
        return values.rolling(window=self.window, min_periods=self.window).mean()


class ExponentialMovingAverage(BaseFilter):
    """
    Recursive EMA with smoothing factor alpha = 2 / (window + 1).

    out[0] = price[0]; out[i] = alpha * price[i] + (1 - alpha) * out[i - 1]
    """

    def __init__(self, window: int = 20):
        self.window = _check_window(window)

    @property
    def name(self) -> str:
        return "ema"

    @property
    def params(self) -> Dict[str, Any]:
        return {"window": self.window}

    @property
    def alpha(self) -> float:
        return 2.0 / (self.window + 1)

    def _transform(self, values: pd.Series) -> pd.Series:
        if self.window == 1:
            return values.copy()
        return values.ewm(alpha=self.alpha, adjust=False).mean()


class WeightedMovingAverage(BaseFilter):
    """
    Weighted mean of the last `window` prices.

    out[i] = sum_k weights[k] * price[i - window + 1 + k], so weights[-1]
    applies to the most recent price.
    """

    def __init__(self, window: int = 5, weights: Optional[Sequence[float]] = None):
        """
        Initialize a weighted moving average.

        Args:
            window: Number of prices in each window
            weights: Weights oldest to newest; linear 1..n normalized when omitted

        Raises:
            InvalidWeights: If the weights have the wrong length, do not sum
                to 1, or are not strictly increasing toward the newest sample
        """
        self.window = _check_window(window)
        if weights is None:
            self.weights = linear_weights(self.window)
        else:
            self.weights = np.asarray(weights, dtype=float)
        self._validate_weights()

    def _validate_weights(self) -> None:
        w = self.weights
        if w.ndim != 1 or len(w) != self.window:
            raise InvalidWeights(
                f"expected {self.window} weights for window {self.window}, got {w.size}"
            )
        if not np.isfinite(w).all():
            raise InvalidWeights("weights must be finite")
        total = float(w.sum())
        if not np.isclose(total, 1.0, rtol=0.0, atol=WEIGHT_SUM_TOLERANCE):
            raise InvalidWeights(f"weights must sum to 1, got {total:.12g}")
        if self.window > 1 and not (np.diff(w) > 0).all():
            raise InvalidWeights("weights must increase strictly toward the most recent sample")

    @property
    def name(self) -> str:
        return "wma"

    @property
    def params(self) -> Dict[str, Any]:
        return {"window": self.window, "weights": self.weights.tolist()}

    def _transform(self, values: pd.Series) -> pd.Series:
        weights = self.weights
        return values.rolling(window=self.window, min_periods=self.window).apply(
            lambda window: float(np.dot(window, weights)), raw=True
        )
