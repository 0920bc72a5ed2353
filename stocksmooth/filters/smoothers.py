"""Local polynomial smoothers: Savitzky-Golay and Lowess."""

from typing import Any, Dict
import logging

import numpy as np
import pandas as pd
from scipy.signal import savgol_filter
from statsmodels.nonparametric.smoothers_lowess import lowess

from stocksmooth.filters.base import BaseFilter
from stocksmooth.utils.error_handling import InvalidFilterParameters

logger = logging.getLogger(__name__)


class SavitzkyGolay(BaseFilter):
    """
    Least-squares polynomial fit over a sliding window, evaluated at its center.

    Edge policy: truncated fit. The first and last (window - 1) / 2 points
    are read off the polynomial fitted to the first and last full window
    (scipy ``mode="interp"``), so the output is defined everywhere.
    """

    def __init__(self, polyorder: int = 3, window: int = 21):
        """
        Initialize a Savitzky-Golay filter.

        Args:
            polyorder: Degree of the fitted polynomial
            window: Odd number of points in each window, greater than polyorder

        Raises:
            InvalidFilterParameters: If window is even or not above polyorder
        """
        if isinstance(window, bool) or not isinstance(window, (int, np.integer)) or window < 1:
            raise InvalidFilterParameters(f"window must be a positive integer, got {window!r}")
        if isinstance(polyorder, bool) or not isinstance(polyorder, (int, np.integer)) or polyorder < 0:
            raise InvalidFilterParameters(f"polyorder must be a non-negative integer, got {polyorder!r}")
        if window % 2 == 0:
            raise InvalidFilterParameters(f"window must be odd, got {window}")
        if window <= polyorder:
            raise InvalidFilterParameters(
                f"window ({window}) must be greater than polyorder ({polyorder})"
            )
        self.polyorder = int(polyorder)
        self.window = int(window)

    @property
    def name(self) -> str:
        return "savgol"

    @property
    def params(self) -> Dict[str, Any]:
        return {"polyorder": self.polyorder, "window": self.window}

    def _transform(self, values: pd.Series) -> pd.Series:
        if len(values) < self.window:
            raise InvalidFilterParameters(
                f"window ({self.window}) is longer than the series ({len(values)} points)"
            )
        smoothed = savgol_filter(
            values.to_numpy(),
            window_length=self.window,
            polyorder=self.polyorder,
            mode="interp",
        )
        return pd.Series(smoothed, index=values.index)


class Lowess(BaseFilter):
    """
    Locally weighted linear regression with robustness iterations.

    x is the integer position of each price, so the fraction of neighbours
    is counted in trading days, not calendar days.
    """

    def __init__(self, frac: float = 0.1, iterations: int = 3):
        """
        Initialize a Lowess smoother.

        Args:
            frac: Fraction of points used for each local fit, in (0, 1]
            iterations: Number of residual-based reweighting passes

        Raises:
            InvalidFilterParameters: If frac is outside (0, 1] or iterations < 0
        """
        if not 0.0 < frac <= 1.0:
            raise InvalidFilterParameters(f"frac must be in (0, 1], got {frac!r}")
        if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)) or iterations < 0:
            raise InvalidFilterParameters(f"iterations must be a non-negative integer, got {iterations!r}")
        self.frac = float(frac)
        self.iterations = int(iterations)

    @property
    def name(self) -> str:
        return "lowess"

    @property
    def params(self) -> Dict[str, Any]:
        return {"frac": self.frac, "iterations": self.iterations}

    def _transform(self, values: pd.Series) -> pd.Series:
        y = values.to_numpy()
        # Robustness weights divide by the median residual, which is zero here
        if np.ptp(y) == 0:
            return values.copy()

        x = np.arange(len(y), dtype=float)
        fitted = lowess(
            y,
            x,
            frac=self.frac,
            it=self.iterations,
            delta=0.0,
            is_sorted=True,
            return_sorted=False,
        )
        return pd.Series(fitted, index=values.index)
