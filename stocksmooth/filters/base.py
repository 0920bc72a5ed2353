"""Base interface for all smoothing filters."""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

import pandas as pd

from stocksmooth.data.structs import PriceSeries, SmoothedSeries

logger = logging.getLogger(__name__)


class BaseFilter(ABC):
    """
    Abstract base class for stateless smoothing filters.

    Subclasses validate their parameters in ``__init__`` and implement
    ``_transform`` on the defined part of the price series. ``apply`` takes
    care of leading missing values and of re-indexing the result onto the
    full input index, so NaN never leaks past a filter's own window.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the filter identifier (also its color key in plots)."""
        pass

    @property
    @abstractmethod
    def params(self) -> Dict[str, Any]:
        """Return the filter parameters."""
        pass

    @abstractmethod
    def _transform(self, values: pd.Series) -> pd.Series:
        """
        Smooth a series with no missing values.

        Args:
            values: Writable float copy of the defined prices

        Returns:
            Series on the same index as values
        """
        pass

    def apply(self, series: PriceSeries) -> SmoothedSeries:
        """
        Smooth a price series.

        Args:
            series: Input prices, left untouched

        Returns:
            SmoothedSeries on the input's index
        """
        prices = series.prices
        defined = prices.dropna().astype(float).copy()
        if defined.empty:
            smoothed = pd.Series(float("nan"), index=prices.index)
        else:
            smoothed = self._transform(defined).reindex(prices.index)

        logger.debug(
            f"{self.name}{self.params} applied to {series.symbol}: "
            f"{int(smoothed.notna().sum())}/{len(smoothed)} defined"
        )
        return SmoothedSeries(name=self.name, values=smoothed, params=self.params)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{self.__class__.__name__}({params})"
