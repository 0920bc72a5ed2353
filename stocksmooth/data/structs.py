"""Core data structures for the smoothing pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

CRITERION_LABELS = {"aicc": "AICc", "aic": "AIC", "bic": "BIC"}


def _frozen_copy(series: pd.Series, name: str) -> pd.Series:
    """Return a float copy of series whose values cannot be written."""
    data = np.array(series.to_numpy(dtype=float), copy=True)
    data.flags.writeable = False
    return pd.Series(data, index=series.index.copy(), name=name, copy=False)


@dataclass(frozen=True)
class PriceSeries:
    """
    Daily adjusted close prices for one instrument.

    Attributes:
        symbol: Instrument identifier
        prices: Series of prices indexed by a strictly increasing DatetimeIndex
        source: Where the prices came from (feed name, 'synthetic', ...)
    """
    symbol: str
    prices: pd.Series
    source: str = "unknown"

    def __post_init__(self):
        """Validate ordering and values, then freeze the underlying data."""
        if not isinstance(self.prices.index, pd.DatetimeIndex):
            raise ValueError("PriceSeries requires a DatetimeIndex")
        if len(self.prices) == 0:
            raise ValueError("PriceSeries cannot be empty")
        if not self.prices.index.is_monotonic_increasing or not self.prices.index.is_unique:
            raise ValueError("PriceSeries dates must be strictly increasing")
        values = self.prices.to_numpy(dtype=float)
        if not np.isfinite(values).all():
            raise ValueError("PriceSeries prices must be finite")
        object.__setattr__(self, "prices", _frozen_copy(self.prices, self.symbol))

    @classmethod
    def from_values(
        cls,
        values,
        symbol: str = "SYNTHETIC",
        start: str = "2020-01-01",
        freq: str = "B",
    ) -> "PriceSeries":
        """Build a series from plain values on a generated business-day index."""
        values = np.asarray(values, dtype=float)
        index = pd.date_range(start=start, periods=len(values), freq=freq)
        return cls(symbol=symbol, prices=pd.Series(values, index=index), source="synthetic")

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self.prices.index

    @property
    def values(self) -> np.ndarray:
        return self.prices.to_numpy()

    def __len__(self) -> int:
        return len(self.prices)


@dataclass(frozen=True)
class SmoothedSeries:
    """
    Output of one smoothing filter, on the same index as its input prices.

    Leading values are NaN where the filter's window has not filled.
    """
    name: str
    values: pd.Series
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", _frozen_copy(self.values, self.name))
        object.__setattr__(self, "params", dict(self.params))

    @property
    def first_valid_position(self) -> Optional[int]:
        """Position of the first defined value, or None if nothing is defined."""
        mask = self.values.notna().to_numpy()
        if not mask.any():
            return None
        return int(np.argmax(mask))

    def defined(self) -> pd.Series:
        """Values from the first defined position onwards."""
        position = self.first_valid_position
        if position is None:
            return self.values.iloc[0:0]
        return self.values.iloc[position:]

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class ForecastStep:
    """One horizon step of a forecast with 80% and 95% prediction intervals."""
    step: int
    date: pd.Timestamp
    point: float
    lower_80: float
    upper_80: float
    lower_95: float
    upper_95: float


@dataclass(frozen=True)
class ForecastResult:
    """
    Forecast produced by a fitted ARIMA model.

    Attributes:
        steps: One entry per horizon step, in order
        order: Selected (p, d, q)
        trend: statsmodels trend code used by the selected model
        coefficients: Fitted parameter values keyed by name
        criterion: Information criterion used for order selection
        criterion_value: Value of that criterion for the selected model
        sigma2: Innovation variance of the selected model
    """
    steps: Tuple[ForecastStep, ...]
    order: Tuple[int, int, int]
    trend: str = "n"
    coefficients: Dict[str, float] = field(default_factory=dict)
    criterion: str = "aicc"
    criterion_value: float = float("nan")
    sigma2: float = float("nan")

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "coefficients", dict(self.coefficients))

    @property
    def horizon(self) -> int:
        return len(self.steps)

    def to_frame(self) -> pd.DataFrame:
        """Forecast rows as a DataFrame indexed by forecast date."""
        rows: List[Dict[str, Any]] = [
            {
                "step": s.step,
                "date": s.date,
                "point": s.point,
                "lower_80": s.lower_80,
                "upper_80": s.upper_80,
                "lower_95": s.lower_95,
                "upper_95": s.upper_95,
            }
            for s in self.steps
        ]
        return pd.DataFrame(rows).set_index("date")

    def interval_widths(self, level: int = 95) -> np.ndarray:
        """Width of the prediction interval at each step."""
        if level == 80:
            return np.array([s.upper_80 - s.lower_80 for s in self.steps])
        if level == 95:
            return np.array([s.upper_95 - s.lower_95 for s in self.steps])
        raise ValueError(f"Unsupported interval level: {level}")

    def summary(self) -> str:
        """Human-readable summary of the selected order and coefficients."""
        p, d, q = self.order
        label = CRITERION_LABELS.get(self.criterion, self.criterion) + ":"
        lines = [
            f"ARIMA({p},{d},{q}) trend={self.trend!r}",
            f"  {label:<7} {self.criterion_value:.4f}",
            f"  sigma2: {self.sigma2:.6g}",
        ]
        if self.coefficients:
            lines.append("  coefficients:")
            for name, value in self.coefficients.items():
                lines.append(f"    {name:<12} {value: .6f}")
        return "\n".join(lines)
