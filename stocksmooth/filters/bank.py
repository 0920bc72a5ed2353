"""Apply a set of independent filters to one price series."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from stocksmooth.data.structs import PriceSeries, SmoothedSeries
from stocksmooth.filters.base import BaseFilter
from stocksmooth.filters.kalman import KalmanSmoother
from stocksmooth.filters.moving_averages import (
    ExponentialMovingAverage,
    SimpleMovingAverage,
    WeightedMovingAverage,
)
from stocksmooth.filters.smoothers import Lowess, SavitzkyGolay
from stocksmooth.utils.error_handling import StageFailure, StockSmoothError

logger = logging.getLogger(__name__)


@dataclass
class FilterBankResult:
    """Outputs of every filter that succeeded, and failures of those that did not."""
    outputs: Dict[str, SmoothedSeries] = field(default_factory=dict)
    failures: Dict[str, StageFailure] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outputs": {name: s.params for name, s in self.outputs.items()},
            "failures": {name: f.to_dict() for name, f in self.failures.items()},
        }


class FilterBank:
    """
    Runs each filter on the same read-only PriceSeries.

    A filter that raises is recorded as a StageFailure and skipped; the
    remaining filters still run.
    """

    def __init__(self, filters: Sequence[BaseFilter], max_workers: int = 1):
        """
        Initialize the bank.

        Args:
            filters: Filters to apply, names must be unique
            max_workers: Threads used to run filters, 1 runs them in order
        """
        names = [f.name for f in filters]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate filter names: {duplicates}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.filters: List[BaseFilter] = list(filters)
        self.max_workers = max_workers

    @classmethod
    def default(cls, max_workers: int = 1) -> "FilterBank":
        """The six walkthrough filters with their default parameters."""
        return cls(
            [
                SimpleMovingAverage(window=20),
                ExponentialMovingAverage(window=20),
                WeightedMovingAverage(window=5),
                SavitzkyGolay(polyorder=3, window=21),
                Lowess(frac=0.1),
                KalmanSmoother(),
            ],
            max_workers=max_workers,
        )

    @classmethod
    def from_config(cls, filters_config: Dict[str, Dict[str, Any]], max_workers: int = 1) -> "FilterBank":
        """
        Build a bank from the 'filters' section of the pipeline config.

        Only the filters present in the mapping are built, in the canonical order.
        """
        builders = {
            "sma": lambda c: SimpleMovingAverage(window=c["window"]),
            "ema": lambda c: ExponentialMovingAverage(window=c["window"]),
            "wma": lambda c: WeightedMovingAverage(window=c["window"], weights=c.get("weights")),
            "savgol": lambda c: SavitzkyGolay(polyorder=c["polyorder"], window=c["window"]),
            "lowess": lambda c: Lowess(frac=c["frac"], iterations=c.get("iterations", 3)),
            "kalman": lambda c: KalmanSmoother(
                observation_variance=c["observation_variance"],
                transition_variance=c["transition_variance"],
            ),
        }
        unknown = set(filters_config) - set(builders)
        if unknown:
            raise ValueError(f"Unknown filters in config: {sorted(unknown)}")
        filters = [builders[name](filters_config[name]) for name in builders if name in filters_config]
        return cls(filters, max_workers=max_workers)

    def apply(self, series: PriceSeries) -> FilterBankResult:
        """
        Apply every filter to the series.

        Args:
            series: Input prices

        Returns:
            FilterBankResult keyed by filter name, in filter order
        """
        if self.max_workers > 1 and len(self.filters) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self._apply_one, f, series) for f in self.filters]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self._apply_one(f, series) for f in self.filters]

        result = FilterBankResult()
        for filt, outcome in zip(self.filters, outcomes):
            if isinstance(outcome, StageFailure):
                result.failures[filt.name] = outcome
            else:
                result.outputs[filt.name] = outcome

        logger.info(
            f"Filter bank on {series.symbol}: {len(result.outputs)} succeeded, "
            f"{len(result.failures)} failed"
        )
        return result

    def _apply_one(self, filt: BaseFilter, series: PriceSeries):
        try:
            return filt.apply(series)
        except StockSmoothError as e:
            failure = StageFailure.from_exception(filt.name, e, filt.params)
            logger.warning(f"Skipping filter: {failure}", extra={"props": failure.to_dict()})
            return failure
