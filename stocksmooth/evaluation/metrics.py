"""Diagnostics for comparing smoothing filters."""

from typing import Dict, Mapping, Optional
import logging

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error

from stocksmooth.data.structs import PriceSeries, SmoothedSeries

logger = logging.getLogger(__name__)


class SmoothingMetrics:
    """Calculate how much each filter smooths, and how far it strays from the data."""

    def __init__(self):
        """Initialize SmoothingMetrics."""
        self._metric_names = [
            "undefined_points",
            "residual_std",
            "variance_ratio",
            "mae_vs_raw",
            "rmse_vs_truth",
        ]

    def calculate(
        self,
        prices: PriceSeries,
        smoothed: SmoothedSeries,
        truth: Optional[pd.Series] = None,
    ) -> Dict[str, float]:
        """
        Calculate diagnostics for one filter output.

        Only indices where the filter is defined are compared.

        Args:
            prices: Raw prices the filter was applied to
            smoothed: Filter output
            truth: Optional noise-free signal on the same index

        Returns:
            Dictionary of metric names to values
        """
        raw = prices.prices
        mask = smoothed.values.notna().to_numpy()
        metrics: Dict[str, float] = {"undefined_points": float((~mask).sum())}

        if not mask.any():
            logger.warning(f"{smoothed.name} has no defined values")
            for name in self._metric_names[1:]:
                metrics[name] = float("nan")
            return metrics

        raw_defined = raw.to_numpy()[mask]
        smooth_defined = smoothed.values.to_numpy()[mask]
        residuals = raw_defined - smooth_defined

        raw_var = float(np.var(raw_defined))
        metrics["residual_std"] = float(np.std(residuals))
        metrics["variance_ratio"] = float(np.var(smooth_defined) / raw_var) if raw_var > 0 else float("nan")
        metrics["mae_vs_raw"] = float(mean_absolute_error(raw_defined, smooth_defined))

        if truth is not None:
            truth_defined = truth.reindex(raw.index).to_numpy()[mask]
            metrics["rmse_vs_truth"] = float(np.sqrt(mean_squared_error(truth_defined, smooth_defined)))
        else:
            metrics["rmse_vs_truth"] = float("nan")

        return metrics

    def compare(
        self,
        prices: PriceSeries,
        outputs: Mapping[str, SmoothedSeries],
        truth: Optional[pd.Series] = None,
    ) -> pd.DataFrame:
        """
        Compare several filter outputs on the same prices.

        Args:
            prices: Raw prices
            outputs: Filter outputs keyed by name
            truth: Optional noise-free signal

        Returns:
            DataFrame with filters as rows and metrics as columns
        """
        rows = {name: self.calculate(prices, smoothed, truth) for name, smoothed in outputs.items()}
        if not rows:
            return pd.DataFrame(columns=self._metric_names)
        return pd.DataFrame.from_dict(rows, orient="index")[self._metric_names]
