"""
Automatically order-selected ARIMA model.

Order search:
- d: KPSS test (level stationarity), differencing until the test no longer
  rejects at `unit_root_alpha` or d reaches `max_d`.
- p, q: exhaustive grid over 0..max_p and 0..max_q, each fitted by maximum
  likelihood with and without a deterministic term (intercept when d = 0,
  drift when d = 1, none when d = 2).
- Selection: lowest information criterion (AICc by default) among converged
  fits; ties go to the model with fewer parameters.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple
import logging
import time
import warnings

import numpy as np
import pandas as pd
from statsmodels.tools.sm_exceptions import InterpolationWarning
from statsmodels.tsa.arima.model import ARIMA
from statsmodels.tsa.stattools import kpss

from stocksmooth.data.structs import ForecastResult, ForecastStep, PriceSeries
from stocksmooth.models.base_model import BaseForecaster, ModelArtifact
from stocksmooth.utils.error_handling import NonConvergent

logger = logging.getLogger(__name__)

TIE_TOLERANCE = 1e-8
SUPPORTED_CRITERIA = ("aicc", "aic", "bic")


@dataclass
class CandidateFit:
    """Outcome of fitting one candidate order."""
    p: int
    d: int
    q: int
    trend: str
    criterion: float
    n_params: int
    converged: bool
    error: Optional[str] = None

    @property
    def order(self) -> Tuple[int, int, int]:
        return (self.p, self.d, self.q)

    @property
    def usable(self) -> bool:
        return self.converged and np.isfinite(self.criterion)


class AutoARIMAModel(BaseForecaster):
    """
    ARIMA with automatic order selection, fitted with statsmodels.

    A constant series has no variance to model: it is fitted as
    ARIMA(0,0,0) with mean equal to the constant, sigma2 = 0, and its
    prediction intervals collapse onto the point forecast.
    """

    def __init__(
        self,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(model_id, hyperparameters)
        self.max_p = int(self.hyperparameters.get("max_p", 5))
        self.max_q = int(self.hyperparameters.get("max_q", 5))
        self.max_d = int(self.hyperparameters.get("max_d", 2))
        self.information_criterion = self.hyperparameters.get("information_criterion", "aicc")
        self.unit_root_alpha = float(self.hyperparameters.get("unit_root_alpha", 0.05))

        if min(self.max_p, self.max_q, self.max_d) < 0:
            raise ValueError("max_p, max_q and max_d must be non-negative")
        if self.max_d > 2:
            raise ValueError(f"max_d is capped at 2, got {self.max_d}")
        if self.information_criterion not in SUPPORTED_CRITERIA:
            raise ValueError(
                f"Unknown information criterion '{self.information_criterion}', "
                f"expected one of {SUPPORTED_CRITERIA}"
            )

        self.results_ = None
        self.order_: Optional[Tuple[int, int, int]] = None
        self.trend_: Optional[str] = None
        self.candidates_: List[CandidateFit] = []
        self._constant: Optional[float] = None
        self._last_date: Optional[pd.Timestamp] = None

    @property
    def model_type(self) -> str:
        return "auto_arima"

    def fit(self, series: PriceSeries) -> "AutoARIMAModel":
        """
        Select an order and fit it by maximum likelihood.

        Args:
            series: Observed prices

        Returns:
            Self

        Raises:
            NonConvergent: If no candidate order converges
        """
        self._validate_input(series)
        start_time = time.time()
        values = np.array(series.values, dtype=float)
        self._last_date = series.dates[-1]
        self.results_ = None
        self._constant = None
        self.candidates_ = []

        if np.ptp(values) == 0:
            self._constant = float(values[0])
            self.order_, self.trend_ = (0, 0, 0), "c"
            self.training_metrics = {self.information_criterion: float("nan"), "sigma2": 0.0}
        else:
            d = self.select_differencing(values)
            for p in range(self.max_p + 1):
                for q in range(self.max_q + 1):
                    for trend in self._trend_options(d):
                        self.candidates_.append(self._fit_candidate(values, (p, d, q), trend))

            best = self._select(self.candidates_)
            if best is None:
                raise NonConvergent(
                    f"None of {len(self.candidates_)} candidate orders converged for {series.symbol} "
                    f"(d={d}, p<= {self.max_p}, q<= {self.max_q})"
                )
            self.order_, self.trend_ = best.order, best.trend
            self.results_ = self._fit_order(values, best.order, best.trend)
            self.training_metrics = {
                self.information_criterion: best.criterion,
                "sigma2": float(self.results_.params[-1]),
            }

        self.is_fitted = True
        self.training_time = time.time() - start_time
        logger.info(
            f"Selected ARIMA{self.order_} trend={self.trend_!r} for {series.symbol} "
            f"from {len(self.candidates_)} candidates in {self.training_time:.2f}s"
        )
        return self

    def select_differencing(self, values: np.ndarray) -> int:
        """
        Choose d by repeated KPSS tests.

        Args:
            values: Observed values

        Returns:
            Differencing order in 0..max_d
        """
        x = np.asarray(values, dtype=float)
        d = 0
        while d < self.max_d:
            if np.ptp(x) == 0 or self._is_stationary(x):
                break
            x = np.diff(x)
            d += 1
        logger.debug(f"KPSS selected d={d}")
        return d

    def _is_stationary(self, x: np.ndarray) -> bool:
        with warnings.catch_warnings():
            # p-values outside the KPSS lookup table are clipped
            warnings.simplefilter("ignore", InterpolationWarning)
            # Tuple access to the result is deprecated in newer statsmodels
            warnings.simplefilter("ignore", FutureWarning)
            result = kpss(x, regression="c", nlags="auto")
            p_value = result.pvalue if hasattr(result, "pvalue") else result[1]
        return p_value >= self.unit_root_alpha

    def _trend_options(self, d: int) -> List[str]:
        if d == 0:
            return ["c", "n"]
        if d == 1:
            return ["t", "n"]
        return ["n"]

    def _fit_order(self, values: np.ndarray, order: Tuple[int, int, int], trend: str):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            return ARIMA(values, order=order, trend=trend).fit()

    def _fit_candidate(
        self,
        values: np.ndarray,
        order: Tuple[int, int, int],
        trend: str,
    ) -> CandidateFit:
        p, d, q = order
        try:
            results = self._fit_order(values, order, trend)
        except (ValueError, np.linalg.LinAlgError) as e:
            logger.debug(f"ARIMA{order} trend={trend!r} failed: {e}")
            return CandidateFit(p, d, q, trend, float("inf"), 0, False, str(e))

        retvals = getattr(results, "mle_retvals", None) or {}
        converged = bool(retvals.get("converged", True))
        criterion = float(getattr(results, self.information_criterion))
        if not np.isfinite(criterion):
            criterion = float("inf")
        return CandidateFit(p, d, q, trend, criterion, len(results.params), converged)

    def _select(self, candidates: List[CandidateFit]) -> Optional[CandidateFit]:
        usable = [c for c in candidates if c.usable]
        if not usable:
            return None
        best_value = min(c.criterion for c in usable)
        tied = [c for c in usable if c.criterion - best_value <= TIE_TOLERANCE]
        return min(tied, key=lambda c: (c.n_params, c.p + c.q))

    def forecast(self, horizon: int) -> ForecastResult:
        """
        Forecast `horizon` business days past the last observation.

        Args:
            horizon: Number of steps

        Returns:
            ForecastResult with 80% and 95% Gaussian prediction intervals
        """
        self._check_horizon(horizon)
        dates = pd.bdate_range(start=self._last_date + pd.offsets.BDay(1), periods=horizon)

        if self._constant is not None:
            point = np.full(horizon, self._constant)
            ci80 = ci95 = np.column_stack([point, point])
            coefficients = {"const": self._constant, "sigma2": 0.0}
        else:
            prediction = self.results_.get_forecast(steps=horizon)
            point = np.asarray(prediction.predicted_mean, dtype=float)
            ci80 = np.asarray(prediction.conf_int(alpha=0.20), dtype=float)
            ci95 = np.asarray(prediction.conf_int(alpha=0.05), dtype=float)
            coefficients = self.coefficients()

        steps = [
            ForecastStep(
                step=i + 1,
                date=dates[i],
                point=float(point[i]),
                lower_80=float(ci80[i, 0]),
                upper_80=float(ci80[i, 1]),
                lower_95=float(ci95[i, 0]),
                upper_95=float(ci95[i, 1]),
            )
            for i in range(horizon)
        ]
        return ForecastResult(
            steps=tuple(steps),
            order=self.order_,
            trend=self.trend_,
            coefficients=coefficients,
            criterion=self.information_criterion,
            criterion_value=float(self.training_metrics.get(self.information_criterion, float("nan"))),
            sigma2=float(coefficients.get("sigma2", float("nan"))),
        )

    def coefficients(self) -> Dict[str, float]:
        """Fitted parameters of the selected model keyed by name."""
        if not self.is_fitted:
            raise ValueError("Model not fitted")
        if self.results_ is None:
            return {"const": self._constant, "sigma2": 0.0}
        names = self.results_.model.param_names
        return {name: float(value) for name, value in zip(names, self.results_.params)}

    def candidates_frame(self) -> pd.DataFrame:
        """Every evaluated candidate, best first."""
        if not self.candidates_:
            return pd.DataFrame(columns=["p", "d", "q", "trend", "criterion", "n_params", "converged", "error"])
        frame = pd.DataFrame([asdict(c) for c in self.candidates_])
        return frame.sort_values(["criterion", "n_params"]).reset_index(drop=True)

    def get_artifact(self) -> ModelArtifact:
        artifact = super().get_artifact()
        if self.is_fitted:
            artifact.order = self.order_
            artifact.trend = self.trend_
            artifact.coefficients = self.coefficients()
        return artifact
