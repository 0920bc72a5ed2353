"""Base interface for forecasting models."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
import logging

from stocksmooth.data.structs import ForecastResult, PriceSeries

logger = logging.getLogger(__name__)

MIN_OBSERVATIONS = 10


@dataclass
class ModelArtifact:
    """Container for a fitted model's selection and metadata."""
    model_id: str
    model_type: str
    hyperparameters: Dict[str, Any]
    order: Optional[Tuple[int, int, int]] = None
    trend: Optional[str] = None
    coefficients: Dict[str, float] = field(default_factory=dict)
    training_metrics: Dict[str, float] = field(default_factory=dict)
    training_time: float = 0.0
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert artifact metadata to dictionary."""
        return {
            "model_id": self.model_id,
            "model_type": self.model_type,
            "hyperparameters": self.hyperparameters,
            "order": list(self.order) if self.order else None,
            "trend": self.trend,
            "coefficients": self.coefficients,
            "training_metrics": self.training_metrics,
            "training_time": self.training_time,
            "created_at": self.created_at.isoformat(),
        }


class BaseForecaster(ABC):
    """Abstract base class for univariate price forecasters."""

    def __init__(
        self,
        model_id: Optional[str] = None,
        hyperparameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize base forecaster.

        Args:
            model_id: Unique identifier for the model
            hyperparameters: Model hyperparameters
        """
        self.hyperparameters = hyperparameters or {}
        self.model_id = model_id or self._generate_model_id()
        self.is_fitted: bool = False
        self.training_metrics: Dict[str, float] = {}
        self.training_time: float = 0.0
        self._created_at: datetime = datetime.now()

    @property
    @abstractmethod
    def model_type(self) -> str:
        """Return the model type identifier."""
        pass

    @abstractmethod
    def fit(self, series: PriceSeries) -> "BaseForecaster":
        """
        Fit the model to a price series.

        Args:
            series: Observed prices

        Returns:
            Self for method chaining
        """
        pass

    @abstractmethod
    def forecast(self, horizon: int) -> ForecastResult:
        """
        Project the fitted model forward.

        Args:
            horizon: Number of business days to forecast

        Returns:
            ForecastResult with point forecasts and prediction intervals
        """
        pass

    def get_artifact(self) -> ModelArtifact:
        """
        Get model artifact containing all metadata.

        Returns:
            ModelArtifact instance
        """
        return ModelArtifact(
            model_id=self.model_id,
            model_type=self.model_type,
            hyperparameters=self.hyperparameters,
            training_metrics=self.training_metrics,
            training_time=self.training_time,
            created_at=self._created_at,
        )

    def _generate_model_id(self) -> str:
        """Generate a unique model ID."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{self.model_type}_{timestamp}"

    def _validate_input(self, series: PriceSeries) -> None:
        """Validate the series before fitting."""
        if not isinstance(series, PriceSeries):
            raise TypeError("series must be a PriceSeries")
        if len(series) < MIN_OBSERVATIONS:
            raise ValueError(
                f"{self.model_type} needs at least {MIN_OBSERVATIONS} observations, got {len(series)}"
            )

    def _check_horizon(self, horizon: int) -> None:
        if not self.is_fitted:
            raise ValueError("Model not fitted")
        if horizon < 1:
            raise ValueError(f"horizon must be at least 1, got {horizon}")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model_id='{self.model_id}', "
            f"is_fitted={self.is_fitted})"
        )
