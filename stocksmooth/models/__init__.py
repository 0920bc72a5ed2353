"""Model implementations for forecasting."""

from stocksmooth.models.base_model import BaseForecaster, ModelArtifact
from stocksmooth.models.arima_model import AutoARIMAModel, CandidateFit

__all__ = ["BaseForecaster", "ModelArtifact", "AutoARIMAModel", "CandidateFit"]
