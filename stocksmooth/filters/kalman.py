"""Kalman smoothing under a local-level model.

The unobserved level follows a random walk and is observed with noise::

    level[t]  = level[t-1] + w[t],   w ~ N(0, dW)
    price[t]  = level[t]   + v[t],   v ~ N(0, dV)

pykalman runs the forward filter and the Rauch-Tung-Striebel backward pass.
A large dV relative to dW trusts the model over the data and smooths
heavily; a small ratio tracks the raw prices closely.
"""

from typing import Any, Dict
import logging

import numpy as np
import pandas as pd
from pykalman import KalmanFilter

from stocksmooth.filters.base import BaseFilter
from stocksmooth.utils.error_handling import InvalidFilterParameters

logger = logging.getLogger(__name__)


class KalmanSmoother(BaseFilter):
    """Forward filter plus RTS smoother for a random-walk level."""

    def __init__(self, observation_variance: float = 15.0, transition_variance: float = 0.5):
        """
        Initialize the smoother.

        Args:
            observation_variance: Measurement noise variance dV
            transition_variance: Level innovation variance dW

        Raises:
            InvalidFilterParameters: If either variance is not positive
        """
        for label, value in (("observation_variance", observation_variance),
                             ("transition_variance", transition_variance)):
            if not np.isfinite(value) or value <= 0:
                raise InvalidFilterParameters(f"{label} must be positive, got {value!r}")
        self.observation_variance = float(observation_variance)
        self.transition_variance = float(transition_variance)

    @property
    def name(self) -> str:
        return "kalman"

    @property
    def params(self) -> Dict[str, Any]:
        return {
            "observation_variance": self.observation_variance,
            "transition_variance": self.transition_variance,
        }

    def build_filter(self, initial_level: float) -> KalmanFilter:
        """Local-level state space model starting at initial_level."""
        return KalmanFilter(
            transition_matrices=[[1.0]],
            observation_matrices=[[1.0]],
            transition_covariance=[[self.transition_variance]],
            observation_covariance=[[self.observation_variance]],
            initial_state_mean=[initial_level],
            initial_state_covariance=[[self.observation_variance]],
        )

    def _transform(self, values: pd.Series) -> pd.Series:
        observations = values.to_numpy().reshape(-1, 1)
        kf = self.build_filter(float(observations[0, 0]))
        state_means, _ = kf.smooth(observations)
        return pd.Series(state_means[:, 0], index=values.index)
