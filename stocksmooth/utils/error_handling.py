"""Error taxonomy and stage failure reporting."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class StockSmoothError(Exception):
    """Base class for every error raised by a pipeline stage."""


class DataUnavailable(StockSmoothError):
    """The instrument is unknown or the price feed could not be reached."""


class EmptyRange(StockSmoothError):
    """No trading days fall inside the requested date range."""


class InvalidFilterParameters(StockSmoothError):
    """A filter was configured with parameters it cannot work with."""


class InvalidWeights(InvalidFilterParameters):
    """Weighted moving average weights have the wrong length, sum or shape."""


class NonConvergent(StockSmoothError):
    """No candidate ARIMA order produced a converged fit."""


@dataclass
class StageFailure:
    """Describes a stage that raised, without substituting any result."""
    stage: str
    error_kind: str
    message: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        stage: str,
        exc: Exception,
        params: Optional[Dict[str, Any]] = None,
    ) -> "StageFailure":
        """Build a failure record from a raised exception."""
        return cls(
            stage=stage,
            error_kind=type(exc).__name__,
            message=str(exc),
            params=dict(params or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stage": self.stage,
            "error_kind": self.error_kind,
            "message": self.message,
            "params": self.params,
        }

    def __str__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{self.stage}({params}) failed with {self.error_kind}: {self.message}"


def run_stage(
    stage: str,
    params: Dict[str, Any],
    func: Callable,
    *args,
    **kwargs
) -> Any:
    """
    Run one pipeline stage, logging its name and parameters if it raises.

    The exception is re-raised unchanged; stages never recover internally.

    Args:
        stage: Stage name used in the log record
        params: Stage parameters, reported alongside the error
        func: Callable implementing the stage
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Whatever func returns
    """
    try:
        return func(*args, **kwargs)
    except StockSmoothError as e:
        failure = StageFailure.from_exception(stage, e, params)
        logger.error(str(failure), extra={"props": failure.to_dict()})
        raise
