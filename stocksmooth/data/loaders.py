"""Price loading from Yahoo Finance with frame validation."""

from typing import Any, Dict, List, Optional, Protocol, Union
from dataclasses import dataclass, field
from datetime import date, timedelta
import logging

import pandas as pd
import yfinance as yf

from stocksmooth.data.structs import PriceSeries
from stocksmooth.utils.error_handling import DataUnavailable, EmptyRange

logger = logging.getLogger(__name__)

DateLike = Union[str, date, pd.Timestamp]


@dataclass
class ValidationResult:
    """Result of raw price frame validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PriceFeed(Protocol):
    """Anything that can serve daily bars for a symbol."""

    name: str

    def fetch(self, symbol: str, start: date, end: date) -> pd.DataFrame:
        ...

    def exists(self, symbol: str) -> bool:
        ...


class YahooPriceFeed:
    """Daily adjusted bars from Yahoo Finance via yfinance."""

    name = "yahoo"

    def fetch(self, symbol: str, start: date, end: date) -> pd.DataFrame:
        """
        Fetch daily bars for the inclusive range [start, end].

        yfinance treats `end` as exclusive, so one day is added.
        """
        ticker = yf.Ticker(symbol)
        return ticker.history(
            start=start.isoformat(),
            end=(end + timedelta(days=1)).isoformat(),
            interval="1d",
            auto_adjust=True,
            actions=False,
        )

    def exists(self, symbol: str) -> bool:
        """Whether Yahoo knows the symbol at all."""
        metadata = yf.Ticker(symbol).history_metadata
        return bool(metadata) and "symbol" in metadata


class PriceLoader:
    """Loads one instrument's adjusted closing prices."""

    def __init__(self, feed: Optional[PriceFeed] = None):
        """
        Initialize PriceLoader.

        Args:
            feed: Price feed to read from, Yahoo Finance by default
        """
        self.feed = feed if feed is not None else YahooPriceFeed()

    def load(self, symbol: str, start: DateLike, end: DateLike) -> PriceSeries:
        """
        Load adjusted closing prices for an inclusive date range.

        Single attempt: the feed is called once and any failure is final.

        Args:
            symbol: Instrument identifier, e.g. 'AAPL'
            start: First date of the range (ISO-8601 string or date)
            end: Last date of the range (ISO-8601 string or date)

        Returns:
            PriceSeries sorted ascending by date

        Raises:
            ValueError: If the symbol is blank or start is after end
            DataUnavailable: If the symbol is unknown or the feed fails
            EmptyRange: If no trading days fall inside the range
        """
        if not isinstance(symbol, str) or not symbol.strip():
            raise ValueError("Symbol must be a non-empty string")
        symbol = symbol.strip().upper()
        start_date = pd.Timestamp(start).date()
        end_date = pd.Timestamp(end).date()
        if start_date > end_date:
            raise ValueError(f"start {start_date} is after end {end_date}")

        logger.info(f"Fetching {symbol} from {self.feed.name} for {start_date}..{end_date}")
        try:
            frame = self.feed.fetch(symbol, start_date, end_date)
        except Exception as e:
            raise DataUnavailable(f"Feed '{self.feed.name}' failed for {symbol}: {e}") from e

        if frame is None or frame.empty:
            try:
                known = self.feed.exists(symbol)
            except Exception as e:
                raise DataUnavailable(f"Feed '{self.feed.name}' failed for {symbol}: {e}") from e
            if not known:
                raise DataUnavailable(f"Unknown instrument: {symbol}")
            raise EmptyRange(f"No trading days for {symbol} between {start_date} and {end_date}")

        result = self.validate_frame(frame)
        for warning in result.warnings:
            logger.warning(f"{symbol}: {warning}")
        if not result.is_valid:
            raise DataUnavailable(f"Malformed data for {symbol}: {'; '.join(result.errors)}")

        closes = self._to_close_series(frame)
        # The feed may pad the range; clip to exactly what was asked for
        closes = closes[(closes.index >= pd.Timestamp(start_date)) & (closes.index <= pd.Timestamp(end_date))]
        if closes.empty:
            raise EmptyRange(f"No trading days for {symbol} between {start_date} and {end_date}")

        logger.info(f"Loaded {len(closes)} closes for {symbol}")
        return PriceSeries(symbol=symbol, prices=closes, source=self.feed.name)

    def validate_frame(self, frame: pd.DataFrame) -> ValidationResult:
        """
        Validate a raw price frame from the feed.

        Args:
            frame: Frame with a DatetimeIndex and a 'Close' column

        Returns:
            ValidationResult with validation details
        """
        errors: List[str] = []
        warnings: List[str] = []

        if "Close" not in frame.columns:
            errors.append("Missing required column: Close")
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        if not isinstance(frame.index, pd.DatetimeIndex):
            errors.append(f"Index must be a DatetimeIndex, got {type(frame.index).__name__}")

        close = pd.to_numeric(frame["Close"], errors="coerce")
        missing = int(close.isna().sum())
        if missing:
            warnings.append(f"Dropping {missing} rows with missing close")

        non_positive = int((close.dropna() <= 0).sum())
        if non_positive:
            errors.append(f"{non_positive} non-positive close prices")

        if frame.index.has_duplicates:
            warnings.append("Duplicate dates found, keeping the last row")

        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    def _to_close_series(self, frame: pd.DataFrame) -> pd.Series:
        """Extract closes on a naive, sorted, de-duplicated date index."""
        close = pd.to_numeric(frame["Close"], errors="coerce").dropna().astype(float)
        index = pd.DatetimeIndex(close.index)
        if index.tz is not None:
            index = index.tz_localize(None)
        close.index = index.normalize()
        close = close[~close.index.duplicated(keep="last")].sort_index()
        close.index.name = "date"
        return close
