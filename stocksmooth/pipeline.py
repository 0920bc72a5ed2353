"""Loader -> filter bank | forecast -> presentation, run end to end."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import matplotlib.pyplot as plt

from stocksmooth.data.loaders import PriceLoader
from stocksmooth.data.structs import ForecastResult, PriceSeries
from stocksmooth.evaluation.plots import plot_filter_bank, plot_forecast, plot_smoothed, save_figure
from stocksmooth.filters.bank import FilterBank, FilterBankResult
from stocksmooth.models.arima_model import AutoARIMAModel
from stocksmooth.utils.error_handling import StageFailure, StockSmoothError, run_stage

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Typed view of the validated pipeline configuration."""
    symbol: str
    start: str
    end: str
    filters: Dict[str, Dict[str, Any]]
    horizon: int = 20
    arima: Dict[str, Any] = field(default_factory=dict)
    output_dir: Optional[str] = None
    filter_workers: int = 1

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "PipelineConfig":
        """
        Build from a configuration dictionary (see config/pipeline_config.yaml).

        Args:
            config: Validated configuration dictionary

        Returns:
            PipelineConfig
        """
        source = config["source"]
        forecast = dict(config["forecast"])
        presentation = config.get("presentation", {})
        horizon = int(forecast.pop("horizon"))
        return cls(
            symbol=source["symbol"],
            start=str(source["start"]),
            end=str(source["end"]),
            filters=dict(config["filters"]),
            horizon=horizon,
            arima=forecast,
            output_dir=presentation.get("output_dir"),
            filter_workers=int(presentation.get("filter_workers", 1)),
        )


@dataclass
class PipelineResult:
    """Everything one run produced."""
    prices: PriceSeries
    filters: FilterBankResult
    forecast: Optional[ForecastResult] = None
    failures: List[StageFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        """Text report: filters run, selected ARIMA order and any failures."""
        lines = [
            f"{self.prices.symbol}: {len(self.prices)} prices "
            f"{self.prices.dates[0].date()} .. {self.prices.dates[-1].date()}",
            f"Filters: {', '.join(self.filters.outputs) or 'none'}",
        ]
        if self.forecast is not None:
            lines.append(self.forecast.summary())
        for failure in self.failures:
            lines.append(f"FAILED {failure}")
        return "\n".join(lines)


class SmoothingPipeline:
    """
    Runs the four stages once.

    The loader is terminal on failure. The filter bank and the forecast
    are independent: a failure in one is recorded and the other still runs.
    """

    def __init__(
        self,
        loader: Optional[PriceLoader] = None,
        filter_bank: Optional[FilterBank] = None,
        horizon: int = 20,
        arima_params: Optional[Dict[str, Any]] = None,
    ):
        if horizon < 1:
            raise ValueError(f"horizon must be at least 1, got {horizon}")
        self.loader = loader or PriceLoader()
        self.filter_bank = filter_bank or FilterBank.default()
        self.horizon = horizon
        self.arima_params = dict(arima_params or {})

    @classmethod
    def from_config(cls, config: PipelineConfig, loader: Optional[PriceLoader] = None) -> "SmoothingPipeline":
        return cls(
            loader=loader,
            filter_bank=FilterBank.from_config(config.filters, max_workers=config.filter_workers),
            horizon=config.horizon,
            arima_params=config.arima,
        )

    def run(self, symbol: str, start: str, end: str) -> PipelineResult:
        """
        Load prices, then smooth and forecast them.

        Raises:
            DataUnavailable: If the loader cannot reach or find the instrument
            EmptyRange: If the range holds no trading days
        """
        params = {"symbol": symbol, "start": start, "end": end}
        prices = run_stage("loader", params, self.loader.load, symbol, start, end)
        return self.run_on_series(prices)

    def run_on_series(self, prices: PriceSeries) -> PipelineResult:
        """Smooth and forecast an already loaded series."""
        bank_result = self.filter_bank.apply(prices)
        failures = list(bank_result.failures.values())

        forecast = None
        try:
            model = AutoARIMAModel(hyperparameters=self.arima_params)
            forecast = run_stage(
                "arima",
                {**self.arima_params, "horizon": self.horizon},
                lambda: model.fit(prices).forecast(self.horizon),
            )
        except (StockSmoothError, ValueError) as e:
            failures.append(StageFailure.from_exception("arima", e, {**self.arima_params, "horizon": self.horizon}))

        result = PipelineResult(prices=prices, filters=bank_result, forecast=forecast, failures=failures)
        logger.info(f"Pipeline finished for {prices.symbol}: {len(failures)} failed stages")
        return result

    def render(self, result: PipelineResult, output_dir: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Draw one chart per filter, the forecast chart and the overview grid.

        Args:
            result: Output of run
            output_dir: If given, each chart is written there as PNG and closed

        Returns:
            Mapping of chart name to figure, or to the written path when saved
        """
        charts: Dict[str, Any] = {}
        for name, smoothed in result.filters.outputs.items():
            fig, ax = plt.subplots(figsize=(12, 5))
            plot_smoothed(result.prices, smoothed, ax=ax)
            charts[name] = fig
        if result.forecast is not None:
            fig, ax = plt.subplots(figsize=(12, 5))
            plot_forecast(result.prices, result.forecast, ax=ax, history=120)
            charts["arima"] = fig
        if result.filters.outputs:
            charts["overview"] = plot_filter_bank(result.prices, result.filters.outputs)

        if output_dir is not None:
            symbol = result.prices.symbol.lower()
            return {
                name: save_figure(fig, Path(output_dir) / f"{symbol}_{name}.png")
                for name, fig in charts.items()
            }
        return charts
