"""Charts of filter outputs and forecasts against the raw price series.

Every series has a fixed color so charts are comparable across runs:
raw prices are neutral grey, each filter and the forecast get one
color from the matplotlib tab10 palette.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import logging

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from stocksmooth.data.structs import ForecastResult, PriceSeries, SmoothedSeries

logger = logging.getLogger(__name__)

SERIES_COLORS: Dict[str, str] = {
    "raw": "#7f7f7f",
    "sma": "#1f77b4",
    "ema": "#ff7f0e",
    "wma": "#2ca02c",
    "savgol": "#d62728",
    "lowess": "#9467bd",
    "kalman": "#8c564b",
    "arima": "#e377c2",
}

SERIES_LABELS: Dict[str, str] = {
    "sma": "Simple moving average",
    "ema": "Exponential moving average",
    "wma": "Weighted moving average",
    "savgol": "Savitzky-Golay",
    "lowess": "Lowess",
    "kalman": "Kalman smoother",
    "arima": "ARIMA forecast",
}

BAND_ALPHA = {80: 0.35, 95: 0.15}


def _format_params(params: Dict[str, Any]) -> str:
    shown = {k: v for k, v in params.items() if k != "weights"}
    return ", ".join(f"{k}={v}" for k, v in shown.items())


def _new_axes(ax, figsize=(12, 5)):
    if ax is None:
        sns.set_style("whitegrid")
        _, ax = plt.subplots(figsize=figsize)
    return ax


def _plot_raw(ax, prices: PriceSeries) -> None:
    ax.plot(
        prices.dates,
        prices.values,
        color=SERIES_COLORS["raw"],
        linewidth=1.0,
        alpha=0.8,
        label=f"{prices.symbol} close",
    )


def plot_smoothed(
    prices: PriceSeries,
    smoothed: SmoothedSeries,
    ax=None,
) -> Any:
    """
    Overlay one filter output on the raw prices.

    Args:
        prices: Raw prices
        smoothed: Filter output
        ax: Matplotlib axes (optional)

    Returns:
        Matplotlib axes object
    """
    ax = _new_axes(ax)
    _plot_raw(ax, prices)
    label = SERIES_LABELS.get(smoothed.name, smoothed.name)
    ax.plot(
        smoothed.values.index,
        smoothed.values.to_numpy(),
        color=SERIES_COLORS.get(smoothed.name, "black"),
        linewidth=2.0,
        label=f"{label} ({_format_params(smoothed.params)})",
    )
    ax.set_title(f"{prices.symbol}: {label}")
    ax.set_xlabel("Date")
    ax.set_ylabel("Adjusted close")
    ax.legend(loc="best")
    return ax


def plot_forecast(
    prices: PriceSeries,
    forecast: ForecastResult,
    ax=None,
    history: Optional[int] = None,
) -> Any:
    """
    Plot the raw prices followed by the forecast and its 80%/95% bands.

    Args:
        prices: Raw prices the model was fitted on
        forecast: Forecast to draw
        ax: Matplotlib axes (optional)
        history: Number of trailing observations to show, all when None

    Returns:
        Matplotlib axes object
    """
    ax = _new_axes(ax)
    shown = prices
    if history is not None and history < len(prices):
        shown = PriceSeries(symbol=prices.symbol, prices=prices.prices.iloc[-history:], source=prices.source)
    _plot_raw(ax, shown)

    frame = forecast.to_frame()
    color = SERIES_COLORS["arima"]
    for level in (95, 80):
        ax.fill_between(
            frame.index,
            frame[f"lower_{level}"].to_numpy(),
            frame[f"upper_{level}"].to_numpy(),
            color=color,
            alpha=BAND_ALPHA[level],
            linewidth=0,
            label=f"{level}% interval",
        )
    ax.plot(frame.index, frame["point"].to_numpy(), color=color, linewidth=2.0, label="Point forecast")

    p, d, q = forecast.order
    ax.set_title(f"{prices.symbol}: ARIMA({p},{d},{q}) forecast, {forecast.horizon} days")
    ax.set_xlabel("Date")
    ax.set_ylabel("Adjusted close")
    ax.legend(loc="upper left")
    return ax


def plot_filter_bank(
    prices: PriceSeries,
    outputs: Mapping[str, SmoothedSeries],
    ncols: int = 2,
) -> Any:
    """
    One panel per filter output, each overlaid on the raw prices.

    Args:
        prices: Raw prices
        outputs: Filter outputs keyed by name
        ncols: Panels per row

    Returns:
        Matplotlib figure
    """
    if not outputs:
        raise ValueError("No filter outputs to plot")
    sns.set_style("whitegrid")
    nrows = int(np.ceil(len(outputs) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(7 * ncols, 3.5 * nrows), sharex=True, squeeze=False)
    flat_axes = axes.ravel()

    for ax, smoothed in zip(flat_axes, outputs.values()):
        plot_smoothed(prices, smoothed, ax=ax)
        ax.set_xlabel("")
    for ax in flat_axes[len(outputs):]:
        ax.set_visible(False)

    fig.suptitle(f"{prices.symbol}: smoothing filters")
    fig.tight_layout()
    return fig


def save_figure(fig, path: Union[str, Path], dpi: int = 120) -> Path:
    """
    Write a figure to disk as PNG and close it.

    Args:
        fig: Matplotlib figure
        path: Output file path; parent directories are created
        dpi: Resolution

    Returns:
        Path written
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Figure saved to {out_path}")
    return out_path
