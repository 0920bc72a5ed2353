# 01_price_smoothing_walkthrough.py
import marimo

__generated_with = "0.1.0"
app = marimo.App(width="medium")


@app.cell
def __():
    import marimo as mo
    from pathlib import Path
    import sys
    import logging
    import matplotlib.pyplot as plt

    # Add project root to path
    project_root = Path(__file__).parent.parent.resolve()
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    from stocksmooth.data.loaders import PriceLoader
    from stocksmooth.evaluation.metrics import SmoothingMetrics
    from stocksmooth.evaluation.plots import plot_filter_bank, plot_forecast, plot_smoothed
    from stocksmooth.filters import FilterBank
    from stocksmooth.models.arima_model import AutoARIMAModel
    from stocksmooth.pipeline import PipelineConfig
    from stocksmooth.utils.config_manager import ConfigManager
    from stocksmooth.utils.logging_config import setup_logging

    setup_logging(log_level="INFO", log_dir=str(project_root / "logs"))
    logger = logging.getLogger("notebook_01")

    mo.md("# Smoothing a Stock Price Series")
    return (
        AutoARIMAModel,
        ConfigManager,
        FilterBank,
        PipelineConfig,
        PriceLoader,
        SmoothingMetrics,
        logger,
        mo,
        plot_filter_bank,
        plot_forecast,
        plot_smoothed,
        plt,
        project_root,
    )


@app.cell
def __(mo):
    mo.md(
        """
        ## 1. Configuration

        All parameters live in `config/pipeline_config.yaml` and are validated
        against its JSON schema before anything runs.
        """
    )
    return


@app.cell
def __(ConfigManager, PipelineConfig, project_root):
    config_manager = ConfigManager(config_dir=str(project_root / "config"))
    raw_config = config_manager.load_pipeline_config()
    config = PipelineConfig.from_dict(raw_config)
    print(f"Symbol: {config.symbol}  Range: {config.start} .. {config.end}")
    return config, config_manager, raw_config


@app.cell
def __(mo):
    mo.md("## 2. Load Adjusted Closing Prices")
    return


@app.cell
def __(PriceLoader, config, logger):
    loader = PriceLoader()
    prices = loader.load(config.symbol, config.start, config.end)
    logger.info(f"{prices.symbol}: {len(prices)} trading days")
    prices.prices.describe()
    return loader, prices


@app.cell
def __(mo):
    mo.md(
        """
        ## 3. Moving Averages

        - **SMA** weights the last *n* prices equally and is undefined for the
          first *n - 1* days.
        - **EMA** uses alpha = 2 / (n + 1) and is seeded with the first price,
          so it starts on day one.
        - **WMA** weights recent prices more: 1, 2, ..., n normalized to sum to 1.
        """
    )
    return


@app.cell
def __(FilterBank, config, prices):
    bank = FilterBank.from_config(config.filters, max_workers=config.filter_workers)
    bank_result = bank.apply(prices)
    for failure in bank_result.failures.values():
        print(f"Skipped: {failure}")
    return bank, bank_result


@app.cell
def __(bank_result, plot_smoothed, plt, prices):
    fig_ma, axes_ma = plt.subplots(3, 1, figsize=(12, 12), sharex=True)
    for ax_ma, name_ma in zip(axes_ma, ["sma", "ema", "wma"]):
        if name_ma in bank_result.outputs:
            plot_smoothed(prices, bank_result.outputs[name_ma], ax=ax_ma)
    fig_ma.tight_layout()
    fig_ma
    return ax_ma, axes_ma, fig_ma, name_ma


@app.cell
def __(mo):
    mo.md(
        """
        ## 4. Savitzky-Golay and Lowess

        Savitzky-Golay fits a low-degree polynomial to each window and keeps its
        centre value; at the edges the polynomial of the first/last full window
        is used. Lowess fits a weighted line around every point and then
        down-weights points with large residuals.
        """
    )
    return


@app.cell
def __(bank_result, plot_smoothed, plt, prices):
    fig_poly, axes_poly = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    for ax_poly, name_poly in zip(axes_poly, ["savgol", "lowess"]):
        if name_poly in bank_result.outputs:
            plot_smoothed(prices, bank_result.outputs[name_poly], ax=ax_poly)
    fig_poly.tight_layout()
    fig_poly
    return ax_poly, axes_poly, fig_poly, name_poly


@app.cell
def __(mo):
    mo.md(
        """
        ## 5. Kalman Smoother

        The "true" price level is a random walk observed with noise. The ratio
        of observation variance (dV) to level variance (dW) decides how much we
        trust the data: raise dV to smooth harder.
        """
    )
    return


@app.cell
def __(bank_result, plot_smoothed, prices):
    ax_kalman = None
    if "kalman" in bank_result.outputs:
        ax_kalman = plot_smoothed(prices, bank_result.outputs["kalman"])
    ax_kalman
    return ax_kalman,


@app.cell
def __(SmoothingMetrics, bank_result, plot_filter_bank, prices):
    metrics_table = SmoothingMetrics().compare(prices, bank_result.outputs)
    overview_fig = plot_filter_bank(prices, bank_result.outputs)
    metrics_table
    return metrics_table, overview_fig


@app.cell
def __(mo):
    mo.md(
        """
        ## 6. Auto-selected ARIMA Forecast

        The differencing order comes from repeated KPSS tests; p and q are
        searched over a small grid and the lowest AICc wins.
        """
    )
    return


@app.cell
def __(AutoARIMAModel, config, prices):
    arima = AutoARIMAModel(hyperparameters=config.arima).fit(prices)
    forecast = arima.forecast(config.horizon)
    print(forecast.summary())
    arima.candidates_frame().head(10)
    return arima, forecast


@app.cell
def __(forecast, plot_forecast, prices):
    ax_forecast = plot_forecast(prices, forecast, history=120)
    ax_forecast
    return ax_forecast,


if __name__ == "__main__":
    app.run()
