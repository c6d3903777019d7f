"""Backtesting service for model evaluation.

Orchestrates:
- Chronological holdout split of the series
- Fitting a model on the training prefix
- Forecasting the length of the test suffix
- Scoring the forecast with MAE, RMSE, MAPE and R2

CRITICAL: All operations respect time-safety constraints.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

import numpy as np
import structlog

from forecast_engine.core.config import Settings, get_settings
from forecast_engine.core.exceptions import ForecastEngineError, ModelError
from forecast_engine.features.backtesting.metrics import FloatArray, MetricsCalculator
from forecast_engine.features.backtesting.schemas import (
    BacktestRequest,
    BacktestResult,
    SplitConfig,
)
from forecast_engine.features.backtesting.splitter import HoldoutSplitter
from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.models import model_factory
from forecast_engine.features.forecasting.schemas import build_model_config

logger = structlog.get_logger()

ForecastFn = Callable[[FloatArray, int], FloatArray | Sequence[float]]


def backtest(
    values: FloatArray | Sequence[float],
    forecast_fn: ForecastFn,
    test_ratio: float = 0.2,
    model: str | None = None,
    split_config: SplitConfig | None = None,
) -> BacktestResult:
    """Score a forecast function against a held-out suffix.

    Args:
        values: Series in time order.
        forecast_fn: Called as forecast_fn(train, horizon); must return
            horizon values.
        test_ratio: Fraction held out (ignored when split_config is given).
        model: Label recorded on the result.
        split_config: Full split configuration.

    Returns:
        BacktestResult with all four metrics and the raw arrays.

    Raises:
        InsufficientDataError: If the series is too short to split.
        ValueError: If forecast_fn returns the wrong number of values.
    """
    splitter = HoldoutSplitter(split_config or SplitConfig(test_ratio=test_ratio))
    split = splitter.split(values)

    predicted = np.asarray(forecast_fn(split.train, split.test_size), dtype=np.float64)
    if len(predicted) != split.test_size:
        raise ValueError(
            f"forecast_fn returned {len(predicted)} values, expected {split.test_size}"
        )

    metrics = MetricsCalculator().calculate_all(split.test, predicted)
    return BacktestResult(
        mae=metrics["mae"],
        rmse=metrics["rmse"],
        mape=metrics["mape"],
        r2=metrics["r2"],
        actual=split.test.tolist(),
        predicted=predicted.tolist(),
        train_size=split.train_size,
        test_size=split.test_size,
        model=model,
    )


class BacktestingService:
    """Service for running holdout backtests on forecasting models.

    CRITICAL: All defaults come from Settings for reproducibility.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the backtesting service.

        Args:
            settings: Settings instance; the cached singleton when omitted.
        """
        self.settings = settings or get_settings()

    def run_backtest(self, request: BacktestRequest) -> BacktestResult:
        """Backtest the requested model on the request's series.

        Args:
            request: Series, model selection and optional test ratio.

        Returns:
            BacktestResult for the model.

        Raises:
            UnsupportedModelError: If the model selector is unknown.
            InvalidModelParamsError: If the model parameters cannot be validated.
            InsufficientDataError: If the series is too short to split.
            ModelError: If the model fails on the training prefix.
        """
        with structlog.contextvars.bound_contextvars(model=request.model):
            return self._run(request)

    def _run(self, request: BacktestRequest) -> BacktestResult:
        start_time = time.perf_counter()
        config = build_model_config(request.model, request.model_params)
        test_ratio = request.test_ratio or self.settings.backtest_default_test_ratio
        split_config = SplitConfig(
            test_ratio=test_ratio,
            min_points=self.settings.backtest_min_points,
        )
        defaults = DefaultParameters.from_settings(self.settings)

        points = sorted(request.historical_data, key=lambda point: point.time)
        values = np.array([point.value for point in points], dtype=np.float64)

        logger.info(
            "backtesting.run_started",
            n_points=len(values),
            test_ratio=test_ratio,
            config_hash=config.config_hash(),
        )

        def forecast_fn(train: FloatArray, horizon: int) -> FloatArray:
            try:
                return model_factory(config, defaults=defaults).fit(train).predict(horizon)
            except (ForecastEngineError, ValueError) as exc:
                raise ModelError(request.model, exc) from exc

        try:
            result = backtest(values, forecast_fn, model=request.model, split_config=split_config)
        except ForecastEngineError as exc:
            logger.warning(
                "backtesting.run_failed",
                n_points=len(values),
                error_code=exc.code,
                error=exc.message,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "backtesting.run_completed",
            train_size=result.train_size,
            test_size=result.test_size,
            mae=result.mae,
            rmse=result.rmse,
            duration_ms=duration_ms,
        )
        return result
