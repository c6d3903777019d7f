"""Forecasting service: the prediction orchestrator.

Orchestrates:
- Request validation (periods, series length, model selector)
- Time format and interval detection
- Model dispatch via factory
- Timestamp projection, optional confidence bounds and summary statistics

CRITICAL: Every call is self-contained; no state survives between calls.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import structlog

from forecast_engine.core.config import Settings, get_settings
from forecast_engine.core.exceptions import (
    ForecastEngineError,
    InsufficientDataError,
    InvalidPeriodsError,
    ModelError,
    UnsupportedModelError,
)
from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.intervals import calculate_intervals
from forecast_engine.features.forecasting.models import model_factory
from forecast_engine.features.forecasting.schemas import (
    MODEL_CONFIGS,
    ForecastPoint,
    HistoricalPoint,
    PredictionResult,
    PredictionStatistics,
    PredictRequest,
    build_model_config,
)
from forecast_engine.features.forecasting.timeline import (
    detect_interval,
    detect_time_format,
    project_times,
)

logger = structlog.get_logger()

MIN_DATA_POINTS: dict[str, int] = {
    "linear": 2,
    "exponential": 3,
    "movingAverage": 2,
    "polynomial": 3,
    "arima": 20,
}


def validate_model_data_requirements(model: str, n_points: int) -> bool:
    """Whether a series of n_points satisfies the model's minimum.

    Raises:
        UnsupportedModelError: If the model is unknown.
    """
    if model not in MIN_DATA_POINTS:
        raise UnsupportedModelError(model, supported=list(MIN_DATA_POINTS))
    return n_points >= MIN_DATA_POINTS[model]


def _summarize(values: np.ndarray[Any, Any], forecast: np.ndarray[Any, Any]) -> PredictionStatistics:
    last_value = float(values[-1])
    predicted_value = float(forecast[-1]) if len(forecast) > 0 else None
    growth_rate: float | None = None
    if predicted_value is not None and last_value != 0:
        growth_rate = (predicted_value - last_value) / last_value * 100
    return PredictionStatistics(
        avg_value=float(np.mean(values)),
        last_value=last_value,
        predicted_value=predicted_value,
        growth_rate=growth_rate,
    )


class ForecastingService:
    """Service for producing forecasts from a historical series.

    Provides orchestration layer for:
    - Validating the request before any computation
    - Detecting time format and step
    - Fitting the selected model and forecasting
    - Assembling the combined historical + forecast result

    CRITICAL: All defaults come from Settings for reproducibility.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the forecasting service.

        Args:
            settings: Settings instance; the cached singleton when omitted.
        """
        self.settings = settings or get_settings()

    def validate_periods(self, periods: int) -> None:
        """Reject a non-positive or oversized horizon.

        Raises:
            InvalidPeriodsError: If periods is outside 1..forecast_max_periods.
        """
        if periods <= 0:
            raise InvalidPeriodsError(
                f"periods must be a positive integer, got {periods}",
                details={"periods": periods},
            )
        if periods > self.settings.forecast_max_periods:
            raise InvalidPeriodsError(
                f"periods must not exceed {self.settings.forecast_max_periods}, got {periods}",
                details={"periods": periods, "max": self.settings.forecast_max_periods},
            )

    def predict(self, request: PredictRequest) -> PredictionResult:
        """Generate a forecast for the request.

        Args:
            request: Historical series, horizon and model selection.

        Returns:
            PredictionResult with forecast and echoed history.

        Raises:
            InvalidPeriodsError: If periods is not positive or exceeds the limit.
            UnsupportedModelError: If the model selector is unknown.
            InvalidModelParamsError: If the model parameters cannot be validated.
            InsufficientDataError: If the series is below the model's minimum.
            ModelError: If the model fails while fitting or forecasting.
        """
        # Model and helper events emitted during the call carry these fields
        with structlog.contextvars.bound_contextvars(
            model=request.model,
            periods=request.periods,
            n_points=len(request.historical_data),
        ):
            return self._predict(request)

    def _predict(self, request: PredictRequest) -> PredictionResult:
        start_time = time.perf_counter()
        n_points = len(request.historical_data)

        logger.info("forecasting.predict_started")

        try:
            self.validate_periods(request.periods)
            config = build_model_config(request.model, request.model_params)

            if n_points < 2:
                raise InsufficientDataError(
                    f"Prediction requires at least 2 historical data points, got {n_points}",
                    required=2,
                    actual=n_points,
                )
            if not validate_model_data_requirements(request.model, n_points):
                required = MIN_DATA_POINTS[request.model]
                raise InsufficientDataError(
                    f"Model {request.model} requires at least {required} data points, "
                    f"got {n_points}",
                    required=required,
                    actual=n_points,
                )

            points = sorted(request.historical_data, key=lambda point: point.time)
            times = [point.time for point in points]
            values = np.array([point.value for point in points], dtype=np.float64)

            time_format = detect_time_format(times[0])
            interval = detect_interval(times, time_format)

            defaults = DefaultParameters.from_settings(self.settings)
            try:
                forecaster = model_factory(config, defaults=defaults)
                forecast = forecaster.fit(values).predict(request.periods)
            except (ForecastEngineError, ValueError) as exc:
                raise ModelError(request.model, exc) from exc

            future_times = project_times(times[-1], interval, request.periods, time_format)
            bounds = (
                calculate_intervals(
                    values,
                    forecast,
                    request.model,
                    confidence_level=request.confidence_level,
                    defaults=defaults,
                )
                if request.confidence_level is not None
                else None
            )
        except ForecastEngineError as exc:
            logger.warning(
                "forecasting.predict_failed",
                error_code=exc.code,
                error=exc.message,
            )
            raise

        predictions = [
            ForecastPoint(
                time=future_time,
                value=float(value),
                is_prediction=True,
                lower_bound=bounds[i].lower if bounds else None,
                upper_bound=bounds[i].upper if bounds else None,
            )
            for i, (future_time, value) in enumerate(zip(future_times, forecast))
        ]
        history = [
            ForecastPoint(time=point.time, value=point.value, is_prediction=False)
            for point in points
        ]

        result = PredictionResult(
            predictions=predictions,
            historical_data=history,
            statistics=_summarize(values, forecast),
            time_interval=interval,
            time_format=time_format,
            model=request.model,
            config_hash=config.config_hash(),
        )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "forecasting.predict_completed",
            time_format=time_format,
            time_interval=interval,
            config_hash=result.config_hash,
            duration_ms=duration_ms,
        )
        return result

    async def predict_async(self, request: PredictRequest) -> PredictionResult:
        """Run predict in a worker thread so async callers are not blocked."""
        return await asyncio.to_thread(self.predict, request)


def generate_prediction(
    historical_data: Sequence[HistoricalPoint | Mapping[str, Any]],
    periods: int,
    model: str = "linear",
    model_params: Mapping[str, Any] | None = None,
    confidence_level: float | None = None,
    settings: Settings | None = None,
) -> PredictionResult:
    """Convenience wrapper accepting plain dicts.

    Args:
        historical_data: Points as HistoricalPoint or {"time", "value"} mappings.
        periods: Number of future periods.
        model: Model selector.
        model_params: Loose parameter record for the model.
        confidence_level: Attach bounds at 0.95 or 0.99 when set.
        settings: Settings override.

    Returns:
        PredictionResult.
    """
    service = ForecastingService(settings=settings)
    # Reject the horizon before the series is parsed
    service.validate_periods(periods)
    if model not in MODEL_CONFIGS:
        raise UnsupportedModelError(model, supported=list(MODEL_CONFIGS))

    request = PredictRequest(
        historical_data=[
            point if isinstance(point, HistoricalPoint) else HistoricalPoint.model_validate(point)
            for point in historical_data
        ],
        periods=periods,
        model=model,
        model_params=dict(model_params or {}),
        confidence_level=confidence_level,  # type: ignore[arg-type]
    )
    return service.predict(request)
