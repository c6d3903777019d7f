"""Forecasting module for statistical time-series models.

This module provides a unified interface for fitting and forecasting with
linear, polynomial, moving-average, exponential smoothing and simplified
ARIMA models, plus the orchestrator that turns a raw (time, value) series
into a structured prediction.

Exports:
    Models:
        - BaseForecaster: Abstract base class for all forecasters
        - LinearRegressionForecaster, PolynomialRegressionForecaster
        - MovingAverageForecaster, ExponentialSmoothingForecaster
        - ArimaForecaster
        - model_factory: Create forecaster from config

    Schemas:
        - ModelConfig: Union of all model configurations
        - PredictRequest, PredictionResult, ForecastPoint

    Service:
        - ForecastingService: Orchestration layer for prediction
        - generate_prediction: Convenience entry point accepting plain dicts
"""

from forecast_engine.features.forecasting.arima import ArimaForecaster
from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.intervals import ConfidenceBound, calculate_intervals
from forecast_engine.features.forecasting.models import (
    BaseForecaster,
    FitResult,
    LinearRegressionForecaster,
    MovingAverageForecaster,
    PolynomialRegressionForecaster,
    model_factory,
    sanitize_forecast,
)
from forecast_engine.features.forecasting.schemas import (
    ArimaModelConfig,
    ExponentialModelConfig,
    ForecastPoint,
    HistoricalPoint,
    LinearModelConfig,
    ModelConfig,
    ModelConfigBase,
    MovingAverageModelConfig,
    PolynomialModelConfig,
    PredictionResult,
    PredictionStatistics,
    PredictRequest,
    build_model_config,
)
from forecast_engine.features.forecasting.service import (
    MIN_DATA_POINTS,
    ForecastingService,
    generate_prediction,
    validate_model_data_requirements,
)
from forecast_engine.features.forecasting.smoothing import ExponentialSmoothingForecaster

__all__ = [
    "MIN_DATA_POINTS",
    "ArimaForecaster",
    "ArimaModelConfig",
    # Models
    "BaseForecaster",
    "ConfidenceBound",
    "DefaultParameters",
    "ExponentialModelConfig",
    "ExponentialSmoothingForecaster",
    "FitResult",
    # Schemas
    "ForecastPoint",
    # Service
    "ForecastingService",
    "HistoricalPoint",
    "LinearModelConfig",
    "LinearRegressionForecaster",
    "ModelConfig",
    "ModelConfigBase",
    "MovingAverageForecaster",
    "MovingAverageModelConfig",
    "PolynomialModelConfig",
    "PolynomialRegressionForecaster",
    "PredictRequest",
    "PredictionResult",
    "PredictionStatistics",
    "build_model_config",
    "calculate_intervals",
    "generate_prediction",
    "model_factory",
    "sanitize_forecast",
    "validate_model_data_requirements",
]
