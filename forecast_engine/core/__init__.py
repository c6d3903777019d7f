"""Core infrastructure: config, logging, exceptions."""

from forecast_engine.core.config import Settings, get_settings
from forecast_engine.core.exceptions import (
    DegenerateRegressionError,
    ForecastEngineError,
    InsufficientDataError,
    InvalidModelParamsError,
    InvalidPeriodsError,
    ModelError,
    SingularMatrixError,
    UnsupportedModelError,
)
from forecast_engine.core.logging import configure_logging, get_logger

__all__ = [
    "DegenerateRegressionError",
    "ForecastEngineError",
    "InsufficientDataError",
    "InvalidModelParamsError",
    "InvalidPeriodsError",
    "ModelError",
    "Settings",
    "SingularMatrixError",
    "UnsupportedModelError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
