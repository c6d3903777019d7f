"""Prediction intervals for forecasts.

Two paths:
- linear: analytic regression interval from the residual standard error and
  the leverage of each future index.
- everything else: prediction +/- z * population std of the history.

Lower bounds are floored at 0 on both paths.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.models import FloatArray, fit_linear


@dataclass(frozen=True)
class ConfidenceBound:
    """Lower and upper bound for one forecast point."""

    lower: float
    upper: float


def _bounds(predictions: FloatArray, margins: FloatArray) -> list[ConfidenceBound]:
    lower = np.maximum(predictions - margins, 0.0)
    upper = predictions + margins
    return [ConfidenceBound(lower=float(lo), upper=float(hi)) for lo, hi in zip(lower, upper)]


def linear_intervals(
    values: FloatArray,
    predictions: FloatArray,
    defaults: DefaultParameters,
) -> list[ConfidenceBound]:
    """Regression interval around a linear trend forecast.

    margin[h] = t * se * sqrt(1 + 1/n + (x_new - x_mean)^2 / Sxx)
    """
    n = len(values)
    x = np.arange(n, dtype=np.float64)
    line = fit_linear(values)
    residuals = values - line.evaluate(x)
    dof = max(n - 2, 1)
    standard_error = float(np.sqrt(np.sum(residuals**2) / dof))

    x_mean = float(np.mean(x))
    sxx = float(np.sum((x - x_mean) ** 2))
    x_new = np.arange(n, n + len(predictions), dtype=np.float64)
    leverage = 1.0 + 1.0 / n + (x_new - x_mean) ** 2 / sxx
    margins = defaults.t_value(n) * standard_error * np.sqrt(leverage)
    return _bounds(predictions, margins)


def std_intervals(
    values: FloatArray,
    predictions: FloatArray,
    confidence_level: float,
    defaults: DefaultParameters,
) -> list[ConfidenceBound]:
    """Constant-width interval from the historical standard deviation."""
    z = defaults.z_value(confidence_level)
    sigma = float(np.std(values))
    margins = np.full(len(predictions), z * sigma)
    return _bounds(predictions, margins)


def calculate_intervals(
    values: FloatArray | Sequence[float],
    predictions: FloatArray | Sequence[float],
    model: str,
    confidence_level: float = 0.95,
    defaults: DefaultParameters | None = None,
) -> list[ConfidenceBound]:
    """Compute a bound for every prediction.

    Args:
        values: Historical values in time order.
        predictions: Forecast values.
        model: Model selector that produced the forecast.
        confidence_level: 0.95 or 0.99.
        defaults: Fallback parameter table.

    Returns:
        One ConfidenceBound per prediction; empty when there are none.

    Raises:
        InsufficientDataError: If fewer than 2 historical values are given.
        ValueError: If the confidence level is unsupported.
    """
    history = np.asarray(values, dtype=np.float64)
    forecast = np.asarray(predictions, dtype=np.float64)
    if len(history) < 2:
        raise InsufficientDataError(
            f"Confidence intervals require at least 2 historical data points, "
            f"got {len(history)}",
            required=2,
            actual=len(history),
        )

    defaults = defaults or DefaultParameters.from_settings()
    # Validates the level on both paths
    defaults.z_value(confidence_level)
    if len(forecast) == 0:
        return []

    if model == "linear":
        return linear_intervals(history, forecast, defaults)
    return std_intervals(history, forecast, confidence_level, defaults)
