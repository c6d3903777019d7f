"""Exponential smoothing family: single, double (Holt) and triple (Holt-Winters).

Unset alpha/beta for single and double smoothing are chosen by grid search
on one-step-ahead squared error over the last 30% of the series. Holt-Winters
uses the configured defaults for any unset factor.

CRITICAL: Grid search is exhaustive and deterministic; ties keep the first
candidate in ascending order.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

import numpy as np
import structlog

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.forecasting.defaults import (
    DefaultParameters,
    usable_factor,
)
from forecast_engine.features.forecasting.models import BaseForecaster, FloatArray, fit_linear

logger = structlog.get_logger()

SmoothingType = Literal["single", "double", "triple"]


# =============================================================================
# Series diagnostics
# =============================================================================


def has_trend(values: FloatArray) -> bool:
    """Whether the least-squares slope is material relative to the value range.

    A trend is present when |slope| > 0.1 * (max - min) / n.
    """
    y = np.asarray(values, dtype=np.float64)
    n = len(y)
    if n < 2:
        return False
    value_range = float(np.max(y) - np.min(y))
    if value_range == 0:
        return False
    slope = fit_linear(y).slope
    return abs(slope) > 0.1 * (value_range / n)


def _phase_means(values: FloatArray, season_length: int) -> FloatArray:
    """Mean of each seasonal phase over the complete cycles."""
    cycles = len(values) // season_length
    return values[: cycles * season_length].reshape(cycles, season_length).mean(axis=0)


def has_seasonality(values: FloatArray, season_length: int) -> bool:
    """Whether per-phase means vary by more than 10% of their mean.

    Requires at least two complete cycles. A zero overall mean counts as
    seasonal when the phase means differ at all.
    """
    y = np.asarray(values, dtype=np.float64)
    if season_length < 2 or len(y) < 2 * season_length:
        return False
    means = _phase_means(y, season_length)
    mean = float(np.mean(means))
    spread = float(np.std(means))
    if mean == 0:
        return spread > 0
    return spread / abs(mean) > 0.1


def detect_smoothing_type(values: FloatArray, season_length: int) -> SmoothingType:
    """Choose the smoothing variant for a series."""
    if len(values) >= 2 * season_length and has_seasonality(values, season_length):
        return "triple"
    if has_trend(values):
        return "double"
    return "single"


# =============================================================================
# Recurrences
# =============================================================================


def single_smoothing(values: FloatArray, alpha: float) -> tuple[FloatArray, float]:
    """Simple exponential smoothing.

    Returns:
        One-step-ahead fitted values (fitted[t] forecasts values[t]) and the
        final level.
    """
    fitted = np.empty(len(values), dtype=np.float64)
    level = float(values[0])
    for t, value in enumerate(values):
        fitted[t] = level
        level = alpha * float(value) + (1 - alpha) * level
    return fitted, level


def double_smoothing(
    values: FloatArray, alpha: float, beta: float
) -> tuple[FloatArray, float, float]:
    """Holt's linear trend method.

    Level starts at values[0] and trend at values[1] - values[0].

    Returns:
        One-step-ahead fitted values, final level and final trend.
    """
    fitted = np.empty(len(values), dtype=np.float64)
    level = float(values[0])
    trend = float(values[1] - values[0])
    fitted[0] = level
    for t in range(1, len(values)):
        fitted[t] = level + trend
        previous_level = level
        level = alpha * float(values[t]) + (1 - alpha) * (level + trend)
        trend = beta * (level - previous_level) + (1 - beta) * trend
    return fitted, level, trend


def initial_seasonal_indices(values: FloatArray, season_length: int) -> FloatArray:
    """Multiplicative seasonal indices from complete cycles, normalized to mean 1."""
    means = _phase_means(values, season_length)
    overall = float(np.mean(means))
    with np.errstate(divide="ignore", invalid="ignore"):
        return means / overall


def triple_smoothing(
    values: FloatArray,
    alpha: float,
    beta: float,
    gamma: float,
    season_length: int,
) -> tuple[float, float, FloatArray]:
    """Multiplicative Holt-Winters.

    Initial level is values[0] / S[0]; initial trend is the average per-step
    change between the first two seasonally adjusted cycle starts.

    Returns:
        Final level, final trend and the seasonal index array.
    """
    s = season_length
    seasonals = initial_seasonal_indices(values, s).copy()

    with np.errstate(divide="ignore", invalid="ignore"):
        level = float(values[0] / seasonals[0])
        trend = float((values[s] / seasonals[0] - values[0] / seasonals[0]) / s)
        for t in range(1, len(values)):
            phase = t % s
            value = values[t]
            previous_level = level
            level = alpha * (value / seasonals[phase]) + (1 - alpha) * (level + trend)
            trend = beta * (level - previous_level) + (1 - beta) * trend
            seasonals[phase] = gamma * (value / level) + (1 - gamma) * seasonals[phase]

    return float(level), float(trend), seasonals


# =============================================================================
# Parameter search
# =============================================================================


def _holdout_mse(values: FloatArray, fitted: FloatArray, holdout_fraction: float) -> float:
    start = int(holdout_fraction * len(values))
    errors = values[start:] - fitted[start:]
    if len(errors) == 0:
        return float("inf")
    return float(np.mean(errors**2))


def optimize_parameters(
    values: FloatArray,
    smoothing_type: Literal["single", "double"],
    defaults: DefaultParameters,
) -> tuple[float, float]:
    """Grid search alpha (and beta for double) on one-step-ahead MSE.

    Candidates yielding a non-finite score are skipped. When no candidate is
    usable the configured defaults are returned.

    Returns:
        Best (alpha, beta); beta is the default for single smoothing.
    """
    best_alpha, best_beta = defaults.alpha, defaults.beta
    best_score = float("inf")

    beta_grid: tuple[float, ...] = (
        defaults.beta_grid if smoothing_type == "double" else (defaults.beta,)
    )
    for alpha in defaults.alpha_grid:
        for beta in beta_grid:
            if smoothing_type == "double":
                fitted = double_smoothing(values, alpha, beta)[0]
            else:
                fitted = single_smoothing(values, alpha)[0]
            score = _holdout_mse(values, fitted, defaults.holdout_fraction)
            if not np.isfinite(score):
                continue
            if score < best_score:
                best_score = score
                best_alpha, best_beta = alpha, beta

    logger.debug(
        "smoothing.parameters_optimized",
        smoothing_type=smoothing_type,
        alpha=best_alpha,
        beta=best_beta,
        mse=best_score if np.isfinite(best_score) else None,
    )
    return best_alpha, best_beta


# =============================================================================
# Forecaster
# =============================================================================


class ExponentialSmoothingForecaster(BaseForecaster):
    """Exponential smoothing forecaster.

    Forecasts:
    - single: y_hat[n+h] = level
    - double: y_hat[n+h] = level + h * trend
    - triple: y_hat[n+h] = (level + h * trend) * S[(n + h - 1) mod s]

    Smoothing factors outside (0, 1) are ignored, as if unset.

    Attributes:
        smoothing_type: single, double, triple or auto.
        alpha: Level smoothing factor (None = estimate or default).
        beta: Trend smoothing factor (None = estimate or default).
        gamma: Seasonal smoothing factor (None = default).
        season_length: Seasonal period (None = default, 12).
    """

    min_observations = 3

    def __init__(
        self,
        smoothing_type: Literal["auto", "single", "double", "triple"] = "auto",
        alpha: float | None = None,
        beta: float | None = None,
        gamma: float | None = None,
        season_length: int | None = None,
        defaults: DefaultParameters | None = None,
    ) -> None:
        super().__init__(defaults)
        if season_length is not None and season_length < 2:
            raise ValueError(f"season_length must be >= 2, got {season_length}")
        self.smoothing_type = smoothing_type
        self.alpha: float | None = usable_factor("alpha", alpha)
        self.beta: float | None = usable_factor("beta", beta)
        self.gamma: float | None = usable_factor("gamma", gamma)
        self.season_length = season_length
        self._resolved_type: SmoothingType | None = None
        self._forecaster: Callable[[int], FloatArray] | None = None

    def fit(self, y: FloatArray) -> ExponentialSmoothingForecaster:
        """Resolve the variant and parameters and run the recurrence.

        Raises:
            InsufficientDataError: If y has fewer than 3 observations, or fewer
                than two full seasons for triple smoothing.
        """
        values = self._check_length(y, self.min_observations, "Exponential smoothing")
        season_length = self.season_length or self.defaults.season_length

        smoothing_type: SmoothingType
        if self.smoothing_type == "auto":
            smoothing_type = detect_smoothing_type(values, season_length)
        else:
            smoothing_type = self.smoothing_type

        params: dict[str, Any]
        if smoothing_type == "triple":
            params = self._fit_triple(values, season_length)
        else:
            params = self._fit_non_seasonal(values, smoothing_type)

        self._resolved_type = smoothing_type
        self._mark_fitted(values, {"smoothing_type": smoothing_type, **params})
        logger.debug("smoothing.fitted", smoothing_type=smoothing_type, n_observations=len(values))
        return self

    def _fit_non_seasonal(
        self, values: FloatArray, smoothing_type: Literal["single", "double"]
    ) -> dict[str, Any]:
        alpha, beta = self.alpha, self.beta
        needs_search = alpha is None or (smoothing_type == "double" and beta is None)
        if needs_search:
            best_alpha, best_beta = optimize_parameters(values, smoothing_type, self.defaults)
            alpha = alpha if alpha is not None else best_alpha
            beta = beta if beta is not None else best_beta
        assert alpha is not None

        if smoothing_type == "single":
            _, level = single_smoothing(values, alpha)
            self._forecaster = lambda horizon: np.full(horizon, level, dtype=np.float64)
            return {"alpha": alpha, "level": level}

        resolved_beta = beta if beta is not None else self.defaults.beta
        _, level, trend = double_smoothing(values, alpha, resolved_beta)
        self._forecaster = lambda horizon: level + trend * np.arange(
            1, horizon + 1, dtype=np.float64
        )
        return {"alpha": alpha, "beta": resolved_beta, "level": level, "trend": trend}

    def _fit_triple(self, values: FloatArray, season_length: int) -> dict[str, Any]:
        n = len(values)
        if n < 2 * season_length:
            raise InsufficientDataError(
                f"Triple exponential smoothing requires at least {2 * season_length} "
                f"data points (two seasons of {season_length}), got {n}",
                required=2 * season_length,
                actual=n,
            )

        alpha = self.alpha if self.alpha is not None else self.defaults.alpha
        beta = self.beta if self.beta is not None else self.defaults.beta
        gamma = self.gamma if self.gamma is not None else self.defaults.gamma
        logger.debug(
            "smoothing.seasonal_defaults_used",
            alpha=alpha,
            beta=beta,
            gamma=gamma,
            season_length=season_length,
        )

        level, trend, seasonals = triple_smoothing(values, alpha, beta, gamma, season_length)

        def forecast(horizon: int) -> FloatArray:
            steps = np.arange(1, horizon + 1)
            phases = (n + steps - 1) % season_length
            with np.errstate(invalid="ignore", over="ignore"):
                return (level + trend * steps) * seasonals[phases]

        self._forecaster = forecast
        return {
            "alpha": alpha,
            "beta": beta,
            "gamma": gamma,
            "season_length": season_length,
            "level": level,
            "trend": trend,
        }

    def _forecast(self, horizon: int) -> FloatArray:
        assert self._forecaster is not None
        return self._forecaster(horizon)

    @property
    def resolved_type(self) -> SmoothingType | None:
        """Variant actually fitted, or None before fit."""
        return self._resolved_type

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Dictionary with smoothing_type, alpha, beta, gamma and season_length.
        """
        return {
            "smoothing_type": self.smoothing_type,
            "alpha": self.alpha,
            "beta": self.beta,
            "gamma": self.gamma,
            "season_length": self.season_length,
        }
