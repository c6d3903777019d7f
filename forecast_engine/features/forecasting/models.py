"""Forecasting models with unified scikit-learn-style interface.

All forecasters implement a common interface:
- fit(y) -> self
- predict(horizon) -> np.ndarray
- get_params() -> dict
- set_params(**params) -> self

Regression models use the zero-based index 0..n-1 of the time-sorted series
as the independent variable, never the raw time key: year values around 2000
make the normal equations ill-conditioned.

CRITICAL: All implementations are deterministic; there is no randomness.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, assert_never

import numpy as np
import structlog

from forecast_engine.core.exceptions import (
    DegenerateRegressionError,
    InsufficientDataError,
    SingularMatrixError,
)
from forecast_engine.features.backtesting.metrics import MetricsCalculator
from forecast_engine.features.forecasting.defaults import (
    DefaultParameters,
    usable_factor,
    usable_window,
)
from forecast_engine.features.forecasting.schemas import (
    ArimaModelConfig,
    ExponentialModelConfig,
    LinearModelConfig,
    ModelConfig,
    MovingAverageModelConfig,
    PolynomialModelConfig,
)
from forecast_engine.shared.linalg import solve

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]

logger = structlog.get_logger()


@dataclass
class FitResult:
    """Result of model fitting.

    Attributes:
        fitted: Whether the model was successfully fitted.
        n_observations: Number of observations used for fitting.
        params: Resolved parameters (after auto-estimation).
        metrics: Dictionary of in-sample metrics (e.g., {"train_r2": 0.98}).
    """

    fitted: bool
    n_observations: int
    params: dict[str, Any] = field(default_factory=lambda: {})
    metrics: dict[str, float] = field(default_factory=lambda: {})


def sanitize_forecast(forecast: FloatArray, history: FloatArray) -> FloatArray:
    """Replace a forecast containing non-finite values with a flat fallback.

    The fallback is the last finite historical value (0.0 when there is none)
    repeated across the horizon.

    Args:
        forecast: Raw model output.
        history: Series the model was fitted on.

    Returns:
        The forecast unchanged when fully finite, otherwise the fallback.
    """
    if np.all(np.isfinite(forecast)):
        return forecast

    finite_history = history[np.isfinite(history)]
    fallback = float(finite_history[-1]) if len(finite_history) > 0 else 0.0
    logger.warning(
        "forecasting.non_finite_forecast",
        horizon=len(forecast),
        n_non_finite=int(np.sum(~np.isfinite(forecast))),
        fallback=fallback,
    )
    return np.full(len(forecast), fallback, dtype=np.float64)


class BaseForecaster(ABC):
    """Abstract base class for all forecasting models.

    Subclasses implement ``fit`` and ``_forecast``; ``predict`` wraps
    ``_forecast`` with the fitted check and the non-finite gate.

    Attributes:
        min_observations: Smallest series length the model accepts.
        defaults: Fallback parameter table.
    """

    min_observations: ClassVar[int] = 2

    def __init__(self, defaults: DefaultParameters | None = None) -> None:
        """Initialize the forecaster.

        Args:
            defaults: Fallback parameter table; built from settings when omitted.
        """
        self.defaults = defaults or DefaultParameters.from_settings()
        self._is_fitted = False
        self._history: FloatArray | None = None
        self._fit_result: FitResult | None = None

    @abstractmethod
    def fit(self, y: FloatArray) -> BaseForecaster:
        """Fit the model on historical data.

        Args:
            y: Target values (1D array of shape [n_samples]) in time order.

        Returns:
            self (for method chaining).

        Raises:
            InsufficientDataError: If y has fewer observations than required.
        """

    @abstractmethod
    def _forecast(self, horizon: int) -> FloatArray:
        """Produce raw forecasts; called only on a fitted model."""

    def predict(self, horizon: int) -> FloatArray:
        """Generate forecasts for the specified horizon.

        Args:
            horizon: Number of steps to forecast.

        Returns:
            Array of forecasts with shape [horizon].

        Raises:
            RuntimeError: If model has not been fitted.
            ValueError: If horizon is not positive.
        """
        if not self._is_fitted or self._history is None:
            raise RuntimeError("Model must be fitted before predict")
        if horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {horizon}")
        raw = np.asarray(self._forecast(horizon), dtype=np.float64)
        return sanitize_forecast(raw, self._history)

    @abstractmethod
    def get_params(self) -> dict[str, Any]:
        """Get model parameters (scikit-learn convention).

        Returns:
            Dictionary of parameter names to values.
        """

    def set_params(self, **params: Any) -> BaseForecaster:  # noqa: ANN401
        """Set model parameters (scikit-learn convention).

        Args:
            **params: Parameter names and values to set.

        Returns:
            self (for method chaining).
        """
        for key, value in params.items():
            setattr(self, key, value)
        self._is_fitted = False
        return self

    @property
    def is_fitted(self) -> bool:
        """Check if the model has been fitted."""
        return self._is_fitted

    @property
    def fit_result(self) -> FitResult | None:
        """Details of the last successful fit."""
        return self._fit_result

    def _check_length(self, y: FloatArray, required: int, label: str) -> FloatArray:
        values = np.asarray(y, dtype=np.float64)
        if values.ndim != 1:
            raise ValueError(f"y must be one-dimensional, got shape {values.shape}")
        if len(values) < required:
            raise InsufficientDataError(
                f"{label} requires at least {required} data points, got {len(values)}",
                required=required,
                actual=len(values),
            )
        return values

    def _mark_fitted(self, values: FloatArray, params: dict[str, Any], **metrics: float) -> None:
        self._history = values
        self._is_fitted = True
        self._fit_result = FitResult(
            fitted=True,
            n_observations=len(values),
            params=params,
            metrics=dict(metrics),
        )


# =============================================================================
# Linear Regression
# =============================================================================


@dataclass(frozen=True)
class LinearFit:
    """Least-squares line over the index sequence.

    Attributes:
        slope: Change per period.
        intercept: Fitted value at index 0.
    """

    slope: float
    intercept: float

    def evaluate(self, x: FloatArray) -> FloatArray:
        """Evaluate the line at the given indices."""
        return self.intercept + self.slope * np.asarray(x, dtype=np.float64)


def fit_linear(values: FloatArray) -> LinearFit:
    """Closed-form OLS of value on index.

    Formula: slope = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)

    Args:
        values: Series in time order.

    Returns:
        Fitted slope and intercept.

    Raises:
        InsufficientDataError: If fewer than 2 points are given.
        DegenerateRegressionError: If the denominator is exactly zero.
    """
    y = np.asarray(values, dtype=np.float64)
    n = len(y)
    if n < 2:
        raise InsufficientDataError(
            f"Linear regression requires at least 2 data points, got {n}",
            required=2,
            actual=n,
        )

    x = np.arange(n, dtype=np.float64)
    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        raise DegenerateRegressionError(
            "Cannot fit linear regression: zero variance in the index sequence",
            details={"n": n},
        )

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return LinearFit(slope=slope, intercept=intercept)


class LinearRegressionForecaster(BaseForecaster):
    """Linear trend extrapolation.

    Formula: y_hat[n+h] = intercept + slope * (n + h)

    Negative forecasts are kept; the series may hold signed quantities such as
    growth rates.
    """

    min_observations = 2

    def __init__(self, defaults: DefaultParameters | None = None) -> None:
        super().__init__(defaults)
        self._line: LinearFit | None = None

    def fit(self, y: FloatArray) -> LinearRegressionForecaster:
        """Fit the least-squares line.

        Raises:
            InsufficientDataError: If y has fewer than 2 observations.
            DegenerateRegressionError: If the regression is undefined.
        """
        values = self._check_length(y, self.min_observations, "Linear regression")
        self._line = fit_linear(values)
        self._mark_fitted(values, {"slope": self._line.slope, "intercept": self._line.intercept})
        return self

    def _forecast(self, horizon: int) -> FloatArray:
        assert self._line is not None and self._history is not None
        n = len(self._history)
        return self._line.evaluate(np.arange(n, n + horizon))

    @property
    def line(self) -> LinearFit | None:
        """Fitted line, or None before fit."""
        return self._line

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Empty dictionary; the model has no tunable parameters.
        """
        return {}


# =============================================================================
# Polynomial Regression
# =============================================================================


def fit_polynomial(values: FloatArray, degree: int) -> FloatArray:
    """Least-squares polynomial coefficients via the normal equations.

    Builds A^T A from power sums of the index sequence, A^T y from weighted
    sums of the values, and solves with Gaussian elimination.

    Args:
        values: Series in time order.
        degree: Polynomial degree.

    Returns:
        Coefficients [a0, a1, ..., a_degree] for y = sum(a_j * x^j).

    Raises:
        InsufficientDataError: If fewer than degree + 1 points are given.
        SingularMatrixError: If the normal equations are singular.
    """
    y = np.asarray(values, dtype=np.float64)
    n = len(y)
    if n < degree + 1:
        raise InsufficientDataError(
            f"Polynomial regression of degree {degree} requires at least "
            f"{degree + 1} data points, got {n}",
            required=degree + 1,
            actual=n,
        )

    x = np.arange(n, dtype=np.float64)
    # power_sums[k] = sum(x^k) for k = 0..2*degree
    power_sums = np.array([np.sum(x**k) for k in range(2 * degree + 1)])
    normal_matrix = np.array(
        [[power_sums[i + j] for j in range(degree + 1)] for i in range(degree + 1)]
    )
    moments = np.array([np.sum((x**i) * y) for i in range(degree + 1)])
    return solve(normal_matrix, moments)


def evaluate_polynomial(coefficients: FloatArray, x: FloatArray) -> FloatArray:
    """Evaluate sum(a_j * x^j) at each x."""
    points = np.asarray(x, dtype=np.float64)
    result = np.zeros_like(points)
    for power, coefficient in enumerate(coefficients):
        result += coefficient * points**power
    return result


class PolynomialRegressionForecaster(BaseForecaster):
    """Polynomial trend extrapolation of degree 2 or 3.

    With degree="auto", both degrees are fitted when at least 4 points exist
    and the one with the higher in-sample R-squared is kept (ties keep 2).

    Attributes:
        degree: 2, 3 or "auto".
    """

    min_observations = 3

    def __init__(
        self,
        degree: Literal[2, 3, "auto"] = "auto",
        defaults: DefaultParameters | None = None,
    ) -> None:
        super().__init__(defaults)
        if degree not in (2, 3, "auto"):
            raise ValueError(f"degree must be 2, 3 or 'auto', got {degree!r}")
        self.degree = degree
        self._coefficients: FloatArray | None = None
        self._selected_degree: int | None = None

    def fit(self, y: FloatArray) -> PolynomialRegressionForecaster:
        """Fit polynomial coefficients, selecting the degree when automatic.

        Raises:
            InsufficientDataError: If y is too short for the requested degree.
            SingularMatrixError: If the normal equations cannot be solved.
        """
        values = self._check_length(y, self.min_observations, "Polynomial regression")

        if self.degree == "auto":
            degree = self._select_degree(values)
        else:
            degree = self.degree

        self._coefficients = fit_polynomial(values, degree)
        self._selected_degree = degree
        fitted = evaluate_polynomial(self._coefficients, np.arange(len(values)))
        self._mark_fitted(
            values,
            {"degree": degree, "coefficients": self._coefficients.tolist()},
            train_r2=MetricsCalculator.r2(values, fitted).value,
        )
        return self

    def _select_degree(self, values: FloatArray) -> int:
        if len(values) < 4:
            return 2

        best_degree = 2
        best_r2 = -np.inf
        for degree in (2, 3):
            try:
                coefficients = fit_polynomial(values, degree)
            except SingularMatrixError:
                logger.debug("polynomial.degree_skipped", degree=degree, reason="singular")
                continue
            fitted = evaluate_polynomial(coefficients, np.arange(len(values)))
            r2 = MetricsCalculator.r2(values, fitted).value
            if r2 > best_r2:
                best_r2 = r2
                best_degree = degree

        logger.debug("polynomial.degree_selected", degree=best_degree, r2=best_r2)
        return best_degree

    def _forecast(self, horizon: int) -> FloatArray:
        assert self._coefficients is not None and self._history is not None
        n = len(self._history)
        return evaluate_polynomial(self._coefficients, np.arange(n, n + horizon))

    @property
    def selected_degree(self) -> int | None:
        """Degree actually fitted, or None before fit."""
        return self._selected_degree

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Dictionary with degree.
        """
        return {"degree": self.degree}


# =============================================================================
# Moving Average Family
# =============================================================================

AverageType = Literal["simple", "weighted", "exponential"]


def _resolve_window(n: int, window_size: int | None, defaults: DefaultParameters) -> int:
    window = window_size if window_size is not None else defaults.default_window(n)
    if window >= n:
        window = n - 1
    return window


def _simple_level_trend(values: FloatArray, window: int) -> tuple[float, float]:
    n = len(values)
    level = float(np.mean(values[n - window :]))
    trend = 0.0
    if n >= 2 * window:
        previous = float(np.mean(values[n - 2 * window : n - window]))
        trend = (level - previous) / window
    return level, trend


def _weighted_level_trend(values: FloatArray, window: int) -> tuple[float, float]:
    n = len(values)
    # Linear weights 1..w normalized to sum 1; the newest point weighs most
    weights = np.arange(1, window + 1, dtype=np.float64)
    weights /= weights.sum()
    level = float(np.dot(values[n - window :], weights))
    trend = 0.0
    if n >= 2 * window:
        previous = float(np.dot(values[n - 2 * window : n - window], weights))
        trend = (level - previous) / window
    return level, trend


def exponential_moving_average(values: FloatArray, alpha: float) -> FloatArray:
    """EMA recurrence seeded with the first observation."""
    ema = np.empty(len(values), dtype=np.float64)
    ema[0] = values[0]
    for i in range(1, len(values)):
        ema[i] = alpha * values[i] + (1 - alpha) * ema[i - 1]
    return ema


def _ema_level_trend(values: FloatArray, alpha: float) -> tuple[float, float]:
    ema = exponential_moving_average(values, alpha)
    trend = (float(ema[-1]) - float(ema[-3])) / 2 if len(ema) >= 3 else 0.0
    return float(ema[-1]), trend


class MovingAverageForecaster(BaseForecaster):
    """Moving average forecaster with trend extrapolation.

    Formula: y_hat[t+h] = level + trend * h

    Strategies:
    - simple: level is the unweighted mean of the last window; trend is the
      change between the last two windows divided by the window size.
    - weighted: like simple, with linearly increasing weights 1..w.
    - exponential: level is the last EMA value; trend is (ema[-1] - ema[-3]) / 2.

    Attributes:
        average_type: simple, weighted, exponential or auto (resolves to simple).
        window_size: Window size; defaults to max(2, n // 3), capped at n - 1.
            A window below 2 is ignored.
        alpha: EMA smoothing factor; defaults to 0.3. A value outside (0, 1)
            is ignored.
    """

    min_observations = 2

    def __init__(
        self,
        average_type: Literal["auto", "simple", "weighted", "exponential"] = "auto",
        window_size: int | None = None,
        alpha: float | None = None,
        defaults: DefaultParameters | None = None,
    ) -> None:
        super().__init__(defaults)
        self.average_type = average_type
        self.window_size: int | None = usable_window(window_size)
        self.alpha: float | None = usable_factor("alpha", alpha)
        self._level: float = 0.0
        self._trend: float = 0.0

    @property
    def resolved_type(self) -> AverageType:
        """Strategy actually used ("auto" resolves to "simple")."""
        if self.average_type == "auto":
            return "simple"
        return self.average_type

    def fit(self, y: FloatArray) -> MovingAverageForecaster:
        """Compute the level and trend of the chosen strategy.

        Raises:
            InsufficientDataError: If y has fewer than 2 observations.
        """
        values = self._check_length(y, self.min_observations, "Moving average")
        strategy = self.resolved_type
        params: dict[str, Any] = {"average_type": strategy}

        if strategy == "exponential":
            alpha = self.alpha if self.alpha is not None else self.defaults.ema_alpha
            self._level, self._trend = _ema_level_trend(values, alpha)
            params["alpha"] = alpha
        else:
            window = _resolve_window(len(values), self.window_size, self.defaults)
            compute: Callable[[FloatArray, int], tuple[float, float]] = (
                _weighted_level_trend if strategy == "weighted" else _simple_level_trend
            )
            self._level, self._trend = compute(values, window)
            params["window_size"] = window

        self._mark_fitted(values, {**params, "level": self._level, "trend": self._trend})
        return self

    def _forecast(self, horizon: int) -> FloatArray:
        steps = np.arange(1, horizon + 1, dtype=np.float64)
        return self._level + self._trend * steps

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Dictionary with average_type, window_size and alpha.
        """
        return {
            "average_type": self.average_type,
            "window_size": self.window_size,
            "alpha": self.alpha,
        }


# =============================================================================
# Factory
# =============================================================================


def model_factory(config: ModelConfig, defaults: DefaultParameters | None = None) -> BaseForecaster:
    """Create a forecaster instance from a configuration.

    Args:
        config: Model configuration.
        defaults: Fallback parameter table shared by the call.

    Returns:
        Instantiated (unfitted) forecaster.
    """
    defaults = defaults or DefaultParameters.from_settings()

    match config:
        case LinearModelConfig():
            return LinearRegressionForecaster(defaults=defaults)
        case PolynomialModelConfig():
            return PolynomialRegressionForecaster(degree=config.degree, defaults=defaults)
        case MovingAverageModelConfig():
            return MovingAverageForecaster(
                average_type=config.average_type,
                window_size=config.window_size,
                alpha=config.alpha,
                defaults=defaults,
            )
        case ExponentialModelConfig():
            from forecast_engine.features.forecasting.smoothing import (
                ExponentialSmoothingForecaster,
            )

            return ExponentialSmoothingForecaster(
                smoothing_type=config.smoothing_type,
                alpha=config.alpha,
                beta=config.beta,
                gamma=config.gamma,
                season_length=config.season_length,
                defaults=defaults,
            )
        case ArimaModelConfig():
            from forecast_engine.features.forecasting.arima import ArimaForecaster

            return ArimaForecaster(p=config.p, d=config.d, q=config.q, defaults=defaults)
        case _:
            assert_never(config)
