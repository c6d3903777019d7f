"""Simplified ARIMA(p, d, q) forecaster.

Pipeline:
1. Difference the series d times.
2. Estimate AR coefficients on the differenced series with Yule-Walker.
3. Forecast the differenced series recursively around its mean.
4. Integrate the forecasts back onto the original scale.

The MA(q) component is not estimated; it is approximated by q extra AR lags,
so the AR order used is p + q.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.models import BaseForecaster, FloatArray
from forecast_engine.shared.linalg import solve

logger = structlog.get_logger()

ARIMA_MIN_POINTS = 20
ORDER_SLACK = 5


@dataclass(frozen=True)
class ArimaOrder:
    """Resolved (p, d, q) order."""

    p: int
    d: int
    q: int

    @property
    def ar_order(self) -> int:
        """Number of AR lags actually fitted."""
        return self.p + self.q

    @property
    def required_points(self) -> int:
        """Series length needed to fit this order."""
        return self.p + self.d + self.q + ORDER_SLACK


def difference(values: FloatArray, order: int = 1) -> FloatArray:
    """Apply first differences ``order`` times."""
    if order < 0:
        raise ValueError(f"order must be >= 0, got {order}")
    return np.diff(np.asarray(values, dtype=np.float64), n=order)


def inverse_difference(differenced: FloatArray, history: FloatArray, order: int = 1) -> FloatArray:
    """Integrate differenced values continuing from the end of ``history``.

    Each differencing level of ``history`` contributes its last value as the
    seed of one cumulative sum, from the deepest level up to the original
    scale.

    Args:
        differenced: Values on the d-times differenced scale that follow history.
        history: Original-scale observations preceding ``differenced``.
        order: Differencing order d.

    Returns:
        Values on the original scale.

    Raises:
        ValueError: If history is shorter than ``order``.
    """
    if order == 0:
        return np.asarray(differenced, dtype=np.float64).copy()
    base = np.asarray(history, dtype=np.float64)
    if len(base) < order:
        raise ValueError(
            f"inverse_difference needs at least {order} history values, got {len(base)}"
        )

    levels = [base]
    for _ in range(order - 1):
        levels.append(np.diff(levels[-1]))

    result = np.asarray(differenced, dtype=np.float64)
    for level in reversed(levels):
        result = level[-1] + np.cumsum(result)
    return result


def autocorrelation(values: FloatArray, lag: int) -> float:
    """Sample autocorrelation at ``lag``.

    Returns 0 when lag >= n or when the series has zero variance.
    """
    x = np.asarray(values, dtype=np.float64)
    n = len(x)
    if lag >= n:
        return 0.0
    centered = x - np.mean(x)
    denominator = float(np.sum(centered**2))
    if denominator == 0:
        return 0.0
    numerator = float(np.sum(centered[: n - lag] * centered[lag:]))
    return numerator / denominator


def yule_walker(values: FloatArray, order: int) -> FloatArray:
    """Estimate AR coefficients by solving the Yule-Walker equations.

    Args:
        values: Stationary (differenced) series.
        order: Number of AR lags.

    Returns:
        Coefficients phi where phi[j] multiplies lag j + 1.

    Raises:
        SingularMatrixError: If the Toeplitz system is singular.
    """
    if order == 0:
        return np.zeros(0, dtype=np.float64)
    acf = np.array([autocorrelation(values, lag) for lag in range(order + 1)])
    indices = np.arange(order)
    toeplitz = acf[np.abs(indices[:, None] - indices[None, :])]
    return solve(toeplitz, acf[1:])


def auto_arima_order(values: FloatArray) -> ArimaOrder:
    """Heuristic order selection.

    d = 1 when differencing cuts the variance below 80% (and n >= 15),
    p = min(2, n // 10), q = min(1, n // 15).
    """
    x = np.asarray(values, dtype=np.float64)
    n = len(x)
    d = 0
    if n >= 15:
        variance = float(np.var(x))
        if float(np.var(np.diff(x))) < 0.8 * variance:
            d = 1
    return ArimaOrder(p=min(2, n // 10), d=d, q=min(1, n // 15))


def resolve_order(
    values: FloatArray,
    p: int | None,
    d: int | None,
    q: int | None,
    defaults: DefaultParameters,
) -> ArimaOrder:
    """Resolve a partial order against the heuristic or the defaults."""
    if p is None and d is None and q is None:
        return auto_arima_order(values)
    return ArimaOrder(
        p=p if p is not None else defaults.arima_p,
        d=d if d is not None else defaults.arima_d,
        q=q if q is not None else defaults.arima_q,
    )


def forecast_ar(
    values: FloatArray,
    phi: FloatArray,
    horizon: int,
    mean: float | None = None,
) -> FloatArray:
    """Recursive AR forecast around the series mean.

    x_hat[t] = mu + sum(phi[j] * (x[t-j-1] - mu))

    Forecasts are fed back as history through a ring buffer of the last
    len(phi) values.
    """
    x = np.asarray(values, dtype=np.float64)
    mu = float(np.mean(x)) if mean is None else mean
    k = len(phi)
    window: deque[float] = deque((float(v) - mu for v in x[len(x) - k :]), maxlen=k)

    forecasts = np.empty(horizon, dtype=np.float64)
    for step in range(horizon):
        # window[-1] is lag 1
        deviation = sum(phi[j] * window[-1 - j] for j in range(k)) if k else 0.0
        forecasts[step] = mu + deviation
        if k:
            window.append(float(deviation))
    return forecasts


class ArimaForecaster(BaseForecaster):
    """Simplified ARIMA forecaster.

    Attributes:
        p: AR order (None = heuristic or default).
        d: Differencing order (None = heuristic or default).
        q: MA order approximated by extra AR lags (None = heuristic or default).
    """

    min_observations = ARIMA_MIN_POINTS

    def __init__(
        self,
        p: int | None = None,
        d: int | None = None,
        q: int | None = None,
        defaults: DefaultParameters | None = None,
    ) -> None:
        super().__init__(defaults)
        for name, value in (("p", p), ("d", d), ("q", q)):
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        self.p = p
        self.d = d
        self.q = q
        self._order: ArimaOrder | None = None
        self._phi: FloatArray | None = None
        self._differenced: FloatArray | None = None

    def fit(self, y: FloatArray) -> ArimaForecaster:
        """Resolve the order and estimate AR coefficients.

        Raises:
            InsufficientDataError: If y has fewer than 20 observations or fewer
                than p + d + q + 5.
            SingularMatrixError: If the Yule-Walker system is singular.
        """
        values = self._check_length(y, self.min_observations, "ARIMA")
        order = resolve_order(values, self.p, self.d, self.q, self.defaults)
        if len(values) < order.required_points:
            raise InsufficientDataError(
                f"ARIMA({order.p},{order.d},{order.q}) requires at least "
                f"{order.required_points} data points, got {len(values)}",
                required=order.required_points,
                actual=len(values),
            )

        differenced = difference(values, order.d)
        phi = yule_walker(differenced, order.ar_order)
        logger.debug(
            "arima.order_selected",
            p=order.p,
            d=order.d,
            q=order.q,
            auto=self.p is None and self.d is None and self.q is None,
        )

        self._order = order
        self._phi = phi
        self._differenced = differenced
        self._mark_fitted(
            values,
            {"p": order.p, "d": order.d, "q": order.q, "phi": phi.tolist()},
        )
        return self

    def _forecast(self, horizon: int) -> FloatArray:
        assert self._order is not None and self._phi is not None
        assert self._differenced is not None and self._history is not None
        predicted = forecast_ar(self._differenced, self._phi, horizon)
        return inverse_difference(predicted, self._history, self._order.d)

    @property
    def order(self) -> ArimaOrder | None:
        """Resolved order, or None before fit."""
        return self._order

    @property
    def coefficients(self) -> FloatArray | None:
        """Fitted AR coefficients, or None before fit."""
        return self._phi

    def get_params(self) -> dict[str, Any]:
        """Get model parameters.

        Returns:
            Dictionary with p, d and q.
        """
        return {"p": self.p, "d": self.d, "q": self.q}
