"""Fallback parameter table shared by all model families.

Built once per forecasting call from Settings and passed down, so every
"safe default" lives in one place instead of being re-derived per function.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from forecast_engine.core.config import Settings, get_settings

logger = structlog.get_logger()


def _grid(start: float, stop: float, step: float) -> tuple[float, ...]:
    """Inclusive grid rounded to avoid accumulated float drift."""
    count = int(round((stop - start) / step)) + 1
    return tuple(round(start + i * step, 10) for i in range(count))


@dataclass(frozen=True)
class DefaultParameters:
    """Immutable defaults used when a model parameter is left unset.

    Attributes:
        alpha: Level smoothing fallback when grid search finds nothing usable.
        beta: Trend smoothing fallback when grid search finds nothing usable.
        gamma: Seasonal smoothing factor for Holt-Winters.
        ema_alpha: Smoothing factor for the exponential moving average.
        season_length: Seasonal period for Holt-Winters and seasonality tests.
        window_divisor: Default moving-average window is n // window_divisor.
        min_window: Smallest moving-average window.
        arima_p: AR order used when only part of an ARIMA order is given.
        arima_d: Differencing order used when only part of an ARIMA order is given.
        arima_q: MA order used when only part of an ARIMA order is given.
        alpha_grid: Candidate alphas for one-step-ahead error minimization.
        beta_grid: Candidate betas for one-step-ahead error minimization.
        holdout_fraction: Start of the scoring window as a fraction of n.
        z_values: Normal multipliers keyed by confidence level.
        t_large_sample: t multiplier used for regression intervals when n > 30.
        t_small_sample: t multiplier used for regression intervals when n <= 30.
        t_sample_cutoff: Sample size separating the two t multipliers.
    """

    alpha: float = 0.3
    beta: float = 0.1
    gamma: float = 0.3
    ema_alpha: float = 0.3
    season_length: int = 12
    window_divisor: int = 3
    min_window: int = 2
    arima_p: int = 2
    arima_d: int = 1
    arima_q: int = 1
    alpha_grid: tuple[float, ...] = field(default_factory=lambda: _grid(0.1, 0.9, 0.1))
    beta_grid: tuple[float, ...] = field(default_factory=lambda: _grid(0.05, 0.5, 0.05))
    holdout_fraction: float = 0.7
    z_values: dict[float, float] = field(default_factory=lambda: {0.95: 1.96, 0.99: 2.576})
    t_large_sample: float = 1.96
    t_small_sample: float = 2.0
    t_sample_cutoff: int = 30

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> DefaultParameters:
        """Build the table from application settings.

        Args:
            settings: Settings instance; the cached singleton when omitted.

        Returns:
            DefaultParameters populated from configuration.
        """
        settings = settings or get_settings()
        return cls(
            alpha=settings.forecast_default_alpha,
            beta=settings.forecast_default_beta,
            gamma=settings.forecast_default_gamma,
            ema_alpha=settings.forecast_default_ema_alpha,
            season_length=settings.forecast_default_season_length,
            window_divisor=settings.forecast_window_divisor,
        )

    def default_window(self, n: int) -> int:
        """Default moving-average window for a series of length n."""
        return max(self.min_window, n // self.window_divisor)

    def z_value(self, confidence_level: float) -> float:
        """Normal multiplier for a supported confidence level.

        Raises:
            ValueError: If the level has no tabulated multiplier.
        """
        try:
            return self.z_values[confidence_level]
        except KeyError:
            raise ValueError(
                f"Unsupported confidence level {confidence_level}; "
                f"supported levels: {sorted(self.z_values)}"
            ) from None

    def t_value(self, n: int) -> float:
        """Coarse Student-t multiplier for a regression on n points."""
        return self.t_large_sample if n > self.t_sample_cutoff else self.t_small_sample


# =============================================================================
# Caller parameter screening
# =============================================================================


def usable_factor(name: str, value: Any) -> Any:  # noqa: ANN401
    """Treat a numeric smoothing factor outside (0, 1) as unset.

    Non-numeric values pass through untouched so schema validation can
    reject them.

    Returns:
        The value, or None when it lies outside the open unit interval.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return value
    if 0.0 < value < 1.0:
        return value
    logger.warning("forecasting.parameter_reset", parameter=name, value=value, bound="(0, 1)")
    return None


def usable_window(value: Any) -> Any:  # noqa: ANN401
    """Treat a numeric moving-average window below 2 as unset."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return value
    if value >= 2:
        return value
    logger.warning(
        "forecasting.parameter_reset", parameter="window_size", value=value, bound=">= 2"
    )
    return None
