"""Test fixtures for forecasting module."""

import numpy as np
import pytest

from forecast_engine.features.forecasting.defaults import DefaultParameters
from forecast_engine.features.forecasting.schemas import (
    ArimaModelConfig,
    ExponentialModelConfig,
    MovingAverageModelConfig,
)


@pytest.fixture
def defaults() -> DefaultParameters:
    """Default parameter table independent of environment settings."""
    return DefaultParameters()


@pytest.fixture
def sample_time_series() -> np.ndarray:
    """Create sample time series data for testing.

    Returns 30 sequential values (1, 2, 3, ...) for easy verification.
    """
    return np.arange(1, 31, dtype=np.float64)


@pytest.fixture
def sample_seasonal_series() -> np.ndarray:
    """Create sample monthly series with a yearly pattern.

    Returns 36 months (3 years) of a fixed 12-month pattern on a gentle trend.
    """
    pattern = np.array([80, 85, 95, 100, 110, 125, 130, 125, 110, 100, 90, 85], dtype=np.float64)
    trend = np.arange(36, dtype=np.float64) * 0.5
    return np.tile(pattern, 3) + trend


@pytest.fixture
def sample_constant_series() -> np.ndarray:
    """Create constant time series for testing.

    Returns 30 observations of constant value (100).
    """
    return np.full(30, 100.0, dtype=np.float64)


@pytest.fixture
def sample_noisy_series() -> np.ndarray:
    """Deterministic noisy trend of 40 points."""
    rng = np.random.default_rng(42)
    return 50.0 + 2.0 * np.arange(40) + rng.normal(0, 3.0, size=40)


@pytest.fixture
def yearly_points() -> list[dict[str, float]]:
    """Six annual points growing by 10 per year."""
    return [{"time": 2018 + i, "value": 100.0 + 10.0 * i} for i in range(6)]


@pytest.fixture
def monthly_points() -> list[dict[str, float]]:
    """Twenty-four noisy monthly points from 2022-01 to 2023-12."""
    rng = np.random.default_rng(1)
    points = []
    for i in range(24):
        year, month = 2022 + i // 12, i % 12 + 1
        value = 200.0 + 3.0 * i + float(rng.normal(0, 2.0))
        points.append({"time": year * 100 + month, "value": value})
    return points


@pytest.fixture
def sample_exponential_config() -> ExponentialModelConfig:
    """Double exponential smoothing with fixed factors."""
    return ExponentialModelConfig(smoothing_type="double", alpha=0.5, beta=0.2)


@pytest.fixture
def sample_mavg_config() -> MovingAverageModelConfig:
    """Create sample moving average configuration."""
    return MovingAverageModelConfig(average_type="simple", window_size=3)


@pytest.fixture
def sample_arima_config() -> ArimaModelConfig:
    """ARIMA(1,1,0) configuration."""
    return ArimaModelConfig(p=1, d=1, q=0)
