"""Test fixtures for backtesting module."""

import numpy as np
import pytest

from forecast_engine.features.backtesting.schemas import SplitConfig


@pytest.fixture
def sample_values() -> np.ndarray:
    """Ten sequential values 1..10."""
    return np.arange(1, 11, dtype=np.float64)


@pytest.fixture
def sample_split_config() -> SplitConfig:
    """Default 80/20 holdout split."""
    return SplitConfig(test_ratio=0.2)


@pytest.fixture
def yearly_points() -> list[dict[str, float]]:
    """Twelve annual points on an exact line."""
    return [{"time": 2010 + i, "value": 100.0 + 5.0 * i} for i in range(12)]
