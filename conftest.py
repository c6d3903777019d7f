"""Shared pytest fixtures for forecast engine tests."""

import pytest

from forecast_engine.core.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear the cached settings so environment changes made by a test stay local."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
