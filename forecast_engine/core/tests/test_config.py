"""Tests for engine configuration."""

import pytest
from pydantic import ValidationError

from forecast_engine.core.config import Settings, get_settings


def test_settings_has_defaults():
    """Settings should have sensible defaults."""
    settings = Settings()

    assert settings.app_name == "ForecastEngine"
    assert settings.app_env == "development"
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"
    assert settings.forecast_max_periods == 1000


def test_settings_forecast_defaults():
    """Smoothing and window defaults should match the documented values."""
    settings = Settings()

    assert settings.forecast_default_alpha == 0.3
    assert settings.forecast_default_beta == 0.1
    assert settings.forecast_default_gamma == 0.3
    assert settings.forecast_default_ema_alpha == 0.3
    assert settings.forecast_default_season_length == 12
    assert settings.forecast_window_divisor == 3
    assert settings.backtest_default_test_ratio == 0.2
    assert settings.backtest_min_points == 5


def test_settings_is_development_property():
    """is_development should return True for development env."""
    settings = Settings(app_env="development")
    assert settings.is_development is True
    assert settings.is_production is False


def test_settings_is_production_property():
    """is_production should return True for production env."""
    settings = Settings(app_env="production")
    assert settings.is_development is False
    assert settings.is_production is True


def test_settings_is_testing_property():
    """is_testing should return True for testing env."""
    settings = Settings(app_env="testing")
    assert settings.is_testing is True


def test_get_settings_returns_singleton():
    """get_settings should return cached singleton."""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2


def test_settings_from_environment(monkeypatch):
    """Settings should load from environment variables."""
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FORECAST_DEFAULT_ALPHA", "0.5")

    # Create new settings instance (not cached)
    settings = Settings()

    assert settings.app_name == "TestApp"
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.forecast_default_alpha == 0.5


@pytest.mark.parametrize("value", [0.0, 1.0, -0.2, 1.5])
def test_smoothing_default_outside_unit_interval_rejected(value):
    """Smoothing defaults must lie strictly inside (0, 1)."""
    with pytest.raises(ValidationError, match="strictly between 0 and 1"):
        Settings(forecast_default_alpha=value)


def test_season_length_below_two_rejected():
    """A season of one observation is meaningless."""
    with pytest.raises(ValidationError, match=">= 2"):
        Settings(forecast_default_season_length=1)
