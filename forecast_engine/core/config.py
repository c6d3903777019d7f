"""Application configuration via Pydantic Settings v2."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "ForecastEngine"
    app_env: Literal["development", "testing", "staging", "production"] = "development"
    debug: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Forecasting
    forecast_max_periods: int = 1000
    forecast_default_alpha: float = 0.3
    forecast_default_beta: float = 0.1
    forecast_default_gamma: float = 0.3
    forecast_default_ema_alpha: float = 0.3
    forecast_default_season_length: int = 12
    forecast_window_divisor: int = 3

    # Backtesting
    backtest_default_test_ratio: float = 0.2
    backtest_min_points: int = 5

    @field_validator(
        "forecast_default_alpha",
        "forecast_default_beta",
        "forecast_default_gamma",
        "forecast_default_ema_alpha",
        "backtest_default_test_ratio",
    )
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        """Validate that a smoothing factor or ratio lies strictly inside (0, 1).

        Args:
            v: Configured value.

        Returns:
            Validated value.

        Raises:
            ValueError: If the value is outside (0, 1).
        """
        if not 0.0 < v < 1.0:
            raise ValueError(f"Value {v} must lie strictly between 0 and 1")
        return v

    @field_validator("forecast_default_season_length", "forecast_window_divisor")
    @classmethod
    def validate_at_least_two(cls, v: int) -> int:
        """Season lengths and window divisors below 2 are meaningless."""
        if v < 2:
            raise ValueError(f"Value {v} must be >= 2")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
