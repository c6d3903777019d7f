"""Pydantic schemas for backtesting configuration and results.

Results use the same camelCase wire aliases as prediction results
(``trainSize``, ``testSize``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from forecast_engine.features.forecasting.schemas import CamelModel, HistoricalPoint

# =============================================================================
# Split Configuration
# =============================================================================


class SplitConfig(BaseModel):
    """Configuration for the chronological holdout split.

    Attributes:
        test_ratio: Fraction of the series held out as the test suffix.
        min_points: Minimum series length accepted.
        min_train_size: Minimum training prefix length after the split.
        min_test_size: Minimum test suffix length after the split.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    test_ratio: float = Field(
        default=0.2,
        gt=0.0,
        lt=1.0,
        description="Fraction of the series held out for testing",
    )
    min_points: int = Field(default=5, ge=2, description="Minimum series length")
    min_train_size: int = Field(default=2, ge=1, description="Minimum training points")
    min_test_size: int = Field(default=1, ge=1, description="Minimum test points")


# =============================================================================
# Request/Response Schemas
# =============================================================================


class BacktestRequest(CamelModel):
    """Input contract for a model backtest.

    Attributes:
        historical_data: Observations in any order.
        model: Model selector.
        model_params: Loose parameter record for the selected model.
        test_ratio: Held-out fraction; the configured default when omitted.
    """

    historical_data: list[HistoricalPoint]
    model: str = "linear"
    model_params: dict[str, Any] = Field(default_factory=dict)
    test_ratio: float | None = Field(default=None, gt=0.0, lt=1.0)


class BacktestResult(CamelModel):
    """Scores of a forecast against the held-out suffix.

    Attributes:
        mae: Mean absolute error.
        rmse: Root mean squared error.
        mape: Mean absolute percentage error over non-zero actuals.
        r2: Coefficient of determination.
        actual: Held-out values.
        predicted: Forecast values for the held-out positions.
        train_size: Length of the training prefix.
        test_size: Length of the test suffix.
        model: Model selector (None for an arbitrary forecast function).
    """

    mae: float
    rmse: float
    mape: float
    r2: float
    actual: list[float]
    predicted: list[float]
    train_size: int
    test_size: int
    model: str | None = None
