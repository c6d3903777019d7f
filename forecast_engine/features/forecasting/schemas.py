"""Pydantic schemas for forecasting configuration and the prediction contract.

Model configs are designed to be:
- Immutable (frozen=True) for reproducibility
- Versioned (schema_version) for comparison across releases
- Hashable (config_hash) for deduplication

Wire payloads use camelCase aliases (``historicalData``, ``isPrediction``,
``growthRate``); snake_case names are accepted on input as well.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Annotated, Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from forecast_engine.core.exceptions import InvalidModelParamsError, UnsupportedModelError
from forecast_engine.features.forecasting.defaults import usable_factor, usable_window

logger = structlog.get_logger()

ModelName = Literal["linear", "exponential", "movingAverage", "polynomial", "arima"]
TimeFormat = Literal["year", "yearmonth"]


class CamelModel(BaseModel):
    """Frozen base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )


# =============================================================================
# Input Series
# =============================================================================


class HistoricalPoint(CamelModel):
    """Single observation of the historical series.

    Attributes:
        time: Year (``2023``) or year-month (``202403``); format is inferred.
        value: Observed value. Signed values are allowed.
    """

    time: int = Field(..., ge=0, description="Year or YYYYMM time key")
    value: float = Field(..., allow_inf_nan=False, description="Observed value")


# =============================================================================
# Model Configuration Schemas
# =============================================================================


class ModelConfigBase(BaseModel):
    """Base configuration for all forecasting models.

    All model configs inherit from this base to ensure:
    - Immutability after creation (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Schema versioning for reproducibility
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )

    schema_version: str = Field(
        default="1.0",
        description="Semantic version of this config schema",
        pattern=r"^\d+\.\d+(\.\d+)?$",
    )

    def config_hash(self) -> str:
        """Generate deterministic hash of configuration.

        Returns:
            16-character hex string hash of config JSON.
        """
        config_json = self.model_dump_json()
        return hashlib.sha256(config_json.encode()).hexdigest()[:16]


class LinearModelConfig(ModelConfigBase):
    """Configuration for ordinary least squares over the index sequence.

    Formula: y_hat[n+h] = intercept + slope * (n + h)
    """

    model_type: Literal["linear"] = "linear"


class ExponentialModelConfig(ModelConfigBase):
    """Configuration for the exponential smoothing family.

    Unset alpha/beta are estimated by grid search for single and double
    smoothing; Holt-Winters falls back to the configured defaults.
    Factors outside (0, 1) are treated as unset.

    Attributes:
        smoothing_type: single, double (Holt), triple (Holt-Winters) or auto.
        alpha: Level smoothing factor.
        beta: Trend smoothing factor.
        gamma: Seasonal smoothing factor.
        season_length: Seasonal period in observations.
    """

    model_type: Literal["exponential"] = "exponential"
    smoothing_type: Literal["auto", "single", "double", "triple"] = Field(
        default="auto",
        alias="type",
        description="Smoothing variant",
    )
    alpha: float | None = Field(default=None, gt=0.0, lt=1.0)
    beta: float | None = Field(default=None, gt=0.0, lt=1.0)
    gamma: float | None = Field(default=None, gt=0.0, lt=1.0)
    season_length: int | None = Field(
        default=None,
        ge=2,
        le=366,
        description="Seasonal period in observations",
    )

    @field_validator("alpha", "beta", "gamma", mode="before")
    @classmethod
    def reset_out_of_range_factor(cls, v: Any, info: ValidationInfo) -> Any:  # noqa: ANN401
        """Drop a factor outside (0, 1) so the estimate or default applies."""
        return usable_factor(info.field_name or "factor", v)


class MovingAverageModelConfig(ModelConfigBase):
    """Configuration for the moving average family.

    Attributes:
        average_type: simple, weighted, exponential or auto (resolves to simple).
        window_size: Window size; defaults to max(2, n // 3). Values below 2
            are treated as unset.
        alpha: Smoothing factor for the exponential variant; values outside
            (0, 1) are treated as unset.
    """

    model_type: Literal["movingAverage"] = "movingAverage"
    average_type: Literal["auto", "simple", "weighted", "exponential"] = Field(
        default="auto",
        alias="type",
        description="Averaging strategy",
    )
    window_size: int | None = Field(default=None, ge=2, description="Window size")
    alpha: float | None = Field(default=None, gt=0.0, lt=1.0)

    @field_validator("window_size", mode="before")
    @classmethod
    def reset_short_window(cls, v: Any) -> Any:  # noqa: ANN401
        """Drop a window below 2 so the default window applies."""
        return usable_window(v)

    @field_validator("alpha", mode="before")
    @classmethod
    def reset_out_of_range_alpha(cls, v: Any) -> Any:  # noqa: ANN401
        """Drop an alpha outside (0, 1) so the EMA default applies."""
        return usable_factor("alpha", v)


class PolynomialModelConfig(ModelConfigBase):
    """Configuration for polynomial least squares.

    Attributes:
        degree: 2, 3 or "auto" (best in-sample R-squared).
    """

    model_type: Literal["polynomial"] = "polynomial"
    degree: Literal[2, 3, "auto"] = "auto"


class ArimaModelConfig(ModelConfigBase):
    """Configuration for the simplified ARIMA(p, d, q).

    When none of p/d/q is set the order is chosen heuristically; when any is
    set the others take their defaults (p=2, d=1, q=1).

    Attributes:
        p: Autoregressive order.
        d: Differencing order.
        q: Moving-average order (approximated by extra AR lags).
    """

    model_type: Literal["arima"] = "arima"
    p: int | None = Field(default=None, ge=0, le=10)
    d: int | None = Field(default=None, ge=0, le=2)
    q: int | None = Field(default=None, ge=0, le=5)

    @property
    def is_auto(self) -> bool:
        """True when the order should be selected automatically."""
        return self.p is None and self.d is None and self.q is None


# Union type for all model configs
ModelConfig = Annotated[
    LinearModelConfig
    | ExponentialModelConfig
    | MovingAverageModelConfig
    | PolynomialModelConfig
    | ArimaModelConfig,
    Field(discriminator="model_type"),
]

MODEL_CONFIGS: dict[str, type[ModelConfigBase]] = {
    "linear": LinearModelConfig,
    "exponential": ExponentialModelConfig,
    "movingAverage": MovingAverageModelConfig,
    "polynomial": PolynomialModelConfig,
    "arima": ArimaModelConfig,
}


def build_model_config(model: str, params: Mapping[str, Any] | None = None) -> ModelConfig:
    """Convert a model selector and loose parameter record into a typed config.

    Keys that do not belong to the selected model and keys set to None are
    dropped, so a caller can send one parameter record for every model.

    Args:
        model: Model selector.
        params: Caller parameters (camelCase or snake_case keys).

    Returns:
        Frozen model configuration.

    Raises:
        UnsupportedModelError: If the selector is unknown.
        InvalidModelParamsError: If a parameter cannot be validated.
    """
    config_cls = MODEL_CONFIGS.get(model)
    if config_cls is None:
        raise UnsupportedModelError(model, supported=list(MODEL_CONFIGS))

    accepted: set[str] = set()
    for name, field_info in config_cls.model_fields.items():
        accepted.add(name)
        if field_info.alias:
            accepted.add(field_info.alias)
    accepted.discard("model_type")
    accepted.discard("modelType")

    selected: dict[str, Any] = {}
    dropped: list[str] = []
    for key, value in (params or {}).items():
        if key in accepted and value is not None:
            selected[key] = value
        else:
            dropped.append(key)

    if dropped:
        logger.debug("forecasting.model_params_dropped", model=model, keys=sorted(dropped))

    try:
        config: ModelConfig = config_cls.model_validate(selected)  # type: ignore[assignment]
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidModelParamsError(model, errors) from exc
    return config


# =============================================================================
# Request/Response Schemas
# =============================================================================


class PredictRequest(CamelModel):
    """Input contract for a forecasting call.

    ``periods`` is deliberately unconstrained here; the service rejects
    non-positive values with InvalidPeriodsError before reading the series.

    Attributes:
        historical_data: Observations in any order.
        periods: Number of future periods to forecast.
        model: Model selector.
        model_params: Loose parameter record for the selected model.
        confidence_level: Attach prediction bounds at this level when set.
    """

    historical_data: list[HistoricalPoint]
    periods: int
    model: str = "linear"
    model_params: dict[str, Any] = Field(default_factory=dict)
    confidence_level: Literal[0.95, 0.99] | None = None


class ForecastPoint(CamelModel):
    """Single point of the combined historical + forecast series.

    Attributes:
        time: Time key in the detected format.
        value: Observed or forecast value.
        is_prediction: False for echoed history, True for forecasts.
        lower_bound: Lower bound of the prediction interval (optional).
        upper_bound: Upper bound of the prediction interval (optional).
    """

    time: int
    value: float
    is_prediction: bool
    lower_bound: float | None = None
    upper_bound: float | None = None


class PredictionStatistics(CamelModel):
    """Summary statistics over history and forecast.

    Attributes:
        avg_value: Mean of historical values.
        last_value: Most recent historical value.
        predicted_value: Final forecast value.
        growth_rate: Percent change from last_value to predicted_value,
            None when last_value is zero.
    """

    avg_value: float
    last_value: float
    predicted_value: float | None
    growth_rate: float | None


class PredictionResult(CamelModel):
    """Output contract of a forecasting call.

    Attributes:
        predictions: Forecast points flagged is_prediction=True.
        historical_data: Sorted input points flagged is_prediction=False.
        statistics: Summary statistics.
        time_interval: Detected step (years or months).
        time_format: Detected time format.
        model: Model selector that produced the forecast.
        config_hash: Hash of the resolved model configuration.
    """

    predictions: list[ForecastPoint]
    historical_data: list[ForecastPoint]
    statistics: PredictionStatistics
    time_interval: int
    time_format: TimeFormat
    model: str
    config_hash: str
