"""Forecast engine error taxonomy.

Every error carries a machine-readable ``code`` and a ``details`` mapping so an
enclosing service can translate it into its own transport format.
"""

from typing import Any

# =============================================================================
# Exception Classes
# =============================================================================


class ForecastEngineError(Exception):
    """Base exception for forecast engine errors.

    All engine-specific exceptions inherit from this class.
    """

    default_code: str = "FORECAST_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize engine error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code (defaults to the class code).
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """Short summary of the problem type."""
        return self.code.replace("_", " ").title()


class InsufficientDataError(ForecastEngineError):
    """Series is shorter than a model's minimum requirement.

    Never replaced by a default forecast: a default would be indistinguishable
    from a real one.
    """

    default_code = "INSUFFICIENT_DATA"

    def __init__(
        self,
        message: str,
        required: int | None = None,
        actual: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if required is not None:
            merged["required"] = required
        if actual is not None:
            merged["actual"] = actual
        super().__init__(message, details=merged)
        self.required = required
        self.actual = actual


class SingularMatrixError(ForecastEngineError):
    """Least-squares or Yule-Walker system has no unique solution."""

    default_code = "SINGULAR_MATRIX"


class DegenerateRegressionError(ForecastEngineError):
    """Closed-form regression denominator is zero."""

    default_code = "DEGENERATE_REGRESSION"


class UnsupportedModelError(ForecastEngineError):
    """Model selector does not name a known model family."""

    default_code = "UNSUPPORTED_MODEL"

    def __init__(self, model: str, supported: list[str] | None = None) -> None:
        super().__init__(
            f"Unsupported model: {model!r}",
            details={"model": model, "supported": supported or []},
        )
        self.model = model


class InvalidModelParamsError(ForecastEngineError):
    """Model parameters cannot be turned into a valid configuration."""

    default_code = "INVALID_MODEL_PARAMS"

    def __init__(self, model: str, errors: list[str]) -> None:
        super().__init__(
            f"Invalid parameters for model {model}: " + "; ".join(errors),
            details={"model": model, "errors": errors},
        )
        self.model = model


class InvalidPeriodsError(ForecastEngineError):
    """Requested forecast horizon is not a positive integer within limits."""

    default_code = "INVALID_PERIODS"


class ModelError(ForecastEngineError):
    """A model failed while fitting or forecasting.

    Wraps the underlying cause; the original exception is also chained as
    ``__cause__``.
    """

    default_code = "MODEL_ERROR"

    def __init__(self, model: str, cause: Exception) -> None:
        cause_code = getattr(cause, "code", type(cause).__name__)
        super().__init__(
            f"Model {model} prediction failed: {cause}",
            details={"model": model, "cause": cause_code},
        )
        self.model = model
        self.cause = cause
