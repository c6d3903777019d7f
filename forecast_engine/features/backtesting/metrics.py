"""Metrics calculator for forecast evaluation.

Supported Metrics:
- MAE: Mean Absolute Error
- RMSE: Root Mean Squared Error
- MAPE: Mean Absolute Percentage Error (non-zero actuals only)
- R2: Coefficient of determination

CRITICAL: All metrics handle edge cases (zeros, empty arrays, constant actuals).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


@dataclass
class MetricResult:
    """Result of a single metric calculation.

    Attributes:
        name: Name of the metric.
        value: Calculated value.
        n_samples: Number of samples used in calculation.
        warnings: List of warnings generated during calculation.
    """

    name: str
    value: float
    n_samples: int
    warnings: list[str] = field(default_factory=lambda: [])


def _prepare(
    name: str,
    actuals: FloatArray | Sequence[float],
    predictions: FloatArray | Sequence[float],
) -> tuple[FloatArray, FloatArray]:
    actual_arr = np.asarray(actuals, dtype=np.float64)
    predicted_arr = np.asarray(predictions, dtype=np.float64)
    if len(actual_arr) != len(predicted_arr):
        raise ValueError(
            f"Length mismatch in {name}: actuals={len(actual_arr)}, "
            f"predictions={len(predicted_arr)}"
        )
    return actual_arr, predicted_arr


class MetricsCalculator:
    """Calculate forecasting accuracy metrics.

    Provides methods for computing forecast accuracy metrics with proper
    edge case handling. Empty inputs score 0 with a warning.

    Supported Metrics:
    - MAE: Mean Absolute Error
    - RMSE: Root Mean Squared Error
    - MAPE: Mean Absolute Percentage Error (0-100+ scale)
    - R2: Coefficient of determination (1 is a perfect fit)
    """

    @staticmethod
    def mae(
        actuals: FloatArray | Sequence[float],
        predictions: FloatArray | Sequence[float],
    ) -> MetricResult:
        """Mean Absolute Error.

        Formula: mean(|actual - predicted|)

        Args:
            actuals: Ground truth values.
            predictions: Predicted values.

        Returns:
            MetricResult with MAE value.

        Raises:
            ValueError: If arrays have different lengths.
        """
        actual_arr, predicted_arr = _prepare("mae", actuals, predictions)
        if len(actual_arr) == 0:
            return MetricResult(name="mae", value=0.0, n_samples=0, warnings=["Empty array"])

        mae_value = float(np.mean(np.abs(actual_arr - predicted_arr)))
        return MetricResult(name="mae", value=mae_value, n_samples=len(actual_arr))

    @staticmethod
    def rmse(
        actuals: FloatArray | Sequence[float],
        predictions: FloatArray | Sequence[float],
    ) -> MetricResult:
        """Root Mean Squared Error.

        Formula: sqrt(mean((actual - predicted)^2))

        Penalizes large errors more heavily than MAE.

        Raises:
            ValueError: If arrays have different lengths.
        """
        actual_arr, predicted_arr = _prepare("rmse", actuals, predictions)
        if len(actual_arr) == 0:
            return MetricResult(name="rmse", value=0.0, n_samples=0, warnings=["Empty array"])

        rmse_value = float(np.sqrt(np.mean((actual_arr - predicted_arr) ** 2)))
        return MetricResult(name="rmse", value=rmse_value, n_samples=len(actual_arr))

    @staticmethod
    def mape(
        actuals: FloatArray | Sequence[float],
        predictions: FloatArray | Sequence[float],
    ) -> MetricResult:
        """Mean Absolute Percentage Error.

        Formula: 100 * mean(|(A - F) / A|) over entries where A != 0

        CRITICAL: Zero actuals are excluded from the average. Returns 0 when
        every actual is zero.

        Args:
            actuals: Ground truth values.
            predictions: Predicted values.

        Returns:
            MetricResult with MAPE value as a percentage. n_samples counts
            only the non-zero actuals that contributed.

        Raises:
            ValueError: If arrays have different lengths.
        """
        warnings: list[str] = []
        actual_arr, predicted_arr = _prepare("mape", actuals, predictions)
        if len(actual_arr) == 0:
            return MetricResult(name="mape", value=0.0, n_samples=0, warnings=["Empty array"])

        nonzero = actual_arr != 0
        n_zeros = int(np.sum(~nonzero))
        if n_zeros > 0:
            warnings.append(f"{n_zeros} samples with zero actuals excluded")

        if not np.any(nonzero):
            return MetricResult(name="mape", value=0.0, n_samples=0, warnings=warnings)

        ratios = np.abs((actual_arr[nonzero] - predicted_arr[nonzero]) / actual_arr[nonzero])
        mape_value = float(np.mean(ratios) * 100.0)
        return MetricResult(
            name="mape", value=mape_value, n_samples=int(np.sum(nonzero)), warnings=warnings
        )

    @staticmethod
    def r2(
        actuals: FloatArray | Sequence[float],
        predictions: FloatArray | Sequence[float],
    ) -> MetricResult:
        """Coefficient of determination.

        Formula: 1 - SS_res / SS_tot

        Interpretation:
        - 1: Perfect fit
        - 0: No better than predicting the mean
        - Negative: Worse than predicting the mean

        CRITICAL: Defined as 0 when SS_tot is 0 (constant actuals), never
        nan or infinity.

        Raises:
            ValueError: If arrays have different lengths.
        """
        warnings: list[str] = []
        actual_arr, predicted_arr = _prepare("r2", actuals, predictions)
        if len(actual_arr) == 0:
            return MetricResult(name="r2", value=0.0, n_samples=0, warnings=["Empty array"])

        mean_actual = float(np.mean(actual_arr))
        ss_tot = float(np.sum((actual_arr - mean_actual) ** 2))
        ss_res = float(np.sum((actual_arr - predicted_arr) ** 2))

        if ss_tot == 0:
            warnings.append("Actuals are constant; R2 undefined, reported as 0")
            return MetricResult(
                name="r2", value=0.0, n_samples=len(actual_arr), warnings=warnings
            )

        return MetricResult(
            name="r2", value=1.0 - ss_res / ss_tot, n_samples=len(actual_arr), warnings=warnings
        )

    def calculate_all(
        self,
        actuals: FloatArray | Sequence[float],
        predictions: FloatArray | Sequence[float],
    ) -> dict[str, float]:
        """Calculate all point metrics.

        Args:
            actuals: Ground truth values.
            predictions: Predicted values.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "mae": self.mae(actuals, predictions).value,
            "rmse": self.rmse(actuals, predictions).value,
            "mape": self.mape(actuals, predictions).value,
            "r2": self.r2(actuals, predictions).value,
        }


def evaluate(
    actuals: FloatArray | Sequence[float],
    predictions: FloatArray | Sequence[float],
) -> dict[str, float]:
    """Score predictions against actuals with every supported metric."""
    return MetricsCalculator().calculate_all(actuals, predictions)
