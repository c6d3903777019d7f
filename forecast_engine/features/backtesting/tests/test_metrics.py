"""Tests for backtesting metrics calculator."""

import numpy as np
import pytest

from forecast_engine.features.backtesting.metrics import MetricsCalculator, evaluate


class TestMAE:
    """Tests for Mean Absolute Error calculation."""

    def test_mae_perfect_predictions(self) -> None:
        """Test MAE is 0 for perfect predictions."""
        calc = MetricsCalculator()
        actuals = np.array([10.0, 20.0, 30.0])
        predictions = np.array([10.0, 20.0, 30.0])

        result = calc.mae(actuals, predictions)
        assert result.value == 0.0

    def test_mae_known_values(self) -> None:
        """Test MAE with known values."""
        calc = MetricsCalculator()
        actuals = np.array([10.0, 20.0, 30.0])
        predictions = np.array([12.0, 18.0, 33.0])

        # |10-12| + |20-18| + |30-33| = 2 + 2 + 3 = 7
        # MAE = 7/3 = 2.333...
        result = calc.mae(actuals, predictions)
        assert result.value == pytest.approx(7 / 3)

    def test_mae_n_samples(self) -> None:
        """Test MAE returns correct n_samples."""
        calc = MetricsCalculator()
        result = calc.mae([1.0, 2.0, 3.0, 4.0, 5.0], [1.0, 2.0, 3.0, 4.0, 5.0])
        assert result.n_samples == 5

    def test_mae_empty_arrays(self) -> None:
        """Test MAE on empty input is 0 with a warning."""
        result = MetricsCalculator.mae([], [])

        assert result.value == 0.0
        assert result.n_samples == 0
        assert "Empty array" in result.warnings

    def test_mae_length_mismatch_raises(self) -> None:
        """Test MAE rejects arrays of different length."""
        with pytest.raises(ValueError, match="Length mismatch"):
            MetricsCalculator.mae([1.0, 2.0], [1.0])


class TestRMSE:
    """Tests for Root Mean Squared Error calculation."""

    def test_rmse_known_values(self) -> None:
        """Test RMSE with known values."""
        # errors 3 and 4 -> sqrt((9 + 16) / 2)
        result = MetricsCalculator.rmse([0.0, 0.0], [3.0, 4.0])
        assert result.value == pytest.approx(np.sqrt(12.5))

    def test_rmse_at_least_mae(self) -> None:
        """RMSE is never below MAE."""
        actuals = [1.0, 5.0, 2.0, 8.0]
        predictions = [2.0, 3.0, 2.0, 4.0]

        rmse = MetricsCalculator.rmse(actuals, predictions).value
        mae = MetricsCalculator.mae(actuals, predictions).value
        assert rmse >= mae


class TestMAPE:
    """Tests for Mean Absolute Percentage Error calculation."""

    def test_mape_known_values(self) -> None:
        """Test MAPE with known values."""
        # |100-110|/100 = 0.1, |200-180|/200 = 0.1 -> 10%
        result = MetricsCalculator.mape([100.0, 200.0], [110.0, 180.0])
        assert result.value == pytest.approx(10.0)

    def test_mape_ignores_zero_actuals(self) -> None:
        """Zero actuals are excluded from the average."""
        result = MetricsCalculator.mape([0.0, 100.0], [50.0, 150.0])

        assert result.value == pytest.approx(50.0)
        assert result.n_samples == 1
        assert any("zero actuals" in warning for warning in result.warnings)

    def test_mape_all_zero_actuals(self) -> None:
        """All-zero actuals give 0, not infinity."""
        result = MetricsCalculator.mape([0.0, 0.0], [1.0, 2.0])

        assert result.value == 0.0
        assert result.n_samples == 0


class TestR2:
    """Tests for coefficient of determination."""

    def test_r2_perfect_fit_is_one(self) -> None:
        """Perfect predictions score exactly 1."""
        result = MetricsCalculator.r2([1.0, 2.0, 4.0], [1.0, 2.0, 4.0])
        assert result.value == 1.0

    def test_r2_mean_prediction_is_zero(self) -> None:
        """Predicting the mean scores 0."""
        result = MetricsCalculator.r2([1.0, 2.0, 3.0], [2.0, 2.0, 2.0])
        assert result.value == pytest.approx(0.0)

    def test_r2_can_be_negative(self) -> None:
        """Predictions worse than the mean score below 0."""
        result = MetricsCalculator.r2([1.0, 2.0, 3.0], [3.0, 2.0, 1.0])
        assert result.value == pytest.approx(-3.0)

    def test_r2_constant_actuals_is_zero(self) -> None:
        """SS_tot of 0 gives 0 rather than NaN or infinity."""
        result = MetricsCalculator.r2([5.0, 5.0, 5.0], [4.0, 5.0, 6.0])

        assert result.value == 0.0
        assert result.warnings


class TestCalculateAll:
    """Tests for calculate_all and evaluate."""

    def test_calculate_all_keys(self) -> None:
        """All four metrics are reported."""
        metrics = MetricsCalculator().calculate_all([1.0, 2.0], [1.0, 2.0])
        assert set(metrics) == {"mae", "rmse", "mape", "r2"}

    def test_evaluate_matches_calculator(self) -> None:
        """evaluate is a shortcut for calculate_all."""
        actuals, predictions = [10.0, 20.0, 30.0], [12.0, 18.0, 33.0]
        assert evaluate(actuals, predictions) == MetricsCalculator().calculate_all(
            actuals, predictions
        )
