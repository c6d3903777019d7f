"""Tests for the backtesting service."""

import numpy as np
import pytest

from forecast_engine.core.config import Settings
from forecast_engine.core.exceptions import (
    InsufficientDataError,
    InvalidModelParamsError,
    ModelError,
    UnsupportedModelError,
)
from forecast_engine.features.backtesting.schemas import BacktestRequest, SplitConfig
from forecast_engine.features.backtesting.service import BacktestingService, backtest


class TestBacktest:
    """Tests for the backtest function."""

    def test_perfect_forecast(self, sample_values):
        """A forecast that reproduces the test suffix scores perfectly."""

        def continue_line(train, horizon):
            return train[-1] + np.arange(1, horizon + 1)

        result = backtest(sample_values, continue_line)

        assert result.actual == [9.0, 10.0]
        assert result.predicted == [9.0, 10.0]
        assert result.mae == 0.0
        assert result.rmse == 0.0
        assert result.mape == 0.0
        assert result.r2 == 1.0
        assert (result.train_size, result.test_size) == (8, 2)

    def test_forecast_receives_only_training_data(self, sample_values):
        """The forecast function never sees the test suffix."""
        seen = {}

        def record(train, horizon):
            seen["train"] = train.copy()
            seen["horizon"] = horizon
            return np.zeros(horizon)

        backtest(sample_values, record, test_ratio=0.3)

        np.testing.assert_array_equal(seen["train"], np.arange(1, 8))
        assert seen["horizon"] == 3

    def test_naive_forecast_metrics(self, sample_values):
        """A flat forecast at the last training value has known errors."""
        result = backtest(sample_values, lambda train, h: np.full(h, train[-1]))

        # actual [9, 10], predicted [8, 8]
        assert result.mae == pytest.approx(1.5)
        assert result.rmse == pytest.approx(np.sqrt(2.5))

    def test_wrong_forecast_length_raises(self, sample_values):
        """forecast_fn must return one value per test point."""
        with pytest.raises(ValueError, match="expected 2"):
            backtest(sample_values, lambda train, h: np.zeros(h + 1))

    def test_explicit_split_config(self, sample_values):
        """A SplitConfig overrides test_ratio."""
        result = backtest(
            sample_values,
            lambda train, h: np.zeros(h),
            test_ratio=0.2,
            split_config=SplitConfig(test_ratio=0.5),
        )
        assert result.test_size == 5

    def test_too_short_series_raises(self):
        """Backtests need at least 5 points."""
        with pytest.raises(InsufficientDataError):
            backtest([1.0, 2.0, 3.0], lambda train, h: np.zeros(h))


class TestBacktestingService:
    """Tests for BacktestingService.run_backtest."""

    @pytest.fixture
    def service(self) -> BacktestingService:
        """Service with default settings."""
        return BacktestingService(settings=Settings())

    def test_linear_on_exact_line(self, service, yearly_points):
        """Linear regression backtests perfectly on an exact line."""
        result = service.run_backtest(BacktestRequest(historical_data=yearly_points))

        assert result.model == "linear"
        assert result.mae == pytest.approx(0.0, abs=1e-9)
        assert result.r2 == pytest.approx(1.0)
        assert (result.train_size, result.test_size) == (9, 3)

    def test_unsorted_points_are_sorted(self, service, yearly_points):
        """Caller order does not matter."""
        ordered = service.run_backtest(BacktestRequest(historical_data=yearly_points))
        shuffled = service.run_backtest(
            BacktestRequest(historical_data=list(reversed(yearly_points)))
        )
        assert ordered == shuffled

    def test_camel_case_request(self, service, yearly_points):
        """The wire payload uses camelCase keys."""
        request = BacktestRequest.model_validate(
            {
                "historicalData": yearly_points,
                "model": "movingAverage",
                "modelParams": {"windowSize": 2},
                "testRatio": 0.25,
            }
        )
        result = service.run_backtest(request)

        assert result.test_size == 3
        assert result.model_dump(by_alias=True)["trainSize"] == 9

    def test_model_failure_wrapped(self, service, yearly_points):
        """Model errors on the training prefix surface as ModelError."""
        request = BacktestRequest(historical_data=yearly_points, model="arima")

        with pytest.raises(ModelError) as exc_info:
            service.run_backtest(request)

        assert isinstance(exc_info.value.cause, InsufficientDataError)

    def test_short_window_falls_back_to_default(self, service, yearly_points):
        """A window below 2 backtests exactly like an unset window."""
        short = service.run_backtest(
            BacktestRequest(
                historical_data=yearly_points,
                model="movingAverage",
                model_params={"windowSize": 1},
            )
        )
        unset = service.run_backtest(
            BacktestRequest(historical_data=yearly_points, model="movingAverage")
        )

        assert short == unset

    def test_invalid_model_params(self, service, yearly_points):
        """Unvalidatable parameters raise InvalidModelParamsError."""
        request = BacktestRequest(
            historical_data=yearly_points,
            model="exponential",
            model_params={"type": "sideways"},
        )

        with pytest.raises(InvalidModelParamsError):
            service.run_backtest(request)

    def test_unknown_model(self, service, yearly_points):
        """Unknown selectors raise UnsupportedModelError."""
        with pytest.raises(UnsupportedModelError):
            service.run_backtest(BacktestRequest(historical_data=yearly_points, model="prophet"))

    def test_settings_minimum_enforced(self, yearly_points):
        """backtest_min_points from settings is applied."""
        service = BacktestingService(settings=Settings(backtest_min_points=20))

        with pytest.raises(InsufficientDataError, match="at least 20"):
            service.run_backtest(BacktestRequest(historical_data=yearly_points))
