"""Tests for the exponential smoothing family."""

import numpy as np
import pytest

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.forecasting.smoothing import (
    ExponentialSmoothingForecaster,
    detect_smoothing_type,
    double_smoothing,
    has_seasonality,
    has_trend,
    initial_seasonal_indices,
    optimize_parameters,
    single_smoothing,
)


class TestDiagnostics:
    """Tests for trend and seasonality detection."""

    def test_linear_series_has_trend(self):
        """A straight line has a material slope."""
        assert has_trend(np.arange(10, dtype=np.float64)) is True

    def test_constant_series_has_no_trend(self, sample_constant_series):
        """A constant series has zero slope."""
        assert has_trend(sample_constant_series) is False

    def test_seasonal_series_detected(self, sample_seasonal_series):
        """A repeating yearly pattern is seasonal at period 12."""
        assert has_seasonality(sample_seasonal_series, 12) is True

    def test_constant_series_not_seasonal(self, sample_constant_series):
        """Equal phase means have zero coefficient of variation."""
        assert has_seasonality(sample_constant_series, 12) is False

    def test_fewer_than_two_cycles_not_seasonal(self):
        """Seasonality needs two complete cycles."""
        assert has_seasonality(np.arange(20, dtype=np.float64), 12) is False

    def test_zero_mean_with_varying_phases_is_seasonal(self):
        """Phase means of +1/-1 average to zero but still differ."""
        assert has_seasonality(np.array([1.0, -1.0, 1.0, -1.0]), 2) is True

    def test_detect_type_routes_seasonal_to_triple(self, sample_seasonal_series):
        """Seasonal data with two cycles selects Holt-Winters."""
        assert detect_smoothing_type(sample_seasonal_series, 12) == "triple"

    def test_detect_type_routes_short_trend_to_double(self):
        """Without enough data for seasonality, a trend selects Holt."""
        assert detect_smoothing_type(np.arange(10, dtype=np.float64), 12) == "double"

    def test_detect_type_routes_flat_to_single(self):
        """No trend and no seasonality selects simple smoothing."""
        assert detect_smoothing_type(np.full(10, 3.0), 12) == "single"

    def test_seasonal_indices_average_to_one(self, sample_seasonal_series):
        """Initial seasonal indices are normalized to mean 1."""
        indices = initial_seasonal_indices(sample_seasonal_series, 12)

        assert len(indices) == 12
        assert np.mean(indices) == pytest.approx(1.0)


class TestRecurrences:
    """Tests for the smoothing recurrences."""

    def test_single_smoothing_final_level(self):
        """Level follows alpha * value + (1 - alpha) * level."""
        _, level = single_smoothing(np.array([10.0, 20.0]), alpha=0.5)

        # level: 10 -> 10 -> 15
        assert level == pytest.approx(15.0)

    def test_double_smoothing_tracks_exact_line(self):
        """Holt's method is exact on a straight line."""
        fitted, level, trend = double_smoothing(np.array([2.0, 4.0, 6.0, 8.0]), 0.4, 0.3)

        assert level == pytest.approx(8.0)
        assert trend == pytest.approx(2.0)
        np.testing.assert_allclose(fitted[1:], [4.0, 6.0, 8.0])

    def test_grid_search_on_constant_series_keeps_first_candidate(self, defaults):
        """Every candidate scores 0; the first in ascending order wins."""
        alpha, beta = optimize_parameters(np.full(10, 4.0), "single", defaults)

        assert alpha == pytest.approx(0.1)
        assert beta == pytest.approx(defaults.beta)

    def test_grid_search_returns_grid_values(self, sample_noisy_series, defaults):
        """Optimized parameters come from the configured grids."""
        alpha, beta = optimize_parameters(sample_noisy_series, "double", defaults)

        assert alpha in defaults.alpha_grid
        assert beta in defaults.beta_grid


class TestExponentialSmoothingForecaster:
    """Tests for ExponentialSmoothingForecaster."""

    def test_single_forecast_is_flat(self):
        """Single smoothing forecasts the final level."""
        model = ExponentialSmoothingForecaster(smoothing_type="single", alpha=0.5)
        model.fit(np.array([10.0, 20.0, 30.0]))

        # level: 10 -> 10 -> 15 -> 22.5
        np.testing.assert_allclose(model.predict(horizon=3), [22.5, 22.5, 22.5])

    def test_double_continues_exact_line(self):
        """Holt forecasts level + h * trend."""
        model = ExponentialSmoothingForecaster(smoothing_type="double", alpha=0.3, beta=0.2)
        model.fit(np.array([5.0, 10.0, 15.0, 20.0]))

        np.testing.assert_allclose(model.predict(horizon=2), [25.0, 30.0])

    def test_auto_on_short_trend_selects_double(self):
        """Auto mode picks Holt for a short trending series."""
        model = ExponentialSmoothingForecaster().fit(np.arange(1, 11, dtype=np.float64))

        assert model.resolved_type == "double"
        np.testing.assert_allclose(model.predict(horizon=2), [11.0, 12.0])

    def test_triple_repeats_seasonal_shape(self, sample_seasonal_series):
        """Holt-Winters forecasts peak at the seasonal peak phase."""
        model = ExponentialSmoothingForecaster(smoothing_type="triple", season_length=12)
        forecast = model.fit(sample_seasonal_series).predict(horizon=12)

        assert np.all(np.isfinite(forecast))
        assert int(np.argmax(forecast)) == 6

    def test_triple_uses_default_factors(self, sample_seasonal_series):
        """Unset Holt-Winters factors fall back to 0.3 / 0.1 / 0.3."""
        model = ExponentialSmoothingForecaster(smoothing_type="triple", season_length=12)
        model.fit(sample_seasonal_series)

        assert model.fit_result is not None
        params = model.fit_result.params
        assert (params["alpha"], params["beta"], params["gamma"]) == (0.3, 0.1, 0.3)

    def test_triple_needs_two_seasons(self):
        """Holt-Winters with fewer than 2s points raises."""
        model = ExponentialSmoothingForecaster(smoothing_type="triple", season_length=12)

        with pytest.raises(InsufficientDataError, match="24"):
            model.fit(np.arange(20, dtype=np.float64))

    def test_degenerate_seasonal_series_falls_back_to_last_value(self):
        """All-zero data makes the seasonal indices NaN; output stays finite."""
        model = ExponentialSmoothingForecaster(smoothing_type="triple", season_length=2)
        forecast = model.fit(np.zeros(6)).predict(horizon=3)

        np.testing.assert_array_equal(forecast, [0.0, 0.0, 0.0])

    def test_two_points_raise(self):
        """Exponential smoothing needs at least 3 points."""
        with pytest.raises(InsufficientDataError, match="at least 3"):
            ExponentialSmoothingForecaster().fit(np.array([1.0, 2.0]))

    @pytest.mark.parametrize("name", ["alpha", "beta", "gamma"])
    def test_factor_outside_unit_interval_ignored(self, name):
        """Smoothing factors outside (0, 1) are treated as unset."""
        model = ExponentialSmoothingForecaster(**{name: 1.5})
        assert getattr(model, name) is None

    def test_out_of_range_alpha_falls_back_to_search(self):
        """An invalid alpha gives the same fit as leaving it unset."""
        values = np.array([10.0, 12.0, 11.0, 14.0, 13.0, 15.0, 17.0, 16.0, 18.0, 20.0])
        invalid = ExponentialSmoothingForecaster(smoothing_type="double", alpha=0.0).fit(values)
        unset = ExponentialSmoothingForecaster(smoothing_type="double").fit(values)

        np.testing.assert_allclose(invalid.predict(horizon=3), unset.predict(horizon=3))
        assert invalid.fit_result.params["alpha"] == unset.fit_result.params["alpha"]

    def test_get_params(self):
        """Test get_params returns expected values."""
        model = ExponentialSmoothingForecaster(smoothing_type="single", alpha=0.2)

        assert model.get_params() == {
            "smoothing_type": "single",
            "alpha": 0.2,
            "beta": None,
            "gamma": None,
            "season_length": None,
        }
