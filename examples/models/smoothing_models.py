"""Example: Moving average and exponential smoothing families.

Shows the three moving average strategies and the automatic choice between
single, double and Holt-Winters smoothing.

Usage:
    python examples/models/smoothing_models.py
"""

import numpy as np

from forecast_engine.features.forecasting.models import MovingAverageForecaster
from forecast_engine.features.forecasting.smoothing import (
    ExponentialSmoothingForecaster,
    has_seasonality,
    has_trend,
)


def main():
    # 1. Moving averages on a noisy upward series
    np.random.seed(42)
    y = np.arange(1, 31, dtype=np.float64) + np.random.normal(0, 2, 30)
    print(f"Training data: {len(y)} observations, last value {y[-1]:.2f}")

    print("\nMoving average strategies (5-step forecast):")
    for average_type in ("simple", "weighted", "exponential"):
        model = MovingAverageForecaster(average_type=average_type).fit(y)
        print(f"  {average_type:>11}: {model.predict(horizon=5).round(2)}")

    # 2. Monthly data with a yearly pattern
    pattern = np.array([80, 85, 95, 100, 110, 125, 130, 125, 110, 100, 90, 85], dtype=np.float64)
    monthly = np.tile(pattern, 3) + np.arange(36) * 0.5
    print(f"\nMonthly series: trend={has_trend(monthly)}, seasonal={has_seasonality(monthly, 12)}")

    model = ExponentialSmoothingForecaster().fit(monthly)
    assert model.fit_result is not None
    print(f"Auto-selected variant: {model.resolved_type}")
    print(f"Resolved parameters: alpha={model.fit_result.params['alpha']}, "
          f"beta={model.fit_result.params['beta']}, gamma={model.fit_result.params['gamma']}")
    print(f"Next 12 months: {model.predict(horizon=12).round(1)}")

    # 3. Grid search on a trending series
    holt = ExponentialSmoothingForecaster(smoothing_type="double").fit(y)
    assert holt.fit_result is not None
    print(f"\nHolt grid search picked alpha={holt.fit_result.params['alpha']}, "
          f"beta={holt.fit_result.params['beta']}")


if __name__ == "__main__":
    main()
