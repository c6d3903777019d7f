"""Example: Linear and polynomial trend forecasters.

Both models regress on the position 0..n-1 of each observation, so they
work on any evenly spaced series regardless of the time keys.

Usage:
    python examples/models/regression_models.py
"""

import numpy as np

from forecast_engine.features.forecasting.models import (
    LinearRegressionForecaster,
    PolynomialRegressionForecaster,
)


def main():
    # 1. Linear data: the classic 2018-2023 example
    y = np.array([100.0, 110.0, 120.0, 130.0, 140.0, 150.0])
    print(f"Training data: {y}")

    model = LinearRegressionForecaster().fit(y)
    assert model.line is not None
    print(f"\nFitted line: y = {model.line.intercept:.2f} + {model.line.slope:.2f} * i")
    print(f"3-step forecast: {model.predict(horizon=3)}")

    # 2. Curved data: automatic degree selection
    x = np.arange(15, dtype=np.float64)
    np.random.seed(7)
    curved = 0.05 * x**3 - 0.8 * x**2 + 4 * x + 20 + np.random.normal(0, 0.5, 15)
    print(f"\nCurved series (last 5): {curved[-5:].round(2)}")

    for degree in (2, 3, "auto"):
        poly = PolynomialRegressionForecaster(degree=degree).fit(curved)
        assert poly.fit_result is not None
        print(
            f"  degree={degree!s:>4}  selected={poly.selected_degree}  "
            f"train R2={poly.fit_result.metrics['train_r2']:.4f}  "
            f"next={poly.predict(horizon=1)[0]:.2f}"
        )


if __name__ == "__main__":
    main()
