"""Example: Simplified ARIMA.

Demonstrates automatic order selection, explicit orders and the
differencing helpers.

Usage:
    python examples/models/arima_model.py
"""

import numpy as np

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.forecasting.arima import (
    ArimaForecaster,
    auto_arima_order,
    difference,
    inverse_difference,
)


def main():
    np.random.seed(0)
    y = 50 + 1.5 * np.arange(48) + np.random.normal(0, 3, 48)

    # 1. Heuristic order
    order = auto_arima_order(y)
    print(f"Auto order: ARIMA({order.p},{order.d},{order.q}), AR lags used: {order.ar_order}")

    model = ArimaForecaster().fit(y)
    print(f"AR coefficients: {model.coefficients}")
    print(f"6-step forecast: {model.predict(horizon=6).round(2)}")

    # 2. Explicit order
    model = ArimaForecaster(p=1, d=1, q=0).fit(y)
    print(f"\nARIMA(1,1,0) forecast: {model.predict(horizon=6).round(2)}")

    # 3. Differencing round trip
    diffed = difference(y, 1)
    restored = inverse_difference(diffed, y[:1], 1)
    print(f"\nRound trip exact: {np.allclose(restored, y[1:])}")

    # 4. Minimum data requirement
    try:
        ArimaForecaster().fit(y[:15])
    except InsufficientDataError as exc:
        print(f"\n15 points rejected: {exc.message}")


if __name__ == "__main__":
    main()
