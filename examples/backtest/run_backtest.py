"""Example: Backtesting every model on the same series.

Holds out the last 20% of the series, fits each model on the rest and
reports the accuracy metrics.

Usage:
    python examples/backtest/run_backtest.py
"""

import numpy as np

from forecast_engine.core.exceptions import ForecastEngineError
from forecast_engine.features.backtesting.schemas import BacktestRequest
from forecast_engine.features.backtesting.service import BacktestingService, backtest


def main():
    np.random.seed(3)
    values = 100 + 2.0 * np.arange(40) + 8 * np.sin(np.arange(40) / 2) + np.random.normal(0, 2, 40)
    points = [{"time": 1985 + i, "value": float(v)} for i, v in enumerate(values)]

    service = BacktestingService()

    print("=" * 70)
    print(f"{'model':>14} {'MAE':>9} {'RMSE':>9} {'MAPE %':>9} {'R2':>9}")
    print("=" * 70)
    for model in ("linear", "polynomial", "movingAverage", "exponential", "arima"):
        request = BacktestRequest(historical_data=points, model=model)
        try:
            result = service.run_backtest(request)
        except ForecastEngineError as exc:
            print(f"{model:>14} failed: {exc.message}")
            continue
        print(
            f"{model:>14} {result.mae:9.3f} {result.rmse:9.3f} {result.mape:9.3f} {result.r2:9.3f}"
        )

    # Any callable works with the plain backtest function
    naive = backtest(values, lambda train, horizon: np.full(horizon, train[-1]))
    print(f"\nNaive last-value baseline: MAE={naive.mae:.3f} "
          f"(train={naive.train_size}, test={naive.test_size})")


if __name__ == "__main__":
    main()
