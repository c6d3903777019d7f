"""Example: End-to-end prediction through the orchestrator.

Builds a request from plain dicts, runs every model and prints the
camelCase payload a web layer would return.

Usage:
    python examples/predict_demo.py
"""

import json

import numpy as np

from forecast_engine.core.exceptions import ForecastEngineError
from forecast_engine.core.logging import configure_logging
from forecast_engine.features.forecasting.service import MIN_DATA_POINTS, generate_prediction


def main():
    configure_logging()

    # 1. Annual series
    yearly = [{"time": 2018 + i, "value": 100.0 + 10.0 * i} for i in range(6)]
    result = generate_prediction(yearly, periods=3, model="linear", confidence_level=0.95)
    print(json.dumps(result.model_dump(by_alias=True), indent=2))

    # 2. Monthly series through every model
    np.random.seed(5)
    noise = np.random.normal(0, 4, 24)
    monthly = [
        {"time": (2022 + i // 12) * 100 + i % 12 + 1, "value": 200.0 + 3.0 * i + float(noise[i])}
        for i in range(24)
    ]
    print("\nModel comparison on 24 monthly points:")
    for model in MIN_DATA_POINTS:
        try:
            result = generate_prediction(monthly, periods=3, model=model)
        except ForecastEngineError as exc:
            print(f"  {model:>13}: failed ({exc.code}) {exc.message}")
            continue
        values = ", ".join(f"{p.time}={p.value:.1f}" for p in result.predictions)
        growth = result.statistics.growth_rate
        growth_text = "n/a" if growth is None else f"{growth:.2f}%"
        print(f"  {model:>13}: {values}  growth={growth_text}")


if __name__ == "__main__":
    main()
