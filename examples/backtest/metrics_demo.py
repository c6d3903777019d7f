"""Example: Metrics calculation and interpretation.

Demonstrates the forecasting metrics suite and its edge cases.

Usage:
    python examples/backtest/metrics_demo.py
"""

import numpy as np

from forecast_engine.features.backtesting.metrics import MetricsCalculator


def print_metric_result(result):
    """Pretty print a MetricResult."""
    print(f"  {result.name.upper()}: {result.value:.4f}")
    if result.warnings:
        for warning in result.warnings:
            print(f"    ! {warning}")


def show(title, actuals, predictions):
    calc = MetricsCalculator()
    print(f"\n--- {title} ---")
    print(f"Actuals:     {actuals}")
    print(f"Predictions: {predictions}")
    for metric in (calc.mae, calc.rmse, calc.mape, calc.r2):
        print_metric_result(metric(actuals, predictions))


def main():
    print("=" * 70)
    print("FORECASTING METRICS DEMONSTRATION")
    print("=" * 70)

    show(
        "Scenario 1: Perfect Predictions",
        np.array([100.0, 200.0, 300.0]),
        np.array([100.0, 200.0, 300.0]),
    )
    show(
        "Scenario 2: Consistent Over-Forecasting",
        np.array([100.0, 100.0, 100.0]),
        np.array([120.0, 120.0, 120.0]),
    )
    show(
        "Scenario 3: Zero Actuals (excluded from MAPE)",
        np.array([0.0, 50.0, 100.0]),
        np.array([10.0, 55.0, 90.0]),
    )


if __name__ == "__main__":
    main()
