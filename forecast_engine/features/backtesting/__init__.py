"""Backtesting module for time-series forecasting evaluation.

Provides chronological holdout splitting and metrics calculation. The
``backtest`` function and ``BacktestingService`` live in
``forecast_engine.features.backtesting.service``.
"""

from forecast_engine.features.backtesting.metrics import MetricResult, MetricsCalculator, evaluate
from forecast_engine.features.backtesting.schemas import (
    BacktestRequest,
    BacktestResult,
    SplitConfig,
)
from forecast_engine.features.backtesting.splitter import HoldoutSplit, HoldoutSplitter

__all__ = [
    "BacktestRequest",
    "BacktestResult",
    "HoldoutSplit",
    "HoldoutSplitter",
    "MetricResult",
    "MetricsCalculator",
    "SplitConfig",
    "evaluate",
]
