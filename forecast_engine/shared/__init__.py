"""Shared numerical utilities."""

from forecast_engine.shared.linalg import PIVOT_TOLERANCE, solve

__all__ = ["PIVOT_TOLERANCE", "solve"]
