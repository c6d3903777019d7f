"""Chronological holdout splitter for backtesting.

CRITICAL: Respects temporal order - no future data in training.

The series is cut once at floor(n * (1 - test_ratio)): everything before the
cut trains the model, everything after is scored.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from forecast_engine.core.exceptions import InsufficientDataError
from forecast_engine.features.backtesting.metrics import FloatArray
from forecast_engine.features.backtesting.schemas import SplitConfig


@dataclass
class HoldoutSplit:
    """A single train/test split.

    Attributes:
        train: Training prefix.
        test: Held-out suffix.
        split_index: Position of the first test value.
    """

    train: FloatArray
    test: FloatArray
    split_index: int

    @property
    def train_size(self) -> int:
        """Number of training values."""
        return len(self.train)

    @property
    def test_size(self) -> int:
        """Number of test values."""
        return len(self.test)


class HoldoutSplitter:
    """Split a series into a training prefix and a test suffix.

    Example (n=10, test_ratio=0.2):
        [0..8] train, [8..10] test

    Attributes:
        config: Split configuration.
    """

    def __init__(self, config: SplitConfig | None = None) -> None:
        """Initialize the splitter.

        Args:
            config: Split configuration; defaults when omitted.
        """
        self.config = config or SplitConfig()

    def split(self, values: FloatArray | Sequence[float]) -> HoldoutSplit:
        """Cut the series chronologically.

        Args:
            values: Series in time order.

        Returns:
            HoldoutSplit with train and test arrays.

        Raises:
            InsufficientDataError: If the series or either side of the split
                is too short.
        """
        y = np.asarray(values, dtype=np.float64)
        n = len(y)
        if n < self.config.min_points:
            raise InsufficientDataError(
                f"Backtest requires at least {self.config.min_points} data points, got {n}",
                required=self.config.min_points,
                actual=n,
            )

        split_index = math.floor(n * (1 - self.config.test_ratio))
        train, test = y[:split_index], y[split_index:]

        if len(train) < self.config.min_train_size:
            raise InsufficientDataError(
                f"Backtest split leaves {len(train)} training points, "
                f"need at least {self.config.min_train_size}",
                required=self.config.min_train_size,
                actual=len(train),
                details={"test_ratio": self.config.test_ratio},
            )
        if len(test) < self.config.min_test_size:
            raise InsufficientDataError(
                f"Backtest split leaves {len(test)} test points, "
                f"need at least {self.config.min_test_size}",
                required=self.config.min_test_size,
                actual=len(test),
                details={"test_ratio": self.config.test_ratio},
            )

        return HoldoutSplit(train=train, test=test, split_index=split_index)
