"""
Simple moving average crossover.
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.indicators import sma
from tradelab.strategies.base import BaseStrategy, check_periods, crosses_above, crosses_below


class SmaCrossStrategy(BaseStrategy):
    """
    BUY: fast SMA crosses from <= to > slow SMA.
    SELL: fast SMA crosses from >= to < slow SMA.
    """

    name = StrategyName.SMA_CROSS.value
    strength = 0.7

    def __init__(self, fast: int = 20, slow: int = 50):
        check_periods("SMA", fast=fast, slow=slow)
        if fast >= slow:
            raise InvalidConfiguration(f"SMA fast period {fast} must be below slow period {slow}")
        self.fast = fast
        self.slow = slow

    @property
    def min_bars(self) -> int:
        return self.slow + 1

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["sma_fast"] = sma(df["close"], self.fast)
        df["sma_slow"] = sma(df["close"], self.slow)
        return df

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        return crosses_above(df["sma_fast"], df["sma_slow"]), crosses_below(df["sma_fast"], df["sma_slow"])
