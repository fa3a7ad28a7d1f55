"""
MACD histogram zero-line cross.
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.indicators import macd
from tradelab.strategies.base import BaseStrategy, check_periods, crosses_above, crosses_below


class MacdCrossStrategy(BaseStrategy):
    """BUY when the histogram goes from <= 0 to > 0; SELL on the reverse."""

    name = StrategyName.MACD_CROSS.value
    strength = 0.75

    def __init__(self, fast: int = 12, slow: int = 26, signal_period: int = 9):
        check_periods("MACD", fast=fast, slow=slow, signal_period=signal_period)
        if fast >= slow:
            raise InvalidConfiguration(f"MACD fast period {fast} must be below slow period {slow}")
        self.fast = fast
        self.slow = slow
        self.signal_period = signal_period

    @property
    def min_bars(self) -> int:
        return self.slow + self.signal_period

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        m = macd(df["close"], self.fast, self.slow, self.signal_period)
        df["macd"] = m["macd"]
        df["macd_signal"] = m["signal"]
        df["macd_hist"] = m["histogram"]
        return df

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        return crosses_above(df["macd_hist"], 0.0), crosses_below(df["macd_hist"], 0.0)
