"""
RSI mean-reversion: buy out of oversold, sell out of overbought.
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.indicators import rsi
from tradelab.strategies.base import BaseStrategy, check_periods, crosses_above, crosses_below


class RsiReversalStrategy(BaseStrategy):
    """
    BUY: RSI crosses up through `lower` (default 30).
    SELL: RSI crosses down through `upper` (default 70).
    """

    name = StrategyName.RSI_REVERSAL.value
    strength = 0.8

    def __init__(self, period: int = 14, lower: float = 30.0, upper: float = 70.0):
        check_periods("RSI", period=period)
        if not 0 < lower < upper < 100:
            raise InvalidConfiguration(f"RSI thresholds must satisfy 0 < lower < upper < 100, got {lower}/{upper}")
        self.period = period
        self.lower = lower
        self.upper = upper

    @property
    def min_bars(self) -> int:
        return self.period + 2

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["rsi"] = rsi(df["close"], self.period)
        return df

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        return crosses_above(df["rsi"], self.lower), crosses_below(df["rsi"], self.upper)
