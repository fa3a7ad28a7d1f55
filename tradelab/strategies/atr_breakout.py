"""
Volatility breakout: close escapes an SMA +/- mult*ATR channel.
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.indicators import atr, sma
from tradelab.strategies.base import BaseStrategy, check_periods, crosses_above, crosses_below


class AtrBreakoutStrategy(BaseStrategy):
    """
    BUY: close crosses above SMA + mult*ATR.
    SELL: close crosses below SMA - mult*ATR.
    Bars without high/low use close, so TR degrades to |close - prevClose|.
    """

    name = StrategyName.ATR_BREAKOUT.value
    strength = 0.6

    def __init__(self, sma_period: int = 20, atr_period: int = 14, mult: float = 1.5):
        check_periods("ATR", sma_period=sma_period, atr_period=atr_period)
        if mult <= 0:
            raise InvalidConfiguration(f"ATR channel multiplier must be > 0, got {mult}")
        self.sma_period = sma_period
        self.atr_period = atr_period
        self.mult = mult

    @property
    def min_bars(self) -> int:
        return max(self.sma_period, self.atr_period + 1) + 1

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        high = df["high"].fillna(df["close"]) if "high" in df else df["close"]
        low = df["low"].fillna(df["close"]) if "low" in df else df["close"]
        df["atr"] = atr(high, low, df["close"], self.atr_period)
        mid = sma(df["close"], self.sma_period)
        df["atr_upper"] = mid + self.mult * df["atr"]
        df["atr_lower"] = mid - self.mult * df["atr"]
        return df

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        return crosses_above(df["close"], df["atr_upper"]), crosses_below(df["close"], df["atr_lower"])
