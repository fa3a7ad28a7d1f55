"""
Bollinger band breakout (contrarian: buy below the lower band).
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.indicators import bollinger_bands
from tradelab.strategies.base import BaseStrategy, check_periods, crosses_above, crosses_below


class BollingerBreakoutStrategy(BaseStrategy):
    """
    BUY: close crosses below the lower band.
    SELL: close crosses above the upper band.
    """

    name = StrategyName.BOLLINGER_BREAKOUT.value
    strength = 0.65

    def __init__(self, period: int = 20, k: float = 2.0):
        check_periods("Bollinger", period=period)
        if k <= 0:
            raise InvalidConfiguration(f"Bollinger band width k must be > 0, got {k}")
        self.period = period
        self.k = k

    @property
    def min_bars(self) -> int:
        return self.period + 1

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        bands = bollinger_bands(df["close"], self.period, self.k)
        df["bb_middle"] = bands["middle"]
        df["bb_upper"] = bands["upper"]
        df["bb_lower"] = bands["lower"]
        return df

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        return crosses_below(df["close"], df["bb_lower"]), crosses_above(df["close"], df["bb_upper"])
