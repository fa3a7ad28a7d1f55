"""
Fixed price levels: buy at or below one price, sell at or above another.
"""

from __future__ import annotations

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.strategies.base import BaseStrategy


class PriceTargetStrategy(BaseStrategy):
    """
    BUY: close moves from above buy_price to at or below it.
    SELL: close moves from below sell_price to at or above it.
    """

    name = StrategyName.PRICE_TARGET.value
    strength = 1.0

    def __init__(self, buy_price: float, sell_price: float):
        if buy_price <= 0 or sell_price <= 0 or buy_price >= sell_price:
            raise InvalidConfiguration(f"need 0 < buy_price < sell_price, got {buy_price}/{sell_price}")
        self.buy_price = buy_price
        self.sell_price = sell_price

    @property
    def min_bars(self) -> int:
        return 2

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.copy()

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        close = df["close"]
        prev = close.shift(1)
        buy = (prev > self.buy_price) & (close <= self.buy_price)
        sell = (prev < self.sell_price) & (close >= self.sell_price)
        return buy, sell
