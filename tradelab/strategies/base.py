"""Abstract strategy: indicators + transition-based signal generation."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List

import pandas as pd

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import Side, Signal


def check_periods(strategy: str, **periods) -> None:
    """Every lookback must be a positive int."""
    for name, value in periods.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidConfiguration(f"{strategy} {name} must be a positive integer, got {value!r}")


def crosses_above(a: pd.Series, b) -> pd.Series:
    """True where a goes from <= b on the previous bar to > b on this bar. NaN never crosses."""
    b = b if isinstance(b, pd.Series) else pd.Series(b, index=a.index)
    prev_a, prev_b = a.shift(1), b.shift(1)
    return ((prev_a <= prev_b) & (a > b)).fillna(False).astype(bool)


def crosses_below(a: pd.Series, b) -> pd.Series:
    """True where a goes from >= b on the previous bar to < b on this bar."""
    b = b if isinstance(b, pd.Series) else pd.Series(b, index=a.index)
    prev_a, prev_b = a.shift(1), b.shift(1)
    return ((prev_a >= prev_b) & (a < b)).fillna(False).astype(bool)


class BaseStrategy(ABC):
    """
    Strategy computes indicator columns and emits signals only at the bar
    where a qualifying transition happens, at most one per index.
    """

    name: str = ""
    strength: float = 1.0

    @property
    @abstractmethod
    def min_bars(self) -> int:
        """Bars needed before the first signal can possibly fire."""

    @abstractmethod
    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of the OHLCV DataFrame with indicator columns added. No lookahead."""

    @abstractmethod
    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        """Boolean (buy, sell) transition masks over an indicator frame."""

    def generate_signals(self, df: pd.DataFrame) -> List[Signal]:
        """Signals sorted by position in df (0-based). BUY wins if both masks fire."""
        frame = self.compute_indicators(df)
        buy, sell = self.entry_exit(frame)
        signals: List[Signal] = []
        for i, (is_buy, is_sell) in enumerate(zip(buy.to_numpy(), sell.to_numpy())):
            if is_buy:
                signals.append(Signal(index=i, side=Side.BUY, strength=self.strength, source=self.name))
            elif is_sell:
                signals.append(Signal(index=i, side=Side.SELL, strength=self.strength, source=self.name))
        return signals

    def signals_by_index(self, df: pd.DataFrame) -> Dict[int, Signal]:
        return {s.index: s for s in self.generate_signals(df)}
