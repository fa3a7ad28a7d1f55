"""
Ensemble: weighted vote over primitive strategies' signals.
"""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from tradelab.core.types import Side, Signal, StrategyName
from tradelab.strategies.base import BaseStrategy

DEFAULT_THRESHOLD = 2.0


def combine_signals(
    signal_lists: Iterable[Sequence[Signal]],
    threshold: float = DEFAULT_THRESHOLD,
    total_weight: Optional[float] = None,
) -> List[Signal]:
    """
    Sum BUY and SELL strengths per bar index. Emit BUY where buy >= threshold
    and buy > sell, SELL symmetrically; ties and sub-threshold scores emit
    nothing. Result is sorted by index with at most one signal per index.
    Emitted strength is score / total_weight capped at 1 (score / threshold
    when total_weight is not given).
    """
    buy_score: Dict[int, float] = defaultdict(float)
    sell_score: Dict[int, float] = defaultdict(float)
    for signals in signal_lists:
        for s in signals:
            if s.side == Side.BUY:
                buy_score[s.index] += s.strength
            else:
                sell_score[s.index] += s.strength
    scale = total_weight if total_weight and total_weight > 0 else threshold
    out: List[Signal] = []
    for index in sorted(set(buy_score) | set(sell_score)):
        b, s = buy_score.get(index, 0.0), sell_score.get(index, 0.0)
        if b >= threshold and b > s:
            out.append(Signal(index=index, side=Side.BUY, strength=min(1.0, b / scale), source=StrategyName.ENSEMBLE.value))
        elif s >= threshold and s > b:
            out.append(Signal(index=index, side=Side.SELL, strength=min(1.0, s / scale), source=StrategyName.ENSEMBLE.value))
    return out


class EnsembleStrategy(BaseStrategy):
    """Consensus of member strategies; not a primitive indicator strategy."""

    name = StrategyName.ENSEMBLE.value

    def __init__(self, members: Optional[Sequence[BaseStrategy]] = None, threshold: float = DEFAULT_THRESHOLD):
        if members is None:
            from tradelab.strategies.registry import default_members
            members = default_members()
        self.members = list(members)
        self.threshold = threshold

    @property
    def min_bars(self) -> int:
        return min((m.min_bars for m in self.members), default=1)

    @property
    def total_weight(self) -> float:
        return sum(m.strength for m in self.members)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        frame = df.copy()
        for member in self.members:
            computed = member.compute_indicators(df)
            for col in computed.columns.difference(df.columns):
                frame[col] = computed[col]
        return frame

    def generate_signals(self, df: pd.DataFrame) -> List[Signal]:
        return combine_signals(
            (m.generate_signals(df) for m in self.members),
            threshold=self.threshold,
            total_weight=self.total_weight,
        )

    def entry_exit(self, df: pd.DataFrame) -> tuple[pd.Series, pd.Series]:
        buy = np.zeros(len(df), dtype=bool)
        sell = np.zeros(len(df), dtype=bool)
        for s in self.generate_signals(df):
            (buy if s.side == Side.BUY else sell)[s.index] = True
        return pd.Series(buy, index=df.index), pd.Series(sell, index=df.index)
