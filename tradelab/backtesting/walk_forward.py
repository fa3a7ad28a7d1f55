"""
Walk-forward evaluation: the history is cut into in-sample (train) and
out-of-sample (test) windows and every test window is backtested on its own,
starting flat with the engine's initial capital.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

import pandas as pd

from tradelab.backtesting.engine import BacktestEngine, BacktestResult
from tradelab.core.errors import InvalidConfiguration

logger = logging.getLogger("tradelab.backtest.walk_forward")


@dataclass
class WalkForwardWindow:
    """Bar ranges [start, end) of one train/test pair."""
    train_start: int
    train_end: int
    test_start: int
    test_end: int

    @property
    def test_bars(self) -> int:
        return self.test_end - self.test_start


class WalkForwardRun(NamedTuple):
    window: WalkForwardWindow
    result: BacktestResult


def split_windows(
    n_bars: int,
    train_pct: float = 0.7,
    step_bars: Optional[int] = None,
) -> List[WalkForwardWindow]:
    """
    step_bars=None: a single split at train_pct.
    Otherwise a train window of n_bars*train_pct rolls forward by step_bars,
    each followed by up to step_bars test bars.
    """
    if not 0 < train_pct < 1:
        raise InvalidConfiguration(f"train_pct must be in (0, 1), got {train_pct}")
    if step_bars is not None and step_bars < 1:
        raise InvalidConfiguration(f"step_bars must be >= 1, got {step_bars}")
    train_len = int(n_bars * train_pct)
    if train_len < 1 or train_len >= n_bars:
        return []
    if step_bars is None:
        return [WalkForwardWindow(0, train_len, train_len, n_bars)]
    windows = []
    for start in range(0, n_bars - train_len, step_bars):
        split = start + train_len
        windows.append(WalkForwardWindow(start, split, split, min(split + step_bars, n_bars)))
    return windows


def walk_forward(
    engine: BacktestEngine,
    df: pd.DataFrame,
    train_pct: float = 0.7,
    step_bars: Optional[int] = None,
) -> List[WalkForwardRun]:
    """Backtest every out-of-sample window of df in order."""
    runs = []
    for w in split_windows(len(df), train_pct, step_bars):
        result = engine.run(df.iloc[w.test_start:w.test_end].reset_index(drop=True))
        m = result.metrics
        logger.info(
            "Window test[%d:%d] (%d bars): %d trades, return %.2f%%, mdd %.2f%%",
            w.test_start, w.test_end, w.test_bars, m.total_trades, m.total_return_pct, m.max_drawdown_pct,
        )
        runs.append(WalkForwardRun(w, result))
    return runs
