"""
Replay a fixed price frame as a market data source (CSV files, test fixtures).
"""

from __future__ import annotations
from typing import List

import pandas as pd

from tradelab.core.errors import DataUnavailable
from tradelab.core.types import Bar
from tradelab.data.base import MarketDataSource
from tradelab.data.frames import frame_to_bars, normalize_frame


class StaticMarketData(MarketDataSource):
    """
    Serves bars from a frame. `advance()` reveals one more bar, so a live
    session can be driven deterministically; the unit argument is ignored.
    """

    def __init__(self, df: pd.DataFrame, visible: int | None = None):
        self._bars = frame_to_bars(normalize_frame(df))
        self._visible = len(self._bars) if visible is None else max(0, min(visible, len(self._bars)))

    @property
    def visible(self) -> int:
        return self._visible

    def advance(self, n: int = 1) -> int:
        self._visible = min(len(self._bars), self._visible + n)
        return self._visible

    def get_latest_bar(self, instrument: str) -> Bar:
        if self._visible == 0:
            raise DataUnavailable(f"no bars for {instrument}")
        return self._bars[self._visible - 1]

    def get_historical_bars(self, instrument: str, unit: str, count: int = 200) -> List[Bar]:
        start = max(0, self._visible - int(count))
        return list(self._bars[start:self._visible])
