"""Abstract market data interface."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

from tradelab.core.types import Bar


class MarketDataSource(ABC):
    """
    Source of bars for one or more instruments. Implementations raise
    DataUnavailable on timeouts, transport errors, or unusable payloads.
    """

    @abstractmethod
    def get_latest_bar(self, instrument: str) -> Bar:
        """Most recent price observation (may be an unfinished bar)."""
        pass

    @abstractmethod
    def get_historical_bars(self, instrument: str, unit: str, count: int = 200) -> List[Bar]:
        """Up to `count` bars of timeframe `unit` (e.g. '1h'), oldest first."""
        pass
