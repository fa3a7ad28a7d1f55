"""
Upbit public REST market data (no API key needed).
"""

from __future__ import annotations
import logging
from typing import Any, List, Optional

import pandas as pd
import requests

from tradelab.core.errors import DataUnavailable
from tradelab.core.types import Bar
from tradelab.data.base import MarketDataSource
from tradelab.utils.timeframes import upbit_candle_unit

logger = logging.getLogger("tradelab.data.upbit")

UPBIT_BASE = "https://api.upbit.com/v1"
MAX_CANDLES_PER_CALL = 200


class UpbitMarketData(MarketDataSource):
    """Ticker and candle endpoints. Upbit returns candles newest first; we reverse them."""

    def __init__(
        self,
        base_url: str = UPBIT_BASE,
        timeout: float = 2.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            r = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise DataUnavailable(f"Upbit request failed: {path}: {e}") from e
        if r.status_code != 200:
            raise DataUnavailable(f"Upbit HTTP {r.status_code} for {path}: {r.text[:200]}")
        try:
            return r.json()
        except ValueError as e:
            raise DataUnavailable(f"Upbit returned non-JSON for {path}") from e

    def get_latest_bar(self, instrument: str) -> Bar:
        data = self._get("ticker", {"markets": instrument})
        if not data:
            raise DataUnavailable(f"Upbit ticker empty for {instrument}")
        t = data[0]
        try:
            return Bar(
                time=pd.Timestamp(int(t["trade_timestamp"]), unit="ms").to_pydatetime(),
                close=float(t["trade_price"]),
                open=float(t["opening_price"]) if t.get("opening_price") is not None else None,
                high=float(t["high_price"]) if t.get("high_price") is not None else None,
                low=float(t["low_price"]) if t.get("low_price") is not None else None,
                volume=float(t["acc_trade_volume_24h"]) if t.get("acc_trade_volume_24h") is not None else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailable(f"Upbit ticker payload malformed: {e}") from e

    def get_historical_bars(self, instrument: str, unit: str, count: int = 200) -> List[Bar]:
        try:
            path = f"candles/{upbit_candle_unit(unit)}"
        except ValueError as e:
            raise DataUnavailable(str(e)) from e
        count = max(1, min(int(count), MAX_CANDLES_PER_CALL))
        data = self._get(path, {"market": instrument, "count": count})
        bars = []
        try:
            for c in data:
                bars.append(Bar(
                    time=pd.Timestamp(c["candle_date_time_utc"]).to_pydatetime(),
                    close=float(c["trade_price"]),
                    open=float(c["opening_price"]),
                    high=float(c["high_price"]),
                    low=float(c["low_price"]),
                    volume=float(c.get("candle_acc_trade_volume") or 0.0),
                ))
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailable(f"Upbit candle payload malformed: {e}") from e
        bars.sort(key=lambda b: b.time)
        logger.debug("Upbit %s %s: %d candles", instrument, unit, len(bars))
        return bars
