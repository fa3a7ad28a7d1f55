"""
Binance spot market data with retry and rate-limit handling.
"""

from __future__ import annotations
import logging
import time
from typing import List, Optional

import pandas as pd
import requests

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from tradelab.core.errors import DataUnavailable
from tradelab.core.types import Bar
from tradelab.data.base import MarketDataSource

logger = logging.getLogger("tradelab.data.binance")


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit); other API errors become DataUnavailable."""
    def decorator(f):
        def wrapped(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise DataUnavailable(f"Binance API error: {e}") from e
                except (BinanceRequestException, requests.RequestException) as e:
                    raise DataUnavailable(f"Binance request failed: {e}") from e
            raise DataUnavailable(f"Binance: gave up after {max_retries} attempts")
        return wrapped
    return decorator


class BinanceMarketData(MarketDataSource):
    """Klines and last price. Keys are optional for public endpoints."""

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        timeout: float = 2.0,
        client: Optional[Client] = None,
    ):
        self._client = client or Client(
            api_key or None, api_secret or None, requests_params={"timeout": timeout}, ping=False
        )

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def get_historical_bars(self, instrument: str, unit: str, count: int = 200) -> List[Bar]:
        raw = self._client.get_klines(symbol=instrument, interval=unit, limit=int(count))
        df = pd.DataFrame(raw, columns=[
            "open_time", "open", "high", "low", "close", "volume",
            "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore"
        ])
        if df.empty:
            return []
        df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
        df["time"] = pd.to_datetime(df["open_time"], unit="ms")
        df = df.sort_values("time")
        return [
            Bar(time=row.time.to_pydatetime(), close=float(row.close), open=float(row.open),
                high=float(row.high), low=float(row.low), volume=float(row.volume))
            for row in df.itertuples(index=False)
        ]

    @retry_on_rate_limit(max_retries=2)
    def get_latest_bar(self, instrument: str) -> Bar:
        ticker = self._client.get_ticker(symbol=instrument)
        try:
            return Bar(
                time=pd.Timestamp(int(ticker["closeTime"]), unit="ms").to_pydatetime(),
                close=float(ticker["lastPrice"]),
                open=float(ticker["openPrice"]),
                high=float(ticker["highPrice"]),
                low=float(ticker["lowPrice"]),
                volume=float(ticker["volume"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailable(f"Binance ticker payload malformed: {e}") from e
