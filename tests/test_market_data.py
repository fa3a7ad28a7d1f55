"""Unit tests for market data adapters and frame helpers (no network)."""

from datetime import datetime

import pandas as pd
import pytest
import requests

from tradelab.core.errors import DataUnavailable
from tradelab.core.types import Bar
from tradelab.data import (
    BinanceMarketData,
    StaticMarketData,
    UpbitMarketData,
    bars_to_frame,
    frame_to_bars,
    load_csv_bars,
    normalize_frame,
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.calls = []
        self._response = response
        self._error = error

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self._error is not None:
            raise self._error
        return self._response


UPBIT_CANDLES = [  # newest first, as the API returns them
    {"candle_date_time_utc": "2024-01-01T02:00:00", "opening_price": 102, "high_price": 104,
     "low_price": 101, "trade_price": 103, "candle_acc_trade_volume": 5.0},
    {"candle_date_time_utc": "2024-01-01T01:00:00", "opening_price": 101, "high_price": 103,
     "low_price": 100, "trade_price": 102, "candle_acc_trade_volume": 4.0},
    {"candle_date_time_utc": "2024-01-01T00:00:00", "opening_price": 100, "high_price": 102,
     "low_price": 99, "trade_price": 101, "candle_acc_trade_volume": 3.0},
]


def test_upbit_candles_ascending():
    session = FakeSession(FakeResponse(UPBIT_CANDLES))
    source = UpbitMarketData(timeout=1.5, session=session)
    bars = source.get_historical_bars("KRW-BTC", "1h", 3)
    assert [b.close for b in bars] == [101.0, 102.0, 103.0]
    url, params, timeout = session.calls[0]
    assert url.endswith("/candles/minutes/60")
    assert params == {"market": "KRW-BTC", "count": 3}
    assert timeout == 1.5


def test_upbit_count_capped():
    session = FakeSession(FakeResponse([]))
    UpbitMarketData(session=session).get_historical_bars("KRW-BTC", "1d", 1000)
    assert session.calls[0][1]["count"] == 200
    assert session.calls[0][0].endswith("/candles/days")


def test_upbit_ticker():
    payload = [{"trade_timestamp": 1704067200000, "trade_price": 50000000.0, "opening_price": 49000000.0,
                "high_price": 51000000.0, "low_price": 48000000.0, "acc_trade_volume_24h": 12.5}]
    bar = UpbitMarketData(session=FakeSession(FakeResponse(payload))).get_latest_bar("KRW-BTC")
    assert bar.close == 50000000.0
    assert bar.time == datetime(2024, 1, 1)


@pytest.mark.parametrize("session", [
    FakeSession(FakeResponse({"error": "bad"}, status_code=500)),
    FakeSession(error=requests.ConnectionError("down")),
    FakeSession(error=requests.Timeout("slow")),
    FakeSession(FakeResponse([])),
])
def test_upbit_failures_raise_data_unavailable(session):
    with pytest.raises(DataUnavailable):
        UpbitMarketData(session=session).get_latest_bar("KRW-BTC")


def test_upbit_unsupported_timeframe():
    with pytest.raises(DataUnavailable):
        UpbitMarketData(session=FakeSession(FakeResponse([]))).get_historical_bars("KRW-BTC", "2h")


class FakeBinanceClient:
    def __init__(self, error=None):
        self.error = error

    def get_klines(self, symbol, interval, limit):
        if self.error:
            raise self.error
        base = 1704067200000
        return [
            [base + i * 3600000, "100", "102", "99", str(100 + i), "10", base + (i + 1) * 3600000 - 1,
             "0", 0, "0", "0", "0"]
            for i in range(limit)
        ]

    def get_ticker(self, symbol):
        return {"closeTime": 1704067200000, "lastPrice": "42000.5", "openPrice": "41000",
                "highPrice": "43000", "lowPrice": "40000", "volume": "123"}


def test_binance_klines():
    bars = BinanceMarketData(client=FakeBinanceClient()).get_historical_bars("BTCUSDT", "1h", 4)
    assert [b.close for b in bars] == [100.0, 101.0, 102.0, 103.0]
    assert bars[0].time == datetime(2024, 1, 1)


def test_binance_ticker():
    assert BinanceMarketData(client=FakeBinanceClient()).get_latest_bar("BTCUSDT").close == 42000.5


def test_binance_transport_error():
    source = BinanceMarketData(client=FakeBinanceClient(error=requests.ConnectionError("down")))
    with pytest.raises(DataUnavailable):
        source.get_historical_bars("BTCUSDT", "1h", 4)


def test_normalize_frame_sorts_dedups_and_fills():
    df = pd.DataFrame({
        "time": ["2024-01-01 02:00", "2024-01-01 00:00", "2024-01-01 01:00", "2024-01-01 01:00"],
        "close": [3.0, 1.0, 2.0, 2.5],
    })
    out = normalize_frame(df)
    assert out["close"].tolist() == [1.0, 2.5, 3.0]
    assert out["high"].tolist() == [1.0, 2.5, 3.0]
    assert list(out.columns) == ["time", "open", "high", "low", "close", "volume"]


def test_bars_frame_round_trip():
    bars = [Bar(time=datetime(2024, 1, 1, h), close=100.0 + h) for h in range(3)]
    back = frame_to_bars(bars_to_frame(bars))
    assert [b.close for b in back] == [100.0, 101.0, 102.0]
    assert back[0].high is None


def test_load_csv_bars(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text("Timestamp,Close\n2024-01-02,11\n2024-01-01,10\n", encoding="utf-8")
    df = load_csv_bars(path)
    assert df["close"].tolist() == [10.0, 11.0]
    with pytest.raises(DataUnavailable):
        load_csv_bars(tmp_path / "missing.csv")


def test_static_source_reveals_bars(make_frame):
    source = StaticMarketData(make_frame([1, 2, 3, 4]), visible=2)
    assert source.get_latest_bar("X").close == 2.0
    source.advance()
    assert [b.close for b in source.get_historical_bars("X", "1h", 2)] == [2.0, 3.0]
    empty = StaticMarketData(make_frame([1, 2]), visible=0)
    with pytest.raises(DataUnavailable):
        empty.get_latest_bar("X")
