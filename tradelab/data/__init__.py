"""Market data: source interface, Upbit/Binance adapters, static replay, frame helpers."""

from tradelab.data.base import MarketDataSource
from tradelab.data.binance import BinanceMarketData
from tradelab.data.frames import bars_to_frame, frame_to_bars, load_csv_bars, normalize_frame
from tradelab.data.static import StaticMarketData
from tradelab.data.upbit import UpbitMarketData

__all__ = [
    "MarketDataSource",
    "BinanceMarketData",
    "UpbitMarketData",
    "StaticMarketData",
    "bars_to_frame",
    "frame_to_bars",
    "load_csv_bars",
    "normalize_frame",
]
