"""Indicator library: SMA, EMA, RSI, MACD, Bollinger Bands, ATR."""

from tradelab.indicators.technical import (
    sma,
    ema,
    rsi,
    macd,
    bollinger_bands,
    true_range,
    atr,
)

__all__ = ["sma", "ema", "rsi", "macd", "bollinger_bands", "true_range", "atr"]
