"""
Technical indicators over close (and high/low) series.

Every function returns a new series aligned index-for-index with its input.
Positions before the lookback window is satisfied hold NaN; nothing is
back-filled or guessed. Inputs are never mutated.
"""

from __future__ import annotations
from typing import Sequence, Union

import numpy as np
import pandas as pd

from tradelab.core.errors import InvalidConfiguration

SeriesLike = Union[pd.Series, Sequence[float], np.ndarray]


def _as_series(values: SeriesLike) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def _check_period(period: int) -> None:
    if int(period) != period or period < 1:
        raise InvalidConfiguration(f"indicator period must be a positive integer, got {period!r}")


def _wilder(values: np.ndarray, period: int, start: int) -> np.ndarray:
    """
    Wilder smoothing of values[start:]. Seeded at start+period-1 with the
    simple mean of the first `period` values, then avg = (avg*(p-1) + v)/p.
    """
    out = np.full(len(values), np.nan)
    seed_end = start + period
    if len(values) < seed_end:
        return out
    avg = float(np.mean(values[start:seed_end]))
    out[seed_end - 1] = avg
    for i in range(seed_end, len(values)):
        avg = (avg * (period - 1) + values[i]) / period
        out[i] = avg
    return out


def sma(values: SeriesLike, period: int) -> pd.Series:
    """Arithmetic mean of the trailing `period` values; NaN for index < period-1."""
    _check_period(period)
    s = _as_series(values)
    return s.rolling(window=period, min_periods=period).mean()


def ema(values: SeriesLike, period: int) -> pd.Series:
    """
    Exponential moving average, k = 2/(period+1), seeded by the first value.
    Defined from index 0: it warms up instead of waiting for a full window.
    """
    _check_period(period)
    s = _as_series(values)
    return s.ewm(span=period, adjust=False).mean()


def rsi(values: SeriesLike, period: int = 14) -> pd.Series:
    """
    Relative Strength Index with Wilder smoothing.

    The first average gain/loss is the mean of the first `period` changes,
    so RSI is defined from index `period`. RSI is 100 when the average loss is 0.
    """
    _check_period(period)
    s = _as_series(values)
    closes = s.to_numpy()
    out = np.full(len(closes), np.nan)
    if len(closes) <= period:
        return pd.Series(out, index=s.index)
    delta = np.diff(closes)
    gains = np.clip(delta, 0, None)
    losses = np.clip(-delta, 0, None)
    # delta[j] is the change into bar j+1, so shift results by one
    avg_gain = _wilder(gains, period, 0)
    avg_loss = _wilder(losses, period, 0)
    for j in range(period - 1, len(delta)):
        g, l = avg_gain[j], avg_loss[j]
        if l == 0:
            out[j + 1] = 100.0
        else:
            out[j + 1] = 100.0 - 100.0 / (1.0 + g / l)
    return pd.Series(out, index=s.index)


def macd(
    values: SeriesLike,
    fast: int = 12,
    slow: int = 26,
    signal_period: int = 9,
) -> pd.DataFrame:
    """
    MACD line = EMA(fast) - EMA(slow); signal = EMA(line, signal_period) over the
    defined part of the line; histogram = line - signal.
    Returns DataFrame with columns macd, signal, histogram.
    """
    for p in (fast, slow, signal_period):
        _check_period(p)
    if fast >= slow:
        raise InvalidConfiguration(f"MACD fast period {fast} must be below slow period {slow}")
    s = _as_series(values)
    line = ema(s, fast) - ema(s, slow)
    signal = pd.Series(np.nan, index=s.index)
    defined = line.dropna()
    if not defined.empty:
        signal.loc[defined.index] = ema(defined, signal_period)
    return pd.DataFrame({"macd": line, "signal": signal, "histogram": line - signal}, index=s.index)


def bollinger_bands(values: SeriesLike, period: int = 20, k: float = 2.0) -> pd.DataFrame:
    """Middle = SMA(period); upper/lower = middle +/- k * population std of the window."""
    _check_period(period)
    s = _as_series(values)
    middle = s.rolling(window=period, min_periods=period).mean()
    std = s.rolling(window=period, min_periods=period).std(ddof=0)
    return pd.DataFrame(
        {"middle": middle, "upper": middle + k * std, "lower": middle - k * std},
        index=s.index,
    )


def true_range(high: SeriesLike, low: SeriesLike, close: SeriesLike) -> pd.Series:
    """max(high-low, |high-prevClose|, |low-prevClose|); NaN at index 0 (no previous close)."""
    h, l, c = _as_series(high), _as_series(low), _as_series(close)
    prev_close = c.shift(1)
    tr = pd.concat([h - l, (h - prev_close).abs(), (l - prev_close).abs()], axis=1).max(axis=1, skipna=False)
    tr.iloc[:1] = np.nan
    return tr


def atr(high: SeriesLike, low: SeriesLike, close: SeriesLike, period: int = 14) -> pd.Series:
    """
    Average True Range. Seeded with the mean of the first `period` true ranges
    (bars 1..period) and Wilder-smoothed after, so defined from index `period`.
    """
    _check_period(period)
    tr = true_range(high, low, close)
    values = tr.to_numpy()
    out = _wilder(values, period, 1) if len(values) > 1 else np.full(len(values), np.nan)
    return pd.Series(out, index=tr.index)
