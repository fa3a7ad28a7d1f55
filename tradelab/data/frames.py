"""
Bar list <-> DataFrame conversion and normalization to chronological order.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List

import numpy as np
import pandas as pd

from tradelab.core.errors import DataUnavailable
from tradelab.core.types import Bar

COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Build an OHLCV DataFrame from bars. Missing fields become NaN."""
    rows = [
        {
            "time": pd.Timestamp(b.time),
            "open": b.open if b.open is not None else np.nan,
            "high": b.high if b.high is not None else np.nan,
            "low": b.low if b.low is not None else np.nan,
            "close": float(b.close),
            "volume": b.volume if b.volume is not None else np.nan,
        }
        for b in bars
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def frame_to_bars(df: pd.DataFrame) -> List[Bar]:
    """Inverse of bars_to_frame; NaN fields become None."""
    def opt(value) -> float | None:
        return None if pd.isna(value) else float(value)

    bars = []
    for row in df.itertuples(index=False):
        bars.append(Bar(
            time=pd.Timestamp(row.time).to_pydatetime(),
            close=float(row.close),
            open=opt(getattr(row, "open", np.nan)),
            high=opt(getattr(row, "high", np.nan)),
            low=opt(getattr(row, "low", np.nan)),
            volume=opt(getattr(row, "volume", np.nan)),
        ))
    return bars


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Sort ascending by time, drop duplicate timestamps (last wins), and fill
    missing open/high/low from close. Returns a new frame with a RangeIndex.
    """
    if "close" not in df.columns or "time" not in df.columns:
        raise DataUnavailable("price frame needs 'time' and 'close' columns")
    df = df.copy()
    for col in COLUMNS:
        if col not in df.columns:
            df[col] = np.nan
    df["time"] = pd.to_datetime(df["time"])
    df = df.sort_values("time", kind="mergesort").drop_duplicates("time", keep="last")
    df["close"] = df["close"].astype(float)
    for col in ("open", "high", "low"):
        df[col] = df[col].astype(float).fillna(df["close"])
    df = df.dropna(subset=["close"])
    return df[COLUMNS].reset_index(drop=True)


def load_csv_bars(path: Path) -> pd.DataFrame:
    """Read a CSV with at least time and close columns; returns a normalized frame."""
    path = Path(path)
    if not path.exists():
        raise DataUnavailable(f"CSV not found: {path}")
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    if "timestamp" in df.columns and "time" not in df.columns:
        df = df.rename(columns={"timestamp": "time"})
    return normalize_frame(df)
