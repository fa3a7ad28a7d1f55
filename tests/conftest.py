"""Shared fixtures: price frames built from close lists."""

import numpy as np
import pandas as pd
import pytest


def frame_from_closes(closes, start="2024-01-01", freq="h"):
    times = pd.date_range(start, periods=len(closes), freq=freq)
    return pd.DataFrame({"time": times, "close": [float(c) for c in closes]})


@pytest.fixture
def make_frame():
    return frame_from_closes


@pytest.fixture
def random_walk():
    rng = np.random.default_rng(7)
    closes = 100 * np.exp(np.cumsum(rng.normal(0, 0.02, 400)))
    df = frame_from_closes(closes)
    df["high"] = df["close"] * 1.01
    df["low"] = df["close"] * 0.99
    return df
