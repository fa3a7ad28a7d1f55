"""Unit tests for utils.timeframes."""

import pytest
from tradelab.utils.timeframes import timeframe_minutes, upbit_candle_unit


def test_timeframe_minutes():
    assert timeframe_minutes("5m") == 5
    assert timeframe_minutes("1h") == 60
    assert timeframe_minutes("1d") == 1440
    assert timeframe_minutes("1w") == 10080


def test_timeframe_invalid():
    with pytest.raises(ValueError):
        timeframe_minutes("1x")


def test_upbit_candle_unit():
    assert upbit_candle_unit("1m") == "minutes/1"
    assert upbit_candle_unit("1h") == "minutes/60"
    assert upbit_candle_unit("4h") == "minutes/240"
    assert upbit_candle_unit("1d") == "days"
    assert upbit_candle_unit("1w") == "weeks"


def test_upbit_candle_unit_unsupported():
    with pytest.raises(ValueError):
        upbit_candle_unit("2h")
