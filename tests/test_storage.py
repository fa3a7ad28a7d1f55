"""Unit tests for storage.store."""

from datetime import datetime

import pytest

from tradelab.core.config import TradingSettings
from tradelab.core.types import Side, Trade, TradeReason
from tradelab.portfolio.ledger import Ledger
from tradelab.storage.store import MAX_TRADE_HISTORY, InMemoryStore, JsonFileStore


def _trade(i):
    return Trade(
        index=i, timestamp=datetime(2024, 1, 1, i % 24), side=Side.BUY if i % 2 == 0 else Side.SELL,
        price=100.0 + i, quantity=1.0, amount=100.0 + i, reason=TradeReason.SIGNAL, instrument="KRW-BTC",
    )


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStore()
    return JsonFileStore(tmp_path / "state" / "state.json")


def test_empty_store(store):
    assert store.load_settings() is None
    assert store.load_ledger() is None
    assert store.load_trade_history() == []


def test_settings_round_trip(store):
    settings = TradingSettings(instrument="KRW-BTC", strategy="PRICE_TARGET", buy_price=100.0, sell_price=120.0,
                               params={"note": 1})
    store.save_settings(settings)
    assert store.load_settings() == settings


def test_last_write_wins(store):
    store.save_settings(TradingSettings(instrument="KRW-BTC"))
    store.save_settings(TradingSettings(instrument="KRW-ETH"))
    assert store.load_settings().instrument == "KRW-ETH"


def test_ledger_round_trip(store):
    ledger = Ledger(cash=1000.0, instrument="KRW-BTC")
    ledger.buy(0, datetime(2024, 1, 1), 100.0, 2.0)
    store.save_ledger(ledger.to_dict())
    restored = Ledger.from_dict(store.load_ledger())
    assert restored.cash == 800.0
    assert restored.position.quantity == 2.0


def test_history_newest_first_and_capped(store):
    for i in range(MAX_TRADE_HISTORY + 5):
        store.append_trade_history(_trade(i))
    history = store.load_trade_history()
    assert len(history) == MAX_TRADE_HISTORY
    assert history[0].index == MAX_TRADE_HISTORY + 4
    assert history[-1].index == 5


def test_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "state.json"
    JsonFileStore(path).save_settings(TradingSettings(instrument="KRW-XRP"))
    assert JsonFileStore(path).load_settings().instrument == "KRW-XRP"


def test_corrupt_file_treated_as_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.load_settings() is None
    store.save_settings(TradingSettings(instrument="KRW-BTC"))
    assert store.load_settings().instrument == "KRW-BTC"
