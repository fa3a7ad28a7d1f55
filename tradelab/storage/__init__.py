"""Persistence: settings, ledger snapshot, trade history."""

from tradelab.storage.store import PersistenceStore, InMemoryStore, JsonFileStore, MAX_TRADE_HISTORY

__all__ = ["PersistenceStore", "InMemoryStore", "JsonFileStore", "MAX_TRADE_HISTORY"]
