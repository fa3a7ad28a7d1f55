"""
Key-value persistence for settings, ledger, and trade history.
Semantics: last write wins, read-your-writes within a process.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from tradelab.core.config import TradingSettings
from tradelab.core.types import Trade

logger = logging.getLogger("tradelab.storage")

MAX_TRADE_HISTORY = 100

SETTINGS_KEY = "settings"
LEDGER_KEY = "ledger"
HISTORY_KEY = "trade_history"


class PersistenceStore(ABC):
    """Settings, ledger snapshot, and newest-first trade history."""

    @abstractmethod
    def _read(self, key: str) -> Any:
        """Raw JSON-compatible value or None."""

    @abstractmethod
    def _write(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value."""

    def load_settings(self) -> Optional[TradingSettings]:
        data = self._read(SETTINGS_KEY)
        return TradingSettings.from_dict(data) if data else None

    def save_settings(self, settings: TradingSettings) -> None:
        self._write(SETTINGS_KEY, settings.to_dict())

    def load_ledger(self) -> Optional[Dict[str, Any]]:
        """Ledger snapshot as produced by Ledger.to_dict(), or None."""
        return self._read(LEDGER_KEY)

    def save_ledger(self, ledger: Dict[str, Any]) -> None:
        self._write(LEDGER_KEY, ledger)

    def append_trade_history(self, trade: Trade) -> None:
        history = self._read(HISTORY_KEY) or []
        history.insert(0, trade.to_dict())
        del history[MAX_TRADE_HISTORY:]
        self._write(HISTORY_KEY, history)

    def load_trade_history(self) -> List[Trade]:
        """Newest first."""
        return [Trade.from_dict(d) for d in (self._read(HISTORY_KEY) or [])]


class InMemoryStore(PersistenceStore):
    """Process-local store. Values are JSON round-tripped so callers never share objects."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def _read(self, key: str) -> Any:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def _write(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)


class JsonFileStore(PersistenceStore):
    """All keys in one JSON file, replaced atomically on every write."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f) or {}
        except json.JSONDecodeError:
            logger.warning("State file %s is corrupt; starting empty", self.path)
            return {}

    def _read(self, key: str) -> Any:
        return self._load_all().get(key)

    def _write(self, key: str, value: Any) -> None:
        data = self._load_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
