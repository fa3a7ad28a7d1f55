"""
Load configuration from config.yaml and .env. API keys only from env.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


@dataclass
class TradingSettings:
    """Per-session trading settings; what the persistence store saves."""
    instrument: str
    strategy: str = StrategyName.SMA_CROSS.value
    stop_loss_pct: float = 5.0
    take_profit_pct: float = 10.0
    risk_per_trade_pct: float = 10.0
    buy_price: Optional[float] = None
    sell_price: Optional[float] = None
    params: dict = field(default_factory=dict)

    def validate(self) -> "TradingSettings":
        """Raise InvalidConfiguration on contradictory or out-of-range values."""
        if not self.instrument:
            raise InvalidConfiguration("instrument is required")
        try:
            name = StrategyName(self.strategy.upper())
        except ValueError:
            raise InvalidConfiguration(f"unknown strategy {self.strategy!r}") from None
        if self.stop_loss_pct <= 0:
            raise InvalidConfiguration(f"stop_loss_pct must be > 0, got {self.stop_loss_pct}")
        if self.take_profit_pct <= 0:
            raise InvalidConfiguration(f"take_profit_pct must be > 0, got {self.take_profit_pct}")
        if self.stop_loss_pct >= self.take_profit_pct:
            raise InvalidConfiguration(
                f"stop_loss_pct {self.stop_loss_pct} must be below take_profit_pct {self.take_profit_pct}"
            )
        if not 0 < self.risk_per_trade_pct <= 100:
            raise InvalidConfiguration(f"risk_per_trade_pct must be in (0, 100], got {self.risk_per_trade_pct}")
        if name == StrategyName.PRICE_TARGET:
            if not self.buy_price or not self.sell_price or self.buy_price <= 0 or self.sell_price <= 0:
                raise InvalidConfiguration("PRICE_TARGET needs positive buy_price and sell_price")
            if self.buy_price >= self.sell_price:
                raise InvalidConfiguration(
                    f"buy_price {self.buy_price} must be below sell_price {self.sell_price}"
                )
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "instrument": self.instrument,
            "strategy": self.strategy,
            "stop_loss_pct": self.stop_loss_pct,
            "take_profit_pct": self.take_profit_pct,
            "risk_per_trade_pct": self.risk_per_trade_pct,
            "buy_price": self.buy_price,
            "sell_price": self.sell_price,
            "params": dict(self.params),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TradingSettings":
        def opt_float(key: str) -> Optional[float]:
            value = data.get(key)
            return float(value) if value is not None else None

        return cls(
            instrument=str(data.get("instrument", "")),
            strategy=str(data.get("strategy", StrategyName.SMA_CROSS.value)).upper(),
            stop_loss_pct=float(data.get("stop_loss_pct", 5.0)),
            take_profit_pct=float(data.get("take_profit_pct", 10.0)),
            risk_per_trade_pct=float(data.get("risk_per_trade_pct", 10.0)),
            buy_price=opt_float("buy_price"),
            sell_price=opt_float("sell_price"),
            params=dict(data.get("params") or {}),
        )


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Env overrides (for secrets and overrides)
    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    data_cfg = data.get("data", {})
    strategy = data.get("strategy", {})
    risk = data.get("risk", {})
    backtest = data.get("backtest", {})
    live = data.get("live", {})
    telegram = data.get("telegram", {})
    logging_cfg = data.get("logging", {})

    return Config(
        data_source=env("DATA_SOURCE", data_cfg.get("source", "upbit")).lower(),
        # API keys (env only; never put keys in config.yaml)
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        instrument=env("SYMBOL", data_cfg.get("instrument", "KRW-BTC")).upper(),
        timeframe=env("TIMEFRAME", data_cfg.get("timeframe", "1h")),
        history_count=env_int("HISTORY_COUNT", data_cfg.get("history_count", 200)),
        request_timeout=env_float("REQUEST_TIMEOUT", data_cfg.get("request_timeout", 2.0)),
        # Strategy
        strategy=env("STRATEGY", strategy.get("name", StrategyName.SMA_CROSS.value)).upper(),
        strategy_params=dict(strategy.get("params") or {}),
        buy_price=strategy.get("buy_price"),
        sell_price=strategy.get("sell_price"),
        # Risk
        stop_loss_pct=env_float("STOP_LOSS_PCT", risk.get("stop_loss_pct", 5.0)),
        take_profit_pct=env_float("TAKE_PROFIT_PCT", risk.get("take_profit_pct", 10.0)),
        risk_per_trade_pct=env_float("RISK_PER_TRADE_PCT", risk.get("risk_per_trade_pct", 10.0)),
        # Backtest
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 10000.0)),
        backtest_chunk_size=int(backtest.get("chunk_size", 500)),
        # Live
        strategy_interval=float(live.get("strategy_interval", 5.0)),
        protective_interval=float(live.get("protective_interval", 1.0)),
        buffer_size=int(live.get("buffer_size", 500)),
        store_path=Path(env("STORE_PATH", live.get("store_path", "data/state.json"))),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN", telegram.get("bot_token", "")),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", telegram.get("chat_id", "")),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "tradelab.log"),
        log_levels=dict(logging_cfg.get("levels") or {}),
    )


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "data_source", "binance_api_key", "binance_api_secret",
        "instrument", "timeframe", "history_count", "request_timeout",
        "strategy", "strategy_params", "buy_price", "sell_price",
        "stop_loss_pct", "take_profit_pct", "risk_per_trade_pct",
        "initial_capital", "backtest_chunk_size",
        "strategy_interval", "protective_interval", "buffer_size", "store_path",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file", "log_levels",
    )

    def __init__(
        self,
        data_source: str = "upbit",
        binance_api_key: str = "",
        binance_api_secret: str = "",
        instrument: str = "KRW-BTC",
        timeframe: str = "1h",
        history_count: int = 200,
        request_timeout: float = 2.0,
        strategy: str = StrategyName.SMA_CROSS.value,
        strategy_params: Optional[dict] = None,
        buy_price: Optional[float] = None,
        sell_price: Optional[float] = None,
        stop_loss_pct: float = 5.0,
        take_profit_pct: float = 10.0,
        risk_per_trade_pct: float = 10.0,
        initial_capital: float = 10000.0,
        backtest_chunk_size: int = 500,
        strategy_interval: float = 5.0,
        protective_interval: float = 1.0,
        buffer_size: int = 500,
        store_path: Path = None,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "tradelab.log",
        log_levels: Optional[dict] = None,
    ):
        self.data_source = data_source
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.instrument = instrument
        self.timeframe = timeframe
        self.history_count = history_count
        self.request_timeout = request_timeout
        self.strategy = strategy
        self.strategy_params = strategy_params or {}
        self.buy_price = buy_price
        self.sell_price = sell_price
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.risk_per_trade_pct = risk_per_trade_pct
        self.initial_capital = initial_capital
        self.backtest_chunk_size = backtest_chunk_size
        self.strategy_interval = strategy_interval
        self.protective_interval = protective_interval
        self.buffer_size = buffer_size
        self.store_path = Path(store_path) if store_path else Path("data/state.json")
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
        self.log_levels = log_levels or {}

    def trading_settings(self) -> TradingSettings:
        """Session settings derived from this config (not validated)."""
        return TradingSettings(
            instrument=self.instrument,
            strategy=self.strategy,
            stop_loss_pct=self.stop_loss_pct,
            take_profit_pct=self.take_profit_pct,
            risk_per_trade_pct=self.risk_per_trade_pct,
            buy_price=float(self.buy_price) if self.buy_price is not None else None,
            sell_price=float(self.sell_price) if self.sell_price is not None else None,
            params=dict(self.strategy_params),
        )
