"""Core: config, types, errors, logging."""

from tradelab.core.config import load_config, Config, TradingSettings
from tradelab.core.errors import (
    TradelabError,
    DataUnavailable,
    InvalidConfiguration,
    MissingConfiguration,
    LedgerError,
)
from tradelab.core.types import (
    Bar,
    Side,
    Signal,
    StrategyName,
    TradeReason,
    Position,
    Trade,
    RoundTrip,
)
from tradelab.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "TradingSettings",
    "TradelabError",
    "DataUnavailable",
    "InvalidConfiguration",
    "MissingConfiguration",
    "LedgerError",
    "Bar",
    "Side",
    "Signal",
    "StrategyName",
    "TradeReason",
    "Position",
    "Trade",
    "RoundTrip",
    "setup_logging",
]
