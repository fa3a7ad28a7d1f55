"""
Core data types for bars, signals, positions, and trades.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import pandas as pd


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class StrategyName(str, Enum):
    SMA_CROSS = "SMA_CROSS"
    RSI_REVERSAL = "RSI_REVERSAL"
    MACD_CROSS = "MACD_CROSS"
    BOLLINGER_BREAKOUT = "BOLLINGER_BREAKOUT"
    ATR_BREAKOUT = "ATR_BREAKOUT"
    PRICE_TARGET = "PRICE_TARGET"
    ENSEMBLE = "ENSEMBLE"


class TradeReason(str, Enum):
    SIGNAL = "SIGNAL"
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    FORCED_CLOSE = "FORCED_CLOSE"


@dataclass
class Bar:
    """Price bar. Only close is mandatory; OHLC/volume depend on the source."""
    time: datetime
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    volume: Optional[float] = None

    @property
    def high_or_close(self) -> float:
        return self.high if self.high is not None else self.close

    @property
    def low_or_close(self) -> float:
        return self.low if self.low is not None else self.close


@dataclass
class Signal:
    """Directional event attached to one bar index."""
    index: int
    side: Side
    strength: float
    source: str = ""


@dataclass
class Position:
    """Open long position. Exists only while quantity > 0."""
    instrument: str
    quantity: float
    entry_price: float
    entry_index: int

    def market_value(self, price: float) -> float:
        return self.quantity * price

    def unrealized_pct(self, price: float) -> float:
        return (price - self.entry_price) / self.entry_price * 100.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        return cls(
            instrument=str(data["instrument"]),
            quantity=float(data["quantity"]),
            entry_price=float(data["entry_price"]),
            entry_index=int(data["entry_index"]),
        )


@dataclass(frozen=True)
class Trade:
    """Executed trade. amount is cost for BUY, revenue for SELL."""
    index: int
    timestamp: datetime
    side: Side
    price: float
    quantity: float
    amount: float
    reason: TradeReason
    instrument: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "timestamp": pd.Timestamp(self.timestamp).isoformat(),
            "side": self.side.value,
            "price": self.price,
            "quantity": self.quantity,
            "amount": self.amount,
            "reason": self.reason.value,
            "instrument": self.instrument,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Trade":
        return cls(
            index=int(data["index"]),
            timestamp=pd.Timestamp(data["timestamp"]).to_pydatetime(),
            side=Side(data["side"]),
            price=float(data["price"]),
            quantity=float(data["quantity"]),
            amount=float(data["amount"]),
            reason=TradeReason(data["reason"]),
            instrument=data.get("instrument", ""),
        )


@dataclass
class RoundTrip:
    """A BUY matched with the SELL that closed it."""
    buy: Trade
    sell: Trade

    @property
    def pnl(self) -> float:
        return self.sell.amount - self.buy.amount

    @property
    def pnl_pct(self) -> float:
        return self.pnl / self.buy.amount * 100.0
