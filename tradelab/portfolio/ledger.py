"""
Cash + single long position ledger for one instrument.

Invariants:
1. position exists only while quantity > 0 (never negative)
2. SELL only closes an open position; BUY only opens one when flat
3. cash changes only on fills: -quantity*price on BUY, +quantity*price on SELL
4. equity(price) = cash + quantity*price
"""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, List, Optional

from tradelab.core.errors import LedgerError
from tradelab.core.types import Position, Side, Trade, TradeReason

logger = logging.getLogger("tradelab.ledger")

# Float tolerance when an order spends the whole cash balance
_CASH_EPS = 1e-9


class Ledger:
    """Holdings, cash, and the append-only trade log of one session."""

    def __init__(self, cash: float, instrument: str, position: Optional[Position] = None):
        if cash < 0:
            raise LedgerError(f"cash cannot be negative: {cash}")
        if position is not None and position.quantity <= 0:
            raise LedgerError(f"position quantity must be > 0, got {position.quantity}")
        self.instrument = instrument
        self._cash = float(cash)
        self._position = position
        self._trades: List[Trade] = []

    @property
    def cash(self) -> float:
        return self._cash

    @property
    def position(self) -> Optional[Position]:
        return self._position

    @property
    def has_position(self) -> bool:
        return self._position is not None

    @property
    def quantity(self) -> float:
        return self._position.quantity if self._position else 0.0

    @property
    def trades(self) -> List[Trade]:
        return list(self._trades)

    def equity(self, price: float) -> float:
        """Cash plus position marked at price."""
        return self._cash + self.quantity * price

    def buy(
        self,
        index: int,
        timestamp: datetime,
        price: float,
        quantity: float,
        reason: TradeReason = TradeReason.SIGNAL,
    ) -> Trade:
        """Open a position; debits quantity*price."""
        if self._position is not None:
            raise LedgerError(f"{self.instrument}: position already open")
        if price <= 0 or quantity <= 0:
            raise LedgerError(f"invalid fill price={price} quantity={quantity}")
        cost = quantity * price
        if cost > self._cash + _CASH_EPS:
            raise LedgerError(f"cost {cost:.8f} exceeds cash {self._cash:.8f}")
        self._cash = max(0.0, self._cash - cost)
        self._position = Position(instrument=self.instrument, quantity=quantity, entry_price=price, entry_index=index)
        trade = Trade(
            index=index, timestamp=timestamp, side=Side.BUY, price=price,
            quantity=quantity, amount=cost, reason=reason, instrument=self.instrument,
        )
        self._trades.append(trade)
        logger.debug("BUY %s qty=%.8f @ %.8f (cash left %.2f)", self.instrument, quantity, price, self._cash)
        return trade

    def sell(self, index: int, timestamp: datetime, price: float, reason: TradeReason) -> Trade:
        """Close the whole position at price; credits quantity*price."""
        if self._position is None:
            raise LedgerError(f"{self.instrument}: no open position to sell")
        if price <= 0:
            raise LedgerError(f"invalid fill price={price}")
        qty = self._position.quantity
        revenue = qty * price
        self._cash += revenue
        self._position = None
        trade = Trade(
            index=index, timestamp=timestamp, side=Side.SELL, price=price,
            quantity=qty, amount=revenue, reason=reason, instrument=self.instrument,
        )
        self._trades.append(trade)
        logger.debug("SELL %s qty=%.8f @ %.8f reason=%s", self.instrument, qty, price, reason.value)
        return trade

    def to_dict(self) -> dict[str, Any]:
        """Persisted form; trade history is stored separately."""
        return {
            "instrument": self.instrument,
            "cash": self._cash,
            "position": self._position.to_dict() if self._position else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ledger":
        pos = data.get("position")
        return cls(
            cash=float(data["cash"]),
            instrument=str(data.get("instrument", "")),
            position=Position.from_dict(pos) if pos else None,
        )
