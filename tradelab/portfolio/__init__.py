"""Portfolio: cash and position ledger."""

from tradelab.portfolio.ledger import Ledger

__all__ = ["Ledger"]
