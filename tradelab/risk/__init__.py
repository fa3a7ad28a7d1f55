"""Risk management: position sizing, stop-loss / take-profit exits."""

from tradelab.risk.manager import RiskManager, RiskResult

__all__ = ["RiskManager", "RiskResult"]
