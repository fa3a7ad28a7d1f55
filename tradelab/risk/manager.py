"""
Risk manager: position sizing and exit priority shared by backtest and live.
Size = cash * risk_per_trade_pct / 100, spent at the signal bar's close.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from tradelab.core.config import TradingSettings
from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import Position, Side, Signal, TradeReason

logger = logging.getLogger("tradelab.risk")


@dataclass
class RiskResult:
    """Result of sizing: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    invest_amount: float = 0.0
    reason: str = ""


class RiskManager:
    """
    Enforces: stop-loss and take-profit percentages against the entry price,
    and fixed-fraction sizing of each entry.
    """

    def __init__(
        self,
        stop_loss_pct: float,
        take_profit_pct: float,
        risk_per_trade_pct: float,
        min_invest: float = 0.0,
    ):
        if stop_loss_pct <= 0 or take_profit_pct <= 0:
            raise InvalidConfiguration("stop_loss_pct and take_profit_pct must be > 0")
        if stop_loss_pct >= take_profit_pct:
            raise InvalidConfiguration(
                f"stop_loss_pct {stop_loss_pct} must be below take_profit_pct {take_profit_pct}"
            )
        if not 0 < risk_per_trade_pct <= 100:
            raise InvalidConfiguration(f"risk_per_trade_pct must be in (0, 100], got {risk_per_trade_pct}")
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.risk_per_trade_pct = risk_per_trade_pct
        self.min_invest = min_invest

    @classmethod
    def from_settings(cls, settings: TradingSettings) -> "RiskManager":
        return cls(
            stop_loss_pct=settings.stop_loss_pct,
            take_profit_pct=settings.take_profit_pct,
            risk_per_trade_pct=settings.risk_per_trade_pct,
        )

    def position_size(self, cash: float, price: float) -> RiskResult:
        """invest = cash * risk%; quantity = invest / price."""
        if price <= 0:
            return RiskResult(allowed=False, reason=f"non-positive price {price}")
        invest = cash * self.risk_per_trade_pct / 100.0
        if invest <= 0:
            return RiskResult(allowed=False, reason="no cash to invest")
        if invest < self.min_invest:
            return RiskResult(allowed=False, reason=f"invest {invest:.2f} < min {self.min_invest}")
        return RiskResult(allowed=True, quantity=invest / price, invest_amount=invest)

    def protective_exit(self, position: Position, price: float) -> Optional[TradeReason]:
        """Stop-loss first, then take-profit. None if neither is breached."""
        pct = position.unrealized_pct(price)
        if pct <= -self.stop_loss_pct:
            logger.info("Stop-loss hit: %.2f%% <= -%.2f%%", pct, self.stop_loss_pct)
            return TradeReason.STOP_LOSS
        if pct >= self.take_profit_pct:
            logger.info("Take-profit hit: %.2f%% >= %.2f%%", pct, self.take_profit_pct)
            return TradeReason.TAKE_PROFIT
        return None

    def exit_reason(
        self,
        position: Position,
        price: float,
        signal: Optional[Signal] = None,
    ) -> Optional[TradeReason]:
        """Priority: stop-loss -> take-profit -> strategy SELL. First match wins."""
        reason = self.protective_exit(position, price)
        if reason is not None:
            return reason
        if signal is not None and signal.side == Side.SELL:
            return TradeReason.SIGNAL
        return None
