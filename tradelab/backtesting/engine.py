"""
Backtest engine: single deterministic pass over a materialized price series.
Exits are checked before entries; a position left open is force-closed at the last close.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from tradelab.analytics.metrics import PerformanceMetrics, compute_metrics
from tradelab.core.types import Side, Signal, Trade, TradeReason
from tradelab.data.frames import normalize_frame
from tradelab.portfolio.ledger import Ledger
from tradelab.risk.manager import RiskManager
from tradelab.strategies.base import BaseStrategy

logger = logging.getLogger("tradelab.backtest")


@dataclass
class BacktestResult:
    """Backtest output: trades and equity curve. Metrics are derived on access."""
    initial_capital: float
    trades: List[Trade] = field(default_factory=list)
    equity_curve: List[float] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)

    @property
    def metrics(self) -> PerformanceMetrics:
        return compute_metrics(self.trades, self.equity_curve, self.initial_capital)

    def to_report(self) -> Dict[str, Any]:
        """Structured update for reporting sinks."""
        return {
            "equity_curve": list(self.equity_curve),
            "trades": [t.to_dict() for t in self.trades],
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class _RunState:
    closes: List[float]
    times: List[Any]
    signals: Dict[int, Signal]
    ledger: Ledger
    equity: List[float]


class BacktestEngine:
    """
    Runs a strategy over historical bars:
    stop-loss -> take-profit -> SELL signal exits, then BUY entries sized by the risk manager.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        risk_manager: RiskManager,
        initial_capital: float = 10000.0,
        instrument: str = "",
    ):
        self.strategy = strategy
        self.risk_manager = risk_manager
        self.initial_capital = initial_capital
        self.instrument = instrument

    def run(self, df: pd.DataFrame) -> BacktestResult:
        """
        Run backtest on a DataFrame with at least time and close columns.
        Equity is recorded once per bar after the bar is processed.
        """
        state = self._prepare(df)
        for i in range(len(state.closes)):
            self._step(state, i)
        return self._finish(state)

    async def run_async(self, df: pd.DataFrame, chunk_size: int = 500) -> BacktestResult:
        """Same pass as run(), yielding to the event loop every chunk_size bars."""
        state = self._prepare(df)
        chunk_size = max(1, int(chunk_size))
        for i in range(len(state.closes)):
            self._step(state, i)
            if (i + 1) % chunk_size == 0:
                await asyncio.sleep(0)
        return self._finish(state)

    def _prepare(self, df: pd.DataFrame) -> _RunState:
        frame = normalize_frame(df)
        signals = self.strategy.signals_by_index(frame) if len(frame) else {}
        return _RunState(
            closes=frame["close"].tolist(),
            times=frame["time"].tolist(),
            signals=signals,
            ledger=Ledger(cash=self.initial_capital, instrument=self.instrument),
            equity=[self.initial_capital],
        )

    def _step(self, state: _RunState, i: int) -> None:
        ledger = state.ledger
        close = state.closes[i]
        signal = state.signals.get(i)
        if ledger.has_position:
            reason = self.risk_manager.exit_reason(ledger.position, close, signal)
            if reason is not None:
                ledger.sell(i, state.times[i], close, reason)
        elif signal is not None and signal.side == Side.BUY:
            sizing = self.risk_manager.position_size(ledger.cash, close)
            if sizing.allowed:
                ledger.buy(i, state.times[i], close, sizing.quantity)
            else:
                logger.debug("Bar %d: BUY skipped (%s)", i, sizing.reason)
        state.equity.append(ledger.equity(close))

    def _finish(self, state: _RunState) -> BacktestResult:
        ledger = state.ledger
        if ledger.has_position and state.closes:
            last = len(state.closes) - 1
            ledger.sell(last, state.times[last], state.closes[last], TradeReason.FORCED_CLOSE)
            # Liquidation at the same close leaves the last equity point unchanged
            state.equity[-1] = ledger.cash
        result = BacktestResult(
            initial_capital=self.initial_capital,
            trades=ledger.trades,
            equity_curve=state.equity,
            signals=sorted(state.signals.values(), key=lambda s: s.index),
        )
        logger.info(
            "Backtest %s on %s: %d bars, %d signals, %d trades, final equity %.2f",
            self.strategy.name, self.instrument or "-", len(state.closes),
            len(state.signals), len(result.trades), state.equity[-1],
        )
        return result
