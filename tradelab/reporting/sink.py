"""
Reporting sinks: where backtest reports and live trades are published.
A failing sink is logged and never interrupts an engine.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Sequence

from tradelab.core.types import Trade
from tradelab.utils.telegram import format_trade_message, send_telegram

logger = logging.getLogger("tradelab.reporting")

Report = Dict[str, Any]


class ReportingSink(ABC):
    """Subscriber for {equity_curve, trades, metrics} reports and {trade} updates."""

    @abstractmethod
    def publish_backtest(self, report: Report) -> None:
        pass

    @abstractmethod
    def publish_trade(self, trade: Trade) -> None:
        pass


class LoggingSink(ReportingSink):
    def publish_backtest(self, report: Report) -> None:
        m = report.get("metrics", {})
        logger.info(
            "Backtest report: %d trades, return %.2f%%, max drawdown %.2f%%",
            len(report.get("trades", [])), m.get("total_return_pct", 0.0), m.get("max_drawdown_pct", 0.0),
        )

    def publish_trade(self, trade: Trade) -> None:
        logger.info("Trade: %s", format_trade_message(trade))


class CollectingSink(ReportingSink):
    """Keeps every update in memory and forwards it to registered callbacks."""

    def __init__(self):
        self.reports: List[Report] = []
        self.updates: List[Report] = []
        self._subscribers: List[Callable[[Report], None]] = []

    def subscribe(self, callback: Callable[[Report], None]) -> None:
        self._subscribers.append(callback)

    def _emit(self, update: Report) -> None:
        for cb in self._subscribers:
            cb(update)

    def publish_backtest(self, report: Report) -> None:
        self.reports.append(report)
        self._emit(report)

    def publish_trade(self, trade: Trade) -> None:
        update = {"trade": trade.to_dict()}
        self.updates.append(update)
        self._emit(update)


class TelegramSink(ReportingSink):
    def __init__(self, bot_token: str, chat_id: str):
        self._bot_token = bot_token
        self._chat_id = chat_id

    def publish_backtest(self, report: Report) -> None:
        m = report.get("metrics", {})
        text = (
            f"Backtest done | trades={len(report.get('trades', []))} "
            f"return={m.get('total_return_pct', 0.0):.2f}% mdd={m.get('max_drawdown_pct', 0.0):.2f}%"
        )
        send_telegram(text, self._bot_token, self._chat_id)

    def publish_trade(self, trade: Trade) -> None:
        send_telegram(format_trade_message(trade), self._bot_token, self._chat_id)


class MultiSink(ReportingSink):
    """Fan-out to several sinks; one sink failing does not stop the others."""

    def __init__(self, sinks: Sequence[ReportingSink]):
        self.sinks = list(sinks)

    def publish_backtest(self, report: Report) -> None:
        for sink in self.sinks:
            try:
                sink.publish_backtest(report)
            except Exception:
                logger.exception("Sink %s failed on backtest report", type(sink).__name__)

    def publish_trade(self, trade: Trade) -> None:
        for sink in self.sinks:
            try:
                sink.publish_trade(trade)
            except Exception:
                logger.exception("Sink %s failed on trade update", type(sink).__name__)
