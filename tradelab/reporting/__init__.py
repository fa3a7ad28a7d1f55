"""Reporting: sinks for backtest reports and live trade updates."""

from tradelab.reporting.sink import ReportingSink, LoggingSink, CollectingSink, TelegramSink, MultiSink

__all__ = ["ReportingSink", "LoggingSink", "CollectingSink", "TelegramSink", "MultiSink"]
