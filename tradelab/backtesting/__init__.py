"""Backtesting engine: deterministic bar-by-bar replay with stop-loss / take-profit exits."""

from tradelab.backtesting.engine import BacktestEngine, BacktestResult
from tradelab.backtesting.walk_forward import WalkForwardRun, WalkForwardWindow, split_windows, walk_forward

__all__ = ["BacktestEngine", "BacktestResult", "WalkForwardRun", "WalkForwardWindow", "split_windows", "walk_forward"]
