"""Strategies: base interface, signal generators, ensemble."""

from tradelab.strategies.base import BaseStrategy, crosses_above, crosses_below
from tradelab.strategies.sma_cross import SmaCrossStrategy
from tradelab.strategies.rsi_reversal import RsiReversalStrategy
from tradelab.strategies.macd_cross import MacdCrossStrategy
from tradelab.strategies.bollinger_breakout import BollingerBreakoutStrategy
from tradelab.strategies.atr_breakout import AtrBreakoutStrategy
from tradelab.strategies.price_target import PriceTargetStrategy
from tradelab.strategies.ensemble import EnsembleStrategy, combine_signals
from tradelab.strategies.registry import build_strategy, default_members

__all__ = [
    "BaseStrategy",
    "crosses_above",
    "crosses_below",
    "SmaCrossStrategy",
    "RsiReversalStrategy",
    "MacdCrossStrategy",
    "BollingerBreakoutStrategy",
    "AtrBreakoutStrategy",
    "PriceTargetStrategy",
    "EnsembleStrategy",
    "combine_signals",
    "build_strategy",
    "default_members",
]
