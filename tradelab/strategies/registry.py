"""Strategy lookup by name."""

from __future__ import annotations
from typing import Any, List, Optional

from tradelab.core.config import TradingSettings
from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import StrategyName
from tradelab.strategies.atr_breakout import AtrBreakoutStrategy
from tradelab.strategies.base import BaseStrategy
from tradelab.strategies.bollinger_breakout import BollingerBreakoutStrategy
from tradelab.strategies.macd_cross import MacdCrossStrategy
from tradelab.strategies.price_target import PriceTargetStrategy
from tradelab.strategies.rsi_reversal import RsiReversalStrategy
from tradelab.strategies.sma_cross import SmaCrossStrategy

_PRIMITIVES = {
    StrategyName.SMA_CROSS: SmaCrossStrategy,
    StrategyName.RSI_REVERSAL: RsiReversalStrategy,
    StrategyName.MACD_CROSS: MacdCrossStrategy,
    StrategyName.BOLLINGER_BREAKOUT: BollingerBreakoutStrategy,
    StrategyName.ATR_BREAKOUT: AtrBreakoutStrategy,
}


def default_members() -> List[BaseStrategy]:
    """The five indicator strategies with default parameters."""
    return [cls() for cls in _PRIMITIVES.values()]


def build_strategy(
    name: str,
    params: Optional[dict[str, Any]] = None,
    settings: Optional[TradingSettings] = None,
) -> BaseStrategy:
    """
    Instantiate a strategy. params are constructor kwargs; for ENSEMBLE they
    may hold 'threshold' and per-member dicts keyed by member name.
    """
    params = dict(params or {})
    try:
        key = StrategyName(str(name).upper())
    except ValueError:
        raise InvalidConfiguration(f"unknown strategy {name!r}") from None
    try:
        if key == StrategyName.PRICE_TARGET:
            buy = params.pop("buy_price", settings.buy_price if settings else None)
            sell = params.pop("sell_price", settings.sell_price if settings else None)
            if buy is None or sell is None:
                raise InvalidConfiguration("PRICE_TARGET needs buy_price and sell_price")
            return PriceTargetStrategy(float(buy), float(sell))
        if key == StrategyName.ENSEMBLE:
            from tradelab.strategies.ensemble import EnsembleStrategy, DEFAULT_THRESHOLD
            threshold = float(params.pop("threshold", DEFAULT_THRESHOLD))
            members = [cls(**params.get(member.value, {})) for member, cls in _PRIMITIVES.items()]
            return EnsembleStrategy(members=members, threshold=threshold)
        return _PRIMITIVES[key](**params)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"bad parameters for {key.value}: {e}") from e
