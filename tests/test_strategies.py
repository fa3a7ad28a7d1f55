"""Unit tests for strategies: crossings, primitives, ensemble, registry."""

import pandas as pd
import pytest

from tradelab.core.config import TradingSettings
from tradelab.core.errors import InvalidConfiguration
from tradelab.core.types import Side, Signal
from tradelab.strategies import (
    AtrBreakoutStrategy,
    BollingerBreakoutStrategy,
    EnsembleStrategy,
    MacdCrossStrategy,
    PriceTargetStrategy,
    RsiReversalStrategy,
    SmaCrossStrategy,
    build_strategy,
    combine_signals,
    crosses_above,
    crosses_below,
)


def test_crosses_above_needs_transition():
    a = pd.Series([1.0, 2.0, 3.0, 4.0])
    assert crosses_above(a, 2.0).tolist() == [False, False, True, False]


def test_crosses_below_nan_never_crosses():
    a = pd.Series([float("nan"), 3.0, 1.0])
    assert crosses_below(a, 2.0).tolist() == [False, False, True]


def test_sma_cross_single_buy(make_frame):
    df = make_frame([5, 4, 3, 2, 3, 4, 5])
    signals = SmaCrossStrategy(fast=2, slow=3).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == [(5, Side.BUY)]
    assert signals[0].strength == 0.7


def test_sma_cross_flat_series_no_signals(make_frame):
    assert SmaCrossStrategy().generate_signals(make_frame([100] * 80)) == []


def test_sma_cross_rejects_fast_ge_slow():
    with pytest.raises(InvalidConfiguration):
        SmaCrossStrategy(fast=50, slow=20)


def test_rsi_reversal_thresholds_validated():
    with pytest.raises(InvalidConfiguration):
        RsiReversalStrategy(lower=70, upper=30)


def test_price_target_levels(make_frame):
    df = make_frame([110, 99, 98, 150, 210, 220, 120])
    signals = PriceTargetStrategy(100, 200).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == [(1, Side.BUY), (4, Side.SELL)]


def test_price_target_rejects_inverted_levels():
    with pytest.raises(InvalidConfiguration):
        PriceTargetStrategy(200, 100)


@pytest.mark.parametrize("strategy", [
    SmaCrossStrategy(fast=5, slow=20),
    RsiReversalStrategy(),
    MacdCrossStrategy(),
    BollingerBreakoutStrategy(),
    AtrBreakoutStrategy(),
])
def test_primitives_one_signal_per_index(strategy, random_walk):
    signals = strategy.generate_signals(random_walk)
    indexes = [s.index for s in signals]
    assert indexes == sorted(set(indexes))
    assert all(0 <= i < len(random_walk) for i in indexes)
    assert all(s.strength == strategy.strength for s in signals)


def test_signals_do_not_depend_on_future_bars(random_walk):
    """Signals on a prefix must equal the same signals on the full series."""
    strategy = MacdCrossStrategy()
    full = [s for s in strategy.generate_signals(random_walk) if s.index < 200]
    prefix = strategy.generate_signals(random_walk.iloc[:200])
    assert [(s.index, s.side) for s in prefix] == [(s.index, s.side) for s in full]


def test_combine_tie_emits_nothing():
    out = combine_signals([[Signal(5, Side.BUY, 1.0)], [Signal(5, Side.SELL, 1.0)]], threshold=1.0)
    assert out == []


def test_combine_below_threshold_emits_nothing():
    out = combine_signals([[Signal(3, Side.BUY, 0.7)], [Signal(3, Side.BUY, 0.8)]], threshold=2.0)
    assert out == []


def test_combine_reaches_threshold():
    out = combine_signals(
        [[Signal(3, Side.BUY, 0.7)], [Signal(3, Side.BUY, 0.8)], [Signal(3, Side.BUY, 0.75)], [Signal(4, Side.SELL, 0.6)]],
        threshold=2.0,
    )
    assert len(out) == 1
    assert out[0].index == 3
    assert out[0].side == Side.BUY
    assert out[0].strength == 1.0


def test_combine_strength_scaled_by_total_weight():
    out = combine_signals([[Signal(1, Side.SELL, 1.0)], [Signal(1, Side.SELL, 1.0)]], threshold=2.0, total_weight=4.0)
    assert out[0].side == Side.SELL
    assert out[0].strength == pytest.approx(0.5)


def test_ensemble_defaults_to_five_members():
    ens = EnsembleStrategy()
    assert len(ens.members) == 5
    assert ens.total_weight == pytest.approx(0.7 + 0.8 + 0.75 + 0.65 + 0.6)


def test_ensemble_signals_sorted_unique(random_walk):
    signals = EnsembleStrategy(threshold=1.0).generate_signals(random_walk)
    indexes = [s.index for s in signals]
    assert indexes == sorted(set(indexes))
    assert all(0 < s.strength <= 1.0 for s in signals)


def test_build_strategy_by_name():
    strat = build_strategy("sma_cross", {"fast": 5, "slow": 10})
    assert isinstance(strat, SmaCrossStrategy)
    assert (strat.fast, strat.slow) == (5, 10)


def test_build_strategy_unknown_name():
    with pytest.raises(InvalidConfiguration):
        build_strategy("MOON")


def test_build_strategy_bad_params():
    with pytest.raises(InvalidConfiguration):
        build_strategy("RSI_REVERSAL", {"bogus": 1})


def test_build_price_target_from_settings():
    settings = TradingSettings(instrument="KRW-BTC", strategy="PRICE_TARGET", buy_price=100, sell_price=200)
    strat = build_strategy("PRICE_TARGET", settings=settings)
    assert (strat.buy_price, strat.sell_price) == (100.0, 200.0)
    with pytest.raises(InvalidConfiguration):
        build_strategy("PRICE_TARGET")


def test_build_ensemble_with_member_params():
    strat = build_strategy("ENSEMBLE", {"threshold": 1.5, "SMA_CROSS": {"fast": 3, "slow": 8}})
    assert isinstance(strat, EnsembleStrategy)
    assert strat.threshold == 1.5
    assert strat.members[0].fast == 3


def test_rsi_reversal_hand_built(make_frame):
    # RSI(2): 0 at bar 2, 50 at bar 3, 75 at bar 4, 37.5 at bar 5
    df = make_frame([10, 9, 8, 9, 10, 9])
    signals = RsiReversalStrategy(period=2).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == [(3, Side.BUY), (5, Side.SELL)]


def test_macd_cross_hand_built(make_frame):
    # MACD(1, 2, 2) histogram: 0, 0, 0, 1/3, -1/9, -1/9
    df = make_frame([10, 10, 10, 13, 13, 13])
    signals = MacdCrossStrategy(fast=1, slow=2, signal_period=2).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == [(3, Side.BUY), (4, Side.SELL)]


def test_bollinger_breakout_hand_built(make_frame):
    # period 3, k=1: bar 3 closes at 7 under lower 7.59; bar 5 closes at 14 over upper 13.20
    df = make_frame([10, 10, 10, 7, 10, 14])
    signals = BollingerBreakoutStrategy(period=3, k=1.0).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == [(3, Side.BUY), (5, Side.SELL)]


@pytest.mark.parametrize("last, expected", [
    # SMA(3) 11.83 + 1.5 * ATR(3) 2.0 = 14.83
    (15, [(5, Side.BUY)]),
    # SMA(3) 9.17 - 1.5 * ATR(3) 1.33 = 7.17
    (7, [(5, Side.SELL)]),
])
def test_atr_breakout_hand_built(make_frame, last, expected):
    df = make_frame([10, 10.5, 10, 10.5, 10, last])
    signals = AtrBreakoutStrategy(sma_period=3, atr_period=3).generate_signals(df)
    assert [(s.index, s.side) for s in signals] == expected


@pytest.mark.parametrize("factory", [
    lambda: SmaCrossStrategy(fast=0, slow=20),
    lambda: RsiReversalStrategy(period=0),
    lambda: MacdCrossStrategy(fast=30, slow=26),
    lambda: MacdCrossStrategy(signal_period=0),
    lambda: BollingerBreakoutStrategy(period=0),
    lambda: BollingerBreakoutStrategy(k=0),
    lambda: AtrBreakoutStrategy(atr_period=-1),
    lambda: AtrBreakoutStrategy(mult=0),
    lambda: AtrBreakoutStrategy(sma_period=2.5),
])
def test_constructor_rejects_bad_parameters(factory):
    with pytest.raises(InvalidConfiguration):
        factory()


def test_build_strategy_rejects_inverted_macd():
    with pytest.raises(InvalidConfiguration):
        build_strategy("MACD_CROSS", {"fast": 30, "slow": 26})


def test_build_price_target_non_numeric():
    with pytest.raises(InvalidConfiguration):
        build_strategy("PRICE_TARGET", {"buy_price": "abc", "sell_price": 200})


@pytest.mark.parametrize("strategy", [
    SmaCrossStrategy(),
    RsiReversalStrategy(),
    BollingerBreakoutStrategy(),
    AtrBreakoutStrategy(),
])
def test_short_history_gives_no_signals(strategy, make_frame):
    # lookback not met: indicators stay NaN and nothing is raised
    assert strategy.generate_signals(make_frame([5, 1, 5, 1, 5])) == []
