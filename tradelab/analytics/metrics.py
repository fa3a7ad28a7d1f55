"""
Performance metrics: returns, Sharpe, Sortino, max drawdown, win rate, profit factor, expectancy.
Computed from a trade log and a per-bar equity curve; never stored.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Sequence

import numpy as np

from tradelab.core.types import RoundTrip, Side, Trade


@dataclass
class PerformanceMetrics:
    """Aggregate performance metrics."""
    initial_capital: float
    final_equity: float
    total_return_pct: float
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown_pct: float
    win_rate: float
    profit_factor: float
    expectancy: float
    total_trades: int
    closed_trades: int
    winning_trades: int
    losing_trades: int
    avg_win: float
    avg_loss: float

    def to_dict(self) -> dict:
        return asdict(self)


def pair_round_trips(trades: Sequence[Trade]) -> List[RoundTrip]:
    """Match each BUY with the SELL that follows it. An unmatched trailing BUY is ignored."""
    trips: List[RoundTrip] = []
    open_buy = None
    for t in trades:
        if t.side == Side.BUY:
            open_buy = t
        elif open_buy is not None:
            trips.append(RoundTrip(buy=open_buy, sell=t))
            open_buy = None
    return trips


def per_bar_returns(equity_curve: Sequence[float]) -> List[float]:
    """(equity[i] - equity[i-1]) / equity[i-1]; steps from zero equity are skipped."""
    arr = np.asarray(equity_curve, dtype=float)
    if len(arr) < 2:
        return []
    prev, cur = arr[:-1], arr[1:]
    mask = prev != 0
    return ((cur[mask] - prev[mask]) / prev[mask]).tolist()


def total_return_pct(equity_curve: Sequence[float], initial_capital: float) -> float:
    if not equity_curve or initial_capital == 0:
        return 0.0
    return (equity_curve[-1] - initial_capital) / initial_capital * 100.0


def _excess(returns: Sequence[float], risk_free_rate: float, periods_per_year: float) -> np.ndarray:
    return np.asarray(returns, dtype=float) - risk_free_rate / periods_per_year


def sharpe_ratio(returns: Sequence[float], risk_free_rate: float = 0.0, periods_per_year: float = 252.0) -> float:
    """Annualized mean/std of per-bar excess returns; 0 when there is no variance."""
    if len(returns) == 0:
        return 0.0
    excess = _excess(returns, risk_free_rate, periods_per_year)
    std = excess.std()
    if std <= 1e-12:
        return 0.0
    return float(np.sqrt(periods_per_year) * excess.mean() / std)


def sortino_ratio(returns: Sequence[float], risk_free_rate: float = 0.0, periods_per_year: float = 252.0) -> float:
    """Like Sharpe but divides by the deviation of losing bars only. Falls back to Sharpe without losses."""
    if len(returns) == 0:
        return 0.0
    excess = _excess(returns, risk_free_rate, periods_per_year)
    downside = np.asarray(returns, dtype=float)
    downside = downside[downside < 0]
    if downside.size == 0 or downside.std() <= 1e-12:
        return sharpe_ratio(returns, risk_free_rate, periods_per_year)
    return float(np.sqrt(periods_per_year) * excess.mean() / downside.std())


def max_drawdown(equity_curve: Sequence[float]) -> float:
    """Largest peak-to-trough decline in percent (positive, e.g. 15.0 = 15%)."""
    if len(equity_curve) == 0:
        return 0.0
    arr = np.asarray(equity_curve, dtype=float)
    peak = np.maximum.accumulate(arr)
    dd = (peak - arr) / np.where(peak != 0, peak, 1)
    return float(max(0.0, np.max(dd))) * 100.0


def win_rate(pnls: List[float]) -> float:
    """Fraction of closed trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def profit_factor(pnls: List[float]) -> float:
    """Gross profit / gross loss. inf when there are profits but no losses, 0 with no profits."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def expectancy(pnls: List[float]) -> float:
    """Average PnL per closed trade."""
    if not pnls:
        return 0.0
    return sum(pnls) / len(pnls)


def compute_metrics(
    trades: Sequence[Trade],
    equity_curve: Sequence[float],
    initial_capital: float,
    risk_free_rate: float = 0.0,
    periods_per_year: float = 252.0,
) -> PerformanceMetrics:
    """Full metrics from the trade log and equity curve (equity_curve[0] is the initial balance)."""
    trips = pair_round_trips(trades)
    pnls = [t.pnl for t in trips]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    rets = per_bar_returns(equity_curve)
    return PerformanceMetrics(
        initial_capital=initial_capital,
        final_equity=float(equity_curve[-1]) if len(equity_curve) else initial_capital,
        total_return_pct=total_return_pct(equity_curve, initial_capital),
        sharpe_ratio=sharpe_ratio(rets, risk_free_rate, periods_per_year),
        sortino_ratio=sortino_ratio(rets, risk_free_rate, periods_per_year),
        max_drawdown_pct=max_drawdown(equity_curve),
        win_rate=win_rate(pnls),
        profit_factor=profit_factor(pnls),
        expectancy=expectancy(pnls),
        total_trades=len(trades),
        closed_trades=len(trips),
        winning_trades=len(wins),
        losing_trades=len(losses),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
    )


def format_metrics(m: PerformanceMetrics) -> str:
    """Human-readable summary for CLI and notifications."""
    pf = "inf" if m.profit_factor == float("inf") else f"{m.profit_factor:.2f}"
    return "\n".join([
        f"Total trades: {m.total_trades} (closed: {m.closed_trades}, wins: {m.winning_trades}, losses: {m.losing_trades})",
        f"Final equity: {m.final_equity:.2f} (start {m.initial_capital:.2f})",
        f"Total return: {m.total_return_pct:.2f}%",
        f"Sharpe ratio: {m.sharpe_ratio:.2f}",
        f"Sortino ratio: {m.sortino_ratio:.2f}",
        f"Max drawdown: {m.max_drawdown_pct:.2f}%",
        f"Win rate: {m.win_rate * 100:.1f}%",
        f"Profit factor: {pf}",
        f"Expectancy: {m.expectancy:.2f}/trade",
    ])
