"""Analytics: performance metrics (returns, Sharpe, Sortino, MDD, win rate, etc.)."""

from tradelab.analytics.metrics import (
    PerformanceMetrics,
    compute_metrics,
    format_metrics,
    pair_round_trips,
    per_bar_returns,
    total_return_pct,
    sharpe_ratio,
    sortino_ratio,
    max_drawdown,
    win_rate,
    profit_factor,
    expectancy,
)

__all__ = [
    "PerformanceMetrics",
    "compute_metrics",
    "format_metrics",
    "pair_round_trips",
    "per_bar_returns",
    "total_return_pct",
    "sharpe_ratio",
    "sortino_ratio",
    "max_drawdown",
    "win_rate",
    "profit_factor",
    "expectancy",
]
