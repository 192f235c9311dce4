"""Analytics: backtest metrics (PnL, win rate, drawdown, Sharpe, losing streaks)."""

from regime_bot.analytics.metrics import (
    BacktestMetrics,
    compute_metrics,
    max_consecutive_losses,
    max_drawdown,
    pair_round_trips,
    sharpe_ratio,
    win_rate,
)

__all__ = [
    "BacktestMetrics",
    "compute_metrics",
    "max_consecutive_losses",
    "max_drawdown",
    "pair_round_trips",
    "sharpe_ratio",
    "win_rate",
]
