"""Policies: shared one-bar interface, live regime policy, backtest MA crossover."""

from regime_bot.strategies.base import BarContext, BasePolicy, Decision
from regime_bot.strategies.context_aware import LivePolicy, evaluate
from regime_bot.strategies.ma_crossover import BacktestPolicy
from regime_bot.strategies.regime import classify_regime

__all__ = [
    "BarContext",
    "BasePolicy",
    "Decision",
    "LivePolicy",
    "BacktestPolicy",
    "classify_regime",
    "evaluate",
]
