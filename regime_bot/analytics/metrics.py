"""
Backtest metrics over completed round trips: total / average PnL, win rate,
max drawdown, per-trade Sharpe, longest losing streak.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from regime_bot.core.types import Action, TradeRecord

ZERO_STD = 1e-12


@dataclass(frozen=True)
class BacktestMetrics:
    """Aggregate metrics for one backtest run. All zero when nothing completed."""
    total_pnl: float = 0.0
    win_rate: float = 0.0
    avg_pnl: float = 0.0
    max_drawdown: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    sharpe_ratio: float = 0.0
    max_consecutive_losses: int = 0


RoundTrip = Tuple[TradeRecord, TradeRecord]


def pair_round_trips(trades: Sequence[TradeRecord]) -> List[RoundTrip]:
    """
    Pair ledger entries positionally as (i, i+1) for even i. Pairs that are
    not BUY then SELL are dropped, as is a trailing unpaired entry; a dropped
    pair is not an error.
    """
    pairs = []
    for i in range(0, len(trades) - 1, 2):
        entry, exit_ = trades[i], trades[i + 1]
        if entry.action == Action.BUY and exit_.action == Action.SELL:
            pairs.append((entry, exit_))
    return pairs


def win_rate(pnls: Sequence[float]) -> float:
    """Fraction of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def max_drawdown(pnls: Sequence[float], initial_balance: float) -> float:
    """Largest peak-to-trough drop (currency) of the balance walked trade by trade."""
    if not pnls:
        return 0.0
    balance = initial_balance + np.cumsum(np.asarray(pnls, dtype=float))
    peak = np.maximum.accumulate(np.concatenate(([initial_balance], balance)))[1:]
    return float(max(0.0, (peak - balance).max()))


def sharpe_ratio(pnls: Sequence[float], initial_balance: float) -> float:
    """
    mean / population std of pnl / initial_balance. Not annualised.
    0 when std is 0; a std below ZERO_STD is rounding noise from a constant
    series (numpy's mean of identical floats can differ in the last bit)
    and also counts as 0.
    """
    if not pnls or initial_balance == 0:
        return 0.0
    returns = np.asarray(pnls, dtype=float) / initial_balance
    std = returns.std()
    if std < ZERO_STD:
        return 0.0
    return float(returns.mean() / std)


def max_consecutive_losses(pnls: Sequence[float]) -> int:
    """Longest run of trades with pnl <= 0."""
    longest = current = 0
    for p in pnls:
        if p <= 0:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def compute_metrics(trades: Sequence[TradeRecord], initial_balance: float) -> BacktestMetrics:
    """Recompute every metric from the ordered ledger of one run."""
    pnls = [exit_.pnl or 0.0 for _, exit_ in pair_round_trips(trades)]
    total_trades = len(pnls)
    if total_trades == 0:
        return BacktestMetrics()
    total_pnl = sum(pnls)
    winning = sum(1 for p in pnls if p > 0)
    return BacktestMetrics(
        total_pnl=total_pnl,
        win_rate=win_rate(pnls),
        avg_pnl=total_pnl / total_trades,
        max_drawdown=max_drawdown(pnls, initial_balance),
        total_trades=total_trades,
        winning_trades=winning,
        losing_trades=total_trades - winning,
        sharpe_ratio=sharpe_ratio(pnls, initial_balance),
        max_consecutive_losses=max_consecutive_losses(pnls),
    )
