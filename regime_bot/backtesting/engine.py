"""
Backtest engine: replays candles bar by bar through a policy, fills at the
bar close, collects the trade ledger and computes metrics.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from regime_bot.analytics.metrics import BacktestMetrics, compute_metrics
from regime_bot.core.config import RiskConfig
from regime_bot.core.types import Action, Candle, PortfolioSnapshot, Position, TradeRecord
from regime_bot.strategies.base import BarContext, BasePolicy
from regime_bot.strategies.ma_crossover import BacktestPolicy

logger = logging.getLogger("regime_bot.backtest")


@dataclass
class BacktestResult:
    """Backtest output: ledger, metrics, balance after each closed trade."""
    trades: List[TradeRecord] = field(default_factory=list)
    metrics: BacktestMetrics = field(default_factory=BacktestMetrics)
    portfolio: List[PortfolioSnapshot] = field(default_factory=list)
    open_position: Optional[Position] = None

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([t.to_dict() for t in self.trades])


class BacktestEngine:
    """
    Runs a policy over historical candles. At bar i the policy sees only
    candles[: i + 1]. A position still open at the end is left open; its BUY
    has no matching SELL and so does not count as a completed trade.
    """

    def __init__(
        self,
        risk_config: RiskConfig,
        initial_balance: Optional[float] = None,
        pair: str = "BTCUSDT",
        policy: Optional[BasePolicy] = None,
    ):
        self.risk_config = risk_config
        # Metrics are measured against one trade's stake unless told otherwise
        self.initial_balance = initial_balance if initial_balance is not None else risk_config.trade_amount
        self.pair = pair
        self.policy = policy or BacktestPolicy(risk_config)

    def run(self, candles: Sequence[Candle]) -> BacktestResult:
        candles = list(candles)
        trades: List[TradeRecord] = []
        position: Optional[Position] = None

        for i in range(len(candles)):
            decision = self.policy.evaluate(BarContext(candles=candles[: i + 1], position=position))
            position = decision.position
            bar = candles[i]
            for intent in decision.intents:
                trades.append(TradeRecord(
                    pair=self.pair,
                    action=intent.action,
                    price=intent.price,
                    quantity=intent.quantity,
                    total_value=intent.total_value,
                    timestamp=bar.timestamp,
                    reason=intent.reason,
                    pnl=intent.pnl,
                    status="simulated",
                    signal_type=self.policy.name,
                ))
                logger.debug("%s %s @ %.4f | %s", bar.timestamp, intent.action.value, intent.price, intent.reason)

        metrics = compute_metrics(trades, self.initial_balance)
        logger.info(
            "Backtest %s: %d candles, %d ledger entries, %d completed trades, pnl %.2f",
            self.pair, len(candles), len(trades), metrics.total_trades, metrics.total_pnl,
        )
        return BacktestResult(
            trades=trades,
            metrics=metrics,
            portfolio=portfolio_curve(trades, self.initial_balance),
            open_position=position,
        )


def portfolio_curve(trades: Sequence[TradeRecord], initial_balance: float) -> List[PortfolioSnapshot]:
    """One flat-position snapshot per SELL: initial balance plus cumulative pnl."""
    snapshots = []
    cumulative = 0.0
    for t in trades:
        if t.action != Action.SELL:
            continue
        cumulative += t.pnl or 0.0
        balance = initial_balance + cumulative
        snapshots.append(PortfolioSnapshot(
            total_value=balance,
            available_balance=balance,
            in_position=False,
            current_position_value=0.0,
            total_pnl=cumulative,
            recorded_at=t.timestamp,
        ))
    return snapshots


def run_backtest(
    candles: Sequence[Candle],
    risk_config: RiskConfig,
    initial_balance: Optional[float] = None,
) -> Tuple[List[TradeRecord], BacktestMetrics]:
    """Pure function of its inputs: same candles and config give the same ledger and metrics."""
    result = BacktestEngine(risk_config, initial_balance=initial_balance).run(candles)
    return result.trades, result.metrics
