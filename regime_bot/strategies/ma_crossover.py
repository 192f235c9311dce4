"""
Backtest policy: SMA crossover entries and exits plus stop-loss / take-profit.
No regime, ADX or volatility gating; sizing is always the full trade amount.
A protective exit and a bullish crossover on the same bar give a Sell
followed by a Buy.
"""

from __future__ import annotations
from typing import List, Optional

from regime_bot.core import events
from regime_bot.core.config import RiskConfig
from regime_bot.core.events import EventType, LogRecord, ProtectiveExitMeta
from regime_bot.core.types import Position, TradeIntent
from regime_bot.indicators.technical import sma
from regime_bot.risk.manager import RiskManager
from regime_bot.strategies.base import (
    BarContext,
    BasePolicy,
    Decision,
    apply_intent,
    buy_intent,
    sell_intent,
)


class BacktestPolicy(BasePolicy):
    """Two-state MA crossover."""

    name = "ma_crossover"

    def __init__(self, config: RiskConfig):
        self.config = config
        self.risk = RiskManager(config)

    def evaluate(self, ctx: BarContext) -> Decision:
        closes = [c.close for c in ctx.candles]
        price = ctx.price
        short_ma = sma(closes, self.config.short_ma_period)
        long_ma = sma(closes, self.config.long_ma_period)
        prev_short = sma(closes[:-1], self.config.short_ma_period)
        prev_long = sma(closes[:-1], self.config.long_ma_period)
        if None in (short_ma, long_ma, prev_short, prev_long) or price <= 0:
            return Decision(TradeIntent.hold(price, "Insufficient history for MA crossover"), ctx.position)

        logs: List[LogRecord] = []
        timestamp = ctx.candles[-1].timestamp
        position = ctx.position
        bullish_cross = prev_short <= prev_long and short_ma > long_ma
        bearish_cross = prev_short >= prev_long and short_ma < long_ma

        if position is not None:
            exit_signal = self.risk.protective_exit(position, price)
            if exit_signal is not None:
                label = "Stop loss" if exit_signal.kind == "stop_loss" else "Take profit"
                reason = f"{label} triggered: {exit_signal.price_change_pct:.2f}%"
                logs.append(events.info(
                    EventType.STOP_LOSS if exit_signal.kind == "stop_loss" else EventType.TAKE_PROFIT,
                    reason,
                    ProtectiveExitMeta(position.entry_price, price, exit_signal.price_change_pct),
                ))
                exit_intent = sell_intent(position, price, reason)
                # the crossover is still checked against the now flat position
                follow_up = self._entry(None, price, short_ma, long_ma) if bullish_cross else None
                new_position = apply_intent(None, follow_up, timestamp) if follow_up else None
                return Decision(exit_intent, new_position, tuple(logs), follow_up=follow_up)
            if bearish_cross:
                intent = sell_intent(
                    position, price, f"Bearish MA crossover: {short_ma:.2f} < {long_ma:.2f}",
                )
                return Decision(intent, apply_intent(position, intent, timestamp), tuple(logs))
        elif bullish_cross:
            intent = self._entry(position, price, short_ma, long_ma)
            return Decision(intent, apply_intent(position, intent, timestamp), tuple(logs))

        return Decision(TradeIntent.hold(price, "No crossover"), position, tuple(logs))

    def _entry(self, position: Optional[Position], price: float, short_ma: float, long_ma: float) -> TradeIntent:
        return buy_intent(
            position, price, self.config.trade_amount,
            f"Bullish MA crossover: {short_ma:.2f} > {long_ma:.2f}",
        )
