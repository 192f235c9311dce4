"""Policy interface: evaluate one bar, plus the long/flat position transitions."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from regime_bot.core.errors import PositionInvariantError
from regime_bot.core.events import LogRecord
from regime_bot.core.types import Action, Candle, Position, Regime, TradeIntent
from regime_bot.indicators.snapshot import IndicatorSnapshot


@dataclass(frozen=True)
class BarContext:
    """Inputs for one bar. candles ends with the bar being evaluated."""
    candles: Sequence[Candle]
    position: Optional[Position] = None
    sentiment: float = 0.0
    today_realized_pnl: float = 0.0

    @property
    def price(self) -> float:
        return self.candles[-1].close if self.candles else 0.0


@dataclass(frozen=True)
class Decision:
    """
    Policy output: the intent, the position after it, and the audit records.
    follow_up is a second intent on the same bar, applied after intent
    (a re-entry after a protective exit); position already reflects it.
    """
    intent: TradeIntent
    position: Optional[Position]
    logs: Tuple[LogRecord, ...] = ()
    snapshot: Optional[IndicatorSnapshot] = None
    regime: Optional[Regime] = None
    disable_bot: bool = False
    follow_up: Optional[TradeIntent] = None

    @property
    def intents(self) -> Tuple[TradeIntent, ...]:
        """Trades to record for this bar, in order."""
        ordered = (self.intent,) if self.follow_up is None else (self.intent, self.follow_up)
        return tuple(i for i in ordered if i.is_trade)


class BasePolicy(ABC):
    """A policy turns one BarContext into one Decision. No state between calls."""

    name: str = ""

    @abstractmethod
    def evaluate(self, ctx: BarContext) -> Decision:
        pass


def buy_intent(position: Optional[Position], price: float, amount: float, reason: str) -> TradeIntent:
    if position is not None:
        raise PositionInvariantError(f"BUY requested while long from {position.entry_price}")
    return TradeIntent(
        action=Action.BUY,
        price=price,
        quantity=amount / price,
        total_value=amount,
        reason=reason,
    )


def sell_intent(position: Optional[Position], price: float, reason: str) -> TradeIntent:
    """Close the whole entry quantity; pnl against the entry price."""
    if position is None:
        raise PositionInvariantError("SELL requested while flat")
    qty = position.quantity
    return TradeIntent(
        action=Action.SELL,
        price=price,
        quantity=qty,
        total_value=qty * price,
        reason=reason,
        pnl=(price - position.entry_price) * qty,
    )


def apply_intent(position: Optional[Position], intent: TradeIntent, timestamp: datetime) -> Optional[Position]:
    """Flat -> Long on BUY, Long -> Flat on SELL, unchanged on HOLD."""
    if intent.action == Action.BUY:
        if position is not None:
            raise PositionInvariantError("BUY applied to an open position")
        return Position(entry_price=intent.price, quantity=intent.quantity, entry_time=timestamp)
    if intent.action == Action.SELL:
        if position is None:
            raise PositionInvariantError("SELL applied while flat")
        return None
    return position
