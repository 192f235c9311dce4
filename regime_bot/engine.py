"""
Live trading tick: gather inputs from the injected collaborators, run the
live policy on the latest candle, and record what it decided.

The engine owns no position state; the position is rebuilt from the
ledger's last trade on every tick.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from regime_bot.core import events
from regime_bot.core.errors import DataSourceError
from regime_bot.core.events import EventType, TradeExecutedMeta
from regime_bot.core.types import (
    Action,
    MarketContext,
    PortfolioSnapshot,
    Position,
    TradeIntent,
    TradeRecord,
)
from regime_bot.execution.base import CandleSource, ConfigStore, LogSink, SentimentSource, TradeLedger
from regime_bot.strategies.base import BarContext, Decision
from regime_bot.strategies.context_aware import LivePolicy

logger = logging.getLogger("regime_bot.engine")


@dataclass
class TickResult:
    """What one tick did. evaluated is False when the bot was inactive."""
    evaluated: bool
    decision: Optional[Decision] = None
    trade: Optional[TradeRecord] = None
    portfolio: Optional[PortfolioSnapshot] = None
    sentiment: Optional[float] = None
    message: str = ""

    @property
    def disabled(self) -> bool:
        return self.decision is not None and self.decision.disable_bot


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def position_from_trade(last: Optional[TradeRecord]) -> Optional[Position]:
    """Long when the most recent trade is a BUY, otherwise flat."""
    if last is None or last.action != Action.BUY:
        return None
    return Position(entry_price=last.price, quantity=last.quantity, entry_time=last.timestamp)


def next_portfolio_snapshot(
    previous: Optional[PortfolioSnapshot],
    intent: TradeIntent,
    at: datetime,
    initial_balance: float,
) -> PortfolioSnapshot:
    """BUY moves cash into the position; SELL returns the proceeds and books the pnl."""
    balance = previous.available_balance if previous else initial_balance
    total_pnl = previous.total_pnl if previous else 0.0
    if intent.action == Action.BUY:
        balance -= intent.total_value
        return PortfolioSnapshot(
            total_value=balance + intent.total_value,
            available_balance=balance,
            in_position=True,
            current_position_value=intent.total_value,
            total_pnl=total_pnl,
            recorded_at=at,
        )
    if intent.action == Action.SELL:
        balance += intent.total_value
        total_pnl += intent.pnl or 0.0
        return PortfolioSnapshot(
            total_value=balance,
            available_balance=balance,
            in_position=False,
            current_position_value=0.0,
            total_pnl=total_pnl,
            recorded_at=at,
        )
    raise ValueError("HOLD does not change the portfolio")


class TradingEngine:
    """One pair, one bot. Call tick() once per poll."""

    def __init__(
        self,
        pair: str,
        candle_source: CandleSource,
        sentiment_source: SentimentSource,
        config_store: ConfigStore,
        ledger: TradeLedger,
        sink: LogSink,
        candle_limit: int = 100,
        initial_balance: float = 10000.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.pair = pair
        self.candle_source = candle_source
        self.sentiment_source = sentiment_source
        self.config_store = config_store
        self.ledger = ledger
        self.sink = sink
        self.candle_limit = candle_limit
        self.initial_balance = initial_balance
        self.clock = clock or _utc_now

    def today_realized_pnl(self, now: datetime) -> float:
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return sum(t.pnl or 0.0 for t in self.ledger.trades_since(midnight))

    def tick(self) -> TickResult:
        """
        Raises DataSourceError when candles or sentiment cannot be fetched;
        the caller decides when to retry.
        """
        risk_config, active = self.config_store.load()
        if not active:
            logger.debug("Bot is not active for %s", self.pair)
            return TickResult(evaluated=False, message="Bot is not active")

        self.sink.emit(events.info(EventType.ENGINE_START, f"Trading engine started for {self.pair}"))
        try:
            candles = self.candle_source.fetch(self.pair, self.candle_limit)
            sentiment = self.sentiment_source.fetch()
        except DataSourceError as e:
            self.sink.emit(events.error(EventType.DATA_UNAVAILABLE, str(e)))
            raise

        now = self.clock()
        ctx = BarContext(
            candles=candles,
            position=position_from_trade(self.ledger.last_trade()),
            sentiment=sentiment,
            today_realized_pnl=self.today_realized_pnl(now),
        )
        decision = LivePolicy(risk_config).evaluate(ctx)
        for record in decision.logs:
            self.sink.emit(record)

        if decision.snapshot is not None and decision.regime is not None:
            self.ledger.append_market_context(MarketContext(
                pair=self.pair,
                timestamp=candles[-1].timestamp,
                snapshot=decision.snapshot,
                regime=decision.regime,
                sentiment=sentiment,
            ))

        if decision.disable_bot:
            self.config_store.set_active(False)
            return TickResult(evaluated=True, decision=decision, sentiment=sentiment, message=decision.intent.reason)

        intent = decision.intent
        if not intent.is_trade:
            return TickResult(evaluated=True, decision=decision, sentiment=sentiment, message=intent.reason)

        trade = TradeRecord(
            pair=self.pair,
            action=intent.action,
            price=intent.price,
            quantity=intent.quantity,
            total_value=intent.total_value,
            timestamp=now,
            reason=intent.reason,
            pnl=intent.pnl,
            status="executed",
            signal_type=LivePolicy.name,
        )
        self.ledger.append_trade(trade)
        self.sink.emit(events.info(
            EventType.TRADE_EXECUTED,
            f"{intent.action.value.upper()} order executed at ${intent.price:.2f}",
            TradeExecutedMeta(quantity=intent.quantity, total_value=intent.total_value, pnl=intent.pnl),
        ))
        snapshot = next_portfolio_snapshot(self.ledger.last_portfolio(), intent, now, self.initial_balance)
        self.ledger.append_portfolio(snapshot)
        return TickResult(
            evaluated=True,
            decision=decision,
            trade=trade,
            portfolio=snapshot,
            sentiment=sentiment,
            message=intent.reason,
        )
