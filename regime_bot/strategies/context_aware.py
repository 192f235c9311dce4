"""
Live policy: regime-aware entries and exits with risk gating.

Per bar, in order: daily loss circuit breaker, stop-loss / take-profit,
history check, position sizing, volatility gate, regime strategy signal,
weakening-momentum exit. The first rule that fires decides the bar.
Protective exits need only the last close, so they fire on short windows.
The indicator snapshot is attached to every decision with a priced bar.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from regime_bot.core import events
from regime_bot.core.config import RiskConfig
from regime_bot.core.events import (
    EventType,
    HistoryMeta,
    LogRecord,
    ProtectiveExitMeta,
    RiskAdjustmentMeta,
    SafetyLimitMeta,
    TradeSignalMeta,
)
from regime_bot.core.types import Candle, Position, Regime, TradeIntent
from regime_bot.indicators.snapshot import IndicatorSnapshot, compute_snapshot, required_history
from regime_bot.risk.manager import RiskManager, SizingResult
from regime_bot.strategies.base import (
    BarContext,
    BasePolicy,
    Decision,
    apply_intent,
    buy_intent,
    sell_intent,
)
from regime_bot.strategies.regime import classify_regime

logger = logging.getLogger("regime_bot.strategy.live")

ADX_TREND = 20.0
RSI_OVERSOLD = 30.0
RSI_BULL_MIN = 40.0
RSI_WEAK = 45.0
RSI_OVERBOUGHT = 70.0


class LivePolicy(BasePolicy):
    """Regime + indicator + risk policy used on live ticks."""

    name = "context_aware"

    def __init__(self, config: RiskConfig):
        self.config = config
        self.risk = RiskManager(config)

    def evaluate(self, ctx: BarContext) -> Decision:
        logs: List[LogRecord] = []
        price = ctx.price
        snap: Optional[IndicatorSnapshot] = None
        regime: Optional[Regime] = None
        if ctx.candles and price > 0:
            snap = compute_snapshot(ctx.candles, self.config.short_ma_period, self.config.long_ma_period)
            regime = classify_regime(snap.rsi, snap.volatility_pct)

        if self.risk.circuit_breaker_tripped(ctx.today_realized_pnl):
            reason = f"Daily loss limit reached: ${abs(ctx.today_realized_pnl):.2f}. Bot paused."
            logs.append(events.warn(
                EventType.SAFETY_LIMIT, reason,
                SafetyLimitMeta(today_pnl=ctx.today_realized_pnl, max_daily_loss=self.config.max_daily_loss),
            ))
            return Decision(
                TradeIntent.hold(price, reason), ctx.position, tuple(logs),
                snapshot=snap, regime=regime, disable_bot=True,
            )

        intent: Optional[TradeIntent] = None
        exit_signal = self.risk.protective_exit(ctx.position, price) if snap is not None else None
        if exit_signal is not None:
            meta = ProtectiveExitMeta(
                entry_price=ctx.position.entry_price,
                current_price=price,
                price_change_pct=exit_signal.price_change_pct,
            )
            if exit_signal.kind == "stop_loss":
                reason = f"Stop loss triggered: {exit_signal.price_change_pct:.2f}% loss"
                logs.append(events.warn(EventType.STOP_LOSS, reason, meta))
            else:
                reason = f"Take profit triggered: {exit_signal.price_change_pct:.2f}% gain"
                logs.append(events.info(EventType.TAKE_PROFIT, reason, meta))
            intent = sell_intent(ctx.position, price, reason)

        needed = required_history(self.config.short_ma_period, self.config.long_ma_period)
        if intent is None and (snap is None or len(ctx.candles) < needed):
            reason = f"Insufficient history: {len(ctx.candles)}/{needed} candles"
            logs.append(events.info(EventType.INSUFFICIENT_DATA, reason, HistoryMeta(len(ctx.candles), needed)))
            return Decision(TradeIntent.hold(price, reason), ctx.position, tuple(logs), snapshot=snap, regime=regime)

        sizing = self.risk.size_position(snap.volatility_pct, ctx.sentiment)
        logs.extend(self._sizing_records(sizing, snap.volatility_pct, ctx.sentiment))

        if intent is None:
            if not self.risk.volatility_ok(snap.volatility_pct):
                reason = f"High volatility detected ({snap.volatility_pct:.2f}%). Waiting for calmer conditions."
                logs.append(events.info(EventType.VOLATILITY_HOLD, reason))
                intent = TradeIntent.hold(price, reason)
            else:
                intent = self._strategy_signal(snap, regime, ctx.position, sizing.amount)

        if intent.is_trade:
            logs.append(events.info(
                EventType.TRADE_SIGNAL,
                f"{intent.action.value.upper()} signal generated: {intent.reason}",
                TradeSignalMeta(
                    price=price,
                    quantity=intent.quantity,
                    total_value=intent.total_value,
                    rsi=snap.rsi,
                    macd=snap.macd,
                    volatility_pct=snap.volatility_pct,
                    regime=regime.value,
                ),
            ))
        else:
            logs.append(events.info(EventType.NO_ACTION, intent.reason))

        position = apply_intent(ctx.position, intent, ctx.candles[-1].timestamp)
        logger.debug("%s | regime=%s | %s", intent.action.value, regime.value, intent.reason)
        return Decision(intent, position, tuple(logs), snapshot=snap, regime=regime)

    @staticmethod
    def _sizing_records(sizing: SizingResult, volatility_pct: float, sentiment: float) -> List[LogRecord]:
        records = []
        for adj in sizing.adjustments:
            if adj.cause == "volatility":
                msg = f"High volatility detected ({volatility_pct:.2f}%). Position size reduced by 50%."
            else:
                msg = f"Negative sentiment detected ({sentiment:.2f}). Position size reduced by 30%."
            records.append(events.info(
                EventType.RISK_ADJUSTMENT, msg,
                RiskAdjustmentMeta(factor=adj.factor, volatility_pct=volatility_pct, sentiment=sentiment),
            ))
        return records

    def _strategy_signal(
        self,
        snap: IndicatorSnapshot,
        regime: Regime,
        position: Optional[Position],
        amount: float,
    ) -> TradeIntent:
        price = snap.price
        short_ma, long_ma = snap.short_ma, snap.long_ma
        rsi, adx = snap.rsi, snap.adx
        flat = position is None

        if regime == Regime.BULLISH and flat and adx > ADX_TREND:
            if short_ma > long_ma and RSI_BULL_MIN < rsi < RSI_OVERBOUGHT and snap.macd > snap.macd_signal:
                return buy_intent(
                    position, price, amount,
                    f"Strong bullish signal: MA crossover + RSI({rsi:.1f}) healthy + MACD bullish "
                    f"+ ADX({adx:.1f}) trending",
                )
        elif regime == Regime.BEARISH and not flat:
            ma_bear = short_ma < long_ma
            macd_bear = snap.macd < snap.macd_signal
            if ma_bear or rsi < RSI_BULL_MIN or macd_bear:
                return sell_intent(
                    position, price,
                    f"Bearish signal: MA({'bearish cross' if ma_bear else ''}) RSI({rsi:.1f}) "
                    f"MACD({'bearish' if macd_bear else ''})",
                )
        elif regime == Regime.RANGE and adx < ADX_TREND:
            lower, upper = snap.bollinger.lower, snap.bollinger.upper
            if flat and price <= lower and rsi < RSI_OVERSOLD:
                return buy_intent(
                    position, price, amount,
                    f"Range mean reversion: Price at lower BB({lower:.2f}) + RSI oversold({rsi:.1f})",
                )
            if not flat and (price >= upper or rsi > RSI_OVERBOUGHT):
                return sell_intent(
                    position, price,
                    f"Range mean reversion exit: Price at upper BB({upper:.2f}) "
                    f"or RSI overbought({rsi:.1f})",
                )

        if not flat and short_ma < long_ma and rsi < RSI_WEAK:
            return sell_intent(position, price, "Protective exit: MA crossover down + weakening momentum")

        return TradeIntent.hold(
            price, f"No signal: {regime.value} regime, RSI {rsi:.1f}, ADX {adx:.1f}",
        )


def evaluate(
    candles: Sequence[Candle],
    risk_config: RiskConfig,
    position: Optional[Position] = None,
    sentiment: float = 0.0,
    today_realized_pnl: float = 0.0,
) -> Decision:
    """Evaluate the live policy on the last candle."""
    ctx = BarContext(
        candles=candles,
        position=position,
        sentiment=sentiment,
        today_realized_pnl=today_realized_pnl,
    )
    return LivePolicy(risk_config).evaluate(ctx)
