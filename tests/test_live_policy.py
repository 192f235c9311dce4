"""
Deterministic tests for the live policy (strategies.context_aware).

Fixtures are fixed candle series from conftest; same input, same decision.
"""

from datetime import datetime, timedelta, timezone

import pytest

from regime_bot.backtesting.engine import BacktestEngine
from regime_bot.core.config import RiskConfig
from regime_bot.core.errors import PositionInvariantError
from regime_bot.core.events import EventType
from regime_bot.core.types import Action, Position, Regime, TradeIntent
from regime_bot.indicators.snapshot import required_history
from regime_bot.strategies.base import BarContext, apply_intent, sell_intent
from regime_bot.strategies.context_aware import LivePolicy, evaluate

from conftest import BEAR_CYCLE, BULL_CYCLE, build_candles, cycle_closes


def _events(decision):
    return [r.event_type for r in decision.logs]


def _long(entry: float, quantity: float = 1.0) -> Position:
    return Position(entry_price=entry, quantity=quantity, entry_time=datetime(2026, 10, 17, tzinfo=timezone.utc))


# ── Circuit breaker ──────────────────────────────────────────────────────

def test_circuit_breaker_holds_and_disables(bullish_candles, risk_config):
    d = evaluate(bullish_candles, risk_config, None, sentiment=0.0, today_realized_pnl=-105.0)
    assert d.intent.action == Action.HOLD
    assert d.disable_bot is True
    assert d.position is None
    assert _events(d) == [EventType.SAFETY_LIMIT]


def test_circuit_breaker_beats_stop_loss(flat_candles, risk_config):
    candles = flat_candles[:-1] + build_candles([90.0], spread=0.0, start=flat_candles[-1].timestamp)
    pos = _long(100.0)
    d = evaluate(candles, risk_config, pos, today_realized_pnl=-150.0)
    assert d.intent.action == Action.HOLD
    assert d.position == pos
    assert d.disable_bot is True


# ── History ──────────────────────────────────────────────────────────────

def test_insufficient_history_is_hold(bullish_candles, risk_config):
    d = evaluate(bullish_candles[:20], risk_config)
    assert d.intent.action == Action.HOLD
    assert "insufficient history" in d.intent.reason.lower()
    assert _events(d) == [EventType.INSUFFICIENT_DATA]
    assert d.disable_bot is False


def test_empty_candles_is_hold(risk_config):
    d = evaluate([], risk_config)
    assert d.intent.action == Action.HOLD
    assert d.intent.price == 0.0


# ── Protective exits ─────────────────────────────────────────────────────

def test_stop_loss_forces_sell(flat_candles, risk_config):
    candles = flat_candles + build_candles(
        [97.0], spread=0.0, start=flat_candles[-1].timestamp + timedelta(minutes=1),
    )
    pos = _long(100.0, quantity=1.0)
    d = evaluate(candles, risk_config, pos)
    assert d.intent.action == Action.SELL
    assert "stop loss" in d.intent.reason.lower()
    assert d.intent.pnl == pytest.approx((97.0 - 100.0) * 1.0)
    assert d.intent.pnl < 0
    assert d.intent.quantity == 1.0
    assert d.position is None
    assert EventType.STOP_LOSS in _events(d)
    assert EventType.TRADE_SIGNAL in _events(d)


def test_stop_loss_fires_on_short_history(flat_candles, risk_config):
    # 30 candles, well under the 50 the strategy path needs
    candles = flat_candles[:29] + build_candles(
        [97.0], spread=0.0, start=flat_candles[28].timestamp + timedelta(minutes=1),
    )
    assert len(candles) < required_history(risk_config.short_ma_period, risk_config.long_ma_period)
    d = evaluate(candles, risk_config, _long(100.0))
    assert d.intent.action == Action.SELL
    assert "stop loss" in d.intent.reason.lower()
    assert d.intent.pnl == pytest.approx(-3.0)
    assert d.position is None
    assert EventType.INSUFFICIENT_DATA not in _events(d)
    assert EventType.STOP_LOSS in _events(d)


def test_short_history_without_exit_holds_with_snapshot(flat_candles, risk_config):
    d = evaluate(flat_candles[:30], risk_config, _long(100.0))
    assert d.intent.action == Action.HOLD
    assert _events(d) == [EventType.INSUFFICIENT_DATA]
    assert d.snapshot is not None
    assert d.snapshot.long_ma is None


def test_take_profit_forces_sell(flat_candles, risk_config):
    candles = flat_candles + build_candles(
        [106.0], spread=0.0, start=flat_candles[-1].timestamp + timedelta(minutes=1),
    )
    d = evaluate(candles, risk_config, _long(100.0, quantity=2.0))
    assert d.intent.action == Action.SELL
    assert "take profit" in d.intent.reason.lower()
    assert d.intent.pnl == pytest.approx(12.0)
    assert d.intent.total_value == pytest.approx(212.0)


# ── Strategy signals ─────────────────────────────────────────────────────

def test_bullish_buy(bullish_candles, risk_config):
    d = evaluate(bullish_candles, risk_config, None, sentiment=0.0)
    price = bullish_candles[-1].close
    assert d.regime == Regime.BULLISH
    assert d.intent.action == Action.BUY
    assert d.intent.quantity == pytest.approx(100.0 / price)
    assert d.intent.total_value == pytest.approx(100.0)
    assert d.intent.pnl is None
    assert d.position == Position(price, d.intent.quantity, bullish_candles[-1].timestamp)
    assert EventType.TRADE_SIGNAL in _events(d)


def test_negative_sentiment_shrinks_buy(bullish_candles, risk_config):
    d = evaluate(bullish_candles, risk_config, None, sentiment=-0.8)
    assert d.intent.action == Action.BUY
    assert d.intent.total_value == pytest.approx(70.0)
    assert _events(d).count(EventType.RISK_ADJUSTMENT) == 1


def test_bullish_while_long_holds(bullish_candles, risk_config):
    price = bullish_candles[-1].close
    d = evaluate(bullish_candles, risk_config, _long(price))
    assert d.intent.action == Action.HOLD
    assert d.position == _long(price)
    assert EventType.NO_ACTION in _events(d)


def test_bearish_exit(bearish_candles, risk_config):
    price = bearish_candles[-1].close
    d = evaluate(bearish_candles, risk_config, _long(price))
    assert d.regime == Regime.BEARISH
    assert d.intent.action == Action.SELL
    assert d.intent.reason.startswith("Bearish signal")
    assert d.intent.pnl == pytest.approx(0.0)


def test_bearish_flat_holds(bearish_candles, risk_config):
    d = evaluate(bearish_candles, risk_config, None)
    assert d.intent.action == Action.HOLD
    assert d.position is None


def test_weakening_momentum_exit(weakening_candles, risk_config):
    price = weakening_candles[-1].close
    d = evaluate(weakening_candles, risk_config, _long(price))
    assert d.regime == Regime.RANGE
    assert d.snapshot.adx >= 20
    assert d.intent.action == Action.SELL
    assert "weakening momentum" in d.intent.reason


def test_range_mean_reversion_exit():
    # alternating 100/101 with no bar range (ADX 0), last bar jumps above the upper band
    closes = [100.0 if i % 2 == 0 else 101.0 for i in range(39)] + [104.0]
    candles = build_candles(closes, spread=0.0)
    config = RiskConfig(short_ma_period=3, long_ma_period=5)
    d = evaluate(candles, config, _long(103.0))
    assert d.regime == Regime.RANGE
    assert d.snapshot.adx == 0.0
    assert d.intent.action == Action.SELL
    assert "Range mean reversion exit" in d.intent.reason


def test_volatility_gate_suppresses_signals():
    closes = cycle_closes(BULL_CYCLE, 60)
    highs = [c * 1.1 for c in closes]
    lows = [c * 0.9 for c in closes]
    candles = build_candles(closes, highs=highs, lows=lows)
    d = evaluate(candles, RiskConfig(), None)
    assert d.snapshot.volatility_pct >= 8
    assert d.intent.action == Action.HOLD
    assert "high volatility" in d.intent.reason.lower()
    events = _events(d)
    assert EventType.VOLATILITY_HOLD in events
    assert EventType.RISK_ADJUSTMENT in events


# ── Position invariant ───────────────────────────────────────────────────

def test_sell_while_flat_is_a_defect():
    with pytest.raises(PositionInvariantError):
        sell_intent(None, 100.0, "bad")


def test_buy_while_long_is_a_defect():
    buy = TradeIntent(Action.BUY, 100.0, 1.0, 100.0, "bad")
    with pytest.raises(PositionInvariantError):
        apply_intent(_long(90.0), buy, datetime(2026, 1, 1, tzinfo=timezone.utc))


def test_actions_alternate_over_a_replay():
    closes = (
        cycle_closes(BULL_CYCLE, 60)
        + cycle_closes(BEAR_CYCLE, 60, start=118.0)[1:]
        + cycle_closes(BULL_CYCLE, 60, start=100.0)[1:]
    )
    candles = build_candles(closes)
    config = RiskConfig()
    result = BacktestEngine(config, policy=LivePolicy(config)).run(candles)
    actions = [t.action for t in result.trades]
    assert actions, "replay should trade at least once"
    for prev, nxt in zip(actions, actions[1:]):
        assert prev != nxt
    assert actions[0] == Action.BUY


def test_policy_holds_no_state(bullish_candles, risk_config):
    policy = LivePolicy(risk_config)
    ctx = BarContext(candles=bullish_candles)
    assert policy.evaluate(ctx) == policy.evaluate(ctx)
