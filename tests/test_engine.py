"""Tests for the live trading tick (regime_bot.engine) with in-memory collaborators."""

import json
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from regime_bot.core.errors import DataSourceError, PositionInvariantError
from regime_bot.core.events import EventType, LogLevel
from regime_bot.core.types import Action, Candle, TradeIntent, TradeRecord
from regime_bot.engine import TradingEngine, next_portfolio_snapshot, position_from_trade
from regime_bot.execution.base import CandleSource
from regime_bot.execution.paper import MemoryConfigStore, MemoryLedger
from regime_bot.execution.sentiment import FixedSentimentSource
from regime_bot.execution.sinks import LoggingSink

from conftest import build_candles

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class ListCandleSource(CandleSource):
    def __init__(self, candles: List[Candle], error: Exception = None):
        self.candles = candles
        self.error = error
        self.calls = 0

    def fetch(self, pair: str, limit: int) -> List[Candle]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.candles[-limit:]


class RecordingNotifier:
    def __init__(self):
        self.sent: List[str] = []

    def send(self, text: str) -> bool:
        self.sent.append(text)
        return True


def _engine(candles, risk_config, active=True, notifier=None, ledger=None):
    return TradingEngine(
        pair="BTCUSDT",
        candle_source=ListCandleSource(candles),
        sentiment_source=FixedSentimentSource(0.0),
        config_store=MemoryConfigStore(risk_config, is_active=active),
        ledger=ledger or MemoryLedger(),
        sink=LoggingSink(notifier, pair="BTCUSDT"),
        clock=lambda: NOW,
    )


def _events(engine):
    return [r.event_type for r in engine.sink.records]


def _closed_trade(at: datetime, pnl: float) -> List[TradeRecord]:
    buy = TradeRecord("BTCUSDT", Action.BUY, 100.0, 1.0, 100.0, at - timedelta(minutes=30))
    sell = TradeRecord("BTCUSDT", Action.SELL, 100.0 + pnl, 1.0, 100.0 + pnl, at, pnl=pnl)
    return [buy, sell]


def test_inactive_bot_does_nothing(bullish_candles, risk_config):
    engine = _engine(bullish_candles, risk_config, active=False)
    result = engine.tick()
    assert result.evaluated is False
    assert engine.candle_source.calls == 0
    assert engine.sink.records == []
    assert engine.ledger.trades == []


def test_buy_is_recorded_with_portfolio_and_context(bullish_candles, risk_config):
    engine = _engine(bullish_candles, risk_config)
    result = engine.tick()
    price = bullish_candles[-1].close

    assert result.evaluated is True
    assert result.trade is not None
    assert result.trade.action == Action.BUY
    assert result.trade.timestamp == NOW
    assert result.trade.status == "executed"
    assert result.trade.signal_type == "context_aware"
    assert engine.ledger.trades == [result.trade]

    snap = engine.ledger.last_portfolio()
    assert snap.available_balance == pytest.approx(9900.0)
    assert snap.total_value == pytest.approx(10000.0)
    assert snap.in_position is True

    assert len(engine.ledger.market_context) == 1
    assert engine.ledger.market_context[0].snapshot.price == price

    events = _events(engine)
    assert events[0] == EventType.ENGINE_START
    assert EventType.TRADE_SIGNAL in events
    assert events[-1] == EventType.TRADE_EXECUTED


def test_next_tick_uses_ledger_position_for_stop_loss(bullish_candles, risk_config):
    engine = _engine(bullish_candles, risk_config)
    buy = engine.tick().trade
    crash = build_candles([110.0], start=bullish_candles[-1].timestamp + timedelta(minutes=1))
    engine.candle_source.candles = bullish_candles + crash

    result = engine.tick()
    assert result.trade.action == Action.SELL
    assert "stop loss" in result.trade.reason.lower()
    assert result.trade.quantity == pytest.approx(buy.quantity)
    assert result.trade.pnl == pytest.approx((110.0 - buy.price) * buy.quantity)
    assert [t.action for t in engine.ledger.trades] == [Action.BUY, Action.SELL]

    snap = engine.ledger.last_portfolio()
    assert snap.in_position is False
    assert snap.available_balance == pytest.approx(9900.0 + buy.quantity * 110.0)
    assert snap.total_pnl == pytest.approx(result.trade.pnl)
    assert EventType.STOP_LOSS in _events(engine)


def test_circuit_breaker_disables_bot(bullish_candles, risk_config):
    ledger = MemoryLedger()
    for trade in _closed_trade(NOW - timedelta(hours=2), -120.0):
        ledger.append_trade(trade)
    engine = _engine(bullish_candles, risk_config, ledger=ledger)

    result = engine.tick()
    assert result.disabled is True
    assert result.trade is None
    assert engine.config_store.load()[1] is False
    assert EventType.SAFETY_LIMIT in _events(engine)
    assert len(ledger.trades) == 2
    # indicator state is still stored for the paused tick
    assert len(ledger.market_context) == 1
    assert ledger.market_context[0].snapshot.price == bullish_candles[-1].close

    assert engine.tick().evaluated is False
    assert len(ledger.market_context) == 1


def test_yesterdays_pnl_does_not_count(bullish_candles, risk_config):
    ledger = MemoryLedger()
    for trade in _closed_trade(NOW - timedelta(days=1), -500.0):
        ledger.append_trade(trade)
    engine = _engine(bullish_candles, risk_config, ledger=ledger)

    assert engine.today_realized_pnl(NOW) == 0.0
    result = engine.tick()
    assert result.disabled is False
    assert result.trade.action == Action.BUY


def test_data_source_error_propagates(bullish_candles, risk_config):
    engine = _engine(bullish_candles, risk_config)
    engine.candle_source.error = DataSourceError("exchange down")
    with pytest.raises(DataSourceError):
        engine.tick()
    last = engine.sink.records[-1]
    assert last.event_type == EventType.DATA_UNAVAILABLE
    assert last.level == LogLevel.ERROR
    assert engine.ledger.trades == []


def test_empty_candles_hold(risk_config):
    engine = _engine([], risk_config)
    result = engine.tick()
    assert result.evaluated is True
    assert result.decision.intent.action == Action.HOLD
    assert result.trade is None
    assert EventType.INSUFFICIENT_DATA in _events(engine)
    assert engine.ledger.market_context == []


def test_warnings_are_forwarded_to_notifier(bullish_candles, risk_config):
    notifier = RecordingNotifier()
    ledger = MemoryLedger()
    for trade in _closed_trade(NOW - timedelta(hours=1), -150.0):
        ledger.append_trade(trade)
    engine = _engine(bullish_candles, risk_config, notifier=notifier, ledger=ledger)
    engine.tick()
    assert len(notifier.sent) == 1
    assert notifier.sent[0].startswith("BTCUSDT | WARN safety_limit")


def test_ledger_writes_json_lines(tmp_path, bullish_candles, risk_config):
    path = tmp_path / "logs" / "ledger.jsonl"
    engine = _engine(bullish_candles, risk_config, ledger=MemoryLedger(path))
    engine.tick()
    rows = [json.loads(line) for line in path.read_text().splitlines()]
    assert [r["kind"] for r in rows] == ["market_context", "trade", "portfolio"]
    assert rows[1]["action"] == "buy"
    assert rows[0]["regime"] == "bullish"


def test_ledger_rejects_out_of_order_trades():
    ledger = MemoryLedger()
    sell = TradeRecord("BTCUSDT", Action.SELL, 100.0, 1.0, 100.0, NOW, pnl=0.0)
    with pytest.raises(PositionInvariantError):
        ledger.append_trade(sell)


def test_position_from_trade():
    assert position_from_trade(None) is None
    buy, sell = _closed_trade(NOW, 5.0)
    assert position_from_trade(sell) is None
    pos = position_from_trade(buy)
    assert pos.entry_price == 100.0
    assert pos.entry_time == buy.timestamp


def test_hold_does_not_change_portfolio():
    with pytest.raises(ValueError):
        next_portfolio_snapshot(None, TradeIntent.hold(100.0, "nothing"), NOW, 10000.0)
