"""Shared candle fixtures. All series are deterministic."""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

import pytest

from regime_bot.core.config import RiskConfig
from regime_bot.core.types import Candle

START = datetime(2026, 10, 18, 0, 0, tzinfo=timezone.utc)

# One 14-delta cycle with 9 ups and 5 downs: RSI over any full cycle is 64.29
BULL_CYCLE = [1, 1, -1, 1, 1, -1, 1, 1, -1, 1, 1, -1, 1, -1]
# Mirror image: RSI 35.71
BEAR_CYCLE = [-d for d in BULL_CYCLE]


def build_candles(
    closes: Sequence[float],
    spread: float = 0.5,
    start: datetime = START,
    step: timedelta = timedelta(minutes=1),
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
) -> List[Candle]:
    candles = []
    for i, close in enumerate(closes):
        candles.append(Candle(
            timestamp=start + i * step,
            open=close,
            high=highs[i] if highs is not None else close + spread,
            low=lows[i] if lows is not None else close - spread,
            close=close,
            volume=1000.0,
        ))
    return candles


def cycle_closes(cycle: Sequence[float], n: int, start: float = 100.0) -> List[float]:
    closes = [start]
    for i in range(1, n):
        closes.append(closes[-1] + cycle[(i - 1) % len(cycle)])
    return closes


@pytest.fixture
def make_candles() -> Callable[..., List[Candle]]:
    return build_candles


@pytest.fixture
def risk_config() -> RiskConfig:
    return RiskConfig(
        short_ma_period=10,
        long_ma_period=50,
        trade_amount=100.0,
        stop_loss_percent=2.0,
        take_profit_percent=5.0,
        max_daily_loss=100.0,
    )


@pytest.fixture
def bullish_candles() -> List[Candle]:
    """Up-drifting series, last 14 deltas are one BULL_CYCLE, every bar has high > low."""
    return build_candles(cycle_closes(BULL_CYCLE, 60))


@pytest.fixture
def bearish_candles() -> List[Candle]:
    return build_candles(cycle_closes(BEAR_CYCLE, 60, start=200.0))


@pytest.fixture
def weakening_candles() -> List[Candle]:
    """Steady decline, then a 6-up / 8-down cycle: RSI 42.86 (range), short MA < long MA."""
    decline = [200.0 - i for i in range(40)]
    cycle = [1, -1, 1, -1, 1, -1, 1, -1, 1, -1, 1, -1, -1, -1]
    tail = cycle_closes(cycle, 21, start=decline[-1])[1:]
    return build_candles(decline + tail)


@pytest.fixture
def flat_candles() -> List[Candle]:
    """55 bars at 100 with no range: ATR and ADX are 0."""
    return build_candles([100.0] * 55, spread=0.0)
