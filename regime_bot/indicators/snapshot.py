"""Per-bar indicator snapshot consumed by the live policy."""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Optional, Sequence

from regime_bot.core.types import Candle
from regime_bot.indicators import technical as ta

RSI_PERIOD = 14
ATR_PERIOD = 14
ADX_PERIOD = 14
BOLLINGER_PERIOD = 20


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values at the last candle. Built fresh for each evaluated bar."""
    price: float
    short_ma: Optional[float]
    long_ma: Optional[float]
    rsi: float
    atr: float
    bollinger: ta.Bands
    macd: float
    macd_signal: float
    adx: float
    support: float
    resistance: float
    volatility_pct: float

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["bollinger"] = self.bollinger._asdict()
        return d


def required_history(short_period: int, long_period: int) -> int:
    """Bars needed before every snapshot field is past its sentinel."""
    return max(
        short_period,
        long_period,
        ta.MACD_SLOW,
        BOLLINGER_PERIOD,
        RSI_PERIOD + 1,
        ATR_PERIOD + 1,
        ADX_PERIOD + 1,
    )


def compute_snapshot(candles: Sequence[Candle], short_period: int, long_period: int) -> IndicatorSnapshot:
    """Compute every indicator at the last candle. Short input yields sentinels, not errors."""
    closes = [c.close for c in candles]
    highs = [c.high for c in candles]
    lows = [c.low for c in candles]
    price = closes[-1] if closes else 0.0

    atr = ta.atr(highs, lows, closes, ATR_PERIOD)
    m = ta.macd(closes)
    levels = ta.support_resistance(closes)
    volatility = (atr / price) * 100 if price else 0.0

    return IndicatorSnapshot(
        price=price,
        short_ma=ta.sma(closes, short_period),
        long_ma=ta.sma(closes, long_period),
        rsi=ta.rsi(closes, RSI_PERIOD),
        atr=atr,
        bollinger=ta.bollinger_bands(closes, BOLLINGER_PERIOD),
        macd=m.macd,
        macd_signal=m.signal,
        adx=ta.adx(highs, lows, ADX_PERIOD),
        support=levels.support,
        resistance=levels.resistance,
        volatility_pct=volatility,
    )
