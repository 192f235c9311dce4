"""
Core data types for candles, positions, trade intents, and ledger records.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional, TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from regime_bot.indicators.snapshot import IndicatorSnapshot


class Action(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class Regime(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    RANGE = "range"


@dataclass(frozen=True)
class Candle:
    """OHLCV candle."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class Position:
    """Open long position. Flat is represented by None."""
    entry_price: float
    quantity: float
    entry_time: datetime


@dataclass(frozen=True)
class TradeIntent:
    """Outcome of one evaluation. pnl is only set on SELL."""
    action: Action
    price: float
    quantity: float
    total_value: float
    reason: str
    pnl: Optional[float] = None

    @classmethod
    def hold(cls, price: float, reason: str) -> "TradeIntent":
        return cls(action=Action.HOLD, price=price, quantity=0.0, total_value=0.0, reason=reason)

    @property
    def is_trade(self) -> bool:
        return self.action != Action.HOLD


@dataclass(frozen=True)
class TradeRecord:
    """Executed or simulated trade as stored in a ledger."""
    pair: str
    action: Action
    price: float
    quantity: float
    total_value: float
    timestamp: datetime
    reason: str = ""
    pnl: Optional[float] = None
    status: str = "executed"  # "executed" | "simulated"
    signal_type: str = "context_aware"

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["action"] = self.action.value
        d["timestamp"] = self.timestamp.isoformat()
        return d


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Running balance after a trade."""
    total_value: float
    available_balance: float
    in_position: bool
    current_position_value: float
    total_pnl: float
    recorded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["recorded_at"] = self.recorded_at.isoformat()
        return d


@dataclass(frozen=True)
class MarketContext:
    """Indicator state, regime and sentiment seen on one live tick."""
    pair: str
    timestamp: datetime
    snapshot: "IndicatorSnapshot"
    regime: Regime
    sentiment: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "pair": self.pair,
            "timestamp": self.timestamp.isoformat(),
            "regime": self.regime.value,
            "sentiment": self.sentiment,
            **self.snapshot.to_dict(),
        }


OHLCV_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Build candles from an OHLCV DataFrame (columns: time, open, high, low, close, volume)."""
    if df.empty:
        return []
    times = pd.to_datetime(df["time"], utc=True)
    return [
        Candle(
            timestamp=t.to_pydatetime(),
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for t, o, h, l, c, v in zip(times, df["open"], df["high"], df["low"], df["close"], df["volume"])
    ]


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    rows = [(c.timestamp, c.open, c.high, c.low, c.close, c.volume) for c in candles]
    return pd.DataFrame(rows, columns=OHLCV_COLUMNS)
