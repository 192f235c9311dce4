"""
Structured decision log records. Each event type carries a fixed metadata
schema; sinks render them with to_dict().
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Optional, Union


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class EventType(str, Enum):
    ENGINE_START = "engine_start"
    RISK_ADJUSTMENT = "risk_adjustment"
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    VOLATILITY_HOLD = "volatility_hold"
    INSUFFICIENT_DATA = "insufficient_data"
    TRADE_SIGNAL = "trade_signal"
    TRADE_EXECUTED = "trade_executed"
    NO_ACTION = "no_action"
    SAFETY_LIMIT = "safety_limit"
    DATA_UNAVAILABLE = "data_unavailable"


@dataclass(frozen=True)
class RiskAdjustmentMeta:
    factor: float
    volatility_pct: float
    sentiment: float


@dataclass(frozen=True)
class ProtectiveExitMeta:
    entry_price: float
    current_price: float
    price_change_pct: float


@dataclass(frozen=True)
class TradeSignalMeta:
    price: float
    quantity: float
    total_value: float
    rsi: float
    macd: float
    volatility_pct: float
    regime: str


@dataclass(frozen=True)
class TradeExecutedMeta:
    quantity: float
    total_value: float
    pnl: Optional[float] = None


@dataclass(frozen=True)
class SafetyLimitMeta:
    today_pnl: float
    max_daily_loss: float


@dataclass(frozen=True)
class HistoryMeta:
    available: int
    required: int


EventMetadata = Union[
    RiskAdjustmentMeta,
    ProtectiveExitMeta,
    TradeSignalMeta,
    TradeExecutedMeta,
    SafetyLimitMeta,
    HistoryMeta,
]


@dataclass(frozen=True)
class LogRecord:
    level: LogLevel
    event_type: EventType
    message: str
    metadata: Optional[EventMetadata] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "event_type": self.event_type.value,
            "message": self.message,
            "metadata": asdict(self.metadata) if self.metadata is not None else None,
        }


def info(event_type: EventType, message: str, metadata: Optional[EventMetadata] = None) -> LogRecord:
    return LogRecord(LogLevel.INFO, event_type, message, metadata)


def warn(event_type: EventType, message: str, metadata: Optional[EventMetadata] = None) -> LogRecord:
    return LogRecord(LogLevel.WARN, event_type, message, metadata)


def error(event_type: EventType, message: str, metadata: Optional[EventMetadata] = None) -> LogRecord:
    return LogRecord(LogLevel.ERROR, event_type, message, metadata)
