"""Core: config, types, errors, structured events, logging."""

from regime_bot.core.config import load_config, Config, RiskConfig
from regime_bot.core.types import (
    Action,
    Candle,
    MarketContext,
    PortfolioSnapshot,
    Position,
    Regime,
    TradeIntent,
    TradeRecord,
)
from regime_bot.core.errors import DataSourceError, PositionInvariantError
from regime_bot.core.events import EventType, LogLevel, LogRecord
from regime_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "RiskConfig",
    "Action",
    "Candle",
    "MarketContext",
    "PortfolioSnapshot",
    "Position",
    "Regime",
    "TradeIntent",
    "TradeRecord",
    "DataSourceError",
    "PositionInvariantError",
    "EventType",
    "LogLevel",
    "LogRecord",
    "setup_logging",
]
