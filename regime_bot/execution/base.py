"""Abstract collaborators of the trading engine: data sources, stores, log sink."""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from regime_bot.core.config import RiskConfig
from regime_bot.core.events import LogRecord
from regime_bot.core.types import Candle, MarketContext, PortfolioSnapshot, TradeRecord


class CandleSource(ABC):
    """OHLCV history, oldest first, most recent last."""

    @abstractmethod
    def fetch(self, pair: str, limit: int) -> List[Candle]:
        """Return up to *limit* candles. Raise DataSourceError when unavailable."""
        pass


class SentimentSource(ABC):
    @abstractmethod
    def fetch(self) -> float:
        """Sentiment score in [-1, 1]."""
        pass


class ConfigStore(ABC):
    @abstractmethod
    def load(self) -> Tuple[RiskConfig, bool]:
        """Current risk config and is_active flag."""
        pass

    @abstractmethod
    def set_active(self, active: bool) -> None:
        pass


class TradeLedger(ABC):
    """Append-only trades, portfolio snapshots and market context."""

    @abstractmethod
    def append_trade(self, trade: TradeRecord) -> None:
        pass

    @abstractmethod
    def last_trade(self) -> Optional[TradeRecord]:
        pass

    @abstractmethod
    def trades_since(self, since: datetime) -> List[TradeRecord]:
        pass

    @abstractmethod
    def append_portfolio(self, snapshot: PortfolioSnapshot) -> None:
        pass

    @abstractmethod
    def last_portfolio(self) -> Optional[PortfolioSnapshot]:
        pass

    def append_market_context(self, context: MarketContext) -> None:
        """Optional: per-tick indicator record. Default drops it."""
        return None


class LogSink(ABC):
    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        pass
