"""
Risk manager: daily loss circuit breaker, stop-loss / take-profit exits,
volatility and sentiment scaled position size, volatility safety gate.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from regime_bot.core.config import RiskConfig
from regime_bot.core.types import Position

logger = logging.getLogger("regime_bot.risk")

HIGH_VOLATILITY_PCT = 3.0
HIGH_VOLATILITY_FACTOR = 0.5
NEGATIVE_SENTIMENT = -0.5
NEGATIVE_SENTIMENT_FACTOR = 0.7
MAX_VOLATILITY_PCT = 8.0


@dataclass(frozen=True)
class ExitSignal:
    """Protective exit on an open position."""
    kind: str  # "stop_loss" | "take_profit"
    price_change_pct: float


@dataclass(frozen=True)
class SizeAdjustment:
    factor: float
    cause: str  # "volatility" | "sentiment"


@dataclass
class SizingResult:
    """Trade amount after risk discounts, with the discounts applied in order."""
    amount: float
    adjustments: List[SizeAdjustment] = field(default_factory=list)


class RiskManager:
    """Stateless rule arithmetic over one RiskConfig snapshot."""

    def __init__(self, config: RiskConfig):
        self.config = config

    def circuit_breaker_tripped(self, today_realized_pnl: float) -> bool:
        """True when today's realized PnL magnitude reaches max_daily_loss."""
        if abs(today_realized_pnl) >= self.config.max_daily_loss:
            logger.warning(
                "Daily loss limit reached: |%.2f| >= %.2f",
                today_realized_pnl, self.config.max_daily_loss,
            )
            return True
        return False

    @staticmethod
    def price_change_pct(entry_price: float, price: float) -> float:
        if entry_price <= 0:
            return 0.0
        return (price - entry_price) / entry_price * 100

    def protective_exit(self, position: Optional[Position], price: float) -> Optional[ExitSignal]:
        """Stop-loss or take-profit breach for a long position, else None."""
        if position is None:
            return None
        change = self.price_change_pct(position.entry_price, price)
        if change <= -self.config.stop_loss_percent:
            return ExitSignal(kind="stop_loss", price_change_pct=change)
        if change >= self.config.take_profit_percent:
            return ExitSignal(kind="take_profit", price_change_pct=change)
        return None

    def size_position(self, volatility_pct: float, sentiment: float) -> SizingResult:
        """Volatility discount first, then sentiment discount; they compose."""
        result = SizingResult(amount=self.config.trade_amount)
        if volatility_pct > HIGH_VOLATILITY_PCT:
            result.amount *= HIGH_VOLATILITY_FACTOR
            result.adjustments.append(SizeAdjustment(HIGH_VOLATILITY_FACTOR, "volatility"))
        if sentiment < NEGATIVE_SENTIMENT:
            result.amount *= NEGATIVE_SENTIMENT_FACTOR
            result.adjustments.append(SizeAdjustment(NEGATIVE_SENTIMENT_FACTOR, "sentiment"))
        return result

    @staticmethod
    def volatility_ok(volatility_pct: float) -> bool:
        return volatility_pct < MAX_VOLATILITY_PCT
