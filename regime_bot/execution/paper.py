"""
In-process config store and trade ledger for paper trading and tests.
MemoryLedger can also append every record to a JSON-lines file.
"""

from __future__ import annotations
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from regime_bot.core.config import RiskConfig
from regime_bot.core.errors import PositionInvariantError
from regime_bot.core.types import Action, MarketContext, PortfolioSnapshot, TradeRecord
from regime_bot.execution.base import ConfigStore, TradeLedger

logger = logging.getLogger("regime_bot.execution.paper")


class MemoryConfigStore(ConfigStore):
    def __init__(self, risk_config: RiskConfig, is_active: bool = True):
        self._risk_config = risk_config
        self._active = is_active

    def load(self) -> Tuple[RiskConfig, bool]:
        return self._risk_config, self._active

    def set_active(self, active: bool) -> None:
        if self._active != active:
            logger.info("Bot %s", "enabled" if active else "disabled")
        self._active = active


class MemoryLedger(TradeLedger):
    """
    Ordered trade list; rejects a BUY after a BUY and a SELL that does not
    follow a BUY, so the stored history always alternates.
    """

    def __init__(self, path: Optional[Path] = None):
        self.trades: List[TradeRecord] = []
        self.portfolio: List[PortfolioSnapshot] = []
        self.market_context: List[MarketContext] = []
        self.path = Path(path) if path else None
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def append_trade(self, trade: TradeRecord) -> None:
        if trade.action == Action.HOLD:
            raise ValueError("HOLD is not a trade")
        last = self.last_trade()
        in_position = last is not None and last.action == Action.BUY
        if trade.action == Action.BUY and in_position:
            raise PositionInvariantError("ledger: BUY while already long")
        if trade.action == Action.SELL and not in_position:
            raise PositionInvariantError("ledger: SELL while flat")
        self.trades.append(trade)
        self._write("trade", trade.to_dict())

    def last_trade(self) -> Optional[TradeRecord]:
        return self.trades[-1] if self.trades else None

    def trades_since(self, since: datetime) -> List[TradeRecord]:
        return [t for t in self.trades if t.timestamp >= since]

    def append_portfolio(self, snapshot: PortfolioSnapshot) -> None:
        self.portfolio.append(snapshot)
        self._write("portfolio", snapshot.to_dict())

    def last_portfolio(self) -> Optional[PortfolioSnapshot]:
        return self.portfolio[-1] if self.portfolio else None

    def append_market_context(self, context: MarketContext) -> None:
        self.market_context.append(context)
        self._write("market_context", context.to_dict())

    def _write(self, kind: str, payload: dict[str, Any]) -> None:
        if self.path is None:
            return
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps({"kind": kind, **payload}) + "\n")
