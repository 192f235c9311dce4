"""Risk management: circuit breaker, protective exits, position sizing, volatility gate."""

from regime_bot.risk.manager import ExitSignal, RiskManager, SizingResult

__all__ = ["ExitSignal", "RiskManager", "SizingResult"]
