"""Utils: Telegram alerts, interval conversion."""

from regime_bot.utils.telegram import TelegramNotifier
from regime_bot.utils.timeframes import timeframe_minutes

__all__ = ["TelegramNotifier", "timeframe_minutes"]
