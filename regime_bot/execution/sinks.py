"""Log sink that writes decision records to the stdlib logger tree."""

from __future__ import annotations
import logging
from typing import List, Optional

from regime_bot.core.events import LogLevel, LogRecord
from regime_bot.execution.base import LogSink
from regime_bot.utils.telegram import TelegramNotifier

logger = logging.getLogger("regime_bot.events")

_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LoggingSink(LogSink):
    """Logs every record, keeps them in memory, alerts on warn/error."""

    def __init__(self, notifier: Optional[TelegramNotifier] = None, pair: str = ""):
        self.notifier = notifier
        self.pair = pair
        self.records: List[LogRecord] = []

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)
        logger.log(_LEVELS[record.level], "[%s] %s", record.event_type.value, record.message)
        if self.notifier is not None and record.level != LogLevel.INFO:
            prefix = f"{self.pair} | " if self.pair else ""
            self.notifier.send(f"{prefix}{record.level.value.upper()} {record.event_type.value}: {record.message}")
