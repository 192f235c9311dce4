"""Execution: candle/sentiment sources, config store, trade ledger, log sink."""

from regime_bot.execution.base import CandleSource, ConfigStore, LogSink, SentimentSource, TradeLedger
from regime_bot.execution.binance_spot import BinanceCandleSource
from regime_bot.execution.csv_source import CsvCandleSource
from regime_bot.execution.paper import MemoryConfigStore, MemoryLedger
from regime_bot.execution.sentiment import FixedSentimentSource, RandomSentimentSource
from regime_bot.execution.sinks import LoggingSink

__all__ = [
    "CandleSource",
    "ConfigStore",
    "LogSink",
    "SentimentSource",
    "TradeLedger",
    "BinanceCandleSource",
    "CsvCandleSource",
    "MemoryConfigStore",
    "MemoryLedger",
    "FixedSentimentSource",
    "RandomSentimentSource",
    "LoggingSink",
]
