"""Indicators: pure technical functions and the per-bar snapshot."""

from regime_bot.indicators.technical import (
    Bands,
    Levels,
    Macd,
    adx,
    atr,
    bollinger_bands,
    ema,
    macd,
    rsi,
    sma,
    support_resistance,
)
from regime_bot.indicators.snapshot import IndicatorSnapshot, compute_snapshot, required_history

__all__ = [
    "Bands",
    "Levels",
    "Macd",
    "adx",
    "atr",
    "bollinger_bands",
    "ema",
    "macd",
    "rsi",
    "sma",
    "support_resistance",
    "IndicatorSnapshot",
    "compute_snapshot",
    "required_history",
]
