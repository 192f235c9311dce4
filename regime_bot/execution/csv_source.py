"""OHLCV CSV file as a candle source, for offline backtests."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List

import pandas as pd

from regime_bot.core.errors import DataSourceError
from regime_bot.core.types import OHLCV_COLUMNS, Candle, candles_from_frame
from regime_bot.execution.base import CandleSource

logger = logging.getLogger("regime_bot.execution.csv")


class CsvCandleSource(CandleSource):
    """
    Reads columns time, open, high, low, close, volume (timestamp is accepted
    as an alias for time; integer times are epoch milliseconds). The pair
    argument is ignored: one file holds one pair.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def fetch(self, pair: str, limit: int) -> List[Candle]:
        if not self.path.exists():
            raise DataSourceError(f"Candle file not found: {self.path}")
        df = pd.read_csv(self.path)
        if "time" not in df.columns and "timestamp" in df.columns:
            df = df.rename(columns={"timestamp": "time"})
        missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
        if missing:
            raise DataSourceError(f"{self.path} is missing columns: {', '.join(missing)}")
        if pd.api.types.is_integer_dtype(df["time"]):
            df["time"] = pd.to_datetime(df["time"], unit="ms", utc=True)
        else:
            df["time"] = pd.to_datetime(df["time"], utc=True)
        df = df.sort_values("time").tail(limit) if limit > 0 else df.sort_values("time")
        logger.info("Loaded %d candles from %s", len(df), self.path)
        return candles_from_frame(df)
