"""
Binance spot klines as a candle source, with rate-limit retry.
Public market data only; API keys are optional.
"""

from __future__ import annotations
import functools
import logging
import time
from typing import Any, List, Optional

import pandas as pd
import requests

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from regime_bot.core.errors import DataSourceError
from regime_bot.core.types import Candle, candles_from_frame
from regime_bot.execution.base import CandleSource

logger = logging.getLogger("regime_bot.execution.binance")

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit)."""
    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
        return wrapped
    return decorator


def klines_to_frame(raw: List[list]) -> pd.DataFrame:
    """Binance kline rows -> OHLCV DataFrame (time, open, high, low, close, volume)."""
    df = pd.DataFrame(raw, columns=KLINE_COLUMNS)
    df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
    df["time"] = pd.to_datetime(df["open_time"], unit="ms", utc=True)
    return df[["time", "open", "high", "low", "close", "volume"]]


class BinanceCandleSource(CandleSource):
    """Spot klines for one interval (e.g. '1m', '1h')."""

    def __init__(
        self,
        interval: str = "1m",
        api_key: str = "",
        api_secret: str = "",
        client: Optional[Any] = None,
        base_delay: float = 1.0,
    ):
        self.interval = interval
        self.base_delay = base_delay
        self._api_key = api_key or None
        self._api_secret = api_secret or None
        self._client = client

    @property
    def client(self) -> Any:
        # Client() pings the exchange on construction, so build it on first use
        if self._client is None:
            self._client = Client(self._api_key, self._api_secret)
        return self._client

    def fetch(self, pair: str, limit: int) -> List[Candle]:
        try:
            raw = self._get_klines(pair, limit)
        except (BinanceAPIException, BinanceRequestException, requests.RequestException) as e:
            logger.error("Kline fetch failed for %s: %s", pair, e)
            raise DataSourceError(f"Failed to fetch market data for {pair}: {e}") from e
        if not raw:
            return []
        return candles_from_frame(klines_to_frame(raw))

    def _get_klines(self, pair: str, limit: int) -> List[list]:
        @retry_on_rate_limit(max_retries=3, base_delay=self.base_delay)
        def call() -> List[list]:
            return self.client.get_klines(symbol=pair, interval=self.interval, limit=limit)
        return call()
