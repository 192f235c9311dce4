"""
Technical indicators over plain price series. Pure functions, no I/O.

Every function is total: when the series is shorter than the lookback it
returns a documented sentinel instead of raising, so callers must check for
it before acting.

MACD signal, ADX and support/resistance are deliberately simplified
formulas kept for parity with the reference numbers; see the function
docstrings before swapping in textbook versions.
"""

from __future__ import annotations
import math
from typing import NamedTuple, Optional, Sequence

import numpy as np

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL_FACTOR = 0.9
ADX_BAR_SCORE = 25.0


class Bands(NamedTuple):
    upper: float
    middle: float
    lower: float


class Macd(NamedTuple):
    macd: float
    signal: float


class Levels(NamedTuple):
    support: float
    resistance: float


def _as_array(series: Sequence[float]) -> np.ndarray:
    return np.asarray(series, dtype=float)


def sma(series: Sequence[float], period: int) -> Optional[float]:
    """Mean of the last *period* values. None when len(series) < period."""
    arr = _as_array(series)
    if period <= 0 or len(arr) < period:
        return None
    return float(arr[-period:].mean())


def ema(series: Sequence[float], period: int) -> Optional[float]:
    """
    EMA over the last *period* values only: seeded with the first value of
    that window, then ema = (price - ema) * 2/(period+1) + ema.
    None when len(series) < period.
    """
    arr = _as_array(series)
    if period <= 0 or len(arr) < period:
        return None
    k = 2.0 / (period + 1)
    window = arr[-period:]
    value = float(window[0])
    for price in window[1:]:
        value = (float(price) - value) * k + value
    return value


def rsi(series: Sequence[float], period: int = 14) -> float:
    """Simple-average RSI over the last *period* deltas. 50.0 when history is short."""
    arr = _as_array(series)
    if period <= 0 or len(arr) < period + 1:
        return 50.0
    deltas = np.diff(arr[-(period + 1):])
    avg_gain = float(deltas[deltas > 0].sum()) / period
    avg_loss = float(-deltas[deltas < 0].sum()) / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """
    Average True Range: TR = max(high - low, |high - prev_close|, |low - prev_close|),
    simple mean of the last *period* TRs. 0.0 when fewer than period + 1 bars.
    """
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    n = min(len(h), len(l), len(c))
    if period <= 0 or n < period + 1:
        return 0.0
    h, l, c = h[-(period + 1):], l[-(period + 1):], c[-(period + 1):]
    prev_close = c[:-1]
    tr = np.maximum.reduce([
        h[1:] - l[1:],
        np.abs(h[1:] - prev_close),
        np.abs(l[1:] - prev_close),
    ])
    return float(tr.mean())


def bollinger_bands(series: Sequence[float], period: int = 20) -> Bands:
    """Middle = SMA(period), bands at +-2 population std. Bands(0, 0, 0) when short."""
    arr = _as_array(series)
    if period <= 0 or len(arr) < period:
        return Bands(0.0, 0.0, 0.0)
    window = arr[-period:]
    middle = float(window.mean())
    std = float(window.std())  # ddof=0
    return Bands(upper=middle + 2 * std, middle=middle, lower=middle - 2 * std)


def macd(series: Sequence[float]) -> Macd:
    """
    MACD = EMA(12) - EMA(26). The signal line is approximated as macd * 0.9,
    not a 9-period EMA of MACD. Macd(0, 0) until 26 values are available.
    """
    fast = ema(series, MACD_FAST)
    slow = ema(series, MACD_SLOW)
    if fast is None or slow is None:
        return Macd(0.0, 0.0)
    value = fast - slow
    return Macd(macd=value, signal=value * MACD_SIGNAL_FACTOR)


def adx(highs: Sequence[float], lows: Sequence[float], period: int = 14) -> float:
    """
    Placeholder trend-strength score, not Wilder's ADX: each of the last
    *period* bars with high > low scores 25, then averaged. 0.0 when fewer
    than period + 1 bars.
    """
    h, l = _as_array(highs), _as_array(lows)
    n = min(len(h), len(l))
    if period <= 0 or n < period + 1:
        return 0.0
    ranging = h[-period:] > l[-period:]
    return float(ranging.sum()) * ADX_BAR_SCORE / period


def support_resistance(series: Sequence[float]) -> Levels:
    """20th / 80th percentile of the sorted series by index, no interpolation."""
    ordered = sorted(float(x) for x in series)
    n = len(ordered)
    if n == 0:
        return Levels(0.0, 0.0)
    return Levels(
        support=ordered[math.floor(n * 0.2)],
        resistance=ordered[math.floor(n * 0.8)],
    )
