"""Stand-in sentiment scores. No real sentiment feed is implied."""

from __future__ import annotations
import random
from typing import Optional

from regime_bot.execution.base import SentimentSource


class RandomSentimentSource(SentimentSource):
    """Uniform score in [-1, 1]; seed it for reproducible runs."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def fetch(self) -> float:
        return self._rng.uniform(-1.0, 1.0)


class FixedSentimentSource(SentimentSource):
    def __init__(self, value: float = 0.0):
        if not -1.0 <= value <= 1.0:
            raise ValueError(f"sentiment must be in [-1, 1], got {value}")
        self.value = value

    def fetch(self) -> float:
        return self.value
