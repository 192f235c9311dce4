"""Exceptions raised by the decision core and its data adapters."""


class PositionInvariantError(AssertionError):
    """BUY while long or SELL while flat. A logic defect, never recovered from."""


class DataSourceError(RuntimeError):
    """Candle or sentiment source failed. Callers may retry on the next poll."""
