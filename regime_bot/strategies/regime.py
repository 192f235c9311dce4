"""Market regime from trend strength (RSI in the live policy)."""

from regime_bot.core.types import Regime

BULLISH_ABOVE = 60.0
BEARISH_BELOW = 40.0


def classify_regime(trend_strength: float, volatility_pct: float) -> Regime:
    """
    > 60 bullish, < 40 bearish, otherwise range. Each bar is classified on
    its own (no hysteresis); volatility does not move the thresholds.
    """
    if trend_strength > BULLISH_ABOVE:
        return Regime.BULLISH
    if trend_strength < BEARISH_BELOW:
        return Regime.BEARISH
    return Regime.RANGE
