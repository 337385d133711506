"""Trend detection — EMA alignment confirmed by market structure.

``detect_trend()`` pairs a dual-EMA comparison with the higher-high /
higher-low structure test.  Both must agree for a directional bias;
everything else is "flat".
"""

from dataclasses import dataclass
from typing import Literal, Optional

from yieldtrader.strategy.indicators import (
    is_bearish_structure,
    is_bullish_structure,
    latest_ema,
)
from yieldtrader.strategy.models import CandleData


@dataclass(frozen=True)
class TrendState:
    """Snapshot of the current trend direction and EMA values."""

    direction: Literal["bullish", "bearish", "flat"]
    ema_fast_value: float
    ema_slow_value: float
    slope: float  # ema_fast - ema_slow (positive = bullish bias)


def detect_trend(
    candles: list[CandleData],
    ema_fast: int = 20,
    ema_slow: int = 50,
    lookback: int = 5,
) -> Optional[TrendState]:
    """Classify trend direction from EMA alignment and market structure.

    Args:
        candles: Candle history, oldest-first.
        ema_fast: Fast EMA period (default 20).
        ema_slow: Slow EMA period (default 50).
        lookback: Structure window passed to the structure predicates.

    Returns:
        ``TrendState``, or ``None`` when either EMA cannot be computed.

    Rules:
        - **Bullish**: EMA(fast) > EMA(slow) AND bullish structure.
        - **Bearish**: EMA(fast) < EMA(slow) AND bearish structure.
        - **Flat**: everything else.
    """
    ema_f = latest_ema(candles, ema_fast)
    ema_s = latest_ema(candles, ema_slow)
    if ema_f is None or ema_s is None:
        return None

    if ema_f > ema_s and is_bullish_structure(candles, lookback):
        direction = "bullish"
    elif ema_f < ema_s and is_bearish_structure(candles, lookback):
        direction = "bearish"
    else:
        direction = "flat"

    return TrendState(
        direction=direction,
        ema_fast_value=ema_f,
        ema_slow_value=ema_s,
        slope=ema_f - ema_s,
    )
