"""Technical indicators — EMA, market structure, swing levels. Pure functions, no I/O."""

from typing import Optional

from yieldtrader.strategy.models import CandleData


def calculate_ema(candles: list[CandleData], period: int) -> list[float]:
    """Calculate an Exponential Moving Average series.

    Uses the standard EMA formula:
        ``EMA_today = (close - EMA_yesterday) × k + EMA_yesterday``
    where ``k = 2 / (period + 1)``.

    The first EMA value is seeded with the SMA of the first *period*
    closes.  Returns one value per candle from index ``period - 1``
    onward, i.e. ``len(candles) - period + 1`` values.

    Short series are degenerate: with fewer than *period* candles the
    result is a single value, the SMA of every available close.  Empty
    input returns an empty list.

    Raises ``ValueError`` if *period* is not positive.
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    if not candles:
        return []

    closes = [c.close for c in candles]
    seed_window = closes[:period]
    seed = sum(seed_window) / len(seed_window)

    if len(closes) < period:
        return [seed]

    k = 2.0 / (period + 1)
    ema: list[float] = [seed]
    for close in closes[period:]:
        ema.append((close - ema[-1]) * k + ema[-1])

    return ema


def latest_ema(candles: list[CandleData], period: int) -> Optional[float]:
    """Return the most recent EMA value, or ``None`` for an empty series."""
    ema = calculate_ema(candles, period)
    return ema[-1] if ema else None


# ── Market structure ─────────────────────────────────────────────────────


def _structure_extremes(
    candles: list[CandleData], lookback: int,
) -> Optional[tuple[float, float, float, float]]:
    """``(recent_high, previous_high, recent_low, previous_low)`` or ``None``.

    The recent window is the last *lookback* candles; the previous window
    is the *lookback* candles before it.
    """
    if lookback <= 0 or len(candles) < lookback * 2:
        return None

    recent = candles[-lookback:]
    previous = candles[-lookback * 2 : -lookback]

    return (
        max(c.high for c in recent),
        max(c.high for c in previous),
        min(c.low for c in recent),
        min(c.low for c in previous),
    )


def is_bullish_structure(candles: list[CandleData], lookback: int = 5) -> bool:
    """``True`` when the last *lookback* candles make a higher high AND a higher low.

    Needs ``2 × lookback`` candles; returns ``False`` otherwise.
    """
    extremes = _structure_extremes(candles, lookback)
    if extremes is None:
        return False
    recent_high, previous_high, recent_low, previous_low = extremes
    return recent_high > previous_high and recent_low > previous_low


def is_bearish_structure(candles: list[CandleData], lookback: int = 5) -> bool:
    """``True`` when the last *lookback* candles make a lower high AND a lower low.

    Mixed structure (e.g. higher high with lower low) is neither bullish
    nor bearish.
    """
    extremes = _structure_extremes(candles, lookback)
    if extremes is None:
        return False
    recent_high, previous_high, recent_low, previous_low = extremes
    return recent_high < previous_high and recent_low < previous_low


# ── Swing levels ─────────────────────────────────────────────────────────


def find_swing_high(candles: list[CandleData], lookback: int = 20) -> Optional[float]:
    """Highest high of the last *lookback* candles, ``None`` if too few."""
    if lookback <= 0 or len(candles) < lookback:
        return None
    return max(c.high for c in candles[-lookback:])


def find_swing_low(candles: list[CandleData], lookback: int = 20) -> Optional[float]:
    """Lowest low of the last *lookback* candles, ``None`` if too few."""
    if lookback <= 0 or len(candles) < lookback:
        return None
    return min(c.low for c in candles[-lookback:])
