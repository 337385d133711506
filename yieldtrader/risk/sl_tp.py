"""Stop-loss and take-profit calculation — pure math, no I/O.

SL is anchored at the recent swing extreme opposite the trade.
TP is placed at a fixed reward:risk multiple of the SL distance.
"""

from typing import Optional


DEFAULT_RR_RATIO = 2.0


def select_stop_loss(
    entry: float,
    action: str,
    swing_low: Optional[float],
    swing_high: Optional[float],
) -> Optional[float]:
    """Pick the swing level that protects a trade at *entry*.

    LONG uses the swing low, SHORT the swing high.  Returns ``None`` when
    the level is missing or not strictly beyond entry, since a stop at or
    through entry would invert the trade's risk.
    """
    if action == "LONG":
        if swing_low is None or swing_low >= entry:
            return None
        return swing_low
    if action == "SHORT":
        if swing_high is None or swing_high <= entry:
            return None
        return swing_high
    raise ValueError(f"action must be 'LONG' or 'SHORT', got '{action}'")


def calculate_take_profit(
    entry: float,
    stop_loss: float,
    action: str,
    rr_ratio: float = DEFAULT_RR_RATIO,
) -> float:
    """TP = entry ± rr_ratio × |entry − stop_loss|."""
    if action == "LONG":
        return entry + (entry - stop_loss) * rr_ratio
    if action == "SHORT":
        return entry - (stop_loss - entry) * rr_ratio
    raise ValueError(f"action must be 'LONG' or 'SHORT', got '{action}'")
