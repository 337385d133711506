"""Position sizing — pure math, no I/O.

Calculates the number of units to trade so that a stop-out loses exactly
the risked fraction of the balance.
"""

import math


def calculate_position_size(
    balance: float,
    risk_per_trade: float,
    entry: float,
    stop_loss: float,
    action: str,
) -> float:
    """Calculate position size in units.

    Formula::

        risk_amount   = balance × risk_per_trade
        risk_per_unit = entry - stop_loss   (LONG)
                      = stop_loss - entry   (SHORT)
        units         = risk_amount / risk_per_unit

    Args:
        balance: Account balance (e.g. 10_000.0).
        risk_per_trade: Fraction of balance to risk (e.g. 0.02 for 2 %).
        entry: Entry price.
        stop_loss: Stop-loss price.
        action: ``"LONG"`` or ``"SHORT"``.

    Returns:
        Position size in units, never negative.  ``0.0`` when the stop is
        on the wrong side of entry or the result is not finite.

    Raises:
        ValueError: If *action* is not a directional action.
    """
    if action == "LONG":
        risk_per_unit = entry - stop_loss
    elif action == "SHORT":
        risk_per_unit = stop_loss - entry
    else:
        raise ValueError(f"action must be 'LONG' or 'SHORT', got '{action}'")

    if risk_per_unit <= 0:
        return 0.0

    units = (balance * risk_per_trade) / risk_per_unit
    if not math.isfinite(units):
        return 0.0
    return max(0.0, units)
