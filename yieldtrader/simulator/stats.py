"""Closed-trade statistics — pure functions over realized P&L."""

from typing import Optional

from yieldtrader.simulator.models import DefiDeposit, TradePosition


def calculate_trade_stats(trades: list[TradePosition]) -> dict:
    """Compute summary statistics from closed trades.

    A trade wins when its pnl is strictly positive; breakeven counts as a
    loss.

    Returns:
        Dict with ``total_trades``, ``winning_trades``, ``losing_trades``,
        ``win_rate`` (fraction), ``profit_factor`` (``None`` without
        losses) and ``net_pnl``.
    """
    if not trades:
        return {
            "total_trades": 0,
            "winning_trades": 0,
            "losing_trades": 0,
            "win_rate": 0.0,
            "profit_factor": None,
            "net_pnl": 0.0,
        }

    pnls = [t.pnl or 0.0 for t in trades]
    total = len(pnls)
    winners = [p for p in pnls if p > 0]
    losers = [p for p in pnls if p <= 0]

    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))
    profit_factor: Optional[float] = (
        gross_profit / gross_loss if gross_loss > 0 else None
    )

    return {
        "total_trades": total,
        "winning_trades": len(winners),
        "losing_trades": len(losers),
        "win_rate": len(winners) / total,
        "profit_factor": profit_factor,
        "net_pnl": sum(pnls),
    }


def realized_defi_profit(deposits: list[DefiDeposit]) -> float:
    """Sum of ``current_value - amount`` over finished deposits."""
    total = 0.0
    for deposit in deposits:
        value = (
            deposit.current_value
            if deposit.current_value is not None
            else deposit.amount + deposit.expected_profit
        )
        total += value - deposit.amount
    return total
