"""Strategy engine — trend-following entries with structure confirmation.

Stateless: every call recomputes the decision from the candle history.

Decision flow (first match wins):
    1. Fewer than EMA_LONG_PERIOD candles → HOLD.
    2. EMA(20) > EMA(50) with bullish structure → LONG, stop at swing low.
    3. EMA(20) < EMA(50) with bearish structure → SHORT, stop at swing high.
    4. Anything else → HOLD.

TP sits at a fixed 2:1 reward:risk; size risks ``balance × risk_per_trade``.
"""

from yieldtrader.risk.position_sizer import calculate_position_size
from yieldtrader.risk.sl_tp import calculate_take_profit, select_stop_loss
from yieldtrader.strategy.indicators import find_swing_high, find_swing_low
from yieldtrader.strategy.models import (
    AccountRiskProfile,
    CandleData,
    Directional,
    Hold,
    TradeDecision,
)
from yieldtrader.strategy.trend import TrendState, detect_trend


EMA_SHORT_PERIOD = 20
EMA_LONG_PERIOD = 50
STRUCTURE_LOOKBACK = 5
SWING_LOOKBACK = 20
RISK_REWARD_RATIO = 2.0


def generate_trade_decision(
    candles: list[CandleData],
    account: AccountRiskProfile,
) -> TradeDecision:
    """Turn a candle history into a LONG, SHORT or HOLD decision.

    Args:
        candles: Candle history, oldest-first.
        account: Balance and risk fraction used for position sizing.

    Returns:
        ``Directional`` with entry, SL, TP and size, or ``Hold`` with the
        reason no trade was taken.
    """
    if len(candles) < EMA_LONG_PERIOD:
        return Hold(
            explanation=(
                f"Insufficient data. Need at least {EMA_LONG_PERIOD} candles "
                f"for strategy calculation, got {len(candles)}."
            ),
        )

    trend = detect_trend(
        candles,
        ema_fast=EMA_SHORT_PERIOD,
        ema_slow=EMA_LONG_PERIOD,
        lookback=STRUCTURE_LOOKBACK,
    )
    if trend is None:
        return Hold(explanation="Unable to calculate EMA indicators.")

    if trend.direction == "bullish":
        action = "LONG"
    elif trend.direction == "bearish":
        action = "SHORT"
    else:
        return Hold(explanation=_hold_explanation(trend))

    entry = candles[-1].close
    stop_loss = select_stop_loss(
        entry,
        action,
        swing_low=find_swing_low(candles, SWING_LOOKBACK),
        swing_high=find_swing_high(candles, SWING_LOOKBACK),
    )
    if stop_loss is None:
        return Hold(
            explanation=(
                f"{action} signal detected but unable to determine "
                "valid stop loss level."
            ),
        )

    take_profit = calculate_take_profit(entry, stop_loss, action, RISK_REWARD_RATIO)
    size = calculate_position_size(
        account.balance, account.risk_per_trade, entry, stop_loss, action,
    )

    return Directional(
        action=action,
        entry=entry,
        stop_loss=stop_loss,
        take_profit=take_profit,
        position_size=size,
        explanation=_directional_explanation(
            action, trend, entry, stop_loss, take_profit, size,
        ),
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _hold_explanation(trend: TrendState) -> str:
    return (
        f"No clear trend detected. EMA20 ({trend.ema_fast_value:.2f}) and "
        f"EMA50 ({trend.ema_slow_value:.2f}) are not aligned, or market "
        "structure is unclear. Waiting for better setup."
    )


def _directional_explanation(
    action: str,
    trend: TrendState,
    entry: float,
    stop_loss: float,
    take_profit: float,
    size: float,
) -> str:
    if action == "LONG":
        parts = [
            f"LONG signal: EMA20 ({trend.ema_fast_value:.2f}) > "
            f"EMA50 ({trend.ema_slow_value:.2f})",
            "Bullish structure detected",
        ]
    else:
        parts = [
            f"SHORT signal: EMA20 ({trend.ema_fast_value:.2f}) < "
            f"EMA50 ({trend.ema_slow_value:.2f})",
            "Bearish structure detected",
        ]

    risk = abs(entry - stop_loss)
    reward = abs(take_profit - entry)
    parts.append(
        f"Entry: {entry:.2f}, Stop Loss: {stop_loss:.2f}, "
        f"Take Profit: {take_profit:.2f}"
    )
    parts.append(f"Risk/Reward: 1:{reward / risk:.2f}")
    parts.append(f"Position size: {size:.4f} units")
    return ". ".join(parts) + "."
