"""Yield optimizer — ranks protocols for a deposit profile. Pure functions, no I/O.

Expected yield is pro-rated linearly over the horizon (no compounding),
then adjusted for reward volatility against the user's risk tolerance and
for capital locked beyond the horizon.  The deposit fee is subtracted last.
"""

from typing import Optional

from yieldtrader.defi.models import DepositProfile, OptimizationResult, Protocol


DAYS_PER_YEAR = 365

_VOLATILITY_WEIGHT = {
    "low": 2.0,
    "medium": 1.0,
    "high": 0.3,
}


def calculate_risk_adjustment(risk_level: str, volatility: float) -> float:
    """Multiplier penalising reward volatility for the given risk tolerance.

    ``penalty = volatility × 0.5``; low tolerance pays double, high pays
    30 %.  Not clamped at zero, so extreme volatility turns yield negative.

    Raises ``ValueError`` for an unknown risk level.
    """
    if risk_level not in _VOLATILITY_WEIGHT:
        raise ValueError(
            f"risk_level must be one of {', '.join(_VOLATILITY_WEIGHT)}, "
            f"got '{risk_level}'"
        )
    penalty = volatility * 0.5
    return 1 - penalty * _VOLATILITY_WEIGHT[risk_level]


def calculate_lock_penalty(lock_days: int, horizon_days: int) -> float:
    """Multiplier for locks longer than the horizon.

    ``1.0`` when the lock fits inside the horizon.  Otherwise the excess,
    as a fraction of the horizon (capped at 1), costs up to half the yield.
    """
    if lock_days <= horizon_days:
        return 1.0
    excess_days = lock_days - horizon_days
    penalty_factor = min(excess_days / horizon_days, 1.0)
    return 1 - penalty_factor * 0.5


def calculate_expected_yield(
    protocol: Protocol, deposit: DepositProfile,
) -> tuple[float, float]:
    """Return ``(profit_fraction, profit_absolute)`` for one protocol."""
    base_yield = protocol.apy * (deposit.horizon_days / DAYS_PER_YEAR)
    risk_adjustment = calculate_risk_adjustment(
        deposit.risk_level, protocol.reward_volatility,
    )
    lock_penalty = calculate_lock_penalty(protocol.lock_days, deposit.horizon_days)

    profit_fraction = base_yield * risk_adjustment * lock_penalty - protocol.deposit_fee
    return profit_fraction, deposit.amount * profit_fraction


def calculate_risk_score(protocol: Protocol, deposit: DepositProfile) -> float:
    """Informational risk score: volatility, excess lock and fee terms.

    The lock component is capped at 30; the other terms are unbounded.
    """
    volatility_score = protocol.reward_volatility * 50
    lock_score = 0.0
    if protocol.lock_days > deposit.horizon_days:
        excess_ratio = (protocol.lock_days - deposit.horizon_days) / deposit.horizon_days
        lock_score = min(excess_ratio * 30, 30.0)
    fee_score = protocol.deposit_fee * 20
    return volatility_score + lock_score + fee_score


def _explain(protocol: Protocol, deposit: DepositProfile, profit_fraction: float) -> str:
    parts = [f'Protocol "{protocol.name}" offers {protocol.apy * 100:.2f}% APY']

    volatility = protocol.reward_volatility
    if deposit.risk_level == "low" and volatility > 0.3:
        parts.append(
            f"but high volatility ({volatility * 100:.1f}%) is penalized "
            "for low-risk profile"
        )
    elif deposit.risk_level == "high" and volatility > 0.5:
        parts.append(
            f"with high volatility ({volatility * 100:.1f}%) acceptable "
            "for high-risk profile"
        )

    if protocol.lock_days > deposit.horizon_days:
        parts.append(
            f"Lock period ({protocol.lock_days} days) exceeds investment "
            f"horizon ({deposit.horizon_days} days), applying penalty"
        )

    if protocol.deposit_fee > 0:
        parts.append(
            f"Deposit fee of {protocol.deposit_fee * 100:.2f}% reduces returns"
        )

    parts.append(
        f"Expected profit: {profit_fraction * 100:.2f}% over "
        f"{deposit.horizon_days} days"
    )
    return ". ".join(parts) + "."


def optimize_yield(
    protocols: list[Protocol], deposit: DepositProfile,
) -> list[OptimizationResult]:
    """Score every protocol and rank by expected profit fraction.

    The sort is stable, so protocols with equal scores keep their input
    order.
    """
    results: list[OptimizationResult] = []
    for protocol in protocols:
        profit_fraction, profit_absolute = calculate_expected_yield(protocol, deposit)
        results.append(
            OptimizationResult(
                protocol=protocol,
                expected_profit_percent=profit_fraction,
                expected_profit_absolute=profit_absolute,
                risk_score=calculate_risk_score(protocol, deposit),
                explanation=_explain(protocol, deposit, profit_fraction),
            )
        )
    return sorted(results, key=lambda r: r.expected_profit_percent, reverse=True)


def best_protocol(results: list[OptimizationResult]) -> Optional[OptimizationResult]:
    """First (highest-ranked) result, or ``None`` for an empty list."""
    return results[0] if results else None
