"""DeFi data models — yield sources, deposit intents and their scores."""

from dataclasses import dataclass
from typing import Literal


RiskLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class Protocol:
    """Static description of a lending / staking yield source."""

    name: str
    apy: float  # decimal fraction, e.g. 0.08 for 8 %
    lock_days: int
    reward_token: str  # e.g. "USDT", "TON", "ETH"
    reward_volatility: float  # 0-1
    deposit_fee: float  # decimal fraction


@dataclass(frozen=True)
class DepositProfile:
    """A user's deposit intent."""

    amount: float
    horizon_days: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class OptimizationResult:
    """One protocol scored against one deposit profile."""

    protocol: Protocol
    expected_profit_percent: float  # fraction of the deposit
    expected_profit_absolute: float
    risk_score: float
    explanation: str
