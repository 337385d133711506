"""Strategy data models — typed representations for strategy inputs and outputs."""

from dataclasses import dataclass
from typing import Literal, Union


@dataclass(frozen=True)
class CandleData:
    """A single candlestick bar for strategy consumption."""

    time: str
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class AccountRiskProfile:
    """Account balance and the fraction of it risked on one trade."""

    balance: float
    risk_per_trade: float  # e.g. 0.02 for 2 %


@dataclass(frozen=True)
class Hold:
    """No trade: the strategy found no valid setup."""

    explanation: str

    @property
    def action(self) -> Literal["HOLD"]:
        return "HOLD"


@dataclass(frozen=True)
class Directional:
    """A LONG or SHORT setup with its risk parameters."""

    action: Literal["LONG", "SHORT"]
    entry: float
    stop_loss: float
    take_profit: float
    position_size: float
    explanation: str


TradeDecision = Union[Hold, Directional]
