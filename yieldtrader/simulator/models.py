"""Simulator data models — positions, deposits, the portfolio and its audit trail."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from yieldtrader.defi.models import Protocol


OperationType = Literal["TRADE_OPEN", "TRADE_CLOSE", "DEFI_DEPOSIT", "DEFI_WITHDRAW"]
PositionStatus = Literal["OPEN", "CLOSED", "LIQUIDATED"]
DepositStatus = Literal["ACTIVE", "COMPLETED", "WITHDRAWN"]


@dataclass
class TradePosition:
    """A live or closed trade.

    Close fields stay ``None`` while the position is OPEN.
    """

    id: str
    action: Literal["LONG", "SHORT"]
    entry_price: float
    stop_loss: float
    take_profit: float
    position_size: float
    entry_time: datetime
    status: PositionStatus = "OPEN"
    close_price: Optional[float] = None
    close_time: Optional[datetime] = None
    close_reason: Optional[str] = None
    pnl: Optional[float] = None
    pnl_percent: Optional[float] = None

    @property
    def position_value(self) -> float:
        """Cash committed at entry."""
        return self.entry_price * self.position_size


@dataclass
class DefiDeposit:
    """A live or finished yield position."""

    id: str
    protocol: Protocol
    amount: float
    start_time: datetime
    end_time: datetime
    expected_profit: float  # absolute, fixed at creation
    status: DepositStatus = "ACTIVE"
    current_value: Optional[float] = None


@dataclass
class Portfolio:
    """Cash plus every open trade and active deposit."""

    cash_balance: float
    active_trades: list[TradePosition] = field(default_factory=list)
    active_deposits: list[DefiDeposit] = field(default_factory=list)
    total_invested: float = 0.0
    total_withdrawn: float = 0.0


@dataclass(frozen=True)
class Operation:
    """Append-only audit record of one accepted portfolio mutation."""

    id: str
    type: OperationType
    timestamp: datetime
    amount: float
    description: str
    balance_after: float


@dataclass(frozen=True)
class SimulationStats:
    """Aggregate performance snapshot."""

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float  # fraction of closed trades with pnl > 0
    profit_factor: Optional[float]
    total_pnl: float
    total_pnl_percent: float
    total_defi_profit: float
    total_defi_profit_percent: float
    max_drawdown: float
    max_drawdown_percent: float
    peak_balance: float
    current_balance: float
    total_operations: int
