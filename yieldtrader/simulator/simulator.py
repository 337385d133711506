"""YieldTrader — portfolio simulator.

Owns a single portfolio and applies trade decisions and DeFi deposits to
it.  Every operation validates first and mutates second: a rejected call
returns ``None`` / ``False`` and leaves the portfolio untouched, so cash
can never go negative.

Time comes from the injected clock only; nothing here sleeps or polls.
"""

import copy
import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from yieldtrader.config import SimulatorConfig
from yieldtrader.defi.models import DepositProfile, OptimizationResult, Protocol, RiskLevel
from yieldtrader.defi.optimizer import best_protocol, optimize_yield
from yieldtrader.risk.drawdown import DrawdownTracker
from yieldtrader.simulator.clock import Clock, IdGenerator, SequentialIdGenerator, SystemClock
from yieldtrader.simulator.models import (
    DefiDeposit,
    Operation,
    OperationType,
    Portfolio,
    SimulationStats,
    TradePosition,
)
from yieldtrader.simulator.stats import calculate_trade_stats, realized_defi_profit
from yieldtrader.strategy.engine import generate_trade_decision
from yieldtrader.strategy.models import (
    AccountRiskProfile,
    CandleData,
    Directional,
    TradeDecision,
)

logger = logging.getLogger("yieldtrader")

# Deposits opened by the simulator are always scored as medium risk.
_DEPOSIT_RISK_LEVEL: RiskLevel = "medium"


class Simulator:
    """Single-account trading + DeFi state machine.

    Not thread-safe: callers sharing an instance across threads must
    serialise access themselves.

    Args:
        config: Starting balance, risk per trade and feature switches.
        clock: Time source for timestamps and deposit maturity.
            Defaults to ``SystemClock``.
        id_generator: Source of position / deposit / operation ids.
            Defaults to a fresh ``SequentialIdGenerator``.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        clock: Optional[Clock] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self._config = config.validate()
        self._clock: Clock = clock or SystemClock()
        self._ids: IdGenerator = id_generator or SequentialIdGenerator()
        self._portfolio = Portfolio(cash_balance=config.initial_balance)
        self._operations: list[Operation] = []
        self._closed_trades: list[TradePosition] = []
        self._completed_deposits: list[DefiDeposit] = []
        self._drawdown = DrawdownTracker(config.initial_balance)

    # ── Trading ──────────────────────────────────────────────────────────

    def open_trade(
        self,
        decision: TradeDecision,
        current_price: Optional[float] = None,
    ) -> Optional[str]:
        """Open a position from a directional decision.

        Args:
            decision: Strategy output.  ``Hold`` is always rejected.
            current_price: Market price at submission, recorded in the
                audit trail when given.  The fill is at ``decision.entry``.

        Returns:
            The new position id, or ``None`` if rejected (HOLD, invalid
            levels, position limit reached, or insufficient cash).
        """
        if not isinstance(decision, Directional):
            logger.debug("Trade rejected: %s decision.", decision.action)
            return None

        if not (
            _is_positive(decision.entry)
            and _is_positive(decision.stop_loss)
            and _is_positive(decision.position_size)
            and math.isfinite(decision.take_profit)
        ):
            logger.debug("Trade rejected: invalid price levels or size in %s.", decision)
            return None

        if len(self._portfolio.active_trades) >= self._config.max_open_trades:
            logger.debug(
                "Trade rejected: %d open trade(s), limit is %d.",
                len(self._portfolio.active_trades), self._config.max_open_trades,
            )
            return None

        position_value = decision.position_size * decision.entry
        if not math.isfinite(position_value) or position_value > self._portfolio.cash_balance:
            logger.debug(
                "Trade rejected: position value %.2f exceeds cash %.2f.",
                position_value, self._portfolio.cash_balance,
            )
            return None

        position = TradePosition(
            id=self._ids.next_id("trade"),
            action=decision.action,
            entry_price=decision.entry,
            stop_loss=decision.stop_loss,
            take_profit=decision.take_profit,
            position_size=decision.position_size,
            entry_time=self._clock.now(),
        )

        self._portfolio.cash_balance -= position_value
        self._portfolio.active_trades.append(position)
        self._portfolio.total_invested += position_value

        description = (
            f"Opened {position.action} position: "
            f"{position.position_size:.4f} @ ${position.entry_price:.2f}"
        )
        if current_price is not None:
            description += f" (market ${current_price:.2f})"
        self._record("TRADE_OPEN", position_value, description)
        logger.info(
            "Opened %s %s: %.4f units @ %.2f (SL %.2f, TP %.2f).",
            position.action, position.id, position.position_size,
            position.entry_price, position.stop_loss, position.take_profit,
        )
        return position.id

    def close_trade(
        self,
        position_id: str,
        close_price: float,
        reason: str = "Manual",
    ) -> bool:
        """Close an open position at *close_price*.

        The position's committed value plus its pnl is returned to cash
        (``size × close_price`` for a LONG).  A SHORT whose loss exceeds
        the committed value returns nothing and is marked LIQUIDATED.

        Returns:
            ``True`` if closed; ``False`` for an unknown id, a position
            that is not OPEN, or an invalid price.
        """
        position = self._find_trade(position_id)
        if position is None or position.status != "OPEN":
            logger.debug("Close rejected: no open trade %s.", position_id)
            return False
        if not math.isfinite(close_price) or close_price < 0:
            logger.debug("Close rejected: invalid close price %s.", close_price)
            return False

        if position.action == "LONG":
            pnl = (close_price - position.entry_price) * position.position_size
        else:
            pnl = (position.entry_price - close_price) * position.position_size

        committed = position.position_value
        proceeds = committed + pnl
        status = "CLOSED"
        if proceeds < 0:
            proceeds = 0.0
            pnl = -committed
            status = "LIQUIDATED"

        position.close_price = close_price
        position.close_time = self._clock.now()
        position.close_reason = reason
        position.status = status
        position.pnl = pnl
        position.pnl_percent = (pnl / committed) * 100

        self._portfolio.cash_balance += proceeds
        self._portfolio.active_trades = [
            t for t in self._portfolio.active_trades if t.id != position_id
        ]
        self._closed_trades.append(position)

        self._record(
            "TRADE_CLOSE",
            proceeds,
            f"Closed {position.action} position: PnL ${pnl:.2f} "
            f"({position.pnl_percent:.2f}%) - {reason}",
        )
        if status == "LIQUIDATED":
            logger.warning(
                "Liquidated %s %s @ %.2f: loss %.2f exceeds position value.",
                position.action, position.id, close_price, -pnl,
            )
        else:
            logger.info(
                "Closed %s %s @ %.2f (%s): PnL %.2f.",
                position.action, position.id, close_price, reason, pnl,
            )

        self._update_drawdown()
        return True

    def update_trades(self, candles: list[CandleData]) -> list[str]:
        """Apply stop-loss / take-profit exits at the latest close.

        Stop-loss is checked first and wins when both levels are breached.
        Take-profit exits only fire when ``auto_close_on_target`` is set.
        Fills happen at the triggering level, not at the candle close.

        Returns:
            Ids of the positions closed by this tick.
        """
        if not candles:
            return []

        price = candles[-1].close
        closed: list[str] = []

        for position in list(self._portfolio.active_trades):
            exit_ = self._check_exit(position, price)
            if exit_ is None:
                continue
            exit_price, reason = exit_
            if self.close_trade(position.id, exit_price, reason):
                closed.append(position.id)

        return closed

    def generate_trade_decision(self, candles: list[CandleData]) -> TradeDecision:
        """Run the strategy engine sized against the current cash balance."""
        account = AccountRiskProfile(
            balance=self._portfolio.cash_balance,
            risk_per_trade=self._config.trading_risk_per_trade,
        )
        return generate_trade_decision(candles, account)

    # ── DeFi ─────────────────────────────────────────────────────────────

    def create_defi_deposit(
        self,
        protocol: Protocol,
        amount: float,
        horizon_days: int,
    ) -> Optional[str]:
        """Lock *amount* in *protocol* for *horizon_days*.

        Expected profit is scored once, at creation, for a medium-risk
        profile and does not change over the deposit's life.

        Returns:
            The new deposit id, or ``None`` if DeFi is disabled, the
            amount or horizon is not positive, or cash is insufficient.
        """
        if not self._config.enable_defi:
            logger.debug("Deposit rejected: DeFi disabled.")
            return None
        if not _is_positive(amount) or horizon_days <= 0:
            logger.debug(
                "Deposit rejected: amount %s, horizon %s days.", amount, horizon_days,
            )
            return None
        if amount > self._portfolio.cash_balance:
            logger.debug(
                "Deposit rejected: amount %.2f exceeds cash %.2f.",
                amount, self._portfolio.cash_balance,
            )
            return None

        profile = DepositProfile(
            amount=amount,
            horizon_days=horizon_days,
            risk_level=_DEPOSIT_RISK_LEVEL,
        )
        result = best_protocol(optimize_yield([protocol], profile))
        expected_profit = result.expected_profit_absolute if result is not None else 0.0
        if not math.isfinite(expected_profit):
            logger.debug("Deposit rejected: non-finite expected profit for %s.", protocol.name)
            return None

        start = self._clock.now()
        deposit = DefiDeposit(
            id=self._ids.next_id("defi"),
            protocol=protocol,
            amount=amount,
            start_time=start,
            end_time=start + timedelta(days=horizon_days),
            expected_profit=expected_profit,
        )

        self._portfolio.cash_balance -= amount
        self._portfolio.active_deposits.append(deposit)
        self._portfolio.total_invested += amount

        self._record(
            "DEFI_DEPOSIT",
            amount,
            f"Deposited ${amount:.2f} to {protocol.name} for {horizon_days} days",
        )
        logger.info(
            "Deposited %.2f to %s for %d days (expected profit %.2f).",
            amount, protocol.name, horizon_days, expected_profit,
        )
        return deposit.id

    def withdraw_defi_deposit(self, deposit_id: str) -> bool:
        """Exit an active deposit.

        At or after maturity the full expected profit is paid and the
        deposit is COMPLETED.  Earlier exits accrue profit linearly over
        the term and mark the deposit WITHDRAWN.

        Returns:
            ``True`` if withdrawn; ``False`` for an unknown or non-ACTIVE id.
        """
        deposit = self._find_deposit(deposit_id)
        if deposit is None or deposit.status != "ACTIVE":
            logger.debug("Withdraw rejected: no active deposit %s.", deposit_id)
            return False

        now = self._clock.now()
        elapsed = now - deposit.start_time
        term = deposit.end_time - deposit.start_time

        if elapsed >= term:
            current_value = deposit.amount + deposit.expected_profit
            deposit.status = "COMPLETED"
        else:
            ratio = max(elapsed / term, 0.0)
            current_value = deposit.amount + deposit.expected_profit * ratio
            deposit.status = "WITHDRAWN"

        deposit.current_value = current_value
        profit = current_value - deposit.amount

        self._portfolio.cash_balance += current_value
        self._portfolio.total_withdrawn += current_value
        self._portfolio.active_deposits = [
            d for d in self._portfolio.active_deposits if d.id != deposit_id
        ]
        self._completed_deposits.append(deposit)

        self._record(
            "DEFI_WITHDRAW",
            current_value,
            f"Withdrew ${current_value:.2f} from {deposit.protocol.name} "
            f"(profit: ${profit:.2f})",
        )
        logger.info(
            "Withdrew %s from %s: %.2f (%s, profit %.2f).",
            deposit.id, deposit.protocol.name, current_value, deposit.status, profit,
        )

        self._update_drawdown()
        return True

    def update_defi_deposits(self) -> list[str]:
        """Withdraw every active deposit that has reached its end time.

        Returns:
            Ids of the deposits completed by this tick.
        """
        now = self._clock.now()
        matured: list[str] = []
        for deposit in list(self._portfolio.active_deposits):
            if deposit.status == "ACTIVE" and now >= deposit.end_time:
                if self.withdraw_defi_deposit(deposit.id):
                    matured.append(deposit.id)
        return matured

    def find_best_defi_protocol(
        self,
        protocols: list[Protocol],
        horizon_days: int,
        risk_level: RiskLevel = "medium",
    ) -> Optional[OptimizationResult]:
        """Best protocol for depositing the whole current cash balance."""
        profile = DepositProfile(
            amount=self._portfolio.cash_balance,
            horizon_days=horizon_days,
            risk_level=risk_level,
        )
        return best_protocol(optimize_yield(protocols, profile))

    # ── Queries ──────────────────────────────────────────────────────────

    def total_balance(self) -> float:
        """Cash plus open trades at cost plus deposits at accrued value.

        Read-only.
        """
        now = self._clock.now()
        total = self._portfolio.cash_balance

        for trade in self._portfolio.active_trades:
            price = trade.close_price if trade.close_price is not None else trade.entry_price
            total += price * trade.position_size

        for deposit in self._portfolio.active_deposits:
            total += self._accrued_value(deposit, now)

        return total

    def stats(self) -> SimulationStats:
        """Aggregate trade, DeFi and drawdown statistics."""
        trade_stats = calculate_trade_stats(self._closed_trades)
        defi_profit = realized_defi_profit(self._completed_deposits)
        initial = self._config.initial_balance

        return SimulationStats(
            total_trades=trade_stats["total_trades"],
            winning_trades=trade_stats["winning_trades"],
            losing_trades=trade_stats["losing_trades"],
            win_rate=trade_stats["win_rate"],
            profit_factor=trade_stats["profit_factor"],
            total_pnl=trade_stats["net_pnl"],
            total_pnl_percent=_percent_of(trade_stats["net_pnl"], initial),
            total_defi_profit=defi_profit,
            total_defi_profit_percent=_percent_of(defi_profit, initial),
            max_drawdown=self._drawdown.max_drawdown,
            max_drawdown_percent=self._drawdown.max_drawdown_pct,
            peak_balance=self._drawdown.peak_balance,
            current_balance=self.total_balance(),
            total_operations=len(self._operations),
        )

    def get_portfolio(self) -> Portfolio:
        """Snapshot of the portfolio; mutating it does not affect the simulator."""
        return copy.deepcopy(self._portfolio)

    def get_operations(self, limit: Optional[int] = None) -> list[Operation]:
        """Operations newest first, truncated to *limit* when given.

        Operations sharing a timestamp are returned latest-recorded first.
        """
        ordered = sorted(
            reversed(self._operations), key=lambda op: op.timestamp, reverse=True,
        )
        return ordered[:limit] if limit is not None else ordered

    def get_closed_trades(self) -> list[TradePosition]:
        return list(self._closed_trades)

    def get_completed_defi_deposits(self) -> list[DefiDeposit]:
        return list(self._completed_deposits)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _check_exit(
        self, position: TradePosition, price: float,
    ) -> Optional[tuple[float, str]]:
        """``(exit_price, reason)`` if *price* breaches SL or TP, else ``None``."""
        if position.action == "LONG":
            sl_hit = price <= position.stop_loss
            tp_hit = price >= position.take_profit
        else:
            sl_hit = price >= position.stop_loss
            tp_hit = price <= position.take_profit

        if sl_hit:
            return position.stop_loss, "Stop Loss"
        if tp_hit and self._config.auto_close_on_target:
            return position.take_profit, "Take Profit"
        return None

    @staticmethod
    def _accrued_value(deposit: DefiDeposit, now: datetime) -> float:
        """Deposit value with profit accrued linearly up to maturity."""
        if deposit.current_value is not None:
            return deposit.current_value
        term = deposit.end_time - deposit.start_time
        if term <= timedelta(0):
            return deposit.amount
        ratio = min((now - deposit.start_time) / term, 1.0)
        return deposit.amount + deposit.expected_profit * ratio

    def _find_trade(self, position_id: str) -> Optional[TradePosition]:
        for trade in self._portfolio.active_trades:
            if trade.id == position_id:
                return trade
        return None

    def _find_deposit(self, deposit_id: str) -> Optional[DefiDeposit]:
        for deposit in self._portfolio.active_deposits:
            if deposit.id == deposit_id:
                return deposit
        return None

    def _update_drawdown(self) -> None:
        self._drawdown.update(self.total_balance())

    def _record(self, op_type: OperationType, amount: float, description: str) -> None:
        self._operations.append(
            Operation(
                id=self._ids.next_id("op"),
                type=op_type,
                timestamp=self._clock.now(),
                amount=amount,
                description=description,
                balance_after=self._portfolio.cash_balance,
            )
        )


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _percent_of(value: float, base: float) -> float:
    return (value / base) * 100 if base > 0 else 0.0
