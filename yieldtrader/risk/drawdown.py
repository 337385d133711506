"""Drawdown tracking — pure math, no I/O.

Tracks peak balance and the largest peak-to-trough decline seen so far.
The maximum only ever grows (high-water-mark bookkeeping).
"""


class DrawdownTracker:
    """Tracks balance peaks and the maximum observed drawdown.

    Args:
        initial_balance: Starting account balance; the first peak.
    """

    def __init__(self, initial_balance: float) -> None:
        if initial_balance < 0:
            raise ValueError(
                f"initial_balance must be non-negative, got {initial_balance}"
            )
        self._peak_balance: float = initial_balance
        self._current_balance: float = initial_balance
        self._max_drawdown: float = 0.0
        self._max_drawdown_pct: float = 0.0

    # ── Mutation ─────────────────────────────────────────────────────────

    def update(self, balance: float) -> None:
        """Record the latest balance.

        Raises the peak when *balance* exceeds it, then widens the maximum
        drawdown when the current decline is the deepest so far.
        """
        self._current_balance = balance
        if balance > self._peak_balance:
            self._peak_balance = balance

        drawdown = self._peak_balance - balance
        if drawdown > self._max_drawdown:
            self._max_drawdown = drawdown
            self._max_drawdown_pct = (
                (drawdown / self._peak_balance) * 100.0
                if self._peak_balance > 0 else 0.0
            )

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def peak_balance(self) -> float:
        """Highest balance recorded."""
        return self._peak_balance

    @property
    def current_balance(self) -> float:
        """Most recently recorded balance."""
        return self._current_balance

    @property
    def drawdown_pct(self) -> float:
        """Current drawdown as a percentage of peak balance."""
        if self._peak_balance == 0:
            return 0.0
        return (
            (self._peak_balance - self._current_balance) / self._peak_balance
        ) * 100.0

    @property
    def max_drawdown(self) -> float:
        """Largest absolute decline from a peak."""
        return self._max_drawdown

    @property
    def max_drawdown_pct(self) -> float:
        """Percentage decline recorded alongside ``max_drawdown``."""
        return self._max_drawdown_pct
