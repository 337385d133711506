"""Time and identifier sources for the simulator.

Both are injected so tests can drive deposit maturity and get
deterministic ids.
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware time."""
        ...


@runtime_checkable
class IdGenerator(Protocol):
    """Produces unique identifiers for positions, deposits and operations."""

    def next_id(self, prefix: str) -> str:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock:
    """A clock that only moves when told to.

    Args:
        start: Initial time.  Defaults to 2025-01-01 00:00 UTC.
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, days: float = 0, hours: float = 0, seconds: float = 0) -> datetime:
        """Move the clock forward and return the new time."""
        self._now += timedelta(days=days, hours=hours, seconds=seconds)
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment


class SequentialIdGenerator:
    """Process-local counter ids, e.g. ``trade_1``, ``defi_2``, ``op_3``.

    The counter is shared across prefixes, so ids are unique per instance.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter)}"
