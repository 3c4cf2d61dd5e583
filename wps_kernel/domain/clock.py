"""
Injectable time source.

Services take a ``Clock`` so that ``generated_at`` and ``submission_date``
on stored wage files can be pinned in tests.  The encoder never reads a
clock: record bodies and file names carry no generation instant.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware "now" values."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Starts at 2025-01-01 12:00 UTC unless given an instant.  Naive datetimes
    are rejected: stored timestamps are always aware.
    """

    DEFAULT_START = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, start: datetime | None = None):
        self._now = self._aware(start or self.DEFAULT_START)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware datetime")
        return value

    def now(self) -> datetime:
        return self._now

    def set_time(self, value: datetime) -> None:
        self._now = self._aware(value)

    def advance(self, seconds: float = 1) -> datetime:
        """Move forward and return the new instant."""
        self._now += timedelta(seconds=seconds)
        return self._now

    def tick(self) -> datetime:
        return self.advance(1)
