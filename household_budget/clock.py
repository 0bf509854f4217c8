"""
Time Sources

Every date-dependent calculation takes "today" as an argument.
Services get it from one of these clocks, so tests can pin the date.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Optional, Union


class Clock(ABC):
    """Source of the current date and time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware datetime."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Reads the system clock, in UTC unless a zone is given."""

    def __init__(self, tz: Optional[timezone] = None):
        self._tz = tz or timezone.utc

    def now(self) -> datetime:
        return datetime.now(self._tz)


def _as_utc_datetime(at: Union[datetime, date]) -> datetime:
    if not isinstance(at, datetime):
        return datetime(at.year, at.month, at.day, tzinfo=timezone.utc)
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at


class FixedClock(Clock):
    """Always returns the same instant. Used in tests."""

    def __init__(self, at: Union[datetime, date]):
        self._at = _as_utc_datetime(at)

    def now(self) -> datetime:
        return self._at

    def advance_to(self, at: Union[datetime, date]) -> None:
        """Move the clock; used to step through payment cycles."""
        self._at = _as_utc_datetime(at)
