"""Injectable "today" so date rules can be tested against a fixed day."""

from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock evaluated in the campsite's time zone."""

    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Clock pinned to a given day. Used by tests."""

    def __init__(self, day: date):
        self._day = day

    def today(self) -> date:
        return self._day

    def set(self, day: date) -> None:
        self._day = day

    def advance(self, days: int = 1) -> None:
        self._day += timedelta(days=days)
