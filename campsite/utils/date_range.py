"""Day-list helpers. Reservation ranges are half-open: [start, end)."""

from datetime import date, timedelta
from typing import List


def days_in_range(start: date, end: date) -> List[date]:
    """Days from start (inclusive) to end (exclusive), ascending. Empty when end <= start."""
    return [start + timedelta(days=offset) for offset in range((end - start).days)]


def days_between(first: date, last: date) -> List[date]:
    """Days from first to last, both inclusive."""
    return days_in_range(first, last + timedelta(days=1))
