"""Calendar date-range helpers shared by the ledger, balances and conflict scans.

All ranges are closed intervals of whole calendar days: a request from Monday
to Wednesday covers three days, and two ranges that share a single day
overlap. Nothing here knows about time zones or times of day.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, NamedTuple, Optional

from timeoff_ledger.common.exceptions import InvalidRangeError


class DateRange(NamedTuple):
    """An inclusive ``[start, end]`` span of calendar days."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)


def days_inclusive(start: date, end: date) -> int:
    """Number of calendar days from *start* to *end*, both counted.

    Raises:
        InvalidRangeError: if *end* is before *start*.
    """
    if end < start:
        raise InvalidRangeError(start, end)
    return (end - start).days + 1


def clamp_to_year(start: date, end: date, year: int) -> Optional[DateRange]:
    """Intersect ``[start, end]`` with ``[Jan 1, Dec 31]`` of *year*.

    Returns ``None`` when the range lies entirely outside the year; callers
    treat that as a zero-day contribution.
    """
    effective_start = max(start, date(year, 1, 1))
    effective_end = min(end, date(year, 12, 31))
    if effective_end < effective_start:
        return None
    return DateRange(effective_start, effective_end)


def overlaps(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Closed-interval intersection test; touching on one day counts."""
    return start_a <= end_b and start_b <= end_a


def intersection(
    start_a: date, end_a: date, start_b: date, end_b: date,
) -> Optional[DateRange]:
    """The shared days of two ranges, or ``None`` if they are disjoint."""
    if not overlaps(start_a, end_a, start_b, end_b):
        return None
    return DateRange(max(start_a, start_b), min(end_a, end_b))


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from *start* to *end* inclusive."""
    for offset in range(days_inclusive(start, end)):
        yield start + timedelta(days=offset)
