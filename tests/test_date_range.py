"""Date-range helpers: inclusive day counts, year clamping, overlap."""

from __future__ import annotations

from datetime import date

import pytest

from timeoff_ledger.common.date_range import (
    DateRange,
    clamp_to_year,
    days_inclusive,
    intersection,
    iter_days,
    overlaps,
)
from timeoff_ledger.common.exceptions import InvalidRangeError, ValidationException


class TestDaysInclusive:

    def test_single_day_counts_as_one(self):
        assert days_inclusive(date(2025, 3, 10), date(2025, 3, 10)) == 1

    def test_monday_to_wednesday_is_three(self):
        assert days_inclusive(date(2025, 3, 10), date(2025, 3, 12)) == 3

    def test_leap_day_included(self):
        assert days_inclusive(date(2024, 2, 28), date(2024, 3, 1)) == 3

    def test_inverted_range_rejected(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            days_inclusive(date(2025, 3, 12), date(2025, 3, 10))
        assert isinstance(exc_info.value, ValidationException)
        assert exc_info.value.status_code == 422
        assert "end_date" in exc_info.value.errors


class TestClampToYear:

    def test_range_inside_year_unchanged(self):
        clamped = clamp_to_year(date(2026, 5, 1), date(2026, 5, 4), 2026)
        assert clamped == DateRange(date(2026, 5, 1), date(2026, 5, 4))
        assert clamped.days == 4

    def test_new_year_span_splits_by_year(self):
        start, end = date(2025, 12, 28), date(2026, 1, 3)

        assert clamp_to_year(start, end, 2025).days == 4
        assert clamp_to_year(start, end, 2026).days == 3
        assert (
            clamp_to_year(start, end, 2025).days + clamp_to_year(start, end, 2026).days
            == days_inclusive(start, end)
        )

    def test_range_outside_year_is_empty(self):
        assert clamp_to_year(date(2024, 6, 1), date(2024, 6, 5), 2025) is None

    def test_range_spanning_whole_year(self):
        clamped = clamp_to_year(date(2023, 6, 1), date(2025, 6, 1), 2024)
        assert clamped == DateRange(date(2024, 1, 1), date(2024, 12, 31))
        assert clamped.days == 366


class TestOverlaps:

    def test_shared_single_day_overlaps(self):
        assert overlaps(date(2025, 7, 1), date(2025, 7, 5), date(2025, 7, 5), date(2025, 7, 9))

    def test_adjacent_ranges_do_not_overlap(self):
        assert not overlaps(
            date(2025, 7, 1), date(2025, 7, 4), date(2025, 7, 5), date(2025, 7, 9),
        )

    def test_overlap_is_symmetric(self):
        a = (date(2025, 7, 1), date(2025, 7, 5))
        b = (date(2025, 7, 4), date(2025, 7, 10))
        assert overlaps(*a, *b) == overlaps(*b, *a) is True

    def test_containment_overlaps(self):
        assert overlaps(date(2025, 7, 1), date(2025, 7, 31), date(2025, 7, 10), date(2025, 7, 12))

    def test_intersection_window(self):
        window = intersection(
            date(2025, 7, 1), date(2025, 7, 5), date(2025, 7, 4), date(2025, 7, 10),
        )
        assert window == DateRange(date(2025, 7, 4), date(2025, 7, 5))
        assert window.days == 2

    def test_intersection_of_disjoint_ranges(self):
        assert intersection(
            date(2025, 7, 1), date(2025, 7, 2), date(2025, 7, 4), date(2025, 7, 10),
        ) is None


def test_iter_days_is_inclusive():
    days = list(iter_days(date(2025, 12, 30), date(2026, 1, 2)))
    assert days == [
        date(2025, 12, 30),
        date(2025, 12, 31),
        date(2026, 1, 1),
        date(2026, 1, 2),
    ]
