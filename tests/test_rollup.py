"""Manager rollup tests — upcoming, this-window counts, summary, calendar."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import TimeOffStatus
from timeoff_ledger.common.exceptions import InvalidRangeError
from timeoff_ledger.directory.models import Employee
from timeoff_ledger.rollup.service import RollupService, window_end_for
from tests.conftest import _file_request, _seed_employee

NOW = date(2025, 7, 7)  # a Monday


class TestUpcoming:

    async def test_upcoming_starts_today_or_later_sorted(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(db, employee.id, date(2025, 7, 20), date(2025, 7, 21))
        await _file_request(db, manager.id, NOW, NOW)
        await _file_request(db, employee.id, date(2025, 7, 1), date(2025, 7, 9))
        await _file_request(
            db, manager.id, date(2025, 7, 10), date(2025, 7, 10),
            status=TimeOffStatus.DENIED,
        )

        upcoming = await RollupService.upcoming(db, NOW)
        assert [r.start_date for r in upcoming] == [NOW, date(2025, 7, 20)]

        limited = await RollupService.upcoming(db, NOW, limit=1)
        assert [r.start_date for r in limited] == [NOW]


class TestDueThisWindow:

    async def test_counts_overlap_not_containment(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        # Started last week, still out on Monday.
        await _file_request(db, employee.id, date(2025, 7, 1), date(2025, 7, 7))
        # Starts on the last day of the window.
        await _file_request(db, manager.id, date(2025, 7, 13), date(2025, 7, 20))
        # Entirely after the window.
        await _file_request(db, employee.id, date(2025, 7, 14), date(2025, 7, 15))
        # Inside the window but cancelled.
        await _file_request(
            db, manager.id, date(2025, 7, 9), date(2025, 7, 9),
            status=TimeOffStatus.CANCELLED,
        )

        window_end = window_end_for(NOW)
        assert window_end == date(2025, 7, 13)
        assert await RollupService.due_this_window(db, NOW, window_end) == 2

    async def test_inverted_window_rejected(self, db: AsyncSession):
        with pytest.raises(InvalidRangeError):
            await RollupService.due_this_window(db, NOW, date(2025, 7, 1))


class TestSummary:

    async def test_summary_card(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(db, employee.id, date(2025, 7, 8), date(2025, 7, 10))
        await _file_request(
            db, manager.id, date(2025, 7, 9), date(2025, 7, 11),
            status=TimeOffStatus.APPROVED,
        )
        await _file_request(db, employee.id, date(2025, 8, 4), date(2025, 8, 8))
        await _file_request(
            db, manager.id, date(2025, 6, 2), date(2025, 6, 3),
            status=TimeOffStatus.DENIED,
        )

        summary = await RollupService.summary(db, NOW)

        assert summary.as_of == NOW
        assert summary.window_end == date(2025, 7, 13)
        assert summary.total_requests == 4
        assert summary.out_this_window == 2
        assert summary.upcoming_count == 3
        assert [r.start_date for r in summary.upcoming] == [
            date(2025, 7, 8), date(2025, 7, 9), date(2025, 8, 4),
        ]
        assert len(summary.conflicts) == 1
        assert summary.conflicts[0].overlap_days == 2

    async def test_summary_by_department(self, db: AsyncSession, employee: Employee):
        sales = await _seed_employee(db, department="Sales")
        await _file_request(db, employee.id, date(2025, 7, 8), date(2025, 7, 8))
        await _file_request(db, sales.id, date(2025, 7, 8), date(2025, 7, 8))

        summary = await RollupService.summary(db, NOW, department="Sales")
        assert summary.total_requests == 1
        assert summary.conflicts == []


class TestCalendar:

    async def test_groups_people_out_by_day(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(db, employee.id, date(2025, 6, 30), date(2025, 7, 2))
        await _file_request(
            db, manager.id, date(2025, 7, 2), date(2025, 7, 3),
            status=TimeOffStatus.APPROVED,
        )

        cal = await RollupService.calendar(db, date(2025, 7, 1), date(2025, 7, 31))

        assert [d.day for d in cal.days] == [
            date(2025, 7, 1), date(2025, 7, 2), date(2025, 7, 3),
        ]
        names = {d.day: [e.employee_name for e in d.entries] for d in cal.days}
        assert names[date(2025, 7, 1)] == ["Ada Lovelace"]
        assert sorted(names[date(2025, 7, 2)]) == ["Ada Lovelace", "Grace Hopper"]

    async def test_status_filter(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(db, employee.id, date(2025, 7, 1), date(2025, 7, 1))
        await _file_request(
            db, manager.id, date(2025, 7, 1), date(2025, 7, 1),
            status=TimeOffStatus.APPROVED,
        )

        cal = await RollupService.calendar(
            db, date(2025, 7, 1), date(2025, 7, 1), status=TimeOffStatus.APPROVED,
        )
        assert [e.employee_name for e in cal.days[0].entries] == ["Grace Hopper"]
