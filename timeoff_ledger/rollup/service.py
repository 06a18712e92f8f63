"""Manager Rollup service — read-only views over the ledger and detector.

``now`` is always a calendar date supplied by the caller; the rollup never
reads the clock itself.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import ACTIVE_STATUSES, TimeOffStatus
from timeoff_ledger.common.date_range import days_inclusive, intersection, iter_days
from timeoff_ledger.common.exceptions import ValidationException
from timeoff_ledger.common.pagination import count_rows
from timeoff_ledger.config import settings
from timeoff_ledger.conflicts.service import ConflictService
from timeoff_ledger.ledger.models import TimeOffRequest
from timeoff_ledger.ledger.schemas import TimeOffRequestOut
from timeoff_ledger.ledger.service import TimeOffLedgerService
from timeoff_ledger.rollup.schemas import (
    CalendarDay,
    CalendarEntry,
    RollupSummary,
    TeamCalendar,
)

logger = logging.getLogger(__name__)

# Longest range the calendar view will expand day by day.
MAX_CALENDAR_SPAN_DAYS = 366


def window_end_for(now: date, days: Optional[int] = None) -> date:
    """Last day of the rolling window that starts on *now* (inclusive)."""
    days = settings.ROLLUP_WINDOW_DAYS if days is None else days
    return now + timedelta(days=max(days, 1) - 1)


class RollupService:
    """Upcoming, this-window and calendar views for managers."""

    @staticmethod
    def _upcoming_query(now: date, department: Optional[str]):
        return TimeOffLedgerService.requests_query(
            statuses=ACTIVE_STATUSES, department=department,
        ).where(TimeOffRequest.start_date >= now)

    @staticmethod
    async def upcoming(
        db: AsyncSession,
        now: date,
        *,
        department: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[TimeOffRequestOut]:
        """Live requests starting on or after *now*, soonest first."""
        query = RollupService._upcoming_query(now, department).order_by(
            TimeOffRequest.start_date, TimeOffRequest.created_at, TimeOffRequest.id,
        ).execution_options(populate_existing=True)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return [TimeOffLedgerService.build_response(r) for r in result.scalars().all()]

    @staticmethod
    async def due_this_window(
        db: AsyncSession,
        now: date,
        window_end: date,
        *,
        department: Optional[str] = None,
    ) -> int:
        """Count live requests that overlap ``[now, window_end]``."""
        days_inclusive(now, window_end)  # InvalidRangeError if the window is inverted
        return await count_rows(
            db,
            TimeOffLedgerService.requests_query(
                statuses=ACTIVE_STATUSES,
                department=department,
                from_date=now,
                to_date=window_end,
            ),
        )

    @staticmethod
    async def summary(
        db: AsyncSession,
        now: date,
        *,
        department: Optional[str] = None,
        upcoming_limit: int = 10,
    ) -> RollupSummary:
        window_end = window_end_for(now)

        total = await count_rows(db, TimeOffLedgerService.requests_query(department=department))
        out_this_window = await RollupService.due_this_window(
            db, now, window_end, department=department,
        )
        upcoming_count = await count_rows(db, RollupService._upcoming_query(now, department))
        upcoming = await RollupService.upcoming(
            db, now, department=department, limit=upcoming_limit,
        )
        conflicts = await ConflictService.get_team_conflicts(
            db, department=department, from_date=now,
        )

        logger.debug(
            "Rollup for %s (dept=%s): %d total, %d out, %d upcoming, %d conflicts",
            now, department, total, out_this_window, upcoming_count, len(conflicts),
        )
        return RollupSummary(
            as_of=now,
            window_end=window_end,
            total_requests=total,
            out_this_window=out_this_window,
            upcoming_count=upcoming_count,
            upcoming=upcoming,
            conflicts=conflicts,
        )

    @staticmethod
    async def calendar(
        db: AsyncSession,
        from_date: date,
        to_date: date,
        *,
        status: Optional[TimeOffStatus] = None,
        department: Optional[str] = None,
    ) -> TeamCalendar:
        """Who is out on each day of ``[from_date, to_date]``.

        Only days with at least one entry are returned. Without *status*
        the view shows live (REQUESTED and APPROVED) requests.
        """
        span = days_inclusive(from_date, to_date)
        if span > MAX_CALENDAR_SPAN_DAYS:
            raise ValidationException(
                {"to_date": [f"Calendar range may not exceed {MAX_CALENDAR_SPAN_DAYS} days."]}
            )

        rows = await TimeOffLedgerService.fetch_requests(
            db,
            statuses=[status] if status else ACTIVE_STATUSES,
            department=department,
            from_date=from_date,
            to_date=to_date,
        )

        by_day: dict[date, list[CalendarEntry]] = defaultdict(list)
        for req in rows:
            window = intersection(req.start_date, req.end_date, from_date, to_date)
            if window is None:
                continue
            entry = CalendarEntry(
                request_id=req.id,
                employee_id=req.employee_id,
                employee_name=req.employee.display_name,
                type=req.type,
                status=req.status,
            )
            for day in iter_days(window.start, window.end):
                by_day[day].append(entry)

        return TeamCalendar(
            from_date=from_date,
            to_date=to_date,
            days=[CalendarDay(day=d, entries=by_day[d]) for d in sorted(by_day)],
        )
