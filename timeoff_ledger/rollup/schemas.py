"""Manager rollup Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from timeoff_ledger.common.constants import TimeOffStatus, TimeOffType
from timeoff_ledger.conflicts.schemas import ConflictPairOut
from timeoff_ledger.ledger.schemas import TimeOffRequestOut


class WindowCount(BaseModel):
    """How many live requests touch ``[from_date, to_date]``."""

    from_date: date
    to_date: date
    count: int


class RollupSummary(BaseModel):
    """The manager's overview: totals, who is out soon, and clashes."""

    as_of: date
    window_end: date
    total_requests: int
    out_this_window: int
    upcoming_count: int
    upcoming: list[TimeOffRequestOut]
    conflicts: list[ConflictPairOut]


class CalendarEntry(BaseModel):
    request_id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    type: TimeOffType
    status: TimeOffStatus


class CalendarDay(BaseModel):
    day: date
    entries: list[CalendarEntry]


class TeamCalendar(BaseModel):
    from_date: date
    to_date: date
    days: list[CalendarDay]
