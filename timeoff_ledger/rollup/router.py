"""Manager rollup router — upcoming, this-window, summary and calendar views."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import TimeOffStatus
from timeoff_ledger.common.exceptions import InvalidRangeError
from timeoff_ledger.database import get_db
from timeoff_ledger.ledger.schemas import TimeOffRequestOut
from timeoff_ledger.rollup.schemas import RollupSummary, TeamCalendar, WindowCount
from timeoff_ledger.rollup.service import RollupService, window_end_for

router = APIRouter(prefix="", tags=["rollup"])


@router.get("/upcoming", response_model=list[TimeOffRequestOut])
async def upcoming(
    now: Optional[date] = Query(None, description="Defaults to today"),
    department: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await RollupService.upcoming(
        db, now or date.today(), department=department, limit=limit,
    )


@router.get("/window", response_model=WindowCount)
async def due_this_window(
    now: Optional[date] = Query(None, description="Defaults to today"),
    window_end: Optional[date] = Query(None, description="Defaults to the rolling window end"),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Count live requests overlapping ``[now, window_end]``."""
    now = now or date.today()
    window_end = window_end or window_end_for(now)
    if window_end < now:
        raise InvalidRangeError(now, window_end, field="window_end")
    count = await RollupService.due_this_window(db, now, window_end, department=department)
    return WindowCount(from_date=now, to_date=window_end, count=count)


@router.get("/summary", response_model=RollupSummary)
async def summary(
    now: Optional[date] = Query(None, description="Defaults to today"),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await RollupService.summary(db, now or date.today(), department=department)


@router.get("/calendar", response_model=TeamCalendar)
async def calendar(
    from_date: date = Query(...),
    to_date: date = Query(...),
    status: Optional[TimeOffStatus] = Query(None),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Days in the range with the people out on each."""
    if to_date < from_date:
        raise InvalidRangeError(from_date, to_date, field="to_date")
    return await RollupService.calendar(
        db, from_date, to_date, status=status, department=department,
    )
