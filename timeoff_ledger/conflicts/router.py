"""Conflict router — overlapping time off between team members."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.exceptions import InvalidRangeError
from timeoff_ledger.conflicts.schemas import ConflictPairOut, ConflictScanRequest
from timeoff_ledger.conflicts.service import ConflictService
from timeoff_ledger.database import get_db

router = APIRouter(prefix="", tags=["conflicts"])


@router.post("", response_model=list[ConflictPairOut])
async def get_conflicts(
    body: ConflictScanRequest,
    db: AsyncSession = Depends(get_db),
):
    """Conflicts among an explicit set of requests."""
    return await ConflictService.get_conflicts(db, body.request_ids)


@router.get("", response_model=list[ConflictPairOut])
async def team_conflicts(
    department: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Conflicts among live requests, optionally for one department and window."""
    if from_date and to_date and to_date < from_date:
        raise InvalidRangeError(from_date, to_date, field="to_date")
    return await ConflictService.get_team_conflicts(
        db, department=department, from_date=from_date, to_date=to_date,
    )
