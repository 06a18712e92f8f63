"""Balance router — per-employee and team balance snapshots."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.balances.schemas import BalanceSnapshot
from timeoff_ledger.balances.service import BalanceService
from timeoff_ledger.database import get_db

router = APIRouter(prefix="", tags=["balances"])


@router.get("", response_model=list[BalanceSnapshot])
async def team_balances(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Defaults to this year"),
    department: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Snapshots for every active employee (optionally one department)."""
    return await BalanceService.compute_team_balances(
        db, year or date.today().year, department=department,
    )


@router.get("/{employee_id}", response_model=BalanceSnapshot)
async def get_balance(
    employee_id: uuid.UUID,
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Defaults to this year"),
    db: AsyncSession = Depends(get_db),
):
    """Used and remaining allowance for one employee and year."""
    return await BalanceService.compute_balance(db, employee_id, year or date.today().year)
