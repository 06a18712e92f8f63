"""Ledger router — create requests, change their status, list and inspect them."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import TimeOffStatus, TimeOffType
from timeoff_ledger.common.pagination import PaginationParams
from timeoff_ledger.database import get_db
from timeoff_ledger.ledger.schemas import (
    StatusChangeOut,
    StatusPatchRequest,
    TimeOffRequestCreate,
    TimeOffRequestFilters,
    TimeOffRequestOut,
)
from timeoff_ledger.ledger.service import TimeOffLedgerService

router = APIRouter(prefix="", tags=["timeoff"])


# ── POST /requests ──────────────────────────────────────────────────

@router.post(
    "/requests",
    response_model=TimeOffRequestOut,
    status_code=201,
)
async def create_request(
    body: TimeOffRequestCreate,
    db: AsyncSession = Depends(get_db),
):
    """File a time-off request. It starts as REQUESTED."""
    return await TimeOffLedgerService.create_request(db, body)


# ── GET /requests ───────────────────────────────────────────────────

@router.get("/requests")
async def list_requests(
    employee_id: Optional[uuid.UUID] = Query(None),
    status: Optional[TimeOffStatus] = Query(None),
    type: Optional[TimeOffType] = Query(None),
    department: Optional[str] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """List requests; ``from_date``/``to_date`` match any overlap with the window."""
    filters = TimeOffRequestFilters(
        employee_id=employee_id,
        status=status,
        type=type,
        department=department,
        from_date=from_date,
        to_date=to_date,
    )
    result = await TimeOffLedgerService.list_requests(db, filters, pagination)
    return {
        "data": [item.model_dump(mode="json") for item in result.data],
        "meta": result.meta.model_dump(),
    }


# ── GET /requests/{id} ──────────────────────────────────────────────

@router.get("/requests/{request_id}", response_model=TimeOffRequestOut)
async def get_request(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await TimeOffLedgerService.get_request(db, request_id)


# ── GET /requests/{id}/history ──────────────────────────────────────

@router.get("/requests/{request_id}/history", response_model=list[StatusChangeOut])
async def get_request_history(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Every status the request has held, oldest first."""
    return await TimeOffLedgerService.get_history(db, request_id)


# ── PATCH /requests/{id}/status ─────────────────────────────────────

@router.patch("/requests/{request_id}/status", response_model=TimeOffRequestOut)
async def patch_request_status(
    request_id: uuid.UUID,
    body: StatusPatchRequest,
    db: AsyncSession = Depends(get_db),
):
    """Approve, deny or cancel a REQUESTED request. Terminal requests answer 409."""
    return await TimeOffLedgerService.set_status(
        db, request_id, body.status, body.actor_id, note=body.note,
    )
