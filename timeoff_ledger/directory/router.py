"""Directory router — read-only employee listing and policy assignment."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.database import get_db
from timeoff_ledger.directory.schemas import EmployeeOut
from timeoff_ledger.directory.service import DirectoryService
from timeoff_ledger.policies.schemas import PolicyAssignRequest, PolicyOut
from timeoff_ledger.policies.service import PolicyCatalogService

router = APIRouter(prefix="", tags=["employees"])


# ── GET /employees ──────────────────────────────────────────────────

@router.get("", response_model=list[EmployeeOut])
async def list_employees(
    department: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Match on name or email"),
    policy_id: Optional[uuid.UUID] = Query(None),
    is_active: Optional[bool] = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """List employees from the directory (reference data, read-only)."""
    return await DirectoryService.list_employees(
        db,
        department=department,
        search=search,
        policy_id=policy_id,
        is_active=is_active,
    )


# ── GET /employees/{id}/policy ──────────────────────────────────────

@router.get("/{employee_id}/policy", response_model=Optional[PolicyOut])
async def get_employee_policy(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """The policy explicitly assigned to the employee, or ``null`` if none."""
    policy = await PolicyCatalogService.get_policy_for_employee(db, employee_id)
    return PolicyOut.model_validate(policy) if policy else None


# ── PUT /employees/{id}/policy ──────────────────────────────────────

@router.put("/{employee_id}/policy", response_model=EmployeeOut)
async def assign_employee_policy(
    employee_id: uuid.UUID,
    body: PolicyAssignRequest,
    db: AsyncSession = Depends(get_db),
):
    """Assign a policy to an employee, or clear it with ``{"policy_id": null}``."""
    return await PolicyCatalogService.assign_policy(db, employee_id, body.policy_id)
