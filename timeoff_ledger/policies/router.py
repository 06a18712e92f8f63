"""Policy Catalog router — list, define and edit time-off policies."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.database import get_db
from timeoff_ledger.policies.schemas import PolicyCreate, PolicyOut, PolicyUpdate
from timeoff_ledger.policies.service import PolicyCatalogService

router = APIRouter(prefix="", tags=["policies"])


@router.get("", response_model=list[PolicyOut])
async def list_policies(db: AsyncSession = Depends(get_db)):
    """All policies the organisation has defined."""
    return await PolicyCatalogService.list_policies(db)


@router.get("/{policy_id}", response_model=PolicyOut)
async def get_policy(policy_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return PolicyOut.model_validate(await PolicyCatalogService.get_policy(db, policy_id))


@router.post("", response_model=PolicyOut, status_code=status.HTTP_201_CREATED)
async def create_policy(body: PolicyCreate, db: AsyncSession = Depends(get_db)):
    """Define a policy. FIXED and ACCRUAL policies need ``annual_allowance_days``."""
    return await PolicyCatalogService.create_policy(db, body)


@router.patch("/{policy_id}", response_model=PolicyOut)
async def update_policy(
    policy_id: uuid.UUID,
    body: PolicyUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await PolicyCatalogService.update_policy(db, policy_id, body)
