"""Policy Catalog service — reference data for allowances.

Policies are written only by administrators through this service; the
ledger and balance calculator read them and never mutate them. An
employee's policy is always the one explicitly assigned in the directory,
never an inferred "first policy in the list".
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.audit import create_audit_entry
from timeoff_ledger.common.constants import PolicyKind
from timeoff_ledger.common.exceptions import NotFoundException, ValidationException
from timeoff_ledger.directory.schemas import EmployeeOut
from timeoff_ledger.directory.service import DirectoryService
from timeoff_ledger.policies.models import TimeOffPolicy
from timeoff_ledger.policies.schemas import PolicyCreate, PolicyOut, PolicyUpdate

logger = logging.getLogger(__name__)


def _check_allowance(kind: PolicyKind, allowance: Optional[int]) -> Optional[int]:
    """Return the allowance to store for *kind*, or raise if it is unusable."""
    if kind == PolicyKind.UNLIMITED:
        return None
    if allowance is None:
        raise ValidationException(
            {"annual_allowance_days": [
                f"annual_allowance_days is required for {kind.value} policies."
            ]}
        )
    if allowance < 0:
        raise ValidationException(
            {"annual_allowance_days": ["annual_allowance_days must be >= 0."]}
        )
    return allowance


class PolicyCatalogService:
    """Async operations on time-off policies."""

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_policies(db: AsyncSession) -> list[PolicyOut]:
        result = await db.execute(
            select(TimeOffPolicy).order_by(TimeOffPolicy.name, TimeOffPolicy.created_at)
        )
        return [PolicyOut.model_validate(p) for p in result.scalars().all()]

    @staticmethod
    async def get_policy(db: AsyncSession, policy_id: uuid.UUID) -> TimeOffPolicy:
        policy = await db.get(TimeOffPolicy, policy_id)
        if policy is None:
            raise NotFoundException("TimeOffPolicy", str(policy_id))
        return policy

    @staticmethod
    async def get_policy_for_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Optional[TimeOffPolicy]:
        """Return the employee's assigned policy.

        ``None`` means no allowance is configured for this employee, which
        callers must show as "not set" rather than as zero days left.
        """
        employee = await DirectoryService.get_employee(db, employee_id)
        if employee.policy_id is None:
            return None
        return await db.get(TimeOffPolicy, employee.policy_id)

    # ─────────────────────────────────────────────────────────────────
    # Administrator writes
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_policy(
        db: AsyncSession,
        data: PolicyCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PolicyOut:
        policy = TimeOffPolicy(
            name=data.name,
            kind=data.kind,
            annual_allowance_days=_check_allowance(data.kind, data.annual_allowance_days),
            description=data.description,
        )
        db.add(policy)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="time_off_policy",
            entity_id=policy.id,
            actor_id=actor_id,
            new_values={
                "name": policy.name,
                "kind": policy.kind.value,
                "annual_allowance_days": policy.annual_allowance_days,
            },
        )
        logger.info("Created policy %s (%s)", policy.id, policy.kind.value)
        return PolicyOut.model_validate(policy)

    @staticmethod
    async def update_policy(
        db: AsyncSession,
        policy_id: uuid.UUID,
        data: PolicyUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> PolicyOut:
        """Apply a partial update, re-checking kind and allowance together."""

        policy = await PolicyCatalogService.get_policy(db, policy_id)
        changes = data.model_dump(exclude_unset=True)

        old_values = {
            "name": policy.name,
            "kind": policy.kind.value,
            "annual_allowance_days": policy.annual_allowance_days,
            "description": policy.description,
        }

        kind = changes.get("kind") or policy.kind
        # An UNLIMITED policy has no stored figure, so switching it to a
        # tracked kind only passes if the update supplies one.
        allowance = changes.get("annual_allowance_days", policy.annual_allowance_days)

        if "name" in changes and changes["name"] is not None:
            policy.name = changes["name"]
        if "description" in changes:
            policy.description = changes["description"]
        policy.kind = kind
        policy.annual_allowance_days = _check_allowance(kind, allowance)
        policy.updated_at = datetime.now(timezone.utc)

        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="time_off_policy",
            entity_id=policy.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={
                "name": policy.name,
                "kind": policy.kind.value,
                "annual_allowance_days": policy.annual_allowance_days,
                "description": policy.description,
            },
        )
        return PolicyOut.model_validate(policy)

    @staticmethod
    async def assign_policy(
        db: AsyncSession,
        employee_id: uuid.UUID,
        policy_id: Optional[uuid.UUID],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> EmployeeOut:
        """Point an employee at *policy_id*, or clear the assignment with ``None``."""

        employee = await DirectoryService.get_employee(db, employee_id)
        if policy_id is not None and await db.get(TimeOffPolicy, policy_id) is None:
            raise ValidationException({"policy_id": [f"Unknown policy '{policy_id}'."]})

        old_policy_id = employee.policy_id
        employee.policy_id = policy_id
        await db.flush()

        await create_audit_entry(
            db,
            action="assign_policy",
            entity_type="employee",
            entity_id=employee.id,
            actor_id=actor_id,
            old_values={"policy_id": str(old_policy_id) if old_policy_id else None},
            new_values={"policy_id": str(policy_id) if policy_id else None},
        )
        return EmployeeOut.model_validate(employee)
