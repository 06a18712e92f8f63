"""Balance Calculator — remaining allowance derived from the ledger on demand.

Business logic:
  - Only APPROVED requests of a balanced type (PTO) consume the allowance.
  - Each request is clamped to the target year first, so a request spanning
    New Year counts its own days in each year.
  - ``remaining = max(allowance - used, 0)``: over-approval is an upstream
    policy concern and never shows up as a negative balance.
  - Nothing is stored; every call re-reads the ledger.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.balances.schemas import BalanceSnapshot
from timeoff_ledger.common.constants import (
    BALANCED_TYPES,
    BalanceState,
    PolicyKind,
    TimeOffStatus,
)
from timeoff_ledger.common.date_range import clamp_to_year
from timeoff_ledger.common.exceptions import DirectoryLookupError
from timeoff_ledger.directory.service import DirectoryService
from timeoff_ledger.ledger.models import TimeOffRequest
from timeoff_ledger.ledger.service import TimeOffLedgerService
from timeoff_ledger.policies.models import TimeOffPolicy
from timeoff_ledger.policies.schemas import PolicyBrief
from timeoff_ledger.policies.service import PolicyCatalogService

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Pure balance math
# ═════════════════════════════════════════════════════════════════════


def days_in_year(
    requests: Iterable[TimeOffRequest],
    year: int,
    *,
    status: TimeOffStatus = TimeOffStatus.APPROVED,
) -> int:
    """Sum the in-year days of balanced-type requests with *status*."""
    total = 0
    for req in requests:
        if req.status != status or req.type not in BALANCED_TYPES:
            continue
        clamped = clamp_to_year(req.start_date, req.end_date, year)
        if clamped is None:
            continue
        total += clamped.days
    return total


def compute_used_days(requests: Iterable[TimeOffRequest], year: int) -> int:
    """Days of allowance consumed in *year* by approved PTO."""
    return days_in_year(requests, year, status=TimeOffStatus.APPROVED)


def remaining_days(allowance: int, used: int) -> int:
    return max(allowance - used, 0)


def build_snapshot(
    employee_id: uuid.UUID,
    year: int,
    policy: Optional[TimeOffPolicy],
    requests: Iterable[TimeOffRequest],
) -> BalanceSnapshot:
    """Turn a policy plus the employee's requests into a snapshot."""
    if policy is None:
        return BalanceSnapshot(
            employee_id=employee_id, year=year, state=BalanceState.not_configured,
        )

    brief = PolicyBrief.model_validate(policy)
    if policy.kind == PolicyKind.UNLIMITED or policy.annual_allowance_days is None:
        return BalanceSnapshot(
            employee_id=employee_id, year=year, state=BalanceState.unlimited, policy=brief,
        )

    requests = list(requests)
    allowance = policy.annual_allowance_days
    used = compute_used_days(requests, year)
    return BalanceSnapshot(
        employee_id=employee_id,
        year=year,
        state=BalanceState.tracked,
        policy=brief,
        allowance=allowance,
        used_days=used,
        remaining_days=remaining_days(allowance, used),
        pending_days=days_in_year(requests, year, status=TimeOffStatus.REQUESTED),
    )


# ═════════════════════════════════════════════════════════════════════
# BalanceService
# ═════════════════════════════════════════════════════════════════════


class BalanceService:
    """Async balance queries. Read-only; takes no locks."""

    @staticmethod
    async def _year_requests(
        db: AsyncSession,
        year: int,
        **criteria,
    ):
        return await TimeOffLedgerService.fetch_requests(
            db,
            statuses=[TimeOffStatus.APPROVED, TimeOffStatus.REQUESTED],
            types=BALANCED_TYPES,
            from_date=date(year, 1, 1),
            to_date=date(year, 12, 31),
            **criteria,
        )

    @staticmethod
    async def compute_balance(
        db: AsyncSession,
        employee_id: uuid.UUID,
        year: int,
    ) -> BalanceSnapshot:
        """The employee's snapshot for *year*.

        Raises ``NotFoundException`` for an unknown employee and
        ``DirectoryLookupError`` if the policy lookup itself fails.
        """
        try:
            policy = await PolicyCatalogService.get_policy_for_employee(db, employee_id)
        except SQLAlchemyError as exc:
            logger.error("Policy lookup failed for employee %s: %s", employee_id, exc)
            raise DirectoryLookupError("Policy lookup", exc) from exc

        requests = []
        if policy is not None and policy.kind != PolicyKind.UNLIMITED:
            requests = await BalanceService._year_requests(db, year, employee_id=employee_id)

        return build_snapshot(employee_id, year, policy, requests)

    @staticmethod
    async def compute_team_balances(
        db: AsyncSession,
        year: int,
        *,
        department: Optional[str] = None,
    ) -> list[BalanceSnapshot]:
        """One snapshot per active employee, optionally limited to a department."""
        try:
            employees = await DirectoryService.list_employees(db, department=department)
            policy_ids = {e.policy_id for e in employees if e.policy_id is not None}
            policies: dict[uuid.UUID, TimeOffPolicy] = {}
            if policy_ids:
                result = await db.execute(
                    select(TimeOffPolicy).where(TimeOffPolicy.id.in_(policy_ids))
                )
                policies = {p.id: p for p in result.scalars().all()}
        except SQLAlchemyError as exc:
            logger.error("Directory lookup failed for team balances: %s", exc)
            raise DirectoryLookupError("Directory lookup", exc) from exc

        by_employee: dict[uuid.UUID, list[TimeOffRequest]] = defaultdict(list)
        if employees:
            rows = await BalanceService._year_requests(
                db, year, employee_ids=[e.id for e in employees],
            )
            for req in rows:
                by_employee[req.employee_id].append(req)

        return [
            build_snapshot(
                e.id,
                year,
                policies.get(e.policy_id) if e.policy_id else None,
                by_employee.get(e.id, []),
            )
            for e in employees
        ]
