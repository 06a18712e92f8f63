"""Request Ledger service — request intake, the status state machine, projections.

Business rules:
  - A request is stored only if ``start_date <= end_date``; it starts as
    REQUESTED.
  - REQUESTED → APPROVED | DENIED | CANCELLED. All three are terminal and
    nothing re-enters REQUESTED.
  - Transitions are a compare-and-swap on ``(id, status, version)``: when two
    callers race, exactly one wins and the other gets
    ``InvalidTransitionException``.
  - Requests are never deleted. Every status the request has held is kept
    in ``time_off_status_changes``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from timeoff_ledger.common.audit import create_audit_entry
from timeoff_ledger.common.constants import ALLOWED_TRANSITIONS, TimeOffStatus, TimeOffType
from timeoff_ledger.common.date_range import days_inclusive
from timeoff_ledger.common.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from timeoff_ledger.common.filters import apply_filters
from timeoff_ledger.common.pagination import PaginatedResponse, PaginationParams, paginate
from timeoff_ledger.config import settings
from timeoff_ledger.directory.models import Employee
from timeoff_ledger.directory.schemas import EmployeeBrief
from timeoff_ledger.directory.service import DirectoryService
from timeoff_ledger.ledger.events import queue_after_commit
from timeoff_ledger.ledger.models import TimeOffRequest, TimeOffStatusChange
from timeoff_ledger.ledger.schemas import (
    StatusChangeOut,
    TimeOffRequestCreate,
    TimeOffRequestFilters,
    TimeOffRequestOut,
    TimeOffRequestRecord,
)
from timeoff_ledger.policies.models import TimeOffPolicy

logger = logging.getLogger(__name__)

_AUDIT_ACTIONS = {
    TimeOffStatus.APPROVED: "approve",
    TimeOffStatus.DENIED: "deny",
    TimeOffStatus.CANCELLED: "cancel",
}

_SORTABLE_COLUMNS = ("start_date", "end_date", "created_at", "updated_at", "status", "type")


class TimeOffLedgerService:
    """Async ledger operations: create, transition, list."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def build_response(
        req: TimeOffRequest,
        *,
        employee: Optional[Employee] = None,
    ) -> TimeOffRequestOut:
        """Build ``TimeOffRequestOut``, embedding the employee when it is at hand."""
        record = TimeOffRequestRecord.model_validate(req)
        if employee is None and "employee" not in inspect(req).unloaded:
            employee = req.employee
        return TimeOffRequestOut(
            **record.model_dump(exclude={"total_days"}),
            total_days=days_inclusive(req.start_date, req.end_date),
            employee=EmployeeBrief.model_validate(employee) if employee else None,
        )

    @staticmethod
    async def _load(db: AsyncSession, request_id: uuid.UUID) -> TimeOffRequest:
        """Fetch the current committed row, bypassing any stale identity-map copy."""
        result = await db.execute(
            select(TimeOffRequest)
            .where(TimeOffRequest.id == request_id)
            .options(selectinload(TimeOffRequest.employee))
            .execution_options(populate_existing=True)
        )
        req = result.scalars().first()
        if req is None:
            raise NotFoundException("TimeOffRequest", str(request_id))
        return req

    @staticmethod
    def requests_query(
        *,
        employee_id: Optional[uuid.UUID] = None,
        employee_ids: Optional[Iterable[uuid.UUID]] = None,
        request_ids: Optional[Iterable[uuid.UUID]] = None,
        statuses: Optional[Iterable[TimeOffStatus]] = None,
        types: Optional[Iterable[TimeOffType]] = None,
        department: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ):
        """The one query every ledger projection is built on.

        ``from_date`` / ``to_date`` select requests whose range overlaps the
        window, not requests contained in it.
        """
        filters: dict[str, Any] = {
            "employee_id": employee_id,
            "employee_id__in": list(employee_ids) if employee_ids is not None else None,
            "id__in": list(request_ids) if request_ids is not None else None,
            "status__in": list(statuses) if statuses is not None else None,
            "type__in": list(types) if types is not None else None,
            "end_date__gte": from_date,
            "start_date__lte": to_date,
        }
        query = apply_filters(
            select(TimeOffRequest).options(selectinload(TimeOffRequest.employee)),
            TimeOffRequest,
            filters,
        )
        if department is not None:
            query = query.join(Employee, TimeOffRequest.employee_id == Employee.id).where(
                Employee.department == department
            )
        return query

    @staticmethod
    async def fetch_requests(db: AsyncSession, **criteria: Any) -> Sequence[TimeOffRequest]:
        """Run ``requests_query(**criteria)`` ordered by start date, then creation.

        Rows already in the session are refreshed from the database.
        """
        query = TimeOffLedgerService.requests_query(**criteria).order_by(
            TimeOffRequest.start_date, TimeOffRequest.created_at, TimeOffRequest.id,
        ).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().all()

    # ─────────────────────────────────────────────────────────────────
    # Create
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_request(
        db: AsyncSession,
        data: TimeOffRequestCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> TimeOffRequestOut:
        """File a request as REQUESTED.

        Raises ``InvalidRangeError`` (a ``ValidationException``) when
        ``end_date < start_date`` and ``ValidationException`` for an unknown
        or inactive employee, an unknown policy, or an over-long span.
        """

        total_days = days_inclusive(data.start_date, data.end_date)
        if total_days > settings.MAX_REQUEST_SPAN_DAYS:
            raise ValidationException(
                {"end_date": [
                    f"A request cannot span more than "
                    f"{settings.MAX_REQUEST_SPAN_DAYS} days."
                ]}
            )

        employee = await DirectoryService.require_employee(db, data.employee_id)

        if data.policy_id is not None and await db.get(TimeOffPolicy, data.policy_id) is None:
            raise ValidationException({"policy_id": [f"Unknown policy '{data.policy_id}'."]})

        req = TimeOffRequest(
            employee_id=employee.id,
            policy_id=data.policy_id,
            type=data.type,
            status=TimeOffStatus.REQUESTED,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            version=1,
        )
        db.add(req)
        await db.flush()

        db.add(TimeOffStatusChange(
            request_id=req.id,
            from_status=None,
            to_status=TimeOffStatus.REQUESTED,
            actor_id=actor_id or employee.id,
        ))
        await create_audit_entry(
            db,
            action="create",
            entity_type="time_off_request",
            entity_id=req.id,
            actor_id=actor_id or employee.id,
            new_values={
                "type": req.type.value,
                "start_date": req.start_date.isoformat(),
                "end_date": req.end_date.isoformat(),
                "total_days": total_days,
                "status": req.status.value,
            },
        )

        logger.info(
            "Created %s request %s for employee %s (%s..%s, %d days)",
            req.type.value, req.id, employee.id, req.start_date, req.end_date, total_days,
        )
        return TimeOffLedgerService.build_response(req, employee=employee)

    # ─────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def set_status(
        db: AsyncSession,
        request_id: uuid.UUID,
        target_status: TimeOffStatus,
        actor_id: uuid.UUID,
        *,
        note: Optional[str] = None,
    ) -> TimeOffRequestOut:
        """Move a request to *target_status* on behalf of *actor_id*.

        An APPROVED result counts toward balances as soon as the caller's
        transaction commits.
        """

        req = await TimeOffLedgerService._load(db, request_id)
        await DirectoryService.require_employee(
            db, actor_id, field="actor_id", active_only=False,
        )

        current = req.status
        if target_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionException(current, target_status)

        now = datetime.now(timezone.utc)
        result = await db.execute(
            update(TimeOffRequest)
            .where(
                TimeOffRequest.id == request_id,
                TimeOffRequest.status == current,
                TimeOffRequest.version == req.version,
            )
            .values(
                status=target_status,
                version=req.version + 1,
                decided_by=actor_id,
                decided_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            fresh = await TimeOffLedgerService._load(db, request_id)
            logger.warning(
                "Lost status race on request %s: wanted %s from %s v%d, found %s v%d",
                request_id, target_status.value, current.value, req.version,
                fresh.status.value, fresh.version,
            )
            raise InvalidTransitionException(fresh.status, target_status)

        db.add(TimeOffStatusChange(
            request_id=request_id,
            from_status=current,
            to_status=target_status,
            actor_id=actor_id,
            note=note,
        ))
        await create_audit_entry(
            db,
            action=_AUDIT_ACTIONS[target_status],
            entity_type="time_off_request",
            entity_id=request_id,
            actor_id=actor_id,
            old_values={"status": current.value},
            new_values={"status": target_status.value, "note": note},
        )

        req = await TimeOffLedgerService._load(db, request_id)
        logger.info(
            "Request %s moved %s -> %s by %s",
            request_id, current.value, target_status.value, actor_id,
        )
        queue_after_commit(
            db,
            "timeoff.status_changed",
            request_id=str(request_id),
            employee_id=str(req.employee_id),
            from_status=current.value,
            to_status=target_status.value,
            actor_id=str(actor_id),
        )
        return TimeOffLedgerService.build_response(req)

    @staticmethod
    async def approve(
        db: AsyncSession, request_id: uuid.UUID, actor_id: uuid.UUID, *, note: Optional[str] = None,
    ) -> TimeOffRequestOut:
        return await TimeOffLedgerService.set_status(
            db, request_id, TimeOffStatus.APPROVED, actor_id, note=note,
        )

    @staticmethod
    async def deny(
        db: AsyncSession, request_id: uuid.UUID, actor_id: uuid.UUID, *, note: Optional[str] = None,
    ) -> TimeOffRequestOut:
        return await TimeOffLedgerService.set_status(
            db, request_id, TimeOffStatus.DENIED, actor_id, note=note,
        )

    @staticmethod
    async def cancel(
        db: AsyncSession, request_id: uuid.UUID, actor_id: uuid.UUID, *, note: Optional[str] = None,
    ) -> TimeOffRequestOut:
        return await TimeOffLedgerService.set_status(
            db, request_id, TimeOffStatus.CANCELLED, actor_id, note=note,
        )

    # ─────────────────────────────────────────────────────────────────
    # Read-only projections
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_request(db: AsyncSession, request_id: uuid.UUID) -> TimeOffRequestOut:
        return TimeOffLedgerService.build_response(
            await TimeOffLedgerService._load(db, request_id)
        )

    @staticmethod
    async def get_history(db: AsyncSession, request_id: uuid.UUID) -> list[StatusChangeOut]:
        """Every status the request has held, oldest first."""
        await TimeOffLedgerService._load(db, request_id)
        result = await db.execute(
            select(TimeOffStatusChange)
            .where(TimeOffStatusChange.request_id == request_id)
            .order_by(TimeOffStatusChange.created_at)
        )
        return [StatusChangeOut.model_validate(c) for c in result.scalars().all()]

    @staticmethod
    async def list_by_employee(
        db: AsyncSession, employee_id: uuid.UUID,
    ) -> list[TimeOffRequestOut]:
        rows = await TimeOffLedgerService.fetch_requests(db, employee_id=employee_id)
        return [TimeOffLedgerService.build_response(r) for r in rows]

    @staticmethod
    async def list_by_status(
        db: AsyncSession, status: TimeOffStatus,
    ) -> list[TimeOffRequestOut]:
        rows = await TimeOffLedgerService.fetch_requests(db, statuses=[status])
        return [TimeOffLedgerService.build_response(r) for r in rows]

    @staticmethod
    async def list_all(db: AsyncSession) -> list[TimeOffRequestOut]:
        rows = await TimeOffLedgerService.fetch_requests(db)
        return [TimeOffLedgerService.build_response(r) for r in rows]

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        filters: TimeOffRequestFilters,
        pagination: PaginationParams,
    ) -> PaginatedResponse:
        """Filtered, paginated request listing for the HTTP surface."""

        query = TimeOffLedgerService.requests_query(
            employee_id=filters.employee_id,
            statuses=[filters.status] if filters.status else None,
            types=[filters.type] if filters.type else None,
            department=filters.department,
            from_date=filters.from_date,
            to_date=filters.to_date,
        )
        page = await paginate(
            db,
            query,
            pagination,
            model=TimeOffRequest,
            sortable=_SORTABLE_COLUMNS,
            default_order=(TimeOffRequest.start_date, TimeOffRequest.created_at),
        )
        return PaginatedResponse(
            data=[TimeOffLedgerService.build_response(r) for r in page.data],
            meta=page.meta,
        )
