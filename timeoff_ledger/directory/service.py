"""Directory service — read-only lookups against the employee reference table."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.exceptions import NotFoundException, ValidationException
from timeoff_ledger.common.filters import apply_filters
from timeoff_ledger.directory.models import Employee
from timeoff_ledger.directory.schemas import EmployeeOut


class DirectoryService:
    """Employee lookups used by the ledger, balances and rollups."""

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        *,
        department: Optional[str] = None,
        search: Optional[str] = None,
        policy_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = True,
    ) -> list[EmployeeOut]:
        """List employees, optionally filtered by department, policy or name."""

        filters: dict[str, Any] = {
            "department": department,
            "policy_id": policy_id,
            "is_active": is_active,
        }
        query = apply_filters(select(Employee), Employee, filters)

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Employee.first_name.ilike(pattern),
                    Employee.last_name.ilike(pattern),
                    Employee.email.ilike(pattern),
                )
            )

        query = query.order_by(Employee.last_name, Employee.first_name)
        result = await db.execute(query)
        return [EmployeeOut.model_validate(e) for e in result.scalars().all()]

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        """Load one employee or raise ``NotFoundException``."""
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    async def require_employee(
        db: AsyncSession,
        employee_id: uuid.UUID,
        *,
        field: str = "employee_id",
        active_only: bool = True,
    ) -> Employee:
        """Resolve an employee referenced from a write payload.

        An unknown reference in a payload is malformed input, so this raises
        ``ValidationException`` keyed on *field* rather than a 404.
        """
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise ValidationException({field: [f"Unknown employee '{employee_id}'."]})
        if active_only and not employee.is_active:
            raise ValidationException({field: [f"Employee '{employee_id}' is inactive."]})
        return employee
