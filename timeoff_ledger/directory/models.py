"""Directory ORM model: Employee.

The ledger does not manage people. This table mirrors the handful of fields
the engine needs from the organisation directory: identity, display fields
for conflict reports, and the explicitly assigned time-off policy.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timeoff_ledger.common.audit import utcnow
from timeoff_ledger.database import Base

if TYPE_CHECKING:
    from timeoff_ledger.ledger.models import TimeOffRequest
    from timeoff_ledger.policies.models import TimeOffPolicy


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    department: Mapped[Optional[str]] = mapped_column(sa.String(100), index=True)
    title: Mapped[Optional[str]] = mapped_column(sa.String(150))
    policy_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("time_off_policies.id"), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, nullable=False,
    )

    # ── Relationships ───────────────────────────────────────────────
    policy: Mapped[Optional[TimeOffPolicy]] = relationship(
        back_populates="employees",
    )
    time_off_requests: Mapped[list[TimeOffRequest]] = relationship(
        back_populates="employee",
        foreign_keys="TimeOffRequest.employee_id",
    )

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Employee {self.display_name!r}>"
