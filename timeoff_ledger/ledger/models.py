"""Request Ledger ORM models: TimeOffRequest, TimeOffStatusChange."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timeoff_ledger.common.audit import utcnow
from timeoff_ledger.common.constants import TimeOffStatus, TimeOffType
from timeoff_ledger.database import Base

if TYPE_CHECKING:
    from timeoff_ledger.directory.models import Employee
    from timeoff_ledger.policies.models import TimeOffPolicy


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_request_date_order"),
        sa.Index("ix_time_off_requests_employee_dates", "employee_id", "start_date"),
        sa.Index("ix_time_off_requests_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id"), nullable=False,
    )
    policy_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("time_off_policies.id"), nullable=True,
    )
    type: Mapped[TimeOffType] = mapped_column(
        sa.Enum(TimeOffType, name="time_off_type"), nullable=False,
    )
    status: Mapped[TimeOffStatus] = mapped_column(
        sa.Enum(TimeOffStatus, name="time_off_status"),
        nullable=False,
        default=TimeOffStatus.REQUESTED,
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    # Bumped on every status change; the compare-and-swap key for transitions.
    version: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=1)
    decided_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id"), nullable=True,
    )
    decided_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, nullable=False,
    )

    # Relationships
    employee: Mapped[Employee] = relationship(
        back_populates="time_off_requests", foreign_keys=[employee_id],
    )
    decider: Mapped[Optional[Employee]] = relationship(foreign_keys=[decided_by])
    policy: Mapped[Optional[TimeOffPolicy]] = relationship()
    history: Mapped[list[TimeOffStatusChange]] = relationship(
        back_populates="request",
        order_by="TimeOffStatusChange.created_at",
    )

    def __repr__(self) -> str:
        return (
            f"<TimeOffRequest {self.type.value} {self.start_date}..{self.end_date}"
            f" {self.status.value} v{self.version}>"
        )


class TimeOffStatusChange(Base):
    """One row per status the request has been in; never updated."""

    __tablename__ = "time_off_status_changes"

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    request_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("time_off_requests.id"), nullable=False, index=True,
    )
    from_status: Mapped[Optional[TimeOffStatus]] = mapped_column(
        sa.Enum(TimeOffStatus, name="time_off_status"),
    )
    to_status: Mapped[TimeOffStatus] = mapped_column(
        sa.Enum(TimeOffStatus, name="time_off_status"), nullable=False,
    )
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        sa.Uuid, sa.ForeignKey("employees.id"), nullable=True,
    )
    note: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, nullable=False,
    )

    request: Mapped[TimeOffRequest] = relationship(back_populates="history")
