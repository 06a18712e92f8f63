"""Policy Catalog ORM model: TimeOffPolicy."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timeoff_ledger.common.audit import utcnow
from timeoff_ledger.common.constants import PolicyKind
from timeoff_ledger.database import Base

if TYPE_CHECKING:
    from timeoff_ledger.directory.models import Employee


class TimeOffPolicy(Base):
    __tablename__ = "time_off_policies"
    __table_args__ = (
        sa.CheckConstraint(
            "annual_allowance_days IS NULL OR annual_allowance_days >= 0",
            name="ck_policy_allowance_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    kind: Mapped[PolicyKind] = mapped_column(
        sa.Enum(PolicyKind, name="time_off_policy_kind"), nullable=False,
    )
    annual_allowance_days: Mapped[Optional[int]] = mapped_column(sa.Integer)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False,
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="policy")

    def __repr__(self) -> str:
        return f"<TimeOffPolicy {self.name!r} {self.kind.value}>"
