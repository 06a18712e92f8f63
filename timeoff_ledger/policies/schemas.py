"""Policy Catalog Pydantic v2 schemas.

Naming conventions:
  - *Create / *Update / *Request → request bodies (write)
  - *Out                         → response bodies (read)
  - *Brief                       → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from timeoff_ledger.common.constants import TRACKED_POLICY_KINDS, PolicyKind


class PolicyBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    kind: PolicyKind
    annual_allowance_days: Optional[int] = None


class PolicyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    kind: PolicyKind
    annual_allowance_days: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PolicyCreate(BaseModel):
    """Payload for defining a policy. UNLIMITED policies never store an allowance."""

    name: str = Field(..., min_length=1, max_length=150)
    kind: PolicyKind
    annual_allowance_days: Optional[int] = Field(
        None, ge=0, description="Required for FIXED and ACCRUAL policies"
    )
    description: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_allowance(self) -> "PolicyCreate":
        if self.kind in TRACKED_POLICY_KINDS and self.annual_allowance_days is None:
            raise ValueError(
                f"annual_allowance_days is required for {self.kind.value} policies."
            )
        if self.kind == PolicyKind.UNLIMITED:
            self.annual_allowance_days = None
        return self


class PolicyUpdate(BaseModel):
    """Partial update; omitted fields are left as they are."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    kind: Optional[PolicyKind] = None
    annual_allowance_days: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=2000)


class PolicyAssignRequest(BaseModel):
    """Assign (or clear, with ``null``) an employee's policy."""

    policy_id: Optional[uuid.UUID] = None
