"""Request Ledger Pydantic v2 schemas — request / response validation."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from timeoff_ledger.common.constants import TimeOffStatus, TimeOffType
from timeoff_ledger.directory.schemas import EmployeeBrief


# ═════════════════════════════════════════════════════════════════════
# Write
# ═════════════════════════════════════════════════════════════════════


class TimeOffRequestCreate(BaseModel):
    """Payload for filing a request on behalf of an employee.

    Date order is checked by the ledger, not here, so that direct service
    callers and HTTP callers get the same ``InvalidRangeError``.
    """

    employee_id: uuid.UUID
    type: TimeOffType = TimeOffType.PTO
    start_date: date = Field(..., description="First day out (inclusive)")
    end_date: date = Field(..., description="Last day out (inclusive)")
    reason: Optional[str] = Field(None, max_length=1000)
    policy_id: Optional[uuid.UUID] = None


class StatusPatchRequest(BaseModel):
    """Payload for ``PATCH /timeoff/requests/{id}/status``."""

    status: TimeOffStatus
    actor_id: uuid.UUID
    note: Optional[str] = Field(None, max_length=500)


# ═════════════════════════════════════════════════════════════════════
# Read
# ═════════════════════════════════════════════════════════════════════


class TimeOffRequestRecord(BaseModel):
    """Column fields only; never touches ORM relationships."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    policy_id: Optional[uuid.UUID] = None
    type: TimeOffType
    status: TimeOffStatus
    start_date: date
    end_date: date
    total_days: int = 0
    reason: Optional[str] = None
    version: int
    decided_by: Optional[uuid.UUID] = None
    decided_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TimeOffRequestOut(TimeOffRequestRecord):
    """Full request response."""

    # Enriched by service
    employee: Optional[EmployeeBrief] = None


class StatusChangeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    request_id: uuid.UUID
    from_status: Optional[TimeOffStatus] = None
    to_status: TimeOffStatus
    actor_id: Optional[uuid.UUID] = None
    note: Optional[str] = None
    created_at: datetime


class TimeOffRequestFilters(BaseModel):
    """Query filters for the request listing."""

    employee_id: Optional[uuid.UUID] = None
    status: Optional[TimeOffStatus] = None
    type: Optional[TimeOffType] = None
    department: Optional[str] = None
    from_date: Optional[date] = Field(
        None, description="Only requests that end on or after this day"
    )
    to_date: Optional[date] = Field(
        None, description="Only requests that start on or before this day"
    )
