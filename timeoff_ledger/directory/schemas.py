"""Directory Pydantic v2 schemas — read-only employee projections."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class EmployeeBrief(BaseModel):
    """Display fields embedded in request, conflict and calendar responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str
    department: Optional[str] = None
    title: Optional[str] = None


class EmployeeOut(BaseModel):
    """Directory entry as returned by ``GET /employees``."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    first_name: str
    last_name: str
    display_name: str
    email: str
    department: Optional[str] = None
    title: Optional[str] = None
    policy_id: Optional[uuid.UUID] = None
    is_active: bool = True
    created_at: datetime
