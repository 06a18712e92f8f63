"""Conflict Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from timeoff_ledger.ledger.schemas import TimeOffRequestOut


class ConflictScanRequest(BaseModel):
    """Body of ``POST /conflicts``: the team's request ids to check."""

    request_ids: list[uuid.UUID] = Field(..., max_length=1000)


class ConflictPairOut(BaseModel):
    request_a: TimeOffRequestOut
    request_b: TimeOffRequestOut
    overlap_start: date
    overlap_end: date
    overlap_days: int
