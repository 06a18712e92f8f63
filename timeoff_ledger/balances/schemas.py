"""Balance Pydantic v2 schemas — derived snapshots, never persisted."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel

from timeoff_ledger.common.constants import BalanceState
from timeoff_ledger.policies.schemas import PolicyBrief


class BalanceSnapshot(BaseModel):
    """An employee's allowance position for one calendar year.

    ``state`` tells the three shapes apart:

    * ``tracked`` — FIXED/ACCRUAL policy; all numeric fields are set and
      ``remaining_days`` is never negative.
    * ``unlimited`` — UNLIMITED policy; numeric fields are ``None`` (show
      "unlimited", not a number).
    * ``not_configured`` — no policy assigned; numeric fields are ``None``
      (show "not set", which is not the same as "0 days left").
    """

    employee_id: uuid.UUID
    year: int
    state: BalanceState
    policy: Optional[PolicyBrief] = None
    allowance: Optional[int] = None
    used_days: Optional[int] = None
    remaining_days: Optional[int] = None
    # REQUESTED PTO days inside the year; informational, never deducted.
    pending_days: Optional[int] = None
