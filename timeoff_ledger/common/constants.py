"""Enums and constants for the time-off ledger — matching the database ENUM types."""

from __future__ import annotations

import enum


# ── Policies ────────────────────────────────────────────────────────

class PolicyKind(str, enum.Enum):
    UNLIMITED = "UNLIMITED"
    FIXED = "FIXED"
    ACCRUAL = "ACCRUAL"


# Kinds that carry an ``annual_allowance_days`` figure.
TRACKED_POLICY_KINDS = frozenset({PolicyKind.FIXED, PolicyKind.ACCRUAL})


# ── Requests ────────────────────────────────────────────────────────

class TimeOffType(str, enum.Enum):
    PTO = "PTO"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    UNPAID = "UNPAID"
    JURY_DUTY = "JURY_DUTY"
    PARENTAL_LEAVE = "PARENTAL_LEAVE"


class TimeOffStatus(str, enum.Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset(
    {TimeOffStatus.APPROVED, TimeOffStatus.DENIED, TimeOffStatus.CANCELLED}
)

# REQUESTED is the only state with outgoing edges.
ALLOWED_TRANSITIONS: dict[TimeOffStatus, frozenset[TimeOffStatus]] = {
    TimeOffStatus.REQUESTED: TERMINAL_STATUSES,
    **{s: frozenset() for s in TERMINAL_STATUSES},
}

# "Planned to be out": counted for conflicts and the manager rollup.
ACTIVE_STATUSES = frozenset({TimeOffStatus.REQUESTED, TimeOffStatus.APPROVED})

# Only this leave type is balanced against a policy allowance.
BALANCED_TYPES = frozenset({TimeOffType.PTO})


# ── Balances ────────────────────────────────────────────────────────

class BalanceState(str, enum.Enum):
    tracked = "tracked"
    unlimited = "unlimited"
    not_configured = "not_configured"


# ── Misc ────────────────────────────────────────────────────────────

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
