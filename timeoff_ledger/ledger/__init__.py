"""Request Ledger module — time-off requests, their state machine and history."""

from timeoff_ledger.ledger.models import TimeOffRequest, TimeOffStatusChange

__all__ = ["TimeOffRequest", "TimeOffStatusChange"]
