"""Directory module — the employee fields the ledger reads: identity, department, policy."""

from timeoff_ledger.directory.models import Employee

__all__ = ["Employee"]
