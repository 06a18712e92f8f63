"""Policy Catalog module — leave policies and their allowances."""

from timeoff_ledger.policies.models import TimeOffPolicy

__all__ = ["TimeOffPolicy"]
