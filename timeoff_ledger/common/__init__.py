"""Common module — shared utilities for the time-off ledger."""

from timeoff_ledger.common.audit import AuditTrail, create_audit_entry
from timeoff_ledger.common.constants import (
    ACTIVE_STATUSES,
    ALLOWED_TRANSITIONS,
    BALANCED_TYPES,
    TERMINAL_STATUSES,
    BalanceState,
    PolicyKind,
    TimeOffStatus,
    TimeOffType,
)
from timeoff_ledger.common.date_range import (
    DateRange,
    clamp_to_year,
    days_inclusive,
    intersection,
    iter_days,
    overlaps,
)
from timeoff_ledger.common.exceptions import (
    AppException,
    DirectoryLookupError,
    InvalidRangeError,
    InvalidTransitionException,
    NotFoundException,
    ScanTimeoutError,
    ValidationException,
    register_exception_handlers,
)
from timeoff_ledger.common.filters import apply_filters, apply_sorting
from timeoff_ledger.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "ACTIVE_STATUSES",
    "ALLOWED_TRANSITIONS",
    "BALANCED_TYPES",
    "TERMINAL_STATUSES",
    "BalanceState",
    "PolicyKind",
    "TimeOffStatus",
    "TimeOffType",
    # Date ranges
    "DateRange",
    "clamp_to_year",
    "days_inclusive",
    "intersection",
    "iter_days",
    "overlaps",
    # Exceptions
    "AppException",
    "DirectoryLookupError",
    "InvalidRangeError",
    "InvalidTransitionException",
    "NotFoundException",
    "ScanTimeoutError",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
