"""Filter and sort helpers for SQLAlchemy ``Select`` statements."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlalchemy import Select, and_
from sqlalchemy.orm import InstrumentedAttribute

from timeoff_ledger.common.exceptions import ValidationException


def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[str],
    *,
    allowed: Iterable[str] = (),
) -> Select:
    """
    Parse a sort string like ``"-start_date"`` and apply ORDER BY.

    A leading ``-`` means DESC. Only names listed in *allowed* are accepted;
    anything else is a ``ValidationException`` on ``sort``.
    """
    if not sort:
        return query

    allowed = frozenset(allowed)
    descending = sort.startswith("-")
    name = sort.lstrip("-")
    col = _get_column(model, name) if name in allowed else None
    if col is None:
        raise ValidationException(
            {"sort": [f"Cannot sort by '{name}'. Choose one of: {', '.join(sorted(allowed))}."]}
        )
    return query.order_by(col.desc() if descending else col.asc())


def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    Apply a dict of filter parameters to a ``Select``.

    Key suffixes pick the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__ilike``   case-insensitive LIKE (wraps ``%…%``)
    ``__gte``     ``>=``
    ``__lte``     ``<=``
    ``__in``      ``IN (…)``
    ============  ==================

    ``None`` values are skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue

        name, _, op = key.partition("__")
        col = _get_column(model, name)
        if col is None:
            continue

        if op == "ilike":
            conditions.append(col.ilike(f"%{value}%"))
        elif op == "gte":
            conditions.append(col >= value)
        elif op == "lte":
            conditions.append(col <= value)
        elif op == "in":
            conditions.append(col.in_(value))
        else:
            conditions.append(col == value)

    if conditions:
        query = query.where(and_(*conditions))

    return query


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Return the mapped column attribute called *name*, if there is one."""
    attr = getattr(model, name, None)
    return attr if isinstance(attr, InstrumentedAttribute) else None
