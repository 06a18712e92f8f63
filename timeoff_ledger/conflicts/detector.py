"""Conflict Detector — overlapping time off between different employees.

The detector is pure: it reads the requests it is handed and nothing else,
so a scan can be abandoned at any point without leaving anything behind.

Only REQUESTED and APPROVED requests take part; both mean "planning to be
out". Rows are stably sorted by ``start_date`` and every unordered pair
``(i, j)`` with ``i < j`` is tested once, so a pair is never reported twice
or mirrored. Once a later row starts after the current row ends, no row
after it can overlap either, which keeps the scan well below n² for
typical teams without changing which pairs come out.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable, Iterator, NamedTuple, Optional, Protocol, Sequence

from timeoff_ledger.common.constants import ACTIVE_STATUSES
from timeoff_ledger.common.date_range import DateRange, intersection
from timeoff_ledger.common.exceptions import ScanTimeoutError
from timeoff_ledger.config import settings

logger = logging.getLogger(__name__)


class ConflictCandidate(Protocol):
    """Anything shaped like a ledger row: ORM objects and schemas both fit."""

    id: object
    employee_id: object
    status: object
    start_date: date
    end_date: date


class ConflictPair(NamedTuple):
    """Two requests from different employees that share at least one day.

    ``request_a`` is always the one that comes first in start-date order.
    """

    request_a: ConflictCandidate
    request_b: ConflictCandidate
    overlap: DateRange

    @property
    def overlap_days(self) -> int:
        return self.overlap.days


def _candidates(requests: Iterable[ConflictCandidate]) -> list[ConflictCandidate]:
    active = [r for r in requests if r.status in ACTIVE_STATUSES]
    # sorted() is stable: equal start dates keep their input order.
    return sorted(active, key=lambda r: r.start_date)


def _row_conflicts(
    rows: Sequence[ConflictCandidate], i: int,
) -> Iterator[ConflictPair]:
    a = rows[i]
    for b in rows[i + 1:]:
        if b.start_date > a.end_date:
            break
        if a.employee_id == b.employee_id:
            continue
        window = intersection(a.start_date, a.end_date, b.start_date, b.end_date)
        if window is not None:
            yield ConflictPair(a, b, window)


def iter_conflicts(requests: Iterable[ConflictCandidate]) -> Iterator[ConflictPair]:
    """Lazily yield conflicting pairs; stop consuming whenever you like."""
    rows = _candidates(requests)
    for i in range(len(rows)):
        yield from _row_conflicts(rows, i)


def find_conflicts(requests: Iterable[ConflictCandidate]) -> list[ConflictPair]:
    """Every conflicting pair, in start-date order."""
    return list(iter_conflicts(requests))


async def scan_conflicts(
    requests: Iterable[ConflictCandidate],
    *,
    timeout: Optional[float] = None,
) -> list[ConflictPair]:
    """``find_conflicts`` that yields to the event loop between rows.

    Bounded by *timeout* seconds (``CONFLICT_SCAN_TIMEOUT_SECONDS`` when not
    given). On timeout the partial result is thrown away and
    ``ScanTimeoutError`` is raised; cancellation propagates unchanged.
    """
    if timeout is None:
        timeout = settings.CONFLICT_SCAN_TIMEOUT_SECONDS

    rows = _candidates(requests)
    scanned = 0

    async def _scan() -> list[ConflictPair]:
        nonlocal scanned
        found: list[ConflictPair] = []
        for i in range(len(rows)):
            found.extend(_row_conflicts(rows, i))
            scanned = i + 1
            await asyncio.sleep(0)
        return found

    try:
        pairs = await asyncio.wait_for(_scan(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(
            "Conflict scan timed out after %.1fs (%d/%d rows)",
            timeout, scanned, len(rows),
        )
        raise ScanTimeoutError(timeout, scanned) from exc

    logger.info("Conflict scan over %d requests found %d pairs", len(rows), len(pairs))
    return pairs
