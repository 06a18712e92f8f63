"""Conflict service — feeds ledger rows to the detector."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import ACTIVE_STATUSES
from timeoff_ledger.common.exceptions import NotFoundException
from timeoff_ledger.conflicts.detector import ConflictPair, scan_conflicts
from timeoff_ledger.conflicts.schemas import ConflictPairOut
from timeoff_ledger.ledger.service import TimeOffLedgerService

logger = logging.getLogger(__name__)


def pair_to_out(pair: ConflictPair) -> ConflictPairOut:
    return ConflictPairOut(
        request_a=TimeOffLedgerService.build_response(pair.request_a),
        request_b=TimeOffLedgerService.build_response(pair.request_b),
        overlap_start=pair.overlap.start,
        overlap_end=pair.overlap.end,
        overlap_days=pair.overlap_days,
    )


class ConflictService:
    """Async conflict queries. Read-only."""

    @staticmethod
    async def get_conflicts(
        db: AsyncSession,
        request_ids: Iterable[uuid.UUID],
    ) -> list[ConflictPairOut]:
        """Conflicts among an explicit list of request ids.

        Every id must exist; DENIED and CANCELLED rows are accepted but
        never appear in a pair.
        """
        wanted = list(dict.fromkeys(request_ids))
        if not wanted:
            return []

        rows = await TimeOffLedgerService.fetch_requests(db, request_ids=wanted)
        missing = set(wanted) - {r.id for r in rows}
        if missing:
            raise NotFoundException("TimeOffRequest", ", ".join(sorted(str(m) for m in missing)))

        # Equal start dates keep the caller's order through the detector's stable sort.
        position = {rid: i for i, rid in enumerate(wanted)}
        rows = sorted(rows, key=lambda r: position[r.id])
        return [pair_to_out(p) for p in await scan_conflicts(rows)]

    @staticmethod
    async def get_team_conflicts(
        db: AsyncSession,
        *,
        department: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> list[ConflictPairOut]:
        """Conflicts among a team's live requests, optionally within a date window."""
        rows = await TimeOffLedgerService.fetch_requests(
            db,
            statuses=ACTIVE_STATUSES,
            department=department,
            from_date=from_date,
            to_date=to_date,
        )
        return [pair_to_out(p) for p in await scan_conflicts(rows)]
