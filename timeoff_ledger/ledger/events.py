"""Post-commit ledger events.

Transitions never talk to outside systems while the row is changing. They
queue an event on the session instead; the queue is emitted to the log only
once the surrounding transaction commits, and discarded on rollback.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_PENDING_KEY = "timeoff_ledger.pending_events"


def queue_after_commit(db: AsyncSession, name: str, **payload: Any) -> None:
    """Emit *name* with *payload* after *db*'s current transaction commits."""
    session = db.sync_session
    if not event.contains(session, "after_commit", _emit_pending):
        event.listen(session, "after_commit", _emit_pending)
        event.listen(session, "after_rollback", _drop_pending)
    session.info.setdefault(_PENDING_KEY, []).append((name, payload))


def pending_events(db: AsyncSession) -> list[tuple[str, dict[str, Any]]]:
    """Events queued on *db* that have not been committed yet."""
    return list(db.sync_session.info.get(_PENDING_KEY, []))


def _emit_pending(session: Session) -> None:
    for name, payload in session.info.pop(_PENDING_KEY, []):
        logger.info("%s %s", name, payload)


def _drop_pending(session: Session) -> None:
    dropped = session.info.pop(_PENDING_KEY, [])
    if dropped:
        logger.debug("Discarded %d uncommitted ledger events", len(dropped))
