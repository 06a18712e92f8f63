"""Page-at-a-time listing: query params, the ``{"data", "meta"}`` envelope, and the runner."""

import math
from typing import Annotated, Any, Generic, Iterable, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from timeoff_ledger.common.filters import apply_sorting

T = TypeVar("T")


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """List-endpoint query params; use as ``pagination: PaginationParams = Depends()``."""

    def __init__(
        self,
        page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
        page_size: Annotated[
            int,
            Query(
                ge=1,
                le=MAX_PAGE_SIZE,
                description=f"Rows per page, at most {MAX_PAGE_SIZE}",
            ),
        ] = DEFAULT_PAGE_SIZE,
        sort: Annotated[
            Optional[str],
            Query(description='Column to order by; a leading "-" sorts descending, e.g. "-start_date"'),
        ] = None,
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ── Envelope ────────────────────────────────────────────────────────

class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def for_page(cls, params: PaginationParams, total: int) -> "PaginationMeta":
        pages = math.ceil(total / params.page_size) if total else 0
        return cls(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=pages,
            has_next=params.page < pages,
            has_prev=params.page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """``{"data": [...], "meta": {...}}``."""

    data: Sequence[T]
    meta: PaginationMeta


# ── Runner ──────────────────────────────────────────────────────────

async def count_rows(session: AsyncSession, query: Select) -> int:
    """``COUNT(*)`` over whatever *query* would return, ignoring its ORDER BY."""
    wrapped = select(func.count()).select_from(query.order_by(None).subquery())
    return (await session.execute(wrapped)).scalar_one()


async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any,
    sortable: Iterable[str] = (),
    default_order: Sequence[Any] = (),
) -> PaginatedResponse:
    """Fetch one page of ORM rows from *query*.

    A requested ``sort`` must name one of *sortable*; it is applied ahead of
    *default_order*, which then only breaks ties.
    """
    query = apply_sorting(query, model, params.sort, allowed=sortable)
    if default_order:
        query = query.order_by(*default_order)

    total = await count_rows(session, query)
    result = await session.execute(query.offset(params.offset).limit(params.page_size))

    return PaginatedResponse(
        data=result.scalars().all(),
        meta=PaginationMeta.for_page(params, total),
    )
