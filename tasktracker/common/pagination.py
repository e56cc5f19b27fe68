"""Generic pagination utilities for in-memory screen lists."""


import math
from typing import Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel

from tasktracker.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from tasktracker.common.filters import apply_sorting

T = TypeVar("T")


# ── FastAPI dependency ──────────────────────────────────────────────

class PaginationParams:
    """Inject via ``Depends(PaginationParams)`` on any list endpoint."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
        page_size: int = Query(
            default=DEFAULT_PAGE_SIZE,
            ge=1,
            le=MAX_PAGE_SIZE,
            description=f"Items per page (max {MAX_PAGE_SIZE})",
        ),
        sort: Optional[str] = Query(
            default=None,
            description='Sort field; prefix "-" for DESC (e.g. "-start_date")',
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ── Pydantic response models ───────────────────────────────────────

class PaginationMeta(BaseModel):
    """Metadata block embedded in every paginated response."""

    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard envelope: ``{"data": [...], "meta": {...}}``."""

    data: Sequence[T]
    meta: PaginationMeta


# ── List helper ─────────────────────────────────────────────────────

def paginate(items: Sequence[T], params: PaginationParams) -> PaginatedResponse:
    """
    Sort *items* by ``params.sort`` and slice out the requested page.

    ``total`` counts every filtered row, not just the current page.
    """
    rows = apply_sorting(items, params.sort)
    total = len(rows)
    total_pages = math.ceil(total / params.page_size) if total else 0

    return PaginatedResponse(
        data=rows[params.offset:params.offset + params.page_size],
        meta=PaginationMeta(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_prev=params.page > 1,
        ),
    )
