"""Offset pagination helpers shared by listing endpoints."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Generic, Sequence, TypeVar

from accountdesk.domain.common.rows import keys_to_camel_case

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class PaginationParams:
    limit: int
    offset: int


@dataclass(slots=True)
class PageInfo:
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool

    def to_payload(self) -> dict[str, Any]:
        return keys_to_camel_case(asdict(self))


@dataclass(slots=True)
class PaginationResponse(Generic[T]):
    data: list[T]
    pagination: PageInfo

    def to_payload(self) -> dict[str, Any]:
        items = [item.to_payload() if hasattr(item, "to_payload") else item for item in self.data]
        return {"data": items, "pagination": self.pagination.to_payload()}


def create_pagination_params(page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> PaginationParams:
    """Clamp the page size into [1, MAX_PAGE_SIZE] and pages below 1 up to 1."""
    limit = max(1, min(page_size, MAX_PAGE_SIZE))
    offset = (max(1, page) - 1) * limit
    return PaginationParams(limit=limit, offset=offset)


def create_pagination_response(
    data: Sequence[T],
    total_items: int,
    page: int,
    page_size: int,
) -> PaginationResponse[T]:
    total_pages = math.ceil(total_items / page_size) if page_size > 0 else 0
    return PaginationResponse(
        data=list(data),
        pagination=PageInfo(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        ),
    )
