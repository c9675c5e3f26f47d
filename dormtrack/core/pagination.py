"""
Page and limit normalisation for list endpoints.

Out-of-range query values are corrected rather than rejected, so a client
asking for page 0 or 5000 rows still gets a well-formed page.
"""
from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from dormtrack.core.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
)
from dormtrack.schemas.common import PaginatedResponse, PaginationParams

TModel = TypeVar("TModel")
TSchema = TypeVar("TSchema")


def clamp_limit(value: int | None, default: int, minimum: int, maximum: int) -> int:
    """
    Missing or non-positive values take ``default``; everything else is
    clamped into ``[minimum, maximum]``.
    """
    if value is None or value < 1:
        value = default
    return min(max(value, minimum), maximum)


def normalize_pagination(
    page: int | None,
    page_size: int | None,
) -> PaginationParams:
    if page is None or page < 1:
        page = DEFAULT_PAGE

    page_size = clamp_limit(page_size, DEFAULT_PAGE_SIZE, MIN_PAGE_SIZE, MAX_PAGE_SIZE)
    return PaginationParams(page=page, page_size=page_size)


def paginate_items(
    *,
    items: Sequence[TModel],
    total_items: int,
    params: PaginationParams,
    mapper: Callable[[TModel], TSchema],
) -> PaginatedResponse[TSchema]:
    """
    Map each item through ``mapper`` and wrap the page with its metadata.
    """
    return PaginatedResponse[TSchema].create(
        items=[mapper(obj) for obj in items],
        total_items=total_items,
        page=params.page,
        page_size=params.page_size,
    )
