"""
Shared schema base and the envelopes used by paged endpoints.

Report listings and the timing details use page numbers; technician
history uses an id cursor because rows keep moving into it.
"""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")

__all__ = [
    "BaseSchema",
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
    "CursorPaginationMeta",
    "CursorPaginatedResponse",
    "MessageResponse",
]


class BaseSchema(BaseModel):
    """Reads ORM objects, accepts field names or aliases, trims strings."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
    )


class PaginationParams(BaseSchema):
    """Page request after clamping; ``page`` is 1-based."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)

    @computed_field  # type: ignore[misc]
    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @computed_field  # type: ignore[misc]
    @property
    def limit(self) -> int:
        return self.page_size


class PaginationMeta(BaseSchema):
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=1, description="An empty result still has one page")
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseSchema, Generic[T]):
    items: List[T]
    meta: PaginationMeta

    @classmethod
    def create(
        cls,
        items: List[T],
        total_items: int,
        page: int,
        page_size: int,
    ) -> "PaginatedResponse[T]":
        pages = max(-(-total_items // page_size), 1)
        return cls(
            items=items,
            meta=PaginationMeta(
                total_items=total_items,
                total_pages=pages,
                current_page=page,
                page_size=page_size,
                has_next=page < pages,
                has_previous=page > 1,
            ),
        )


class CursorPaginationMeta(BaseSchema):
    next_cursor: Optional[str] = Field(default=None, description="Pass back as ``cursor`` to continue")
    has_more: bool


class CursorPaginatedResponse(BaseSchema, Generic[T]):
    items: List[T]
    meta: CursorPaginationMeta


class MessageResponse(BaseSchema):
    ok: bool = True
    message: str
