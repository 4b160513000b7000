"""Schemas shared by several content endpoints."""
from math import ceil
from uuid import UUID

from schemas.base import CamelModel


class AuthorSummary(CamelModel):
    """Public author fields embedded in content responses."""

    id: UUID
    name: str | None = None
    username: str | None = None
    image: str | None = None


class CategorySummary(CamelModel):
    """Category fields embedded in content responses."""

    id: UUID
    name: str
    slug: str


class Pagination(CamelModel):
    """Page-number pagination metadata."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Derive page counts and navigation flags from a total."""
        total_pages = ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class SlugAvailability(CamelModel):
    """Response for slug availability checks."""

    slug: str
    available: bool


class MessageResponse(CamelModel):
    """Plain acknowledgement."""

    message: str
