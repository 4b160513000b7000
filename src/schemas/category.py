"""Pydantic schemas for category endpoints."""
from uuid import UUID

from schemas.base import CamelModel


class CategoryResponse(CamelModel):
    """A category with its number of published prompts."""

    id: UUID
    name: str
    slug: str
    description: str | None = None
    prompt_type: str
    prompt_count: int = 0


class CategoryListResponse(CamelModel):
    """All categories."""

    categories: list[CategoryResponse]
