"""Pydantic schemas for prompt endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from models.prompt import PromptType
from schemas.base import CamelModel
from schemas.common import AuthorSummary, CategorySummary, Pagination
from schemas.validators import validate_and_normalize_tags, validate_slug


class PromptCreate(CamelModel):
    """Schema for creating a new prompt."""

    title: str
    excerpt: str
    content: str
    prompt_type: PromptType
    category_id: UUID | None = None
    slug: str
    tags: list[str] = Field(default_factory=list)
    published: bool = True

    @field_validator("slug")
    @classmethod
    def check_slug_format(cls, v: str) -> str:
        """Validate slug format."""
        return validate_slug(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)


class PromptUpdate(CamelModel):
    """
    Schema for updating an existing prompt.

    Only fields present in the request body are applied. The slug is immutable.
    """

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    prompt_type: PromptType | None = None
    category_id: UUID | None = None
    tags: list[str] | None = None
    published: bool | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize and validate tags if provided."""
        if v is None:
            return None
        return validate_and_normalize_tags(v)


class PromptListItem(CamelModel):
    """Prompt fields returned in listings (no body)."""

    id: UUID
    slug: str
    title: str
    excerpt: str
    prompt_type: str
    tags: list[str]
    upvotes: int
    downvotes: int
    views: int
    copy_count: int
    featured: bool
    published: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary
    category: CategorySummary | None = None


class PromptResponse(PromptListItem):
    """Full prompt including its body."""

    content: str
    category_id: UUID | None = None
    author_id: UUID


class PromptListResponse(CamelModel):
    """Paginated prompt listing."""

    prompts: list[PromptListItem]
    pagination: Pagination
