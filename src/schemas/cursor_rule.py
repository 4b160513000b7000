"""Pydantic schemas for cursor rule endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from models.cursor_rule import RuleType
from schemas.base import CamelModel
from schemas.common import AuthorSummary, CategorySummary, Pagination
from schemas.validators import validate_and_normalize_tags, validate_slug


class CursorRuleCreate(CamelModel):
    """
    Schema for creating a new cursor rule.

    When ``slug`` is omitted one is generated from the title.
    """

    title: str
    description: str
    content: str
    rule_type: RuleType
    globs: str | None = None
    category_id: UUID | None = None
    slug: str | None = None
    tags: list[str] = Field(default_factory=list)
    published: bool = True

    @field_validator("slug")
    @classmethod
    def check_slug_format(cls, v: str | None) -> str | None:
        """Validate slug format if provided."""
        if v is None or v == "":
            return None
        return validate_slug(v)

    @field_validator("globs")
    @classmethod
    def blank_globs_to_none(cls, v: str | None) -> str | None:
        """Treat blank globs as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)


class CursorRuleUpdate(CamelModel):
    """Schema for updating an existing cursor rule. The slug is immutable."""

    title: str | None = None
    description: str | None = None
    content: str | None = None
    rule_type: RuleType | None = None
    globs: str | None = None
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


class CursorRuleListItem(CamelModel):
    """Cursor rule fields returned in listings."""

    id: UUID
    slug: str
    title: str
    description: str
    rule_type: str
    globs: str | None = None
    tags: list[str]
    upvotes: int
    views: int
    copy_count: int
    featured: bool
    published: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary
    category: CategorySummary | None = None


class CursorRuleResponse(CursorRuleListItem):
    """Full cursor rule including its body."""

    content: str
    category_id: UUID | None = None
    author_id: UUID


class CursorRuleListResponse(CamelModel):
    """Paginated cursor rule listing."""

    cursor_rules: list[CursorRuleListItem]
    pagination: Pagination
