"""Pydantic schemas for prompt comments."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from schemas.base import CamelModel
from schemas.common import AuthorSummary


class CommentCreate(CamelModel):
    """Schema for posting a comment or a reply."""

    content: str = Field(max_length=5000)
    parent_id: UUID | None = None

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        """Require non-blank content."""
        if not v.strip():
            raise ValueError("Comment content is required")
        return v.strip()


class CommentResponse(CamelModel):
    """A single comment."""

    id: UUID
    content: str
    parent_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary


class CommentThread(CommentResponse):
    """A top-level comment with its replies, oldest reply first."""

    replies: list[CommentResponse] = Field(default_factory=list)


class CommentListResponse(CamelModel):
    """All comments on a prompt, threaded."""

    comments: list[CommentThread]
    total: int


class CommentCreatedResponse(CamelModel):
    """Acknowledgement with the created comment."""

    message: str
    comment: CommentResponse
