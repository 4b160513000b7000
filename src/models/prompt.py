"""Prompt model for storing published AI prompts."""
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.category import Category
    from models.user import User


class PromptType(StrEnum):
    """Message role a prompt is written for."""

    SYSTEM = "system"
    USER = "user"
    DEVELOPER = "developer"


class Prompt(Base, UUIDv7Mixin, TimestampMixin):
    """Prompt model - published prompt text with engagement counters."""

    __tablename__ = "prompts"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_prompts_upvotes_non_negative"),
        CheckConstraint("downvotes >= 0", name="ck_prompts_downvotes_non_negative"),
        CheckConstraint("views >= 0", name="ck_prompts_views_non_negative"),
        CheckConstraint("copy_count >= 0", name="ck_prompts_copy_count_non_negative"),
        # Trending and "popular" listings sort published rows by upvotes
        Index("ix_prompts_published_upvotes", "published", "upvotes"),
    )

    # id provided by UUIDv7Mixin
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Denormalized counters; mutated only through atomic UPDATE statements
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    copy_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )

    author: Mapped["User"] = relationship(back_populates="prompts", lazy="joined")
    category: Mapped["Category | None"] = relationship(lazy="joined")

    @property
    def summary(self) -> str:
        """Short description shown in listings."""
        return self.excerpt
