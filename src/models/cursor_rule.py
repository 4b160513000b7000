"""CursorRule model for storing editor rule files."""
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.category import Category
    from models.user import User


class RuleType(StrEnum):
    """How the editor decides to attach a rule to a request."""

    ALWAYS = "always"
    AUTO_ATTACHED = "auto-attached"
    AGENT_REQUESTED = "agent-requested"
    MANUAL = "manual"


class CursorRule(Base, UUIDv7Mixin, TimestampMixin):
    """CursorRule model - an editor rule with globs and engagement counters."""

    __tablename__ = "cursor_rules"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_cursor_rules_upvotes_non_negative"),
        CheckConstraint("views >= 0", name="ck_cursor_rules_views_non_negative"),
        CheckConstraint("copy_count >= 0", name="ck_cursor_rules_copy_count_non_negative"),
        Index("ix_cursor_rules_published_upvotes", "published", "upvotes"),
    )

    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rule_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    globs: Mapped[str | None] = mapped_column(String(500), nullable=True)
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
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Upvote-only; there is no downvote counter for rules
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    copy_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )

    author: Mapped["User"] = relationship(back_populates="cursor_rules", lazy="joined")
    category: Mapped["Category | None"] = relationship(lazy="joined")

    @property
    def summary(self) -> str:
        """Short description shown in listings."""
        return self.description
