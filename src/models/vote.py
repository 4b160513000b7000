"""
Vote ledger models.

One table per content type and direction. A row's presence is the only record
that a user has voted; the counters on the content row are derived from it.
"""
from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, synonym

from models.base import Base, TimestampMixin, UUIDv7Mixin


class PromptUpvote(Base, UUIDv7Mixin, TimestampMixin):
    """A user's upvote on a prompt."""

    __tablename__ = "prompt_upvotes"
    __table_args__ = (
        UniqueConstraint("prompt_id", "user_id", name="uq_prompt_upvotes_prompt_user"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    # Generic name used by the shared content service
    content_id: Mapped[UUID] = synonym("prompt_id")


class PromptDownvote(Base, UUIDv7Mixin, TimestampMixin):
    """A user's downvote on a prompt."""

    __tablename__ = "prompt_downvotes"
    __table_args__ = (
        UniqueConstraint("prompt_id", "user_id", name="uq_prompt_downvotes_prompt_user"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    content_id: Mapped[UUID] = synonym("prompt_id")


class CursorRuleUpvote(Base, UUIDv7Mixin, TimestampMixin):
    """A user's upvote on a cursor rule."""

    __tablename__ = "cursor_rule_upvotes"
    __table_args__ = (
        UniqueConstraint(
            "cursor_rule_id", "user_id", name="uq_cursor_rule_upvotes_rule_user",
        ),
    )

    cursor_rule_id: Mapped[UUID] = mapped_column(
        ForeignKey("cursor_rules.id", ondelete="CASCADE"),
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    content_id: Mapped[UUID] = synonym("cursor_rule_id")
