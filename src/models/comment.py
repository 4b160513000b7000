"""Comment model for discussion threads on prompts."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.user import User


class Comment(Base, UUIDv7Mixin, TimestampMixin):
    """Comment model - a top-level comment or a single-level reply on a prompt."""

    __tablename__ = "comments"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        index=True,
    )
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    author: Mapped["User"] = relationship(lazy="joined")
