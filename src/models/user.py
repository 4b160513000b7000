"""User model for storing authenticated users."""
from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.cursor_rule import CursorRule
    from models.prompt import Prompt


class User(Base, UUIDv7Mixin, TimestampMixin):
    """User model - stores identity-provider user info plus the public profile."""

    __tablename__ = "users"

    auth0_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Auth0 'sub' claim - unique identifier from Auth0",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Null until the user completes onboarding
    username: Mapped[str | None] = mapped_column(
        String(20), unique=True, index=True, nullable=True,
    )
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Content rows are removed explicitly before the user is deleted
    prompts: Mapped[list["Prompt"]] = relationship(
        back_populates="author", passive_deletes=True,
    )
    cursor_rules: Mapped[list["CursorRule"]] = relationship(
        back_populates="author", passive_deletes=True,
    )
