"""Pydantic schemas for user profile endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import field_validator

from schemas.base import CamelModel
from schemas.validators import validate_username, validate_website


class UserResponse(CamelModel):
    """The authenticated user's profile."""

    id: UUID
    email: str | None = None
    name: str | None = None
    username: str | None = None
    image: str | None = None
    bio: str | None = None
    website: str | None = None
    created_at: datetime


class ProfileUpdate(CamelModel):
    """
    Schema for updating the caller's profile.

    ``name`` is required. Blank optional fields are stored as null.
    """

    name: str
    username: str | None = None
    bio: str | None = None
    website: str | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Require a non-blank name."""
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str | None) -> str | None:
        """Validate username format if provided."""
        if v is None or not v.strip():
            return None
        return validate_username(v.strip())

    @field_validator("bio")
    @classmethod
    def blank_bio_to_none(cls, v: str | None) -> str | None:
        """Treat blank bio as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("website")
    @classmethod
    def check_website(cls, v: str | None) -> str | None:
        """Validate website URL if provided."""
        if v is None or not v.strip():
            return None
        return validate_website(v.strip())


class ProfileUpdateResponse(CamelModel):
    """Acknowledgement with the updated profile."""

    message: str
    user: UserResponse


class UsernameCheckRequest(CamelModel):
    """Body of a username availability check."""

    username: str

    @field_validator("username")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        """Require a username."""
        if not v.strip():
            raise ValueError("Username is required")
        return v.strip()


class UsernameCheckResponse(CamelModel):
    """
    Username availability.

    Format problems are reported in ``error`` with ``available=False`` rather
    than as a validation failure, so forms can show them inline.
    """

    available: bool
    username: str | None = None
    error: str | None = None
