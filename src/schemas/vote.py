"""Schemas for vote and copy endpoints."""
from typing import Literal

from schemas.base import CamelModel


class VoteRequest(CamelModel):
    """Body of a vote toggle request."""

    type: Literal["upvote", "downvote"]


class VoteResponse(CamelModel):
    """Caller's vote state and the item's current counts."""

    upvoted: bool
    downvoted: bool
    upvote_count: int
    downvote_count: int
    net_score: int
    message: str | None = None


class CopyResponse(CamelModel):
    """Copy count after recording a copy."""

    copy_count: int
