"""Schemas for trending and statistics endpoints."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from schemas.base import CamelModel
from schemas.common import AuthorSummary, CategorySummary

TrendingTimeframe = Literal["daily", "weekly", "monthly", "all-time"]
StatsTimeframe = Literal["daily", "weekly", "monthly"]


class TrendingPrompt(CamelModel):
    """A ranked prompt."""

    id: UUID
    slug: str
    title: str
    excerpt: str
    prompt_type: str
    upvotes: int
    net_score: int
    views: int
    copy_count: int
    created_at: datetime
    author: AuthorSummary | None = None
    category: CategorySummary | None = None


class TrendingMeta(CamelModel):
    """Echo of the query that produced a trending list."""

    limit: int
    timeframe: TrendingTimeframe | None = None
    type: str | None = None
    category: str | None = None


class TrendingResponse(CamelModel):
    """Trending listing with its query parameters."""

    data: list[TrendingPrompt]
    meta: TrendingMeta


class TopCategory(CamelModel):
    """Prompt type with its count of published prompts."""

    name: str
    count: int


class CommunityStats(CamelModel):
    """Community-wide totals."""

    total_prompts: int
    active_users: int
    weekly_prompts: int
    monthly_prompts: int
    total_upvotes: int
    total_copies: int
    top_categories: list[TopCategory]


class MostUpvotedPrompt(CamelModel):
    """The published prompt with the most upvotes."""

    title: str
    slug: str
    upvotes: int


class EngagementStats(CamelModel):
    """Engagement totals across published prompts."""

    total_upvotes: int
    total_copies: int
    average_upvotes_per_prompt: float
    most_upvoted_prompt: MostUpvotedPrompt | None = None


class DetailedCommunityStats(CommunityStats):
    """Community totals plus engagement metrics."""

    engagement: EngagementStats


class PromptStats(CamelModel):
    """Prompts created within a timeframe."""

    total_created: int
    published: int
    drafts: int
    by_type: dict[str, int]


class UserActivity(CamelModel):
    """User signups within a timeframe."""

    new_users: int
    active_users: int
    returning_users: int
