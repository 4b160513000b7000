"""
Trending and hot prompt rankings.

Rankings are read-only queries over the prompt counters. Results are cached
briefly; a ranking may lag new votes by up to the cache TTL.
"""
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import LayeredCache
from models.base import as_utc
from models.category import Category
from models.prompt import Prompt
from schemas.common import AuthorSummary, CategorySummary
from schemas.stats import TrendingPrompt
from services.utils import timeframe_start

logger = logging.getLogger(__name__)

HOT_WINDOW = timedelta(hours=24)
# Floor on item age so a brand-new item does not divide by ~zero
MIN_HOT_AGE_SECONDS = 60

_trending_list = TypeAdapter(list[TrendingPrompt])


def to_trending(prompt: Prompt) -> TrendingPrompt:
    """
    Build a ranking entry for a prompt.

    ``net_score`` is the upvote count; downvotes do not affect rankings.
    """
    return TrendingPrompt(
        id=prompt.id,
        slug=prompt.slug,
        title=prompt.title,
        excerpt=prompt.excerpt,
        prompt_type=prompt.prompt_type,
        upvotes=prompt.upvotes or 0,
        net_score=prompt.upvotes or 0,
        views=prompt.views or 0,
        copy_count=prompt.copy_count or 0,
        created_at=as_utc(prompt.created_at),
        author=AuthorSummary.model_validate(prompt.author) if prompt.author else None,
        category=CategorySummary.model_validate(prompt.category) if prompt.category else None,
    )


def hot_score(upvotes: int, created_at: datetime, now: datetime) -> float:
    """Upvotes per hour since creation."""
    age_seconds = max((now - as_utc(created_at)).total_seconds(), MIN_HOT_AGE_SECONDS)
    return upvotes / (age_seconds / 3600)


class TrendingService:
    """Ranks published prompts by upvotes."""

    def __init__(self, cache: LayeredCache | None = None, ttl_seconds: int = 180) -> None:
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def _cached(
        self,
        key: str,
        compute: Callable[[], Awaitable[list[TrendingPrompt]]],
    ) -> list[TrendingPrompt]:
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                try:
                    return _trending_list.validate_json(cached)
                except ValidationError:
                    logger.warning("trending_cache_corrupt", extra={"key": key})

        items = await compute()
        if self.cache is not None:
            await self.cache.set(key, _trending_list.dump_json(items).decode(), self.ttl_seconds)
        return items

    async def _top_by_upvotes(
        self,
        db: AsyncSession,
        conditions: list[ColumnElement[bool]],
        limit: int,
    ) -> list[TrendingPrompt]:
        stmt = (
            select(Prompt)
            .where(Prompt.published.is_(True), *conditions)
            .order_by(Prompt.upvotes.desc(), Prompt.created_at.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return [to_trending(p) for p in result.scalars().unique().all()]

    async def get_trending(
        self,
        db: AsyncSession,
        limit: int = 5,
        timeframe: str = "weekly",
    ) -> list[TrendingPrompt]:
        """
        Top published prompts created within a timeframe.

        Ordered by upvotes, newest first among ties.

        Args:
            db: Database session.
            limit: Maximum number of prompts.
            timeframe: "daily", "weekly", "monthly" or "all-time".
        """
        async def compute() -> list[TrendingPrompt]:
            conditions = []
            since = timeframe_start(timeframe)
            if since is not None:
                conditions.append(Prompt.created_at >= since)
            return await self._top_by_upvotes(db, conditions, limit)

        return await self._cached(f"trending:{timeframe}:{limit}", compute)

    async def get_trending_by_type(
        self,
        db: AsyncSession,
        prompt_type: str,
        limit: int = 5,
    ) -> list[TrendingPrompt]:
        """Top published prompts of one type, with no time window."""
        async def compute() -> list[TrendingPrompt]:
            return await self._top_by_upvotes(db, [Prompt.prompt_type == prompt_type], limit)

        return await self._cached(f"trending:type:{prompt_type}:{limit}", compute)

    async def get_trending_by_category(
        self,
        db: AsyncSession,
        category: str,
        limit: int = 5,
    ) -> list[TrendingPrompt]:
        """Top published prompts in a category, given its id or slug."""
        async def compute() -> list[TrendingPrompt]:
            try:
                condition = Prompt.category_id == UUID(category)
            except ValueError:
                condition = Prompt.category_id == (
                    select(Category.id).where(Category.slug == category).scalar_subquery()
                )
            return await self._top_by_upvotes(db, [condition], limit)

        return await self._cached(f"trending:category:{category}:{limit}", compute)

    async def get_hot(
        self,
        db: AsyncSession,
        limit: int = 5,
        now: datetime | None = None,
    ) -> list[TrendingPrompt]:
        """
        Prompts from the last 24 hours ranked by upvotes per hour.

        Ties on the rate go to the prompt with more upvotes. Not cached; the
        rate changes continuously with item age.
        """
        now = now or datetime.now(UTC)
        stmt = select(Prompt).where(
            Prompt.published.is_(True),
            Prompt.created_at >= now - HOT_WINDOW,
        )
        prompts = (await db.execute(stmt)).scalars().unique().all()
        ranked = sorted(
            prompts,
            key=lambda p: (hot_score(p.upvotes or 0, p.created_at, now), p.upvotes or 0),
            reverse=True,
        )
        return [to_trending(p) for p in ranked[:limit]]
