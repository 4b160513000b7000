"""
Community-wide statistics.

Each aggregate query runs in its own session so independent queries can run
concurrently. Summary results are cached; counts may lag by up to the TTL.
"""
import asyncio
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.cache import LayeredCache
from models.prompt import Prompt
from models.user import User
from schemas.stats import (
    CommunityStats,
    EngagementStats,
    MostUpvotedPrompt,
    PromptStats,
    TopCategory,
    UserActivity,
)
from services.utils import timeframe_start

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

COMMUNITY_STATS_KEY = "stats:community"
ENGAGEMENT_STATS_KEY = "stats:engagement"
TOP_CATEGORY_LIMIT = 5


def format_category_name(name: str) -> str:
    """Display form of a prompt type ('system' -> 'System')."""
    return name[:1].upper() + name[1:]


class CommunityStatsService:
    """Computes and caches aggregate statistics over prompts and users."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: LayeredCache | None = None,
        ttl_seconds: int = 300,
    ) -> None:
        self.session_factory = session_factory
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    # --- Query helpers (one session each) ---

    async def _count(self, stmt: Select) -> int:
        async with self.session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    async def _first(self, stmt: Select) -> Any:
        async with self.session_factory() as session:
            return (await session.execute(stmt)).first()

    async def _all(self, stmt: Select) -> list[Any]:
        async with self.session_factory() as session:
            return list((await session.execute(stmt)).all())

    async def _get_cached(self, key: str, model: type[M]) -> M | None:
        if self.cache is None:
            return None
        cached = await self.cache.get(key)
        if cached is None:
            return None
        try:
            return model.model_validate_json(cached)
        except ValidationError:
            logger.warning("stats_cache_corrupt", extra={"key": key})
            return None

    async def _set_cached(self, key: str, value: BaseModel) -> None:
        if self.cache is not None:
            await self.cache.set(key, value.model_dump_json(), self.ttl_seconds)

    async def invalidate(self) -> None:
        """Drop cached summaries."""
        if self.cache is not None:
            await self.cache.delete(COMMUNITY_STATS_KEY)
            await self.cache.delete(ENGAGEMENT_STATS_KEY)

    # --- Public API ---

    async def get_community_stats(self) -> CommunityStats:
        """
        Totals for the community page.

        On a cache miss, six queries run concurrently: published prompts, users,
        prompts in the last 7 and 30 days, summed upvotes and copies, and the top
        prompt types by count.
        """
        cached = await self._get_cached(COMMUNITY_STATS_KEY, CommunityStats)
        if cached is not None:
            return cached

        published = Prompt.published.is_(True)
        week_ago = timeframe_start("weekly")
        month_ago = timeframe_start("monthly")

        (
            total_prompts,
            active_users,
            weekly_prompts,
            monthly_prompts,
            totals,
            top_types,
        ) = await asyncio.gather(
            self._count(select(func.count()).select_from(Prompt).where(published)),
            self._count(select(func.count()).select_from(User)),
            self._count(
                select(func.count()).select_from(Prompt).where(
                    published, Prompt.created_at >= week_ago,
                ),
            ),
            self._count(
                select(func.count()).select_from(Prompt).where(
                    published, Prompt.created_at >= month_ago,
                ),
            ),
            self._first(
                select(
                    func.coalesce(func.sum(Prompt.upvotes), 0),
                    func.coalesce(func.sum(Prompt.copy_count), 0),
                ).where(published),
            ),
            self._all(
                select(Prompt.prompt_type, func.count().label("count"))
                .where(published)
                .group_by(Prompt.prompt_type)
                .order_by(func.count().desc(), Prompt.prompt_type)
                .limit(TOP_CATEGORY_LIMIT),
            ),
        )

        stats = CommunityStats(
            total_prompts=total_prompts,
            active_users=active_users,
            weekly_prompts=weekly_prompts,
            monthly_prompts=monthly_prompts,
            total_upvotes=int(totals[0] or 0) if totals else 0,
            total_copies=int(totals[1] or 0) if totals else 0,
            top_categories=[
                TopCategory(name=format_category_name(row[0]), count=int(row[1]))
                for row in top_types
            ],
        )
        await self._set_cached(COMMUNITY_STATS_KEY, stats)
        return stats

    async def get_engagement_stats(self) -> EngagementStats:
        """Upvote and copy totals, the per-prompt upvote average and the top prompt."""
        cached = await self._get_cached(ENGAGEMENT_STATS_KEY, EngagementStats)
        if cached is not None:
            return cached

        published = Prompt.published.is_(True)
        totals, most_upvoted = await asyncio.gather(
            self._first(
                select(
                    func.coalesce(func.sum(Prompt.upvotes), 0),
                    func.coalesce(func.sum(Prompt.copy_count), 0),
                    func.count(),
                ).select_from(Prompt).where(published),
            ),
            self._first(
                select(Prompt.title, Prompt.slug, Prompt.upvotes)
                .where(published)
                .order_by(Prompt.upvotes.desc(), Prompt.created_at.desc())
                .limit(1),
            ),
        )

        total_upvotes = int(totals[0] or 0) if totals else 0
        total_copies = int(totals[1] or 0) if totals else 0
        total_prompts = int(totals[2] or 0) if totals else 0
        average = round(total_upvotes / total_prompts, 2) if total_prompts else 0.0

        stats = EngagementStats(
            total_upvotes=total_upvotes,
            total_copies=total_copies,
            average_upvotes_per_prompt=average,
            most_upvoted_prompt=MostUpvotedPrompt(
                title=most_upvoted[0],
                slug=most_upvoted[1],
                upvotes=most_upvoted[2] or 0,
            ) if most_upvoted else None,
        )
        await self._set_cached(ENGAGEMENT_STATS_KEY, stats)
        return stats

    async def get_prompt_stats(self, timeframe: str = "weekly") -> PromptStats:
        """Prompts created within a timeframe, split by published state and type."""
        since = timeframe_start(timeframe)
        in_window = Prompt.created_at >= since

        total, published, drafts, by_type = await asyncio.gather(
            self._count(select(func.count()).select_from(Prompt).where(in_window)),
            self._count(
                select(func.count()).select_from(Prompt).where(
                    in_window, Prompt.published.is_(True),
                ),
            ),
            self._count(
                select(func.count()).select_from(Prompt).where(
                    in_window, Prompt.published.is_(False),
                ),
            ),
            self._all(
                select(Prompt.prompt_type, func.count())
                .where(in_window)
                .group_by(Prompt.prompt_type),
            ),
        )
        return PromptStats(
            total_created=total,
            published=published,
            drafts=drafts,
            by_type={row[0]: int(row[1]) for row in by_type},
        )

    async def get_user_activity(self, timeframe: str = "weekly") -> UserActivity:
        """
        Signups within a timeframe.

        ``active_users`` is the total number of accounts; ``returning_users``
        are accounts created before the window.
        """
        since = timeframe_start(timeframe)
        new_users, total_users = await asyncio.gather(
            self._count(select(func.count()).select_from(User).where(User.created_at >= since)),
            self._count(select(func.count()).select_from(User)),
        )
        return UserActivity(
            new_users=new_users,
            active_users=total_users,
            returning_users=max(0, total_users - new_users),
        )
