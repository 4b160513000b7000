"""
Tests for community statistics.

Data is committed first because the service opens its own sessions for each
aggregate query.
"""
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.cache import LayeredCache, LocalTTLCache
from services.community_stats_service import CommunityStatsService, format_category_name
from tests.factories import make_prompt, make_user


class CountingSessionFactory:
    """Wraps a session factory and counts the sessions it opens."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]) -> None:
        self.factory = factory
        self.calls = 0

    def __call__(self) -> AsyncSession:
        self.calls += 1
        return self.factory()


@pytest.fixture
async def populated(db_session: AsyncSession) -> None:
    """Two users, three published prompts (one old), and one draft."""
    now = datetime.now(UTC)
    author = await make_user(db_session, name="Author")
    await make_user(db_session, name="Reader")
    await make_prompt(db_session, author, "sys-a", prompt_type="system", upvotes=4, copy_count=2)
    await make_prompt(db_session, author, "sys-b", prompt_type="system", upvotes=1, copy_count=1)
    await make_prompt(
        db_session, author, "old-user", prompt_type="user", upvotes=7,
        created_at=now - timedelta(days=20),
    )
    await make_prompt(db_session, author, "draft", prompt_type="developer", published=False)
    await db_session.commit()


async def test__get_community_stats__totals(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    stats = await CommunityStatsService(session_factory).get_community_stats()

    assert stats.total_prompts == 3
    assert stats.active_users == 2
    assert stats.weekly_prompts == 2
    assert stats.monthly_prompts == 3
    assert stats.total_upvotes == 12
    assert stats.total_copies == 3
    assert [(c.name, c.count) for c in stats.top_categories] == [("System", 2), ("User", 1)]


async def test__get_community_stats__empty_database_is_all_zero(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    stats = await CommunityStatsService(session_factory).get_community_stats()

    assert stats.total_prompts == 0
    assert stats.total_upvotes == 0
    assert stats.total_copies == 0
    assert stats.top_categories == []


async def test__get_community_stats__cached_between_calls(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    """The second call within the TTL runs no queries."""
    counting = CountingSessionFactory(session_factory)
    service = CommunityStatsService(counting, cache=LayeredCache(None, LocalTTLCache()))

    first = await service.get_community_stats()
    calls_after_first = counting.calls
    second = await service.get_community_stats()

    assert calls_after_first == 6
    assert counting.calls == calls_after_first
    assert second == first


async def test__invalidate__forces_recompute(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    counting = CountingSessionFactory(session_factory)
    service = CommunityStatsService(counting, cache=LayeredCache(None, LocalTTLCache()))

    await service.get_community_stats()
    await service.invalidate()
    await service.get_community_stats()

    assert counting.calls == 12


async def test__get_engagement_stats(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    stats = await CommunityStatsService(session_factory).get_engagement_stats()

    assert stats.total_upvotes == 12
    assert stats.total_copies == 3
    assert stats.average_upvotes_per_prompt == 4.0
    assert stats.most_upvoted_prompt is not None
    assert stats.most_upvoted_prompt.slug == "old-user"


async def test__get_engagement_stats__no_prompts(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    stats = await CommunityStatsService(session_factory).get_engagement_stats()

    assert stats.average_upvotes_per_prompt == 0.0
    assert stats.most_upvoted_prompt is None


async def test__get_prompt_stats__weekly(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    stats = await CommunityStatsService(session_factory).get_prompt_stats("weekly")

    assert stats.total_created == 3
    assert stats.published == 2
    assert stats.drafts == 1
    assert stats.by_type == {"system": 2, "developer": 1}


async def test__get_user_activity(
    session_factory: async_sessionmaker[AsyncSession], populated: None,
) -> None:
    activity = await CommunityStatsService(session_factory).get_user_activity("daily")

    assert activity.new_users == 2
    assert activity.active_users == 2
    assert activity.returning_users == 0


def test__format_category_name() -> None:
    assert format_category_name("system") == "System"
    assert format_category_name("") == ""
