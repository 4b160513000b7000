"""
Tests for deduplicated view counting.

The in-process cache takes an injectable clock so the dedup window can be
crossed without sleeping.
"""
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import LayeredCache, LocalTTLCache
from core.redis import RedisClient
from models.prompt import Prompt
from models.user import User
from services.prompt_service import PromptService
from services.view_tracker import ViewTracker, view_key
from tests.factories import make_prompt, make_user

prompt_service = PromptService()

WINDOW = 3600


class FakeClock:
    """Monotonic clock controlled by the test."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(clock: FakeClock) -> ViewTracker:
    return ViewTracker(LayeredCache(None, LocalTTLCache(clock=clock)), window_seconds=WINDOW)


@pytest.fixture
async def author(db_session: AsyncSession) -> User:
    return await make_user(db_session, name="Author")


@pytest.fixture
async def prompt(db_session: AsyncSession, author: User) -> Prompt:
    return await make_prompt(db_session, author, "viewed")


async def _views(db: AsyncSession, prompt: Prompt) -> int:
    await db.refresh(prompt, attribute_names=["views"])
    return prompt.views


async def test__record_view__first_view_counts(
    db_session: AsyncSession, tracker: ViewTracker, prompt: Prompt,
) -> None:
    counted = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert counted is True
    assert await _views(db_session, prompt) == 1


async def test__record_view__repeat_within_window_is_ignored(
    db_session: AsyncSession, tracker: ViewTracker, prompt: Prompt, clock: FakeClock,
) -> None:
    await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")
    clock.advance(WINDOW - 1)
    counted = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert counted is False
    assert await _views(db_session, prompt) == 1


async def test__record_view__counts_again_after_window(
    db_session: AsyncSession, tracker: ViewTracker, prompt: Prompt, clock: FakeClock,
) -> None:
    await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")
    clock.advance(WINDOW + 1)
    counted = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert counted is True
    assert await _views(db_session, prompt) == 2


async def test__record_view__distinct_viewers_each_count(
    db_session: AsyncSession, tracker: ViewTracker, prompt: Prompt,
) -> None:
    for identity in ("10.0.0.1", "10.0.0.2", "user-123"):
        await tracker.record_view(db_session, prompt_service, prompt, identity)

    assert await _views(db_session, prompt) == 3


async def test__record_view__viewer_stays_deduplicated_past_local_bound(
    db_session: AsyncSession, prompt: Prompt, clock: FakeClock,
) -> None:
    local = LocalTTLCache(max_entries=2, clock=clock, evict_live=False)
    tracker = ViewTracker(LayeredCache(None, local), window_seconds=WINDOW)
    for identity in ("10.0.0.1", "10.0.0.2", "10.0.0.3"):
        await tracker.record_view(db_session, prompt_service, prompt, identity)
    clock.advance(10)

    counted = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert counted is False
    assert await _views(db_session, prompt) == 3


async def test__record_view__author_views_are_not_counted(
    db_session: AsyncSession, tracker: ViewTracker, prompt: Prompt, author: User,
) -> None:
    counted = await tracker.record_view(
        db_session, prompt_service, prompt, str(author.id), author.id,
    )

    assert counted is False
    assert await _views(db_session, prompt) == 0
    assert len(tracker.cache.local) == 0


async def test__record_view__redis_failure_falls_back_to_local_cache(
    db_session: AsyncSession, prompt: Prompt, clock: FakeClock,
) -> None:
    """Redis errors are swallowed and the in-process map still deduplicates."""
    redis_client = RedisClient("redis://localhost:6379", enabled=True)
    redis_client._client = AsyncMock()
    redis_client._client.get.side_effect = RedisError("Connection lost")
    redis_client._client.setex.side_effect = RedisError("Connection lost")
    tracker = ViewTracker(
        LayeredCache(redis_client, LocalTTLCache(clock=clock)), window_seconds=WINDOW,
    )

    first = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")
    second = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert first is True
    assert second is False
    assert await _views(db_session, prompt) == 1
    redis_client._client.setex.assert_awaited_once()


async def test__record_view__redis_hit_skips_even_when_local_is_empty(
    db_session: AsyncSession, prompt: Prompt, clock: FakeClock,
) -> None:
    """A key written by another process is honored."""
    redis_client = RedisClient("redis://localhost:6379", enabled=True)
    redis_client._client = AsyncMock()
    redis_client._client.get.return_value = b"1700000000"
    tracker = ViewTracker(
        LayeredCache(redis_client, LocalTTLCache(clock=clock)), window_seconds=WINDOW,
    )

    counted = await tracker.record_view(db_session, prompt_service, prompt, "10.0.0.1")

    assert counted is False
    redis_client._client.get.assert_awaited_once_with(view_key("viewed", "10.0.0.1"))
