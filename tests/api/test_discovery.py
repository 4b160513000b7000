"""Tests for trending, stats, categories and health endpoints."""
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from httpx import AsyncClient

from tests.factories import make_category, make_prompt, make_user

Seed = Callable[..., Awaitable[Any]]


async def test__health__reports_redis_unavailable(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "healthy",
        "redis": "unavailable",
    }


async def test__health__security_headers(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


async def test__trending__ranks_by_upvotes_within_timeframe(
    client: AsyncClient, seed: Seed,
) -> None:
    author = await seed(make_user)
    await seed(make_prompt, author, "recent-low", upvotes=2)
    await seed(make_prompt, author, "recent-high", upvotes=5, downvotes=9)
    await seed(
        make_prompt, author, "old", upvotes=50,
        created_at=datetime.now(UTC) - timedelta(days=10),
    )

    response = await client.get("/api/trending", params={"limit": 5})

    body = response.json()
    assert [p["slug"] for p in body["data"]] == ["recent-high", "recent-low"]
    assert body["data"][0]["netScore"] == 5
    assert body["meta"] == {"limit": 5, "timeframe": "weekly", "type": None, "category": None}


async def test__trending__monthly_includes_older_prompts(
    client: AsyncClient, seed: Seed,
) -> None:
    author = await seed(make_user)
    await seed(
        make_prompt, author, "old", upvotes=50,
        created_at=datetime.now(UTC) - timedelta(days=10),
    )

    response = await client.get("/api/trending", params={"timeframe": "monthly"})

    assert [p["slug"] for p in response.json()["data"]] == ["old"]


async def test__trending__by_type_ignores_timeframe(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    await seed(
        make_prompt, author, "old-user", prompt_type="user", upvotes=3,
        created_at=datetime.now(UTC) - timedelta(days=60),
    )
    await seed(make_prompt, author, "system", prompt_type="system", upvotes=9)

    response = await client.get("/api/trending", params={"type": "user"})

    body = response.json()
    assert [p["slug"] for p in body["data"]] == ["old-user"]
    assert body["meta"]["type"] == "user"


async def test__trending__by_category_slug(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    writing = await seed(make_category, "Writing", prompt_type="user")
    await seed(make_prompt, author, "essay", category_id=writing.id, upvotes=1)
    await seed(make_prompt, author, "other", upvotes=9)

    response = await client.get("/api/trending", params={"category": "writing"})

    assert [p["slug"] for p in response.json()["data"]] == ["essay"]


async def test__trending__invalid_timeframe(client: AsyncClient) -> None:
    response = await client.get("/api/trending", params={"timeframe": "yearly"})

    assert response.status_code == 400


async def test__hot__only_last_day(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    await seed(make_prompt, author, "fresh", upvotes=1)
    await seed(
        make_prompt, author, "stale", upvotes=40,
        created_at=datetime.now(UTC) - timedelta(days=2),
    )

    response = await client.get("/api/trending/hot")

    assert [p["slug"] for p in response.json()["data"]] == ["fresh"]


async def test__community_stats(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    await seed(make_prompt, author, "a", upvotes=3, copy_count=2)
    await seed(make_prompt, author, "b", upvotes=1, prompt_type="user")

    basic = (await client.get("/api/stats/community")).json()
    detailed = (await client.get("/api/stats/community", params={"detailed": "true"})).json()

    assert basic["totalPrompts"] == 2
    assert basic["totalUpvotes"] == 4
    assert basic["totalCopies"] == 2
    assert "engagement" not in basic
    assert detailed["engagement"]["averageUpvotesPerPrompt"] == 2.0
    assert detailed["engagement"]["mostUpvotedPrompt"]["slug"] == "a"


async def test__prompt_stats_and_user_activity(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    await seed(make_prompt, author, "draft", published=False)

    prompts = (await client.get("/api/stats/prompts", params={"timeframe": "daily"})).json()
    users = (await client.get("/api/stats/users")).json()

    assert prompts == {"totalCreated": 1, "published": 0, "drafts": 1, "byType": {"system": 1}}
    assert users["newUsers"] == 1


async def test__categories__lists_with_counts(client: AsyncClient, seed: Seed) -> None:
    author = await seed(make_user)
    coding = await seed(make_category, "Coding")
    await seed(make_prompt, author, "c1", category_id=coding.id)

    response = await client.get("/api/categories")

    categories = response.json()["categories"]
    assert [(c["slug"], c["promptCount"]) for c in categories] == [("coding", 1)]
