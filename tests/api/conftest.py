"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from uuid import UUID

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.main import app
from core.auth import get_current_user, get_optional_user
from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User
from services.container import ServiceContainer, build_services

# Constant for non-existent slug
MISSING_SLUG = "does-not-exist"


def _test_settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        DEV_MODE="false",
        REDIS_ENABLED="false",
    )


@pytest.fixture
def services(session_factory: async_sessionmaker[AsyncSession]) -> ServiceContainer:
    """Fresh services without Redis or webhooks."""
    return build_services(_test_settings(), None, session_factory)


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    services: ServiceContainer,
) -> AsyncGenerator[AsyncClient]:
    """
    Anonymous test client.

    Each request gets its own session that commits at the end, as in
    production. Auth runs with DEV_MODE off, so requests are anonymous until a
    test calls ``act_as``.
    """
    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = _test_settings
    app.state.services = services

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def act_as(user: User | None) -> None:
    """Authenticate subsequent requests as ``user``; None makes them anonymous again."""
    if user is None:
        app.dependency_overrides.pop(get_current_user, None)
        app.dependency_overrides.pop(get_optional_user, None)
        return

    user_id = user.id

    async def current_user(db: AsyncSession = Depends(get_async_session)) -> User:
        return await db.get(User, user_id)

    app.dependency_overrides[get_current_user] = current_user
    app.dependency_overrides[get_optional_user] = current_user


@pytest.fixture
def seed(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Any]]:
    """
    Run a factory from tests.factories in its own committed session.

    Usage: ``user = await seed(make_user, name="Ada")``.
    """
    async def _seed(factory: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        async with session_factory() as session:
            obj = await factory(session, *args, **kwargs)
            await session.commit()
            return obj

    return _seed


async def read_counters(
    session_factory: async_sessionmaker[AsyncSession],
    model: type,
    item_id: UUID,
) -> Any:
    """Load a row in a fresh session to see committed counter values."""
    async with session_factory() as session:
        return await session.get(model, item_id)
