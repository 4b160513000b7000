"""
Pytest fixtures for testing.

Each test gets its own database: a SQLite file under tmp_path by default, or a
fresh schema in a PostgreSQL container when TEST_DATABASE=postgres.
"""
import os

# Must be set before any app imports that trigger Settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEV_MODE", "true")
os.environ.setdefault("REDIS_ENABLED", "false")

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from db.session import enable_sqlite_foreign_keys  # noqa: E402
from models.base import Base  # noqa: E402


def _use_postgres() -> bool:
    return os.environ.get("TEST_DATABASE", "sqlite").lower() == "postgres"


@pytest.fixture(scope="session")
def postgres_url() -> Generator[str | None]:
    """Start a PostgreSQL container for the test session when requested."""
    if not _use_postgres():
        yield None
        return

    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16", driver="asyncpg") as postgres:
        yield postgres.get_connection_url()


@pytest.fixture
def database_url(postgres_url: str | None, tmp_path: Path) -> str:
    """Database URL for one test."""
    if postgres_url is not None:
        return postgres_url
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create an engine with the schema in place; dropped again afterwards."""
    engine = create_async_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """A session for service-level tests; uncommitted work is discarded."""
    async with session_factory() as session:
        yield session
        await session.rollback()
