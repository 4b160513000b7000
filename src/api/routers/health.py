"""Liveness endpoint reporting database and Redis state."""
import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_services
from core.redis import RedisClient
from services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

ComponentState = Literal["healthy", "unhealthy", "unavailable"]


class HealthResponse(BaseModel):
    """Overall status plus per-dependency state."""

    status: Literal["healthy", "degraded"]
    database: ComponentState
    redis: ComponentState


async def _database_state(db: AsyncSession) -> ComponentState:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("health_database_failed")
        return "unhealthy"
    return "healthy"


async def _redis_state(redis: RedisClient | None) -> ComponentState:
    if redis is None or not redis.is_connected:
        return "unavailable"
    return "healthy" if await redis.ping() else "unhealthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> HealthResponse:
    """
    Report database and Redis state.

    Only the database affects the overall status; Redis is an optional cache.
    """
    database = await _database_state(db)
    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
        redis=await _redis_state(services.redis),
    )
