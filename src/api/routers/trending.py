"""Trending and hot prompt rankings."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_services
from schemas.stats import TrendingMeta, TrendingResponse, TrendingTimeframe
from services.container import ServiceContainer

router = APIRouter(prefix="/api/trending", tags=["trending"])


@router.get("", response_model=TrendingResponse)
async def get_trending(
    limit: int = Query(default=5, ge=1, le=50),
    timeframe: TrendingTimeframe = Query(default="weekly"),
    type: str | None = Query(default=None, description="Rank within one prompt type"),  # noqa: A002
    category: str | None = Query(default=None, description="Category id or slug"),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> TrendingResponse:
    """
    Top published prompts by upvotes.

    ``type`` takes precedence over ``category``; both rank without a time
    window. Otherwise prompts created within ``timeframe`` are ranked.
    """
    if type:
        data = await services.trending.get_trending_by_type(db, type, limit)
        meta = TrendingMeta(limit=limit, type=type)
    elif category:
        data = await services.trending.get_trending_by_category(db, category, limit)
        meta = TrendingMeta(limit=limit, category=category)
    else:
        data = await services.trending.get_trending(db, limit, timeframe)
        meta = TrendingMeta(limit=limit, timeframe=timeframe)
    return TrendingResponse(data=data, meta=meta)


@router.get("/hot", response_model=TrendingResponse)
async def get_hot(
    limit: int = Query(default=5, ge=1, le=50),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> TrendingResponse:
    """Prompts from the last 24 hours ranked by upvotes per hour."""
    data = await services.trending.get_hot(db, limit)
    return TrendingResponse(data=data, meta=TrendingMeta(limit=limit))
