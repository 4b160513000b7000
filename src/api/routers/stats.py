"""Community statistics endpoints."""
from fastapi import APIRouter, Depends, Query

from api.dependencies import get_services
from schemas.stats import (
    CommunityStats,
    DetailedCommunityStats,
    PromptStats,
    StatsTimeframe,
    UserActivity,
)
from services.container import ServiceContainer

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/community", response_model=CommunityStats | DetailedCommunityStats)
async def get_community_stats(
    detailed: bool = Query(default=False, description="Include engagement statistics"),
    services: ServiceContainer = Depends(get_services),
) -> CommunityStats | DetailedCommunityStats:
    """Community totals; cached, so counts may lag recent activity."""
    stats = await services.community_stats.get_community_stats()
    if not detailed:
        return stats
    engagement = await services.community_stats.get_engagement_stats()
    return DetailedCommunityStats(**stats.model_dump(), engagement=engagement)


@router.get("/prompts", response_model=PromptStats)
async def get_prompt_stats(
    timeframe: StatsTimeframe = Query(default="weekly"),
    services: ServiceContainer = Depends(get_services),
) -> PromptStats:
    """Prompts created within a timeframe."""
    return await services.community_stats.get_prompt_stats(timeframe)


@router.get("/users", response_model=UserActivity)
async def get_user_activity(
    timeframe: StatsTimeframe = Query(default="weekly"),
    services: ServiceContainer = Depends(get_services),
) -> UserActivity:
    """Signups within a timeframe."""
    return await services.community_stats.get_user_activity(timeframe)
