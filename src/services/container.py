"""Process-wide services that hold caches or connections."""
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.cache import LayeredCache, LocalTTLCache
from core.config import Settings
from core.redis import RedisClient
from services.community_stats_service import CommunityStatsService
from services.discord_notifier import DiscordNotifier
from services.trending_service import TrendingService
from services.view_tracker import ViewTracker


@dataclass
class ServiceContainer:
    """Services built once at startup and shared by every request."""

    view_tracker: ViewTracker
    trending: TrendingService
    community_stats: CommunityStatsService
    notifier: DiscordNotifier
    redis: RedisClient | None = None


def build_services(
    settings: Settings,
    redis_client: RedisClient | None,
    session_factory: async_sessionmaker[AsyncSession],
) -> ServiceContainer:
    """Wire services from settings; ``redis_client`` may be None or disconnected."""
    view_cache = LayeredCache(
        redis_client,
        LocalTTLCache(max_entries=settings.view_dedup_max_local_entries, evict_live=False),
    )
    aggregate_cache = LayeredCache(redis_client, LocalTTLCache())

    return ServiceContainer(
        view_tracker=ViewTracker(view_cache, window_seconds=settings.view_dedup_window_seconds),
        trending=TrendingService(
            aggregate_cache, ttl_seconds=settings.trending_cache_ttl_seconds,
        ),
        community_stats=CommunityStatsService(
            session_factory,
            cache=aggregate_cache,
            ttl_seconds=settings.stats_cache_ttl_seconds,
        ),
        notifier=DiscordNotifier(
            content_webhook_url=settings.discord_webhook_content_url,
            registrations_webhook_url=settings.discord_webhook_registrations_url,
            app_url=settings.app_url,
        ),
        redis=redis_client,
    )
