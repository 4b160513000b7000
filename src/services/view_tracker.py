"""
View counting with per-viewer deduplication.

A view increments the item's counter at most once per viewer per window. The
dedup keys live in a LayeredCache: Redis when available, and an in-process map
that keeps deduplication working within one process when Redis is not.
"""
import logging
import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import LayeredCache
from services.base_content_service import BaseContentService, ContentItem

logger = logging.getLogger(__name__)

ANONYMOUS_VIEWER = "anonymous"


def view_key(slug: str, viewer_identity: str) -> str:
    """Dedup cache key for a (slug, viewer) pair."""
    return f"view:{slug}:{viewer_identity}"


class ViewTracker:
    """Records deduplicated views."""

    def __init__(self, cache: LayeredCache, window_seconds: int = 3600) -> None:
        self.cache = cache
        self.window_seconds = window_seconds

    async def record_view(
        self,
        db: AsyncSession,
        content_service: BaseContentService,
        item: ContentItem,
        viewer_identity: str,
        viewer_user_id: UUID | None = None,
    ) -> bool:
        """
        Count a view of ``item`` unless it is a repeat or the author's own view.

        Args:
            db: Database session used for the counter update.
            content_service: Service owning the item's table.
            item: The viewed item.
            viewer_identity: User id string or a network-address fallback.
            viewer_user_id: Authenticated viewer, used for the author exemption.

        Returns:
            True if the counter was incremented.
        """
        if viewer_user_id is not None and viewer_user_id == item.author_id:
            return False

        key = view_key(item.slug, viewer_identity or ANONYMOUS_VIEWER)
        if await self.cache.get(key) is not None:
            logger.debug("view_deduplicated", extra={"key": key})
            return False

        views = await content_service.increment_counter(db, item.id, "views")
        if views is None:
            return False

        await self.cache.set(key, str(int(time.time())), self.window_seconds)
        logger.debug("view_counted", extra={"key": key, "views": views})
        return True
