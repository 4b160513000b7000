"""Service layer for prompt operations."""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from models.comment import Comment
from models.prompt import Prompt
from models.vote import PromptDownvote, PromptUpvote
from schemas.prompt import PromptCreate
from schemas.validators import PROMPT_LENGTH_RULES
from services.base_content_service import BaseContentService
from services.exceptions import SlugConflictError

logger = logging.getLogger(__name__)


class PromptService(BaseContentService[Prompt]):
    """Prompts: up- and downvotable, searchable by title and excerpt."""

    model = Prompt
    entity_name = "Prompt"
    upvote_model = PromptUpvote
    downvote_model = PromptDownvote
    type_column = "prompt_type"
    length_rules = PROMPT_LENGTH_RULES

    def _build_text_search_filter(self, pattern: str) -> ColumnElement[bool]:
        return or_(
            Prompt.title.ilike(pattern, escape="\\"),
            Prompt.excerpt.ilike(pattern, escape="\\"),
        )

    def _get_sort_columns(self) -> dict[str, ColumnElement[Any]]:
        return {
            "recent": Prompt.created_at,
            "popular": Prompt.views,
            "upvotes": Prompt.upvotes,
        }

    async def _delete_dependents(self, db: AsyncSession, entity: Prompt) -> None:
        await db.execute(
            delete(Comment)
            .where(Comment.prompt_id == entity.id)
            .execution_options(synchronize_session=False),
        )

    async def create(self, db: AsyncSession, author_id: UUID, data: PromptCreate) -> Prompt:
        """
        Create a new prompt.

        Args:
            db: Database session.
            author_id: The authenticated author.
            data: Prompt creation data (slug format already validated).

        Returns:
            The created prompt with author and category loaded.

        Raises:
            ContentValidationError: If a text field fails its length rule or the
                category does not exist.
            SlugConflictError: If the slug is already used by another prompt.
        """
        title = data.title.strip()
        excerpt = data.excerpt.strip()
        content = data.content.strip()
        self._validate_lengths({"title": title, "excerpt": excerpt, "content": content})
        await self._check_category(db, data.category_id)

        if await self.slug_exists(db, data.slug):
            raise SlugConflictError(data.slug)

        prompt = Prompt(
            slug=data.slug,
            title=title,
            excerpt=excerpt,
            content=content,
            prompt_type=data.prompt_type,
            category_id=data.category_id,
            author_id=author_id,
            tags=data.tags,
            published=data.published,
        )
        prompt = await self._insert(db, prompt)
        logger.info("prompt_created", extra={"slug": prompt.slug, "author_id": str(author_id)})
        return prompt
