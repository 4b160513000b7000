"""Service layer for cursor rule operations."""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from models.cursor_rule import CursorRule
from models.vote import CursorRuleUpvote
from schemas.cursor_rule import CursorRuleCreate
from schemas.validators import CURSOR_RULE_LENGTH_RULES, SLUG_MAX_LENGTH, SLUG_MIN_LENGTH
from services.base_content_service import BaseContentService
from services.exceptions import ContentValidationError, SlugConflictError
from services.utils import slugify

logger = logging.getLogger(__name__)


class CursorRuleService(BaseContentService[CursorRule]):
    """Cursor rules: upvote-only, searchable by title."""

    model = CursorRule
    entity_name = "Cursor rule"
    upvote_model = CursorRuleUpvote
    downvote_model = None
    type_column = "rule_type"
    length_rules = CURSOR_RULE_LENGTH_RULES
    nullable_fields = frozenset({"category_id", "globs"})

    def _build_text_search_filter(self, pattern: str) -> ColumnElement[bool]:
        return CursorRule.title.ilike(pattern, escape="\\")

    def _get_sort_columns(self) -> dict[str, ColumnElement[Any]]:
        return {
            "recent": CursorRule.created_at,
            "popular": CursorRule.upvotes,
            "upvotes": CursorRule.upvotes,
            "views": CursorRule.views,
            "copies": CursorRule.copy_count,
        }

    async def generate_unique_slug(self, db: AsyncSession, title: str) -> str:
        """
        Derive an unused slug from a title.

        Appends -1, -2, ... until the slug is free.

        Raises:
            ContentValidationError: If the title yields a slug that is too short.
        """
        base = slugify(title)[: SLUG_MAX_LENGTH - 6].strip("-")
        if len(base) < SLUG_MIN_LENGTH:
            raise ContentValidationError([
                f"Slug must be at least {SLUG_MIN_LENGTH} characters long",
            ])

        slug = base
        suffix = 0
        while await self.slug_exists(db, slug):
            suffix += 1
            slug = f"{base}-{suffix}"
        return slug

    async def _default_category_id(self, db: AsyncSession, rule_type: str) -> UUID | None:
        """Find a category named after the rule type, if one exists."""
        return await db.scalar(
            select(Category.id).where(func.lower(Category.name) == rule_type.lower()).limit(1),
        )

    async def create(
        self,
        db: AsyncSession,
        author_id: UUID,
        data: CursorRuleCreate,
    ) -> CursorRule:
        """
        Create a new cursor rule.

        A slug is generated from the title when none is given. Without an explicit
        category, the rule is filed under the category named after its rule type.

        Raises:
            ContentValidationError: If a field fails validation.
            SlugConflictError: If an explicit slug is already in use.
        """
        title = data.title.strip()
        description = data.description.strip()
        content = data.content.strip()
        self._validate_lengths({
            "title": title,
            "description": description,
            "content": content,
            "globs": data.globs,
        })
        await self._check_category(db, data.category_id)

        if data.slug is not None:
            if await self.slug_exists(db, data.slug):
                raise SlugConflictError(data.slug)
            slug = data.slug
        else:
            slug = await self.generate_unique_slug(db, title)

        category_id = data.category_id
        if category_id is None:
            category_id = await self._default_category_id(db, data.rule_type)

        rule = CursorRule(
            slug=slug,
            title=title,
            description=description,
            content=content,
            rule_type=data.rule_type,
            globs=data.globs,
            category_id=category_id,
            author_id=author_id,
            tags=data.tags,
            published=data.published,
        )
        rule = await self._insert(db, rule)
        logger.info("cursor_rule_created", extra={"slug": rule.slug, "author_id": str(author_id)})
        return rule
