"""
Base service class for shareable content (prompts and cursor rules).

Implements listing, ownership checks, deletion and the engagement counters once.
Content-specific behavior is defined via class attributes and abstract methods:
which columns to search and sort on, which vote ledgers exist, and which length
rules apply to the text fields.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, case, delete, func, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from schemas.validators import LengthRule, check_lengths
from services.exceptions import (
    ContentNotFoundError,
    ContentValidationError,
    PermissionDeniedError,
    SlugConflictError,
)
from services.utils import escape_ilike

logger = logging.getLogger(__name__)

# Counter columns that may be incremented/decremented
COUNTER_FIELDS = frozenset({"upvotes", "downvotes", "views", "copy_count"})


class ContentItem(Protocol):
    """Protocol for content rows that carry engagement counters."""

    id: UUID
    slug: str
    title: str
    content: str
    author_id: UUID
    category_id: UUID | None
    published: bool
    upvotes: int
    views: int
    copy_count: int
    created_at: datetime
    updated_at: datetime


T = TypeVar("T", bound=ContentItem)


class BaseContentService(ABC, Generic[T]):
    """
    Abstract base class for content CRUD and counter operations.

    Subclasses must define:
    - model: The SQLAlchemy model class
    - entity_name: Human-readable name for messages (e.g., "Prompt")
    - upvote_model: Ledger model recording upvotes
    - downvote_model: Ledger model recording downvotes, or None if unsupported
    - type_column: Name of the type tag column (e.g., "prompt_type")
    - length_rules: Trimmed-length rules for text fields

    Subclasses must implement:
    - _build_text_search_filter(): Entity-specific search fields
    - _get_sort_columns(): Entity-specific sort column mapping

    Note: create() is NOT in base class - it has entity-specific logic
    (e.g., cursor rule slug generation).
    """

    model: type[T]
    entity_name: str
    upvote_model: type
    downvote_model: type | None = None
    type_column: str
    length_rules: dict[str, LengthRule]
    # Fields an update may set to null
    nullable_fields: frozenset[str] = frozenset({"category_id"})

    @property
    def supports_downvotes(self) -> bool:
        """True when the content type has a downvote ledger."""
        return self.downvote_model is not None

    # --- Abstract Methods (entity-specific) ---

    @abstractmethod
    def _build_text_search_filter(self, pattern: str) -> ColumnElement[bool]:
        """
        Build text search filter for entity-specific fields.

        Args:
            pattern: The ILIKE pattern (already escaped and wrapped with %).
        """
        ...

    @abstractmethod
    def _get_sort_columns(self) -> dict[str, ColumnElement[Any]]:
        """Get mapping of sort parameter values to columns (sorted descending)."""
        ...

    # --- Helper Methods ---

    async def _refresh(self, db: AsyncSession, entity: T) -> None:
        """Refresh entity and eagerly load the relationships responses embed."""
        await db.refresh(entity)
        await db.refresh(entity, attribute_names=["author", "category"])

    def _validate_lengths(self, values: dict[str, str | None]) -> None:
        """
        Apply length rules to text fields.

        Raises:
            ContentValidationError: With one message per failing field.
        """
        errors = check_lengths(self.length_rules, values)
        if errors:
            raise ContentValidationError(errors)

    async def _check_category(self, db: AsyncSession, category_id: UUID | None) -> None:
        """Raise ContentValidationError if category_id references no category."""
        if category_id is None:
            return
        found = await db.scalar(select(Category.id).where(Category.id == category_id))
        if found is None:
            raise ContentValidationError(["Invalid category"])

    async def _insert(self, db: AsyncSession, entity: T) -> T:
        """
        Flush a new entity, translating slug uniqueness violations.

        Raises:
            SlugConflictError: If another request took the slug first.
        """
        db.add(entity)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "slug" in str(e.orig).lower():
                raise SlugConflictError(entity.slug) from e
            raise
        await self._refresh(db, entity)
        return entity

    async def _delete_dependents(self, db: AsyncSession, entity: T) -> None:
        """Delete rows other than ledger rows that reference the entity."""
        return None

    # --- Lookups ---

    async def get_by_slug(self, db: AsyncSession, slug: str) -> T | None:
        """Get an item by slug regardless of published state."""
        result = await db.execute(select(self.model).where(self.model.slug == slug))
        return result.scalar_one_or_none()

    async def get_visible(
        self,
        db: AsyncSession,
        slug: str,
        viewer_id: UUID | None,
    ) -> T | None:
        """
        Get an item the viewer is allowed to see.

        Unpublished items are only visible to their author; to everyone else
        they are indistinguishable from missing items.
        """
        item = await self.get_by_slug(db, slug)
        if item is None:
            return None
        if not item.published and item.author_id != viewer_id:
            return None
        return item

    async def get_owned(self, db: AsyncSession, slug: str, user_id: UUID) -> T:
        """
        Get an item for mutation by its author.

        Raises:
            ContentNotFoundError: If the slug does not exist.
            PermissionDeniedError: If the caller is not the author.
        """
        item = await self.get_by_slug(db, slug)
        if item is None:
            raise ContentNotFoundError(self.entity_name, slug)
        if item.author_id != user_id:
            raise PermissionDeniedError(
                f"You don't have permission to modify this {self.entity_name.lower()}",
            )
        return item

    async def slug_exists(self, db: AsyncSession, slug: str) -> bool:
        """Check whether a slug is already in use."""
        found = await db.scalar(select(self.model.id).where(self.model.slug == slug))
        return found is not None

    async def search(
        self,
        db: AsyncSession,
        *,
        page: int = 1,
        limit: int = 12,
        type_filter: str | None = None,
        category: str | None = None,
        query: str | None = None,
        sort: str = "recent",
    ) -> tuple[list[T], int]:
        """
        List published items with filtering, sorting and page-number pagination.

        Args:
            db: Database session.
            page: 1-based page number.
            limit: Page size.
            type_filter: Type tag to match; None or "all" disables the filter.
            category: Category slug; an unknown slug or "all" disables the filter.
            query: Case-insensitive substring to match against search fields.
            sort: Key into _get_sort_columns(); unknown keys sort by recency.

        Returns:
            Tuple of (items for the page, total matching count).
        """
        conditions: list[ColumnElement[bool]] = [self.model.published.is_(True)]

        if type_filter and type_filter != "all":
            conditions.append(getattr(self.model, self.type_column) == type_filter)

        if category and category != "all":
            category_id = await db.scalar(select(Category.id).where(Category.slug == category))
            if category_id is not None:
                conditions.append(self.model.category_id == category_id)

        if query:
            pattern = f"%{escape_ilike(query)}%"
            conditions.append(self._build_text_search_filter(pattern))

        sort_columns = self._get_sort_columns()
        sort_column = sort_columns.get(sort, self.model.created_at)

        total = await db.scalar(
            select(func.count()).select_from(self.model).where(*conditions),
        ) or 0

        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(sort_column.desc(), self.model.created_at.desc(), self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().unique().all()), total

    # --- Mutations ---

    async def update(
        self,
        db: AsyncSession,
        slug: str,
        user_id: UUID,
        data: Any,
    ) -> T:
        """
        Apply the fields present in ``data`` to an item owned by ``user_id``.

        Length rules are checked against the merged result, so a partial update
        cannot leave an item in a state creation would have rejected.

        Raises:
            ContentNotFoundError: If the slug does not exist.
            PermissionDeniedError: If the caller is not the author.
            ContentValidationError: If a field fails validation.
        """
        item = await self.get_owned(db, slug, user_id)

        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in self.nullable_fields
        }
        for field in self.length_rules:
            if isinstance(updates.get(field), str):
                updates[field] = updates[field].strip()

        self._validate_lengths(
            {field: updates.get(field, getattr(item, field)) for field in self.length_rules},
        )
        if "category_id" in updates:
            await self._check_category(db, updates["category_id"])

        for field, value in updates.items():
            setattr(item, field, value)

        await db.flush()
        await self._refresh(db, item)
        return item

    async def delete(self, db: AsyncSession, slug: str, user_id: UUID) -> None:
        """
        Delete an item owned by ``user_id`` along with its ledger rows.

        Raises:
            ContentNotFoundError: If the slug does not exist.
            PermissionDeniedError: If the caller is not the author.
        """
        item = await self.get_owned(db, slug, user_id)
        await self.delete_item(db, item)

    async def delete_item(self, db: AsyncSession, item: T) -> None:
        """Delete an item, its ledger rows and dependent rows without ownership checks."""
        for ledger in self.ledger_models():
            await db.execute(
                delete(ledger)
                .where(ledger.content_id == item.id)
                .execution_options(synchronize_session=False),
            )
        await self._delete_dependents(db, item)
        await db.delete(item)
        await db.flush()
        logger.info(
            "content_deleted",
            extra={"entity": self.entity_name, "slug": item.slug},
        )

    # --- Counters ---

    def ledger_models(self) -> list[type]:
        """Ledger models for this content type."""
        if self.downvote_model is None:
            return [self.upvote_model]
        return [self.upvote_model, self.downvote_model]

    def _counter_column(self, field: str) -> Any:
        if field not in COUNTER_FIELDS or not hasattr(self.model, field):
            raise ValueError(f"{self.entity_name} has no counter '{field}'")
        return getattr(self.model, field)

    async def increment_counter(
        self,
        db: AsyncSession,
        item_id: UUID,
        field: str,
        amount: int = 1,
    ) -> int | None:
        """
        Atomically add ``amount`` to a counter.

        The addition happens in a single UPDATE statement so concurrent requests
        never lose updates. updated_at is left unchanged; it tracks content edits.

        Returns:
            The new counter value, or None if the item does not exist.
        """
        column = self._counter_column(field)
        stmt = (
            update(self.model)
            .where(self.model.id == item_id)
            .values({field: column + amount, "updated_at": self.model.updated_at})
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def decrement_counter(
        self,
        db: AsyncSession,
        item_id: UUID,
        field: str,
        amount: int = 1,
    ) -> int | None:
        """
        Atomically subtract ``amount`` from a counter, clamping at zero.

        Returns:
            The new counter value, or None if the item does not exist.
        """
        column = self._counter_column(field)
        stmt = (
            update(self.model)
            .where(self.model.id == item_id)
            .values({
                field: case((column >= amount, column - amount), else_=0),
                "updated_at": self.model.updated_at,
            })
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def get_vote_counts(self, db: AsyncSession, item_id: UUID) -> tuple[int, int]:
        """Read (upvotes, downvotes) from the database; downvotes is 0 if unsupported."""
        downvotes = self.model.downvotes if self.supports_downvotes else literal(0)
        row = (await db.execute(
            select(self.model.upvotes, downvotes).where(self.model.id == item_id),
        )).one()
        return int(row[0] or 0), int(row[1] or 0)

    async def record_copy(
        self, db: AsyncSession, slug: str, viewer_id: UUID | None = None,
    ) -> int:
        """
        Count a copy of an item's body. No deduplication is applied.

        Drafts only count copies made by their author.

        Raises:
            ContentNotFoundError: If the slug does not exist or is hidden from the viewer.
        """
        visible = self.model.published.is_(True)
        if viewer_id is not None:
            visible = or_(visible, self.model.author_id == viewer_id)
        stmt = (
            update(self.model)
            .where(self.model.slug == slug, visible)
            .values({"copy_count": self.model.copy_count + 1, "updated_at": self.model.updated_at})
            .returning(self.model.copy_count)
            .execution_options(synchronize_session=False)
        )
        copy_count = (await db.execute(stmt)).scalar_one_or_none()
        if copy_count is None:
            raise ContentNotFoundError(self.entity_name, slug)
        return copy_count
