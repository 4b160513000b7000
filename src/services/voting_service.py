"""
Vote toggling for content items.

A user holds at most one vote per item. Repeating a vote removes it; voting the
other way replaces it. The ledger rows and the denormalized counters on the
item are changed in the caller's transaction, so they commit or roll back
together.
"""
import logging
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.base_content_service import BaseContentService
from services.exceptions import ContentNotFoundError, UnsupportedVoteError, VoteConflictError

logger = logging.getLogger(__name__)


class VoteDirection(StrEnum):
    """Direction of a vote."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def opposite(self) -> "VoteDirection":
        return VoteDirection.DOWNVOTE if self is VoteDirection.UPVOTE else VoteDirection.UPVOTE

    @property
    def counter_field(self) -> str:
        return "upvotes" if self is VoteDirection.UPVOTE else "downvotes"


@dataclass
class VoteResult:
    """The caller's vote state on an item and the item's counts."""

    upvoted: bool
    downvoted: bool
    upvote_count: int
    downvote_count: int
    message: str | None = None

    @property
    def net_score(self) -> int:
        return self.upvote_count - self.downvote_count


class VotingService:
    """Toggles votes for one content type."""

    def __init__(self, content_service: BaseContentService) -> None:
        self.content = content_service

    def _ledger(self, direction: VoteDirection) -> type | None:
        if direction is VoteDirection.UPVOTE:
            return self.content.upvote_model
        return self.content.downvote_model

    async def _has_vote(
        self,
        db: AsyncSession,
        ledger: type | None,
        item_id: UUID,
        user_id: UUID,
    ) -> bool:
        if ledger is None:
            return False
        found = await db.scalar(
            select(ledger.id).where(ledger.content_id == item_id, ledger.user_id == user_id),
        )
        return found is not None

    async def _remove_vote(
        self,
        db: AsyncSession,
        direction: VoteDirection,
        item_id: UUID,
        user_id: UUID,
    ) -> bool:
        """
        Delete the user's vote in ``direction`` and decrement its counter.

        The counter is only decremented when a ledger row was actually deleted,
        so a concurrent removal of the same vote cannot decrement twice.
        """
        ledger = self._ledger(direction)
        if ledger is None:
            return False
        result = await db.execute(
            delete(ledger)
            .where(ledger.content_id == item_id, ledger.user_id == user_id)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            return False
        await self.content.decrement_counter(db, item_id, direction.counter_field)
        return True

    async def toggle_vote(
        self,
        db: AsyncSession,
        slug: str,
        user_id: UUID,
        direction: VoteDirection,
    ) -> VoteResult:
        """
        Toggle the user's vote on an item.

        Args:
            db: Database session; nothing is committed here.
            slug: Item slug.
            user_id: The authenticated voter.
            direction: Requested vote direction.

        Returns:
            The caller's resulting vote state and the item's updated counts.

        Raises:
            ContentNotFoundError: If the slug is unknown or hidden from the user.
            UnsupportedVoteError: If the content type has no ledger for ``direction``.
            VoteConflictError: If a concurrent request inserted the same vote first.
        """
        direction = VoteDirection(direction)
        item = await self.content.get_visible(db, slug, user_id)
        if item is None:
            raise ContentNotFoundError(self.content.entity_name, slug)

        ledger = self._ledger(direction)
        if ledger is None:
            raise UnsupportedVoteError(self.content.entity_name, direction.value)

        if await self._remove_vote(db, direction, item.id, user_id):
            voted = False
            message = f"{direction.value.capitalize()} removed"
        else:
            # A user may not hold both directions at once
            await self._remove_vote(db, direction.opposite, item.id, user_id)
            db.add(ledger(content_id=item.id, user_id=user_id))
            try:
                await db.flush()
            except IntegrityError as e:
                await db.rollback()
                if "unique" not in str(e.orig).lower():
                    raise
                logger.warning(
                    "vote_conflict",
                    extra={"slug": slug, "user_id": str(user_id), "direction": direction.value},
                )
                raise VoteConflictError() from e
            await self.content.increment_counter(db, item.id, direction.counter_field)
            voted = True
            message = f"{self.content.entity_name} {direction.value}d"

        upvotes, downvotes = await self.content.get_vote_counts(db, item.id)
        return VoteResult(
            upvoted=voted and direction is VoteDirection.UPVOTE,
            downvoted=voted and direction is VoteDirection.DOWNVOTE,
            upvote_count=upvotes,
            downvote_count=downvotes,
            message=message,
        )

    async def get_voting_status(
        self,
        db: AsyncSession,
        slug: str,
        user_id: UUID | None,
    ) -> VoteResult:
        """
        Report the caller's vote state without changing anything.

        Anonymous callers get both flags False.

        Raises:
            ContentNotFoundError: If the slug is unknown or hidden from the caller.
        """
        item = await self.content.get_visible(db, slug, user_id)
        if item is None:
            raise ContentNotFoundError(self.content.entity_name, slug)

        upvoted = downvoted = False
        if user_id is not None:
            upvoted = await self._has_vote(db, self.content.upvote_model, item.id, user_id)
            downvoted = await self._has_vote(db, self.content.downvote_model, item.id, user_id)

        upvotes, downvotes = await self.content.get_vote_counts(db, item.id)
        return VoteResult(
            upvoted=upvoted,
            downvoted=downvoted,
            upvote_count=upvotes,
            downvote_count=downvotes,
        )
