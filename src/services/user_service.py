"""Service layer for user profiles and accounts."""
import logging
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.comment import Comment
from models.user import User
from schemas.user import ProfileUpdate
from schemas.validators import username_error
from services.base_content_service import BaseContentService
from services.exceptions import UsernameConflictError

logger = logging.getLogger(__name__)


async def username_taken(
    db: AsyncSession,
    username: str,
    exclude_user_id: UUID | None = None,
) -> bool:
    """Check whether a username (case-insensitive) belongs to another account."""
    stmt = select(User.id).where(func.lower(User.username) == username.lower())
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return await db.scalar(stmt.limit(1)) is not None


async def check_username(
    db: AsyncSession,
    username: str,
    exclude_user_id: UUID | None = None,
) -> tuple[bool, str | None]:
    """
    Check whether a username may be claimed.

    Returns:
        Tuple of (available, error). ``error`` explains a format problem; a valid
        but taken username returns (False, None).
    """
    error = username_error(username)
    if error:
        return False, error
    return not await username_taken(db, username, exclude_user_id), None


async def count_registered_users(db: AsyncSession) -> int:
    """Number of accounts that have completed their profile (have a username)."""
    return await db.scalar(
        select(func.count()).select_from(User).where(User.username.is_not(None)),
    ) or 0


async def update_profile(
    db: AsyncSession,
    user: User,
    data: ProfileUpdate,
) -> bool:
    """
    Update the caller's public profile.

    Args:
        db: Database session.
        user: The authenticated user (attached to ``db``).
        data: Validated profile fields; username already lowercased.

    Returns:
        True if this update set a username for the first time (completed onboarding).

    Raises:
        UsernameConflictError: If the username belongs to another account.
    """
    completed_onboarding = user.username is None and data.username is not None

    if data.username is not None and await username_taken(db, data.username, user.id):
        raise UsernameConflictError(data.username)

    user.name = data.name
    user.username = data.username
    user.bio = data.bio
    user.website = data.website

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise UsernameConflictError(data.username or "") from e

    await db.refresh(user)
    if completed_onboarding:
        logger.info("user_onboarded", extra={"user_id": str(user.id)})
    return completed_onboarding


async def delete_account(
    db: AsyncSession,
    user: User,
    content_services: list[BaseContentService],
) -> None:
    """
    Delete a user and everything they own.

    The user's votes on other people's content are withdrawn first so those
    counters stay in step with the ledgers. Then the user's own content (with
    its ledgers and comments), the user's comments and the user row are removed.
    """
    for service in content_services:
        for ledger, counter in zip(
            service.ledger_models(), ("upvotes", "downvotes"), strict=False,
        ):
            voted_ids = (await db.scalars(
                select(ledger.content_id).where(ledger.user_id == user.id),
            )).all()
            await db.execute(
                delete(ledger)
                .where(ledger.user_id == user.id)
                .execution_options(synchronize_session=False),
            )
            for item_id in voted_ids:
                await service.decrement_counter(db, item_id, counter)

        owned = (await db.scalars(
            select(service.model).where(service.model.author_id == user.id),
        )).unique().all()
        for item in owned:
            await service.delete_item(db, item)

    own_comments = select(Comment.id).where(Comment.author_id == user.id)
    await db.execute(
        delete(Comment)
        .where(Comment.parent_id.in_(own_comments))
        .execution_options(synchronize_session=False),
    )
    await db.execute(
        delete(Comment)
        .where(Comment.author_id == user.id)
        .execution_options(synchronize_session=False),
    )

    await db.delete(user)
    await db.flush()
    logger.info("user_deleted", extra={"user_id": str(user.id)})
