"""Service layer for prompt comments."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.comment import Comment
from models.prompt import Prompt
from schemas.comment import CommentCreate, CommentResponse, CommentThread
from services.exceptions import ContentValidationError

logger = logging.getLogger(__name__)


async def list_threads(db: AsyncSession, prompt: Prompt) -> tuple[list[CommentThread], int]:
    """
    Comments on a prompt grouped into threads.

    Top-level comments are newest first; replies under each are oldest first.

    Returns:
        Tuple of (threads, total number of comments including replies).
    """
    result = await db.execute(
        select(Comment)
        .where(Comment.prompt_id == prompt.id)
        .order_by(Comment.created_at.desc(), Comment.id.desc()),
    )
    comments = list(result.scalars().unique().all())

    replies: dict[UUID, list[CommentResponse]] = {}
    for comment in reversed(comments):
        if comment.parent_id is not None:
            replies.setdefault(comment.parent_id, []).append(
                CommentResponse.model_validate(comment),
            )

    threads = [
        CommentThread(
            **CommentResponse.model_validate(comment).model_dump(),
            replies=replies.get(comment.id, []),
        )
        for comment in comments
        if comment.parent_id is None
    ]
    return threads, len(comments)


async def create_comment(
    db: AsyncSession,
    prompt: Prompt,
    author_id: UUID,
    data: CommentCreate,
) -> Comment:
    """
    Add a comment or reply to a prompt.

    Replies attach to top-level comments only; replying to a reply attaches to
    that reply's parent.

    Raises:
        ContentValidationError: If ``parent_id`` is not a comment on this prompt.
    """
    parent_id = data.parent_id
    if parent_id is not None:
        parent = await db.scalar(
            select(Comment).where(Comment.id == parent_id, Comment.prompt_id == prompt.id),
        )
        if parent is None:
            raise ContentValidationError(["Parent comment not found"])
        parent_id = parent.parent_id or parent.id

    comment = Comment(
        content=data.content,
        prompt_id=prompt.id,
        author_id=author_id,
        parent_id=parent_id,
    )
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    await db.refresh(comment, attribute_names=["author"])
    logger.info("comment_created", extra={"prompt_id": str(prompt.id)})
    return comment
