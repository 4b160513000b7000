"""Prompt endpoints: CRUD, voting, copies, views and comments."""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_optional_user, get_services
from api.helpers import SERVICE_ERRORS, to_http_exception, viewer_identity
from models.user import User
from schemas.comment import (
    CommentCreate,
    CommentCreatedResponse,
    CommentListResponse,
    CommentResponse,
)
from schemas.common import MessageResponse, Pagination, SlugAvailability
from schemas.prompt import (
    PromptCreate,
    PromptListItem,
    PromptListResponse,
    PromptResponse,
    PromptUpdate,
)
from schemas.vote import CopyResponse, VoteRequest, VoteResponse
from services import comment_service
from services.container import ServiceContainer
from services.exceptions import ContentNotFoundError
from services.prompt_service import PromptService
from services.voting_service import VotingService

router = APIRouter(prefix="/api/prompts", tags=["prompts"])

prompt_service = PromptService()
prompt_voting = VotingService(prompt_service)

DEFAULT_PAGE_SIZE = 12


@router.get("", response_model=PromptListResponse)
async def list_prompts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    type: str | None = Query(default=None, description="Prompt type, or 'all'"),  # noqa: A002
    category: str | None = Query(default=None, description="Category slug, or 'all'"),
    search: str | None = Query(default=None, description="Match title or excerpt"),
    sort: str = Query(default="recent", description="recent, popular or upvotes"),
    db: AsyncSession = Depends(get_async_session),
) -> PromptListResponse:
    """List published prompts."""
    prompts, total = await prompt_service.search(
        db,
        page=page,
        limit=limit,
        type_filter=type,
        category=category,
        query=search,
        sort=sort,
    )
    return PromptListResponse(
        prompts=[PromptListItem.model_validate(p) for p in prompts],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=PromptResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> PromptResponse:
    """Create a new prompt."""
    try:
        prompt = await prompt_service.create(db, current_user.id, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if prompt.published:
        background_tasks.add_task(
            services.notifier.notify_content, "published", prompt, current_user,
        )
    return PromptResponse.model_validate(prompt)


@router.get("/check-slug", response_model=SlugAvailability)
async def check_slug(
    slug: str = Query(min_length=1),
    db: AsyncSession = Depends(get_async_session),
) -> SlugAvailability:
    """Check whether a slug is free."""
    return SlugAvailability(slug=slug, available=not await prompt_service.slug_exists(db, slug))


@router.get("/{slug}", response_model=PromptResponse)
async def get_prompt(
    slug: str,
    request: Request,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> PromptResponse:
    """
    Get a prompt by slug and count the view.

    Unpublished prompts are only visible to their author.
    """
    viewer_id = current_user.id if current_user else None
    prompt = await prompt_service.get_visible(db, slug, viewer_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")

    counted = await services.view_tracker.record_view(
        db,
        prompt_service,
        prompt,
        viewer_identity(request, current_user),
        viewer_id,
    )
    if counted:
        await db.refresh(prompt, attribute_names=["views"])
    return PromptResponse.model_validate(prompt)


@router.put("/{slug}", response_model=PromptResponse)
async def update_prompt(
    slug: str,
    data: PromptUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> PromptResponse:
    """Update a prompt owned by the caller."""
    try:
        prompt = await prompt_service.update(db, slug, current_user.id, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if prompt.published:
        background_tasks.add_task(
            services.notifier.notify_content, "edited", prompt, current_user,
        )
    return PromptResponse.model_validate(prompt)


@router.delete("/{slug}", response_model=MessageResponse)
async def delete_prompt(
    slug: str,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> MessageResponse:
    """Delete a prompt owned by the caller, with its votes and comments."""
    try:
        prompt = await prompt_service.get_owned(db, slug, current_user.id)
        await prompt_service.delete_item(db, prompt)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if prompt.published:
        background_tasks.add_task(
            services.notifier.notify_content, "deleted", prompt, current_user,
        )
    return MessageResponse(message="Prompt deleted successfully")


@router.get("/{slug}/vote", response_model=VoteResponse)
async def get_vote_status(
    slug: str,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> VoteResponse:
    """The caller's vote on a prompt and its vote counts."""
    try:
        result = await prompt_voting.get_voting_status(
            db, slug, current_user.id if current_user else None,
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e
    return VoteResponse.model_validate(result)


@router.post("/{slug}/vote", response_model=VoteResponse)
async def vote_prompt(
    slug: str,
    data: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> VoteResponse:
    """Toggle the caller's upvote or downvote on a prompt."""
    try:
        result = await prompt_voting.toggle_vote(db, slug, current_user.id, data.type)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e
    return VoteResponse.model_validate(result)


@router.post("/{slug}/copy", response_model=CopyResponse)
async def copy_prompt(
    slug: str,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> CopyResponse:
    """Count a copy of the prompt body."""
    try:
        copy_count = await prompt_service.record_copy(
            db, slug, current_user.id if current_user else None,
        )
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return CopyResponse(copy_count=copy_count)


@router.get("/{slug}/comments", response_model=CommentListResponse)
async def list_comments(
    slug: str,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> CommentListResponse:
    """Threaded comments on a prompt."""
    prompt = await prompt_service.get_visible(db, slug, current_user.id if current_user else None)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    threads, total = await comment_service.list_threads(db, prompt)
    return CommentListResponse(comments=threads, total=total)


@router.post("/{slug}/comments", response_model=CommentCreatedResponse, status_code=201)
async def create_comment(
    slug: str,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CommentCreatedResponse:
    """Comment on a prompt, or reply to a comment."""
    prompt = await prompt_service.get_visible(db, slug, current_user.id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    try:
        comment = await comment_service.create_comment(db, prompt, current_user.id, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e
    return CommentCreatedResponse(
        message="Comment created successfully",
        comment=CommentResponse.model_validate(comment),
    )
