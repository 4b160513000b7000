"""Cursor rule endpoints: CRUD, voting, copies and views."""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_optional_user, get_services
from api.helpers import SERVICE_ERRORS, to_http_exception, viewer_identity
from models.user import User
from schemas.common import MessageResponse, Pagination, SlugAvailability
from schemas.cursor_rule import (
    CursorRuleCreate,
    CursorRuleListItem,
    CursorRuleListResponse,
    CursorRuleResponse,
    CursorRuleUpdate,
)
from schemas.vote import CopyResponse, VoteRequest, VoteResponse
from services.container import ServiceContainer
from services.cursor_rule_service import CursorRuleService
from services.exceptions import ContentNotFoundError
from services.voting_service import VotingService

router = APIRouter(prefix="/api/cursor-rules", tags=["cursor-rules"])

cursor_rule_service = CursorRuleService()
cursor_rule_voting = VotingService(cursor_rule_service)

DEFAULT_PAGE_SIZE = 10


@router.get("", response_model=CursorRuleListResponse)
async def list_cursor_rules(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    type: str | None = Query(default=None, description="Rule type, or 'all'"),  # noqa: A002
    category: str | None = Query(default=None, description="Category slug, or 'all'"),
    search: str | None = Query(default=None, description="Match title"),
    sort: str = Query(default="recent", description="recent, popular, upvotes, views or copies"),
    db: AsyncSession = Depends(get_async_session),
) -> CursorRuleListResponse:
    """List published cursor rules."""
    rules, total = await cursor_rule_service.search(
        db,
        page=page,
        limit=limit,
        type_filter=type,
        category=category,
        query=search,
        sort=sort,
    )
    return CursorRuleListResponse(
        cursor_rules=[CursorRuleListItem.model_validate(r) for r in rules],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=CursorRuleResponse, status_code=201)
async def create_cursor_rule(
    data: CursorRuleCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> CursorRuleResponse:
    """Create a cursor rule. A slug is generated from the title when omitted."""
    try:
        rule = await cursor_rule_service.create(db, current_user.id, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if rule.published:
        background_tasks.add_task(
            services.notifier.notify_content, "published", rule, current_user,
        )
    return CursorRuleResponse.model_validate(rule)


@router.get("/check-slug", response_model=SlugAvailability)
async def check_slug(
    slug: str = Query(min_length=1),
    db: AsyncSession = Depends(get_async_session),
) -> SlugAvailability:
    """Check whether a slug is free."""
    return SlugAvailability(
        slug=slug, available=not await cursor_rule_service.slug_exists(db, slug),
    )


@router.get("/{slug}", response_model=CursorRuleResponse)
async def get_cursor_rule(
    slug: str,
    request: Request,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> CursorRuleResponse:
    """Get a cursor rule by slug and count the view."""
    viewer_id = current_user.id if current_user else None
    rule = await cursor_rule_service.get_visible(db, slug, viewer_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="Cursor rule not found")

    counted = await services.view_tracker.record_view(
        db,
        cursor_rule_service,
        rule,
        viewer_identity(request, current_user),
        viewer_id,
    )
    if counted:
        await db.refresh(rule, attribute_names=["views"])
    return CursorRuleResponse.model_validate(rule)


@router.put("/{slug}", response_model=CursorRuleResponse)
async def update_cursor_rule(
    slug: str,
    data: CursorRuleUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> CursorRuleResponse:
    """Update a cursor rule owned by the caller."""
    try:
        rule = await cursor_rule_service.update(db, slug, current_user.id, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if rule.published:
        background_tasks.add_task(
            services.notifier.notify_content, "edited", rule, current_user,
        )
    return CursorRuleResponse.model_validate(rule)


@router.delete("/{slug}", response_model=MessageResponse)
async def delete_cursor_rule(
    slug: str,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> MessageResponse:
    """Delete a cursor rule owned by the caller, with its votes."""
    try:
        rule = await cursor_rule_service.get_owned(db, slug, current_user.id)
        await cursor_rule_service.delete_item(db, rule)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if rule.published:
        background_tasks.add_task(
            services.notifier.notify_content, "deleted", rule, current_user,
        )
    return MessageResponse(message="Cursor rule deleted successfully")


@router.get("/{slug}/vote", response_model=VoteResponse)
async def get_vote_status(
    slug: str,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> VoteResponse:
    """The caller's upvote on a cursor rule and its upvote count."""
    try:
        result = await cursor_rule_voting.get_voting_status(
            db, slug, current_user.id if current_user else None,
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e
    return VoteResponse.model_validate(result)


@router.post("/{slug}/vote", response_model=VoteResponse)
async def vote_cursor_rule(
    slug: str,
    data: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> VoteResponse:
    """Toggle the caller's upvote. Downvotes are rejected with 400."""
    try:
        result = await cursor_rule_voting.toggle_vote(db, slug, current_user.id, data.type)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e
    return VoteResponse.model_validate(result)


@router.post("/{slug}/copy", response_model=CopyResponse)
async def copy_cursor_rule(
    slug: str,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> CopyResponse:
    """Count a copy of the rule body."""
    try:
        copy_count = await cursor_rule_service.record_copy(
            db, slug, current_user.id if current_user else None,
        )
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return CopyResponse(copy_count=copy_count)
