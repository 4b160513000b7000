"""User profile and account endpoints."""
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_optional_user, get_services
from api.helpers import SERVICE_ERRORS, to_http_exception
from models.user import User
from schemas.common import MessageResponse
from schemas.user import (
    ProfileUpdate,
    ProfileUpdateResponse,
    UsernameCheckRequest,
    UsernameCheckResponse,
    UserResponse,
)
from services import user_service
from services.container import ServiceContainer
from services.cursor_rule_service import CursorRuleService
from services.prompt_service import PromptService

router = APIRouter(prefix="/api/user", tags=["users"])

# Content types whose rows are removed with an account
content_services = [PromptService(), CursorRuleService()]


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Get the caller's profile."""
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    data: ProfileUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    services: ServiceContainer = Depends(get_services),
) -> ProfileUpdateResponse:
    """
    Update the caller's profile.

    Setting a username for the first time completes onboarding and announces
    the registration.
    """
    try:
        completed_onboarding = await user_service.update_profile(db, current_user, data)
    except SERVICE_ERRORS as e:
        raise to_http_exception(e) from e

    if completed_onboarding:
        total = await user_service.count_registered_users(db)
        background_tasks.add_task(services.notifier.notify_registration, current_user, total)

    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(current_user),
    )


@router.delete("/profile", response_model=MessageResponse)
async def delete_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete the caller's account and everything they own."""
    await user_service.delete_account(db, current_user, content_services)
    return MessageResponse(message="Account deleted successfully")


@router.post("/check-username", response_model=UsernameCheckResponse)
async def check_username(
    data: UsernameCheckRequest,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> UsernameCheckResponse:
    """
    Check whether a username may be claimed.

    The caller's own username counts as available.
    """
    available, error = await user_service.check_username(
        db, data.username, current_user.id if current_user else None,
    )
    if error:
        return UsernameCheckResponse(available=False, error=error)
    return UsernameCheckResponse(available=available, username=data.username.lower())
