"""FastAPI dependencies for injection."""
from fastapi import Request

from core.auth import get_current_user, get_optional_user
from core.config import get_settings
from db.session import get_async_session
from services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Services built at startup and stored on the application state."""
    return request.app.state.services


__all__ = [
    "get_async_session",
    "get_current_user",
    "get_optional_user",
    "get_services",
    "get_settings",
]
