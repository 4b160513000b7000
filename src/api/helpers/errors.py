"""Translation of service exceptions into HTTP errors."""
from fastapi import HTTPException

from services.exceptions import (
    ContentNotFoundError,
    ContentValidationError,
    PermissionDeniedError,
    SlugConflictError,
    UnsupportedVoteError,
    UsernameConflictError,
    VoteConflictError,
)

_STATUS_CODES: dict[type[Exception], int] = {
    ContentNotFoundError: 404,
    PermissionDeniedError: 403,
    ContentValidationError: 400,
    UnsupportedVoteError: 400,
    SlugConflictError: 409,
    UsernameConflictError: 409,
    VoteConflictError: 409,
}

SERVICE_ERRORS = tuple(_STATUS_CODES)


def to_http_exception(exc: Exception) -> HTTPException:
    """
    Build the HTTPException for a service exception.

    Validation errors carry their messages as a ``details`` list.
    """
    status_code = _STATUS_CODES.get(type(exc), 500)
    if isinstance(exc, ContentValidationError):
        return HTTPException(
            status_code=status_code,
            detail={"error": str(exc), "details": exc.details},
        )
    return HTTPException(status_code=status_code, detail=str(exc))
