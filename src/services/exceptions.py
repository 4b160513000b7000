"""Shared exceptions for service layer operations."""


class ContentNotFoundError(Exception):
    """Raised when a slug does not resolve to content the caller may see."""

    def __init__(self, entity_name: str, slug: str) -> None:
        self.entity_name = entity_name
        self.slug = slug
        super().__init__(f"{entity_name} not found")


class PermissionDeniedError(Exception):
    """Raised when the caller is authenticated but does not own the content."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class ContentValidationError(Exception):
    """
    Raised when content fields fail validation rules checked by a service.

    Carries every failing rule so the API can report them together.
    """

    def __init__(self, details: list[str]) -> None:
        self.details = details
        super().__init__("Validation failed")


class SlugConflictError(Exception):
    """Raised when a slug is already used by another item of the same type."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Slug '{slug}' is already taken")


class UsernameConflictError(Exception):
    """Raised when a username is already used by another account."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already taken")


class VoteConflictError(Exception):
    """
    Raised when a concurrent request recorded the same vote first.

    The ledger's unique constraint rejected the insert; the transaction is rolled back.
    """

    def __init__(self) -> None:
        super().__init__("Vote was modified by another request, please retry")


class UnsupportedVoteError(Exception):
    """Raised when a vote direction is not supported for a content type."""

    def __init__(self, entity_name: str, direction: str) -> None:
        self.entity_name = entity_name
        self.direction = direction
        super().__init__(f"{entity_name}s do not support {direction}s")
