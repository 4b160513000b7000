"""Shared utility functions for service layer."""
import re
from datetime import UTC, datetime, timedelta

# Lower bounds for timeframe filters; "all-time" has none
TIMEFRAME_WINDOWS: dict[str, timedelta] = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
}


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def slugify(title: str) -> str:
    """
    Build a URL slug from a title.

    Lowercases, replaces every run of non-alphanumeric characters with a single
    hyphen and trims hyphens from both ends.
    """
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def timeframe_start(timeframe: str, now: datetime | None = None) -> datetime | None:
    """
    Return the creation-time lower bound for a timeframe.

    Returns None for "all-time" or any unrecognized value.
    """
    window = TIMEFRAME_WINDOWS.get(timeframe)
    if window is None:
        return None
    return (now or datetime.now(UTC)) - window
