"""
Shared validation functions for Pydantic schemas and services.

Format checks (slugs, usernames, tags) run in the request schemas. Length rules
for content bodies are applied by the content services so that updates can be
validated against the merged result.
"""
import re
from dataclasses import dataclass
from urllib.parse import urlparse

# Slug format: lowercase alphanumeric and hyphens (e.g., 'code-review-helper')
SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 100

# Username format: letters, numbers, hyphens and underscores
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20

# Tag format: lowercase alphanumeric with hyphens (e.g., 'machine-learning', 'web-dev')
TAG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


@dataclass(frozen=True)
class LengthRule:
    """Inclusive bounds on the trimmed length of a text field."""

    label: str
    min_length: int
    max_length: int


PROMPT_LENGTH_RULES: dict[str, LengthRule] = {
    "title": LengthRule("Title", 3, 120),
    "excerpt": LengthRule("Description", 20, 500),
    "content": LengthRule("Content", 80, 30000),
}

CURSOR_RULE_LENGTH_RULES: dict[str, LengthRule] = {
    "title": LengthRule("Title", 3, 120),
    "description": LengthRule("Description", 20, 500),
    "content": LengthRule("Content", 50, 10000),
    "globs": LengthRule("Globs", 0, 500),
}


def check_lengths(rules: dict[str, LengthRule], values: dict[str, str | None]) -> list[str]:
    """
    Check field values against length rules.

    Args:
        rules: Mapping of field name to its length rule.
        values: Mapping of field name to value. None values are skipped.

    Returns:
        Human-readable error messages, empty when every field is valid.
    """
    errors: list[str] = []
    for field, rule in rules.items():
        value = values.get(field)
        if value is None:
            continue
        length = len(value.strip())
        if length < rule.min_length:
            errors.append(f"{rule.label} must be at least {rule.min_length} characters long")
        elif length > rule.max_length:
            errors.append(f"{rule.label} must be no more than {rule.max_length} characters long")
    return errors


def validate_slug(slug: str) -> str:
    """
    Validate slug format.

    Raises:
        ValueError: If the slug is too short, too long, or has invalid characters.
    """
    if len(slug) < SLUG_MIN_LENGTH:
        raise ValueError(f"Slug must be at least {SLUG_MIN_LENGTH} characters long")
    if len(slug) > SLUG_MAX_LENGTH:
        raise ValueError(f"Slug must be no more than {SLUG_MAX_LENGTH} characters long")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug can only contain lowercase letters, numbers, and hyphens")
    return slug


def username_error(username: str) -> str | None:
    """Return the reason a username is invalid, or None when it is valid."""
    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        return (
            f"Username must be between {USERNAME_MIN_LENGTH} "
            f"and {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(username):
        return "Username can only contain letters, numbers, hyphens, and underscores"
    return None


def validate_username(username: str) -> str:
    """
    Validate username format and normalize it to lowercase.

    Raises:
        ValueError: If the username is invalid.
    """
    error = username_error(username)
    if error:
        raise ValueError(error)
    return username.lower()


def validate_website(website: str) -> str:
    """
    Validate a profile website, adding https:// when no scheme is given.

    Raises:
        ValueError: If the value cannot be parsed as a URL with a host.
    """
    url = website if website.startswith("http") else f"https://{website}"
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc or " " in parsed.netloc:
        raise ValueError("Please enter a valid website URL")
    return url


def validate_and_normalize_tag(tag: str) -> str:
    """
    Normalize and validate a single tag.

    Whitespace runs become hyphens, so 'Machine Learning' is stored as
    'machine-learning'.

    Raises:
        ValueError: If the tag has invalid format.
    """
    normalized = re.sub(r"\s+", "-", tag.lower().strip())
    if not TAG_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid tag format: '{normalized}'. "
            "Use lowercase letters, numbers, and hyphens only (e.g., 'machine-learning').",
        )
    return normalized


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """
    Normalize and validate a list of tags.

    Empty strings are dropped and duplicates removed, preserving first occurrence order.
    """
    normalized = []
    seen: set[str] = set()
    for tag in tags:
        if not tag.strip():
            continue
        validated = validate_and_normalize_tag(tag)
        if validated not in seen:
            seen.add(validated)
            normalized.append(validated)
    return normalized
