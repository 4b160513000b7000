"""Helpers that insert rows directly, bypassing services and their validation."""
from datetime import datetime
from itertools import count
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from models.cursor_rule import CursorRule
from models.prompt import Prompt
from models.user import User

_sequence = count(1)

PROMPT_CONTENT = (
    "You are a careful assistant. Answer the question step by step, state your "
    "assumptions, and finish with a one-sentence summary of the answer."
)
RULE_CONTENT = "Always write type hints for new functions and keep them precise."


async def make_user(
    db: AsyncSession,
    name: str = "Test User",
    username: str | None = None,
) -> User:
    """Create a user with a unique auth0 id."""
    n = next(_sequence)
    user = User(
        auth0_id=f"auth0|test-{n}",
        email=f"user{n}@example.com",
        name=name,
        username=username,
    )
    db.add(user)
    await db.flush()
    return user


async def make_category(
    db: AsyncSession,
    name: str = "Coding",
    slug: str | None = None,
    prompt_type: str = "developer",
) -> Category:
    """Create a category; the slug defaults to the lowercased name."""
    category = Category(name=name, slug=slug or name.lower(), prompt_type=prompt_type)
    db.add(category)
    await db.flush()
    return category


async def make_prompt(
    db: AsyncSession,
    author: User,
    slug: str | None = None,
    *,
    title: str = "Helpful Assistant",
    prompt_type: str = "system",
    published: bool = True,
    category_id: UUID | None = None,
    upvotes: int = 0,
    downvotes: int = 0,
    views: int = 0,
    copy_count: int = 0,
    created_at: datetime | None = None,
) -> Prompt:
    """Create a prompt with valid text fields and the given counters."""
    prompt = Prompt(
        slug=slug or f"prompt-{next(_sequence)}",
        title=title,
        excerpt="A short description of the prompt for listings.",
        content=PROMPT_CONTENT,
        prompt_type=prompt_type,
        author_id=author.id,
        published=published,
        category_id=category_id,
        upvotes=upvotes,
        downvotes=downvotes,
        views=views,
        copy_count=copy_count,
    )
    if created_at is not None:
        prompt.created_at = created_at
    db.add(prompt)
    await db.flush()
    await db.refresh(prompt, attribute_names=["author", "category"])
    return prompt


async def make_cursor_rule(
    db: AsyncSession,
    author: User,
    slug: str | None = None,
    *,
    title: str = "Type Hints",
    rule_type: str = "always",
    published: bool = True,
    upvotes: int = 0,
    views: int = 0,
    copy_count: int = 0,
) -> CursorRule:
    """Create a cursor rule with valid text fields and the given counters."""
    rule = CursorRule(
        slug=slug or f"rule-{next(_sequence)}",
        title=title,
        description="Keeps function signatures annotated and precise.",
        content=RULE_CONTENT,
        rule_type=rule_type,
        author_id=author.id,
        published=published,
        upvotes=upvotes,
        views=views,
        copy_count=copy_count,
    )
    db.add(rule)
    await db.flush()
    await db.refresh(rule, attribute_names=["author", "category"])
    return rule
