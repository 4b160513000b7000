"""Tests for cursor rule service: slug generation, default categories, listing."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.cursor_rule import CursorRuleCreate, CursorRuleUpdate
from services.cursor_rule_service import CursorRuleService
from services.exceptions import ContentValidationError, SlugConflictError
from tests.factories import RULE_CONTENT, make_category, make_cursor_rule, make_user

cursor_rule_service = CursorRuleService()


@pytest.fixture
async def author(db_session: AsyncSession) -> User:
    return await make_user(db_session, name="Author")


def _create_data(**overrides: object) -> CursorRuleCreate:
    data = {
        "title": "Python Type Hints",
        "description": "Annotate every function signature in Python files.",
        "content": RULE_CONTENT,
        "rule_type": "auto-attached",
        "globs": "**/*.py",
    }
    data.update(overrides)
    return CursorRuleCreate(**data)


async def test__create__generates_slug_from_title(
    db_session: AsyncSession, author: User,
) -> None:
    rule = await cursor_rule_service.create(db_session, author.id, _create_data())

    assert rule.slug == "python-type-hints"
    assert rule.globs == "**/*.py"
    assert rule.upvotes == 0


async def test__create__generated_slug_gets_numeric_suffix(
    db_session: AsyncSession, author: User,
) -> None:
    first = await cursor_rule_service.create(db_session, author.id, _create_data())
    second = await cursor_rule_service.create(db_session, author.id, _create_data())
    third = await cursor_rule_service.create(db_session, author.id, _create_data())

    assert [first.slug, second.slug, third.slug] == [
        "python-type-hints",
        "python-type-hints-1",
        "python-type-hints-2",
    ]


async def test__create__explicit_duplicate_slug_conflicts(
    db_session: AsyncSession, author: User,
) -> None:
    await make_cursor_rule(db_session, author, "taken")

    with pytest.raises(SlugConflictError):
        await cursor_rule_service.create(db_session, author.id, _create_data(slug="taken"))


async def test__create__title_without_slug_characters_rejected(
    db_session: AsyncSession, author: User,
) -> None:
    with pytest.raises(ContentValidationError):
        await cursor_rule_service.create(db_session, author.id, _create_data(title="!!!"))


async def test__create__defaults_category_to_rule_type(
    db_session: AsyncSession, author: User,
) -> None:
    category = await make_category(db_session, "Auto-attached")

    rule = await cursor_rule_service.create(db_session, author.id, _create_data())

    assert rule.category_id == category.id


async def test__create__content_length_rule(
    db_session: AsyncSession, author: User,
) -> None:
    with pytest.raises(ContentValidationError) as exc_info:
        await cursor_rule_service.create(db_session, author.id, _create_data(content="short"))

    assert exc_info.value.details == ["Content must be at least 50 characters long"]


async def test__update__clears_globs_when_sent_as_null(
    db_session: AsyncSession, author: User,
) -> None:
    rule = await cursor_rule_service.create(db_session, author.id, _create_data())

    updated = await cursor_rule_service.update(
        db_session, rule.slug, author.id, CursorRuleUpdate(globs=None),
    )

    assert updated.globs is None


async def test__search__sorts_by_copies(db_session: AsyncSession, author: User) -> None:
    await make_cursor_rule(db_session, author, "rarely-copied", copy_count=1, upvotes=9)
    await make_cursor_rule(db_session, author, "often-copied", copy_count=20)

    items, total = await cursor_rule_service.search(db_session, sort="copies")

    assert total == 2
    assert [r.slug for r in items] == ["often-copied", "rarely-copied"]


async def test__search__matches_title_only(db_session: AsyncSession, author: User) -> None:
    await make_cursor_rule(db_session, author, "hints", title="Type Hints")

    _, title_hits = await cursor_rule_service.search(db_session, query="hints")
    _, description_hits = await cursor_rule_service.search(db_session, query="signatures")

    assert title_hits == 1
    assert description_hits == 0


async def test__get_vote_counts__reports_zero_downvotes(
    db_session: AsyncSession, author: User,
) -> None:
    rule = await make_cursor_rule(db_session, author, "counted", upvotes=4)

    assert await cursor_rule_service.get_vote_counts(db_session, rule.id) == (4, 0)
