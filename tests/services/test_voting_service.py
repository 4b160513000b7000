"""
Tests for vote toggling.

Covers the toggle state machine, mutual exclusivity of up- and downvotes, the
zero floor on counters, and upvote-only content.
"""
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.prompt import Prompt
from models.user import User
from models.vote import CursorRuleUpvote, PromptDownvote, PromptUpvote
from services.cursor_rule_service import CursorRuleService
from services.exceptions import ContentNotFoundError, UnsupportedVoteError, VoteConflictError
from services.prompt_service import PromptService
from services.voting_service import VoteDirection, VotingService
from tests.factories import make_cursor_rule, make_prompt, make_user

prompt_voting = VotingService(PromptService())
rule_voting = VotingService(CursorRuleService())


@pytest.fixture
async def author(db_session: AsyncSession) -> User:
    return await make_user(db_session, name="Author")


@pytest.fixture
async def voter(db_session: AsyncSession) -> User:
    return await make_user(db_session, name="Voter")


@pytest.fixture
async def prompt(db_session: AsyncSession, author: User) -> Prompt:
    return await make_prompt(db_session, author, "vote-target")


async def _ledger_count(db: AsyncSession, ledger: type, user: User) -> int:
    return await db.scalar(
        select(func.count()).select_from(ledger).where(ledger.user_id == user.id),
    )


# =============================================================================
# Toggle behavior
# =============================================================================


async def test__toggle_vote__fresh_upvote(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """A first upvote records a ledger row and increments the counter."""
    result = await prompt_voting.toggle_vote(
        db_session, prompt.slug, voter.id, VoteDirection.UPVOTE,
    )

    assert result.upvoted is True
    assert result.downvoted is False
    assert result.upvote_count == 1
    assert result.downvote_count == 0
    assert result.net_score == 1
    assert result.message == "Prompt upvoted"
    assert await _ledger_count(db_session, PromptUpvote, voter) == 1


async def test__toggle_vote__same_direction_twice_restores_state(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """Voting the same way twice leaves no vote and the initial counts."""
    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.UPVOTE)
    result = await prompt_voting.toggle_vote(
        db_session, prompt.slug, voter.id, VoteDirection.UPVOTE,
    )

    assert result.upvoted is False
    assert result.upvote_count == 0
    assert result.message == "Upvote removed"
    assert await _ledger_count(db_session, PromptUpvote, voter) == 0


async def test__toggle_vote__switching_direction_moves_the_vote(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """Downvoting after an upvote removes the upvote and records the downvote."""
    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.UPVOTE)
    result = await prompt_voting.toggle_vote(
        db_session, prompt.slug, voter.id, VoteDirection.DOWNVOTE,
    )

    assert result.upvoted is False
    assert result.downvoted is True
    assert result.upvote_count == 0
    assert result.downvote_count == 1
    assert result.net_score == -1
    assert await _ledger_count(db_session, PromptUpvote, voter) == 0
    assert await _ledger_count(db_session, PromptDownvote, voter) == 1


async def test__toggle_vote__user_never_holds_both_directions(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """Any sequence of toggles leaves at most one ledger row for the user."""
    sequence = [
        VoteDirection.UPVOTE,
        VoteDirection.DOWNVOTE,
        VoteDirection.DOWNVOTE,
        VoteDirection.UPVOTE,
        VoteDirection.DOWNVOTE,
    ]
    for direction in sequence:
        await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, direction)
        up = await _ledger_count(db_session, PromptUpvote, voter)
        down = await _ledger_count(db_session, PromptDownvote, voter)
        assert up + down <= 1

    await db_session.refresh(prompt)
    assert prompt.upvotes == 0
    assert prompt.downvotes == 1


async def test__toggle_vote__counts_votes_from_several_users(
    db_session: AsyncSession, prompt: Prompt, voter: User, author: User,
) -> None:
    """Counters reflect every user's vote."""
    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.UPVOTE)
    result = await prompt_voting.toggle_vote(
        db_session, prompt.slug, author.id, VoteDirection.UPVOTE,
    )

    assert result.upvote_count == 2


async def test__toggle_vote__removal_never_drives_counter_negative(
    db_session: AsyncSession, author: User, voter: User,
) -> None:
    """A drifted counter at zero stays at zero when a vote is removed."""
    prompt = await make_prompt(db_session, author, "drifted", upvotes=0)
    db_session.add(PromptUpvote(prompt_id=prompt.id, user_id=voter.id))
    await db_session.flush()

    result = await prompt_voting.toggle_vote(
        db_session, prompt.slug, voter.id, VoteDirection.UPVOTE,
    )

    assert result.upvoted is False
    assert result.upvote_count == 0


async def test__toggle_vote__does_not_touch_updated_at(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """Counter changes are not content edits."""
    await db_session.refresh(prompt)
    before = prompt.updated_at

    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.UPVOTE)
    await db_session.refresh(prompt)

    assert prompt.updated_at == before


# =============================================================================
# Visibility and unsupported directions
# =============================================================================


async def test__toggle_vote__unknown_slug_raises_not_found(
    db_session: AsyncSession, voter: User,
) -> None:
    with pytest.raises(ContentNotFoundError):
        await prompt_voting.toggle_vote(db_session, "missing", voter.id, VoteDirection.UPVOTE)


async def test__toggle_vote__unpublished_hidden_from_other_users(
    db_session: AsyncSession, author: User, voter: User,
) -> None:
    """Unpublished content cannot be voted on by anyone but its author."""
    draft = await make_prompt(db_session, author, "draft", published=False)

    with pytest.raises(ContentNotFoundError):
        await prompt_voting.toggle_vote(db_session, draft.slug, voter.id, VoteDirection.UPVOTE)

    result = await prompt_voting.toggle_vote(
        db_session, draft.slug, author.id, VoteDirection.UPVOTE,
    )
    assert result.upvoted is True


async def test__toggle_vote__cursor_rule_upvote(
    db_session: AsyncSession, author: User, voter: User,
) -> None:
    rule = await make_cursor_rule(db_session, author, "rule-target")

    result = await rule_voting.toggle_vote(
        db_session, rule.slug, voter.id, VoteDirection.UPVOTE,
    )

    assert result.upvoted is True
    assert result.upvote_count == 1
    assert result.downvote_count == 0
    assert result.message == "Cursor rule upvoted"
    assert await _ledger_count(db_session, CursorRuleUpvote, voter) == 1


async def test__toggle_vote__cursor_rule_rejects_downvote(
    db_session: AsyncSession, author: User, voter: User,
) -> None:
    """Cursor rules are upvote-only; a downvote changes nothing."""
    rule = await make_cursor_rule(db_session, author, "upvote-only", upvotes=3)

    with pytest.raises(UnsupportedVoteError):
        await rule_voting.toggle_vote(db_session, rule.slug, voter.id, VoteDirection.DOWNVOTE)

    await db_session.refresh(rule)
    assert rule.upvotes == 3


# =============================================================================
# Status
# =============================================================================


async def test__get_voting_status__reports_caller_vote(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.DOWNVOTE)

    status = await prompt_voting.get_voting_status(db_session, prompt.slug, voter.id)

    assert status.upvoted is False
    assert status.downvoted is True
    assert status.downvote_count == 1
    assert status.message is None


async def test__get_voting_status__anonymous_has_no_vote(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    await prompt_voting.toggle_vote(db_session, prompt.slug, voter.id, VoteDirection.UPVOTE)

    status = await prompt_voting.get_voting_status(db_session, prompt.slug, None)

    assert status.upvoted is False
    assert status.downvoted is False
    assert status.upvote_count == 1


# =============================================================================
# Insert failures
# =============================================================================


async def test__toggle_vote__duplicate_ledger_row_is_conflict(
    db_session: AsyncSession, prompt: Prompt, voter: User,
) -> None:
    """A concurrent request that inserted the same vote first surfaces as a conflict."""
    db_session.add(PromptUpvote(prompt_id=prompt.id, user_id=voter.id))
    await db_session.flush()

    # Simulate losing the race: the existing row is not seen before the insert
    with (
        patch.object(prompt_voting, "_remove_vote", AsyncMock(return_value=False)),
        pytest.raises(VoteConflictError),
    ):
        await prompt_voting.toggle_vote(
            db_session, prompt.slug, voter.id, VoteDirection.UPVOTE,
        )


async def test__toggle_vote__unknown_voter_is_not_a_conflict(
    db_session: AsyncSession, prompt: Prompt,
) -> None:
    """Foreign key failures propagate instead of being reported as duplicate votes."""
    with pytest.raises(IntegrityError):
        await prompt_voting.toggle_vote(
            db_session, prompt.slug, uuid4(), VoteDirection.UPVOTE,
        )
