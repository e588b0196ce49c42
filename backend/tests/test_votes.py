"""Tests for vote totals, the caller's vote status and voting."""

import pytest
import pytest_asyncio
from conftest import add_post, add_votes, session_for

from app.core.exceptions import InputValidationError, NotFoundError, UnauthenticatedError
from app.models.user import User
from app.modules.forum.service import ForumService, VoteSummary


@pytest_asyncio.fixture
async def voters(db_session, users):
    """Alice, bob and carol, plus a post by alice."""
    alice, bob = users
    carol = User(email="carol@example.com", username="carol")
    db_session.add(carol)
    await db_session.flush()
    post = await add_post(db_session, alice.id, "python", minutes=0)
    return alice, bob, carol, post


class TestVoteAggregation:
    async def test_total_is_sum_of_values(self, db_session, voters):
        alice, bob, carol, post = voters
        await add_votes(db_session, post.id, {alice.id: 1, bob.id: 1, carol.id: -1})

        assert await ForumService(db_session).get_vote_total(post.id) == 1

    async def test_total_without_votes_is_zero(self, db_session, voters):
        *_, post = voters

        assert await ForumService(db_session).get_vote_total(post.id) == 0

    async def test_anonymous_status_is_zero(self, db_session, voters):
        alice, bob, carol, post = voters
        await add_votes(db_session, post.id, {alice.id: 1, bob.id: 1, carol.id: -1})
        forum = ForumService(db_session)

        assert await forum.get_vote_total(post.id) == 1
        assert await forum.get_vote_status(post.id) == 0

    async def test_status_is_own_vote(self, db_session, voters):
        alice, bob, carol, post = voters
        await add_votes(db_session, post.id, {alice.id: 1, carol.id: -1})

        assert await ForumService(db_session, session_for(alice)).get_vote_status(post.id) == 1
        assert await ForumService(db_session, session_for(carol)).get_vote_status(post.id) == -1
        assert await ForumService(db_session, session_for(bob)).get_vote_status(post.id) == 0

    async def test_summaries_match_per_post_queries(self, db_session, voters):
        alice, bob, carol, post = voters
        other = await add_post(db_session, bob.id, "rust", minutes=1)
        quiet = await add_post(db_session, bob.id, "rust", minutes=2)
        await add_votes(db_session, post.id, {alice.id: 1, bob.id: -1, carol.id: -1})
        await add_votes(db_session, other.id, {bob.id: 1, carol.id: 1})
        forum = ForumService(db_session, session_for(bob))

        summaries = await forum.get_vote_summaries([post.id, other.id, quiet.id])

        for post_id in (post.id, other.id, quiet.id):
            assert summaries[post_id] == VoteSummary(
                votes=await forum.get_vote_total(post_id),
                vote_status=await forum.get_vote_status(post_id),
            )
        assert summaries[post.id] == VoteSummary(votes=-1, vote_status=-1)
        assert summaries[other.id] == VoteSummary(votes=2, vote_status=1)
        assert summaries[quiet.id] == VoteSummary()

    async def test_anonymous_summaries_have_zero_status(self, db_session, voters):
        alice, bob, carol, post = voters
        await add_votes(db_session, post.id, {alice.id: 1, bob.id: 1, carol.id: -1})

        summaries = await ForumService(db_session).get_vote_summaries([post.id])

        assert summaries[post.id] == VoteSummary(votes=1, vote_status=0)

    async def test_summaries_of_nothing(self, db_session):
        assert await ForumService(db_session).get_vote_summaries([]) == {}


class TestVoting:
    async def test_vote_requires_session(self, db_session, voters):
        *_, post = voters

        with pytest.raises(UnauthenticatedError):
            await ForumService(db_session).vote(post.id, 1)

    async def test_vote_value_must_be_one_or_minus_one(self, db_session, voters):
        alice, *_, post = voters

        with pytest.raises(InputValidationError):
            await ForumService(db_session, session_for(alice)).vote(post.id, 2)

    async def test_vote_on_missing_post(self, db_session, voters):
        alice, *_ = voters

        with pytest.raises(NotFoundError):
            await ForumService(db_session, session_for(alice)).vote(999, 1)

    async def test_upvote_then_switch_then_withdraw(self, db_session, voters):
        alice, bob, _, post = voters
        await add_votes(db_session, post.id, {bob.id: 1})
        forum = ForumService(db_session, session_for(alice))

        assert await forum.vote(post.id, 1) == VoteSummary(votes=2, vote_status=1)
        assert await forum.vote(post.id, -1) == VoteSummary(votes=0, vote_status=-1)
        assert await forum.vote(post.id, -1) == VoteSummary(votes=1, vote_status=0)
        assert await forum.get_vote_status(post.id) == 0
