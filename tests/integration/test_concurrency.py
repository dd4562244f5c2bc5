"""
Concurrency tests on a file-backed database

Each service call runs in its own session and connection, the way two API
workers or a worker and the beat sweep would.
"""

import asyncio
from unittest.mock import patch

import pytest

from afc.core.errors import InvalidOperation
from afc.models.audit_log import AuditLog
from afc.models.contest import Contest
from afc.models.contest_winner import ContestWinner
from afc.models.transaction import Transaction
from afc.models.user import User
from afc.repos import reaction_repo
from afc.repos.contest_repo import lock_contest
from afc.repos.entry_repo import get_entry_by_id
from afc.services.entries import approve_entry, reject_entry
from afc.services.finalization import finalize_contest
from afc.services.reactions import clear_reaction, set_reaction
from tests.fixtures.concurrency import hold_until_all_arrive
from tests.fixtures.database import (
    count_rows, create_test_contest, create_test_entry, create_test_user
)

pytestmark = pytest.mark.integration


async def _finalize(session_factory, contest_id):
    async with session_factory() as session:
        return await finalize_contest(session, contest_id)


async def _approve(session_factory, entry_id, admin_id):
    async with session_factory() as session:
        return await approve_entry(session, entry_id, admin_id)


async def _reject(session_factory, entry_id, admin_id):
    async with session_factory() as session:
        return await reject_entry(session, entry_id, admin_id, "Blurry photo")


class TestConcurrentFinalization:

    @pytest.mark.asyncio
    async def test_simultaneous_finalize_credits_once(self, file_session_factory):
        async with file_session_factory() as session:
            contest = await create_test_contest(session)
            painter = await create_test_user(session, "painter")
            sculptor = await create_test_user(session, "sculptor")
            await create_test_entry(session, contest, painter, reactions_count=10)
            await create_test_entry(session, contest, sculptor, reactions_count=6)

        # Both finalizers see the contest unfinalized before either writes
        with patch(
            "afc.services.finalization.lock_contest",
            hold_until_all_arrive(lock_contest)
        ):
            results = await asyncio.gather(
                _finalize(file_session_factory, contest.id),
                _finalize(file_session_factory, contest.id),
            )

        assert sorted(r["status"] for r in results) == ["already_finalized", "finalized"]
        assert results[0]["winners"] == results[1]["winners"]

        async with file_session_factory() as session:
            assert await count_rows(session, ContestWinner, ContestWinner.contest_id == contest.id) == 2
            assert await count_rows(session, Transaction) == 2
            for user_id, prize in ((painter.id, 8), (sculptor.id, 3)):
                user = await session.get(User, user_id)
                assert user.wins_count == 1
                assert user.points_balance == prize
            stored = await session.get(Contest, contest.id)
            assert stored.finalized_at is not None


class TestConcurrentModeration:

    @pytest.mark.asyncio
    async def test_simultaneous_approvals_count_once(self, file_session_factory):
        async with file_session_factory() as session:
            contest = await create_test_contest(session, status="active")
            author = await create_test_user(session, "author")
            admin = await create_test_user(session, "curator", role="admin")
            entry = await create_test_entry(session, contest, author, status="pending")

        with patch(
            "afc.services.entries.get_entry_by_id",
            hold_until_all_arrive(get_entry_by_id)
        ):
            results = await asyncio.gather(
                _approve(file_session_factory, entry.id, admin.id),
                _approve(file_session_factory, entry.id, admin.id),
                return_exceptions=True
            )

        assert sum(isinstance(r, dict) for r in results) == 1
        assert sum(isinstance(r, InvalidOperation) for r in results) == 1

        async with file_session_factory() as session:
            assert (await session.get(Contest, contest.id)).entries_count == 1
            assert (await session.get(User, author.id)).entries_count == 1
            assert await count_rows(session, AuditLog, AuditLog.action == "entry_approved") == 1

    @pytest.mark.asyncio
    async def test_approve_racing_reject_has_one_outcome(self, file_session_factory):
        async with file_session_factory() as session:
            contest = await create_test_contest(session, status="active")
            author = await create_test_user(session, "author")
            admin = await create_test_user(session, "curator", role="admin")
            entry = await create_test_entry(session, contest, author, status="pending")

        with patch(
            "afc.services.entries.get_entry_by_id",
            hold_until_all_arrive(get_entry_by_id)
        ):
            approved, rejected = await asyncio.gather(
                _approve(file_session_factory, entry.id, admin.id),
                _reject(file_session_factory, entry.id, admin.id),
                return_exceptions=True
            )

        winner = approved if isinstance(approved, dict) else rejected
        assert isinstance(approved, InvalidOperation) or isinstance(rejected, InvalidOperation)

        async with file_session_factory() as session:
            stored = await get_entry_by_id(session, entry.id)
            assert stored.status == winner["status"]
            expected = 1 if stored.status == "approved" else 0
            assert (await session.get(Contest, contest.id)).entries_count == expected


class TestConcurrentReactions:

    @pytest.mark.asyncio
    async def test_clear_between_read_and_update_keeps_new_type(self, file_session_factory):
        async with file_session_factory() as session:
            contest = await create_test_contest(session, status="active")
            author = await create_test_user(session, "author")
            fan = await create_test_user(session, "fan")
            entry = await create_test_entry(session, contest, author)
        async with file_session_factory() as session:
            await set_reaction(session, entry.id, fan.id, "like", fan.id)

        async def read_then_cleared(session, entry_id, user_id):
            existing = await reaction_repo.get_reaction(session, entry_id, user_id)
            async with file_session_factory() as other:
                await clear_reaction(other, entry_id, user_id, user_id)
            return existing

        with patch("afc.services.reactions.get_reaction", read_then_cleared):
            async with file_session_factory() as session:
                result = await set_reaction(session, entry.id, fan.id, "fire", fan.id)

        assert result["action"] == "created"
        assert result["reactions_count"] == 1

        async with file_session_factory() as session:
            stored = await reaction_repo.get_reaction(session, entry.id, fan.id)
            assert stored.reaction_type == "fire"
            assert await reaction_repo.count_reactions(session, entry.id) == 1
            assert (await get_entry_by_id(session, entry.id)).reactions_count == 1

    @pytest.mark.asyncio
    async def test_simultaneous_first_reactions_count_once(self, file_session_factory):
        async with file_session_factory() as session:
            contest = await create_test_contest(session, status="active")
            author = await create_test_user(session, "author")
            fan = await create_test_user(session, "fan")
            entry = await create_test_entry(session, contest, author)

        async def _react(reaction_type):
            async with file_session_factory() as session:
                return await set_reaction(session, entry.id, fan.id, reaction_type, fan.id)

        with patch(
            "afc.services.reactions.get_reaction",
            hold_until_all_arrive(reaction_repo.get_reaction)
        ):
            results = await asyncio.gather(_react("like"), _react("fire"))

        assert sorted(r["action"] for r in results) == ["created", "updated"]

        async with file_session_factory() as session:
            assert await reaction_repo.count_reactions(session, entry.id) == 1
            assert (await get_entry_by_id(session, entry.id)).reactions_count == 1
