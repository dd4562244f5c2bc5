"""
Integration tests for contest finalization
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from afc.core.errors import NotEligible, NotFound, PartialWriteFailure
from afc.models.audit_log import AuditLog
from afc.models.contest_winner import ContestWinner
from afc.models.notification import Notification
from afc.models.transaction import Transaction
from afc.models.xp_history import XpHistory
from afc.services.finalization import finalize_contest, get_finalization_result
from tests.fixtures.database import (
    count_rows, create_test_contest, create_test_entry, create_test_user
)

pytestmark = pytest.mark.integration


async def _make_users(db_session, count):
    return [await create_test_user(db_session, f"creator{index}") for index in range(count)]


class TestFinalizationScenarios:
    """Winner selection and prize credit"""

    @pytest.mark.asyncio
    async def test_no_entries(self, db_session):
        contest = await create_test_contest(db_session)

        result = await finalize_contest(db_session, contest.id)

        assert result["success"] is True
        assert result["status"] == "finalized"
        assert result["winners"] == []
        assert result["message"] == "no winners"

        await db_session.refresh(contest)
        assert contest.finalized_at is not None
        assert contest.prize_pool_distributed is True
        assert await count_rows(db_session, ContestWinner, ContestWinner.contest_id == contest.id) == 0

    @pytest.mark.asyncio
    async def test_single_entry(self, db_session, test_user):
        contest = await create_test_contest(db_session)
        entry = await create_test_entry(db_session, contest, test_user, reactions_count=5)

        result = await finalize_contest(db_session, contest.id)

        assert len(result["winners"]) == 1
        winner = result["winners"][0]
        assert winner["entry_id"] == str(entry.id)
        assert winner["placement"] == 1
        assert winner["prize_amount"] == 2
        assert result["total_prize_pool"] == 5

        await db_session.refresh(test_user)
        assert test_user.points_balance == 2
        assert test_user.wins_count == 1
        assert test_user.xp == 500
        assert test_user.level == 3

        await db_session.refresh(contest)
        assert contest.winner_1st_entry_id == entry.id
        assert contest.winner_2nd_entry_id is None

    @pytest.mark.asyncio
    async def test_three_winners_prizes(self, db_session):
        contest = await create_test_contest(db_session)
        users = await _make_users(db_session, 4)
        for user, reactions in zip(users, [4, 10, 1, 6]):
            await create_test_entry(db_session, contest, user, reactions_count=reactions)

        result = await finalize_contest(db_session, contest.id)

        assert [w["reactions_count"] for w in result["winners"]] == [10, 6, 4]
        assert [w["prize_amount"] for w in result["winners"]] == [10, 4, 2]
        assert result["total_prize_pool"] == 20
        assert result["total_prizes"] == 16

        balances = []
        for user in users:
            await db_session.refresh(user)
            balances.append(user.points_balance)
        assert balances == [2, 10, 0, 4]

        prize_rows = (await db_session.execute(
            select(Transaction).where(Transaction.related_id == contest.id)
        )).scalars().all()
        assert sorted(tx.points for tx in prize_rows) == [2, 4, 10]
        assert all(tx.tx_type == "prize" for tx in prize_rows)
        assert await count_rows(db_session, XpHistory, XpHistory.reference_id == contest.id) == 3
        assert await count_rows(db_session, Notification, Notification.type == "winner") == 3

    @pytest.mark.asyncio
    async def test_only_approved_entries_rank(self, db_session):
        contest = await create_test_contest(db_session)
        approved_user, pending_user, rejected_user = await _make_users(db_session, 3)
        approved = await create_test_entry(db_session, contest, approved_user, reactions_count=1)
        await create_test_entry(db_session, contest, pending_user, status="pending", reactions_count=50)
        await create_test_entry(db_session, contest, rejected_user, status="rejected", reactions_count=40)

        result = await finalize_contest(db_session, contest.id)

        assert [w["entry_id"] for w in result["winners"]] == [str(approved.id)]

    @pytest.mark.asyncio
    async def test_ties_go_to_earlier_submission(self, db_session):
        contest = await create_test_contest(db_session)
        early_user, late_user = await _make_users(db_session, 2)
        base = datetime.now(timezone.utc) - timedelta(days=5)
        late = await create_test_entry(db_session, contest, late_user, reactions_count=7,
                                       created_at=base + timedelta(hours=2))
        early = await create_test_entry(db_session, contest, early_user, reactions_count=7,
                                        created_at=base)

        result = await finalize_contest(db_session, contest.id)

        assert [w["entry_id"] for w in result["winners"]] == [str(early.id), str(late.id)]

    @pytest.mark.asyncio
    async def test_custom_xp_policy(self, db_session, test_user):
        contest = await create_test_contest(db_session)
        await create_test_entry(db_session, contest, test_user, reactions_count=3)

        await finalize_contest(db_session, contest.id, xp_policy=lambda placement: 42)

        await db_session.refresh(test_user)
        assert test_user.xp == 42

    @pytest.mark.asyncio
    async def test_admin_finalization_is_audited(self, db_session, test_user, admin_user):
        contest = await create_test_contest(db_session)
        await create_test_entry(db_session, contest, test_user, reactions_count=3)

        await finalize_contest(db_session, contest.id, admin_id=admin_user.id)

        logs = (await db_session.execute(
            select(AuditLog).where(AuditLog.action == "contest_finalization")
        )).scalars().all()
        assert len(logs) == 1
        assert logs[0].admin_id == admin_user.id
        assert logs[0].details["contest_id"] == str(contest.id)


class TestFinalizationGuards:

    @pytest.mark.asyncio
    async def test_missing_contest(self, db_session):
        from uuid import uuid4
        with pytest.raises(NotFound):
            await finalize_contest(db_session, uuid4())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["upcoming", "active"])
    async def test_not_ended(self, db_session, status):
        contest = await create_test_contest(db_session, status=status)

        with pytest.raises(NotEligible):
            await finalize_contest(db_session, contest.id)

        await db_session.refresh(contest)
        assert contest.finalized_at is None

    @pytest.mark.asyncio
    async def test_unfinalized_result_reports_no_winners(self, db_session, test_user):
        contest = await create_test_contest(db_session)
        await create_test_entry(db_session, contest, test_user, reactions_count=3)

        result = await get_finalization_result(db_session, contest.id)

        assert result["success"] is False
        assert result["status"] == "ended"
        assert result["winners"] == []


class TestFinalizationIdempotency:
    """Finalizing twice never credits anyone twice"""

    @pytest.mark.asyncio
    async def test_second_call_returns_stored_result(self, db_session, test_user):
        contest = await create_test_contest(db_session)
        await create_test_entry(db_session, contest, test_user, reactions_count=8)

        first = await finalize_contest(db_session, contest.id)
        second = await finalize_contest(db_session, contest.id)

        assert first["status"] == "finalized"
        assert second["status"] == "already_finalized"
        assert second["winners"] == first["winners"]
        assert second["finalized_at"] == first["finalized_at"]

        await db_session.refresh(test_user)
        assert test_user.points_balance == 4
        assert test_user.wins_count == 1
        assert await count_rows(db_session, Transaction, Transaction.user_id == test_user.id) == 1

    @pytest.mark.asyncio
    async def test_losing_the_race_rolls_back_and_reports_winner(self, db_session, test_user):
        """
        A second finalizer that read the contest before the first committed
        loses the finalized_at compare-and-set and must leave no trace.
        """
        contest = await create_test_contest(db_session)
        await create_test_entry(db_session, contest, test_user, reactions_count=6)
        first = await finalize_contest(db_session, contest.id)

        stale_view = SimpleNamespace(
            id=contest.id,
            title=contest.title,
            start_date=contest.start_date,
            end_date=contest.end_date,
            finalized_at=None
        )
        with patch("afc.services.finalization.lock_contest", AsyncMock(return_value=stale_view)):
            second = await finalize_contest(db_session, contest.id)

        assert second["success"] is True
        assert second["status"] == "already_finalized"
        assert second["winners"] == first["winners"]

        await db_session.refresh(test_user)
        assert test_user.points_balance == 3
        assert test_user.wins_count == 1
        assert await count_rows(db_session, ContestWinner, ContestWinner.contest_id == contest.id) == 1


class TestFinalizationFailure:
    """A failed run leaves the contest unfinalized and retryable"""

    @pytest.mark.asyncio
    async def test_failure_rolls_back_everything(self, db_session):
        contest = await create_test_contest(db_session)
        users = await _make_users(db_session, 3)
        for user, reactions in zip(users, [10, 6, 4]):
            await create_test_entry(db_session, contest, user, reactions_count=reactions)

        failing = AsyncMock(side_effect=RuntimeError("notification store unavailable"))
        with patch("afc.services.finalization.create_notification", failing):
            with pytest.raises(PartialWriteFailure):
                await finalize_contest(db_session, contest.id)

        await db_session.refresh(contest)
        assert contest.finalized_at is None
        assert contest.prize_pool_distributed is False
        assert await count_rows(db_session, ContestWinner, ContestWinner.contest_id == contest.id) == 0
        for user in users:
            await db_session.refresh(user)
            assert user.points_balance == 0
            assert user.wins_count == 0

        retry = await finalize_contest(db_session, contest.id)

        assert retry["status"] == "finalized"
        assert [w["prize_amount"] for w in retry["winners"]] == [10, 4, 2]
        await db_session.refresh(users[0])
        assert users[0].points_balance == 10
        assert users[0].wins_count == 1

    @pytest.mark.asyncio
    async def test_stale_winner_rows_are_replaced(self, db_session, test_user, other_user):
        contest = await create_test_contest(db_session)
        loser = await create_test_entry(db_session, contest, other_user, reactions_count=1)
        winner = await create_test_entry(db_session, contest, test_user, reactions_count=9)
        db_session.add(ContestWinner(
            contest_id=contest.id,
            entry_id=loser.id,
            user_id=other_user.id,
            placement=1,
            reactions_count=1,
            prize_amount=0
        ))
        await db_session.commit()

        result = await finalize_contest(db_session, contest.id)

        assert [w["entry_id"] for w in result["winners"]] == [str(winner.id), str(loser.id)]
        rows = (await db_session.execute(
            select(ContestWinner)
            .where(ContestWinner.contest_id == contest.id)
            .order_by(ContestWinner.placement)
            .execution_options(populate_existing=True)
        )).scalars().all()
        assert [row.entry_id for row in rows] == [winner.id, loser.id]
