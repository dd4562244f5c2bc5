"""
Integration tests for the auto-finalization sweep
"""

from unittest.mock import patch

import pytest

from afc.core.errors import PartialWriteFailure
from afc.services import finalization
from afc.services.sweep import sweep_ended_contests
from tests.fixtures.database import create_test_contest, create_test_entry

pytestmark = pytest.mark.integration


class TestSweep:

    @pytest.mark.asyncio
    async def test_finalizes_only_ended_contests(self, db_session, session_factory, test_user):
        ended = await create_test_contest(db_session, status="ended", title="Ended")
        active = await create_test_contest(db_session, status="active", title="Active")
        upcoming = await create_test_contest(db_session, status="upcoming", title="Upcoming")
        await create_test_entry(db_session, ended, test_user, reactions_count=4)

        outcomes = await sweep_ended_contests(session_factory)

        assert [o["contest_id"] for o in outcomes] == [str(ended.id)]
        assert outcomes[0]["finalized"] is True
        assert outcomes[0]["message"] == "1 winner(s) selected"

        for contest in (ended, active, upcoming):
            await db_session.refresh(contest)
        assert ended.finalized_at is not None
        assert active.finalized_at is None
        assert upcoming.finalized_at is None

        await db_session.refresh(test_user)
        assert test_user.points_balance == 2

    @pytest.mark.asyncio
    async def test_second_sweep_finds_nothing(self, db_session, session_factory):
        await create_test_contest(db_session, status="ended")

        assert len(await sweep_ended_contests(session_factory)) == 1
        assert await sweep_ended_contests(session_factory) == []

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_sweep(self, db_session, session_factory):
        broken = await create_test_contest(db_session, status="ended", title="Broken")
        healthy = await create_test_contest(db_session, status="ended", title="Healthy")

        real_finalize = finalization.finalize_contest

        async def flaky_finalize(session, contest_id, **kwargs):
            if contest_id == broken.id:
                raise PartialWriteFailure(f"Finalization of contest {contest_id} failed and was rolled back")
            return await real_finalize(session, contest_id, **kwargs)

        with patch("afc.services.sweep.finalize_contest", flaky_finalize):
            outcomes = await sweep_ended_contests(session_factory)

        by_title = {o["contest_title"]: o for o in outcomes}
        assert by_title["Broken"]["finalized"] is False
        assert "rolled back" in by_title["Broken"]["message"]
        assert by_title["Healthy"]["finalized"] is True

        await db_session.refresh(broken)
        await db_session.refresh(healthy)
        assert broken.finalized_at is None
        assert healthy.finalized_at is not None

        # The broken contest is picked up again by the next sweep
        retry = await sweep_ended_contests(session_factory)
        assert [o["contest_id"] for o in retry] == [str(broken.id)]
