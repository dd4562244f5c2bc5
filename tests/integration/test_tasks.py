"""
Celery task tests

Tasks run eagerly in the testing environment. Each one calls asyncio.run()
itself, so these tests are synchronous and prepare data in their own loop.
"""

import asyncio

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from afc.core.config import settings
from afc.db.base import Base
from afc.db.session import task_session_factory
from afc.tasks.contest_tasks import auto_finalize_ended_contests_task, finalize_contest_task
from tests.fixtures.database import create_test_contest, create_test_entry, create_test_user

pytestmark = pytest.mark.integration


@pytest.fixture
def worker_database(file_database_url, monkeypatch):
    """Point the task engine at a file database with the schema in place."""
    monkeypatch.setattr(settings, "database_url", file_database_url)

    async def _create_schema():
        engine = create_async_engine(file_database_url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create_schema())
    return file_database_url


def _seed(database_url, contest_status="ended", reactions_count=5):
    async def _create():
        engine = create_async_engine(database_url)
        async with async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)() as session:
            contest = await create_test_contest(session, status=contest_status)
            creator = await create_test_user(session, f"creator-{contest.id.hex[:8]}")
            await create_test_entry(session, contest, creator, reactions_count=reactions_count)
        await engine.dispose()
        return contest.id

    return asyncio.run(_create())


class TestTaskSessions:

    def test_sessions_work_across_event_loops(self, worker_database):
        async def _select_one():
            async with task_session_factory() as session_factory:
                async with session_factory() as session:
                    return (await session.execute(text("SELECT 1"))).scalar_one()

        assert asyncio.run(_select_one()) == 1
        assert asyncio.run(_select_one()) == 1


class TestContestTasks:

    def test_sweep_task_runs_repeatedly_in_one_process(self, worker_database):
        first_contest = _seed(worker_database)

        first = auto_finalize_ended_contests_task.apply().get()
        second_contest = _seed(worker_database)
        second = auto_finalize_ended_contests_task.apply().get()
        third = auto_finalize_ended_contests_task.apply().get()

        assert [(o["contest_id"], o["finalized"]) for o in first] == [(str(first_contest), True)]
        assert [(o["contest_id"], o["finalized"]) for o in second] == [(str(second_contest), True)]
        assert third == []

    def test_finalize_task(self, worker_database):
        contest_id = _seed(worker_database)

        result = finalize_contest_task.apply(args=[str(contest_id)]).get()
        again = finalize_contest_task.apply(args=[str(contest_id)]).get()

        assert result["status"] == "finalized"
        assert result["winners"][0]["prize_amount"] == 2
        assert again["status"] == "already_finalized"

    def test_finalize_task_does_not_retry_ineligible_contest(self, worker_database):
        contest_id = _seed(worker_database, contest_status="active")

        result = finalize_contest_task.apply(args=[str(contest_id)]).get()

        assert result["success"] is False
        assert "only ended contests" in result["message"]
