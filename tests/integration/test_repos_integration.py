"""
Integration tests for user and contest repository operations
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from afc.repos.contest_repo import (
    get_contest_by_id,
    get_contests,
    get_ended_unfinalized_contests,
    mark_contest_finalized
)
from afc.repos.user_repo import create_user, get_user_by_id, get_user_by_username
from tests.fixtures.database import create_test_contest

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_user_creation_and_retrieval(db_session):
    """Test user creation and retrieval operations."""
    user = await create_user(session=db_session, username="painter", display_name="Painter")

    assert user.id is not None
    assert user.role == "user"
    assert user.level == 1
    assert user.points_balance == 0

    assert (await get_user_by_id(db_session, user.id)).username == "painter"
    assert (await get_user_by_username(db_session, "painter")).id == user.id
    assert await get_user_by_id(db_session, uuid4()) is None


@pytest.mark.asyncio
async def test_get_contests_by_category(db_session):
    await create_test_contest(db_session, category="art", title="Ink")
    await create_test_contest(db_session, category="music", title="Beats")

    contests = await get_contests(db_session, category="music")

    assert [c.title for c in contests] == ["Beats"]


@pytest.mark.asyncio
async def test_ended_unfinalized_contests(db_session):
    ended = await create_test_contest(db_session, status="ended")
    await create_test_contest(db_session, status="active")
    done = await create_test_contest(db_session, status="ended")
    await mark_contest_finalized(db_session, done.id, datetime.now(timezone.utc))
    await db_session.commit()

    pending = await get_ended_unfinalized_contests(db_session, datetime.now(timezone.utc))

    assert [c.id for c in pending] == [ended.id]


@pytest.mark.asyncio
async def test_mark_finalized_is_compare_and_set(db_session):
    contest = await create_test_contest(db_session, status="ended")
    first_time = datetime.now(timezone.utc)

    assert await mark_contest_finalized(db_session, contest.id, first_time) is True
    assert await mark_contest_finalized(db_session, contest.id, first_time + timedelta(minutes=1)) is False
    await db_session.commit()

    stored = await get_contest_by_id(db_session, contest.id)
    assert stored.finalized_at.replace(tzinfo=timezone.utc) == first_time
