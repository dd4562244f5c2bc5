"""
Integration tests for comments, comment likes and follows
"""

import pytest

from afc.core.errors import InvalidOperation, NotAuthorized, NotFound
from afc.models.notification import Notification
from afc.services.comments import add_comment, like_comment, unlike_comment
from afc.services.social import follow_user, unfollow_user
from tests.fixtures.database import count_rows, create_test_contest, create_test_entry

pytestmark = pytest.mark.integration


@pytest.fixture
async def entry(db_session, test_user):
    contest = await create_test_contest(db_session, status="active")
    return await create_test_entry(db_session, contest, test_user)


class TestComments:

    @pytest.mark.asyncio
    async def test_comment_and_reply(self, db_session, entry, test_user, other_user):
        comment = await add_comment(db_session, entry.id, other_user.id, other_user.id, "  Lovely colours  ")
        reply = await add_comment(
            db_session, entry.id, test_user.id, test_user.id, "Thank you!", parent_id=comment.id
        )

        assert comment.content == "Lovely colours"
        assert reply.parent_id == comment.id
        await db_session.refresh(entry)
        assert entry.comments_count == 2

        assert await count_rows(
            db_session, Notification, Notification.user_id == test_user.id, Notification.type == "comment"
        ) == 1
        assert await count_rows(
            db_session, Notification, Notification.user_id == other_user.id, Notification.type == "reply"
        ) == 1

    @pytest.mark.asyncio
    async def test_parent_must_belong_to_entry(self, db_session, entry, test_user, other_user):
        other_contest = await create_test_contest(db_session, status="active", title="Other")
        other_entry = await create_test_entry(db_session, other_contest, other_user)
        foreign = await add_comment(db_session, other_entry.id, test_user.id, test_user.id, "Nice")

        with pytest.raises(NotFound):
            await add_comment(db_session, entry.id, other_user.id, other_user.id, "Hi", parent_id=foreign.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "x" * 2001])
    async def test_content_length(self, db_session, entry, other_user, content):
        with pytest.raises(InvalidOperation):
            await add_comment(db_session, entry.id, other_user.id, other_user.id, content)

    @pytest.mark.asyncio
    async def test_pending_entry_is_not_commentable(self, db_session, test_user, other_user):
        contest = await create_test_contest(db_session, status="active")
        pending = await create_test_entry(db_session, contest, test_user, status="pending")

        with pytest.raises(NotFound):
            await add_comment(db_session, pending.id, other_user.id, other_user.id, "Hello")

    @pytest.mark.asyncio
    async def test_likes_are_idempotent(self, db_session, entry, test_user, other_user):
        comment = await add_comment(db_session, entry.id, other_user.id, other_user.id, "First!")

        assert (await like_comment(db_session, comment.id, test_user.id, test_user.id))["likes_count"] == 1
        again = await like_comment(db_session, comment.id, test_user.id, test_user.id)
        assert again["action"] == "unchanged"
        assert again["likes_count"] == 1

        assert (await unlike_comment(db_session, comment.id, test_user.id, test_user.id))["likes_count"] == 0
        assert (await unlike_comment(db_session, comment.id, test_user.id, test_user.id))["action"] == "unchanged"


class TestFollows:

    @pytest.mark.asyncio
    async def test_follow_and_unfollow(self, db_session, test_user, other_user):
        first = await follow_user(db_session, other_user.id, test_user.id, other_user.id)
        second = await follow_user(db_session, other_user.id, test_user.id, other_user.id)

        assert first["action"] == "followed"
        assert second["action"] == "unchanged"
        await db_session.refresh(test_user)
        await db_session.refresh(other_user)
        assert test_user.followers_count == 1
        assert other_user.following_count == 1
        assert await count_rows(db_session, Notification, Notification.type == "follow") == 1

        assert (await unfollow_user(db_session, other_user.id, test_user.id, other_user.id))["action"] == "unfollowed"
        assert (await unfollow_user(db_session, other_user.id, test_user.id, other_user.id))["action"] == "unchanged"
        await db_session.refresh(test_user)
        assert test_user.followers_count == 0

    @pytest.mark.asyncio
    async def test_no_self_follow(self, db_session, test_user):
        with pytest.raises(InvalidOperation):
            await follow_user(db_session, test_user.id, test_user.id, test_user.id)

    @pytest.mark.asyncio
    async def test_actor_must_match(self, db_session, test_user, other_user):
        with pytest.raises(NotAuthorized):
            await follow_user(db_session, other_user.id, test_user.id, test_user.id)
