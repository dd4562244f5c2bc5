"""
Follow graph with follower/following counters
"""

import logging
from typing import Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.errors import InvalidOperation, NotAuthorized, NotFound
from afc.models.enums import NotificationType
from afc.models.user import User
from afc.repos.follow_repo import delete_follow, insert_follow
from afc.repos.notification_repo import create_notification
from afc.repos.user_repo import get_user_by_id
from afc.services.counters import increment

logger = logging.getLogger(__name__)


async def _check_pair(session: AsyncSession, follower_id: UUID, following_id: UUID, actor_id: UUID) -> None:
    if follower_id != actor_id:
        raise NotAuthorized("Cannot change follows on behalf of another user")
    if follower_id == following_id:
        raise InvalidOperation("Users cannot follow themselves")
    if await get_user_by_id(session, following_id) is None:
        raise NotFound(f"User {following_id} not found")


async def follow_user(session: AsyncSession, follower_id: UUID, following_id: UUID, actor_id: UUID) -> Dict:
    """Follow a user; following twice is a no-op."""
    try:
        await _check_pair(session, follower_id, following_id, actor_id)
        created = await insert_follow(session, follower_id, following_id)
        if created:
            await increment(session, User.followers_count, following_id, 1)
            await increment(session, User.following_count, follower_id, 1)
            await create_notification(
                session,
                user_id=following_id,
                type=NotificationType.FOLLOW.value,
                title="New follower",
                message="Someone started following you",
                actor_id=follower_id
            )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    if created:
        logger.info(f"User {follower_id} followed {following_id}")
    return {"following_id": str(following_id), "action": "followed" if created else "unchanged"}


async def unfollow_user(session: AsyncSession, follower_id: UUID, following_id: UUID, actor_id: UUID) -> Dict:
    """Unfollow a user; no-op if not following."""
    try:
        await _check_pair(session, follower_id, following_id, actor_id)
        removed = await delete_follow(session, follower_id, following_id)
        if removed:
            await increment(session, User.followers_count, following_id, -1)
            await increment(session, User.following_count, follower_id, -1)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return {"following_id": str(following_id), "action": "unfollowed" if removed else "unchanged"}
