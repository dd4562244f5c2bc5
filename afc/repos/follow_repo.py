"""
Follow repository
"""

from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete

from afc.db.upsert import insert_if_absent
from afc.models.follow import Follow


async def insert_follow(session: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
    """Insert a follow edge; returns False if it already existed."""
    follow_id = await insert_if_absent(
        session,
        Follow,
        ["follower_id", "following_id"],
        follower_id=follower_id,
        following_id=following_id
    )
    return follow_id is not None


async def delete_follow(session: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
    """Delete a follow edge; returns False if there was none."""
    result = await session.execute(
        delete(Follow)
        .where(Follow.follower_id == follower_id)
        .where(Follow.following_id == following_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
