"""
Comment repository
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from afc.db.upsert import insert_if_absent
from afc.models.comment import Comment, CommentLike


async def get_comment_by_id(session: AsyncSession, comment_id: UUID) -> Optional[Comment]:
    """
    Get comment by ID.
    
    Args:
        session: Database session
        comment_id: Comment UUID
    
    Returns:
        Comment instance or None if not found
    """
    result = await session.execute(
        select(Comment)
        .where(Comment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_entry_comments(
    session: AsyncSession,
    entry_id: UUID,
    limit: int = 100,
    offset: int = 0
) -> List[Comment]:
    """
    Get comments on an entry, oldest first.
    
    Args:
        session: Database session
        entry_id: Entry UUID
        limit: Maximum number of comments to return
        offset: Number of comments to skip
    
    Returns:
        List of Comment instances (top-level and replies)
    """
    result = await session.execute(
        select(Comment)
        .where(Comment.entry_id == entry_id)
        .order_by(Comment.created_at, Comment.id)
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


async def insert_comment_like(session: AsyncSession, comment_id: UUID, user_id: UUID) -> bool:
    """Insert a like; returns False if the user already liked the comment."""
    like_id = await insert_if_absent(
        session,
        CommentLike,
        ["comment_id", "user_id"],
        comment_id=comment_id,
        user_id=user_id
    )
    return like_id is not None


async def delete_comment_like(session: AsyncSession, comment_id: UUID, user_id: UUID) -> bool:
    """Delete a like; returns False if there was none."""
    result = await session.execute(
        delete(CommentLike)
        .where(CommentLike.comment_id == comment_id)
        .where(CommentLike.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
