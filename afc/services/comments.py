"""
Comments and comment likes on approved entries
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.config import settings
from afc.core.errors import InvalidOperation, NotAuthorized, NotFound
from afc.models.comment import Comment
from afc.models.entry import Entry
from afc.models.enums import NotificationType
from afc.repos.comment_repo import delete_comment_like, get_comment_by_id, insert_comment_like
from afc.repos.entry_repo import get_approved_entry
from afc.repos.notification_repo import create_notification
from afc.services.counters import increment

logger = logging.getLogger(__name__)


async def add_comment(
    session: AsyncSession,
    entry_id: UUID,
    user_id: UUID,
    actor_id: UUID,
    content: str,
    parent_id: Optional[UUID] = None
) -> Comment:
    """
    Add a comment (or a reply when parent_id is set) to an approved entry.

    Raises:
        NotAuthorized: actor is not the commenting user
        NotFound: entry is missing or not approved, or parent is not on this entry
        InvalidOperation: empty or oversized content
    """
    if user_id != actor_id:
        raise NotAuthorized("Cannot comment on behalf of another user")

    content = (content or "").strip()
    if not content:
        raise InvalidOperation("Comment cannot be empty")
    if len(content) > settings.comment_max_length:
        raise InvalidOperation(f"Comment exceeds {settings.comment_max_length} characters")

    try:
        entry = await get_approved_entry(session, entry_id)
        if entry is None:
            raise NotFound(f"Entry {entry_id} not found")

        parent = None
        if parent_id is not None:
            parent = await get_comment_by_id(session, parent_id)
            if parent is None or parent.entry_id != entry_id:
                raise NotFound(f"Comment {parent_id} not found on entry {entry_id}")

        comment = Comment(entry_id=entry_id, user_id=user_id, parent_id=parent_id, content=content)
        session.add(comment)
        await session.flush()
        await increment(session, Entry.comments_count, entry_id, 1)

        recipient = parent.user_id if parent is not None else entry.user_id
        if recipient != user_id:
            is_reply = parent is not None
            await create_notification(
                session,
                user_id=recipient,
                type=(NotificationType.REPLY if is_reply else NotificationType.COMMENT).value,
                title="New reply" if is_reply else "New comment",
                message=content[:140],
                actor_id=user_id,
                contest_id=entry.contest_id,
                entry_id=entry_id,
                comment_id=comment.id
            )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(comment)
    logger.info(f"User {user_id} commented on entry {entry_id}")
    return comment


async def like_comment(session: AsyncSession, comment_id: UUID, user_id: UUID, actor_id: UUID) -> Dict:
    """Like a comment; liking twice is a no-op."""
    if user_id != actor_id:
        raise NotAuthorized("Cannot like on behalf of another user")

    try:
        comment = await get_comment_by_id(session, comment_id)
        if comment is None:
            raise NotFound(f"Comment {comment_id} not found")

        if await insert_comment_like(session, comment_id, user_id):
            likes = await increment(session, Comment.likes_count, comment_id, 1)
            action = "liked"
        else:
            likes = comment.likes_count
            action = "unchanged"
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return {"comment_id": str(comment_id), "action": action, "likes_count": likes}


async def unlike_comment(session: AsyncSession, comment_id: UUID, user_id: UUID, actor_id: UUID) -> Dict:
    """Remove a like; no-op if the user had not liked the comment."""
    if user_id != actor_id:
        raise NotAuthorized("Cannot unlike on behalf of another user")

    try:
        comment = await get_comment_by_id(session, comment_id)
        if comment is None:
            raise NotFound(f"Comment {comment_id} not found")

        if await delete_comment_like(session, comment_id, user_id):
            likes = await increment(session, Comment.likes_count, comment_id, -1)
            action = "unliked"
        else:
            likes = comment.likes_count
            action = "unchanged"
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return {"comment_id": str(comment_id), "action": action, "likes_count": likes}
