"""
Notification repository
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc

from afc.models.notification import Notification


async def create_notification(
    session: AsyncSession,
    user_id: UUID,
    type: str,
    title: str,
    message: str,
    actor_id: Optional[UUID] = None,
    contest_id: Optional[UUID] = None,
    entry_id: Optional[UUID] = None,
    comment_id: Optional[UUID] = None
) -> Notification:
    """
    Queue a notification for a user. Does not commit.
    
    Args:
        session: Database session
        user_id: Recipient UUID
        type: Notification type
        title: Short title
        message: Body text
        actor_id: User who caused the notification
        contest_id: Related contest
        entry_id: Related entry
        comment_id: Related comment
    
    Returns:
        Created Notification instance
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        actor_id=actor_id,
        contest_id=contest_id,
        entry_id=entry_id,
        comment_id=comment_id
    )
    session.add(notification)
    return notification


async def get_user_notifications(
    session: AsyncSession,
    user_id: UUID,
    notification_type: Optional[str] = None,
    limit: int = 50
) -> List[Notification]:
    """Get a user's notifications, newest first."""
    query = select(Notification).where(Notification.user_id == user_id)
    if notification_type:
        query = query.where(Notification.type == notification_type)
    result = await session.execute(query.order_by(desc(Notification.created_at)).limit(limit))
    return result.scalars().all()


async def mark_notification_read(session: AsyncSession, notification_id: UUID, user_id: UUID) -> bool:
    """
    Mark one of a user's notifications as read.
    
    Returns:
        True if the notification exists and belongs to the user
    """
    result = await session.execute(
        update(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.user_id == user_id)
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def mark_all_read(session: AsyncSession, user_id: UUID) -> int:
    """Mark every unread notification of a user as read; returns how many changed."""
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
