"""
Notification model matching the DDL schema
"""

from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


class Notification(Base):
    """Notification model"""
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    type = Column(
        sa.Enum('reaction', 'comment', 'reply', 'follow', 'winner', 'contest', 'system', name='notification_type'),
        nullable=False
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    actor_id = Column(UUID(as_uuid=True), nullable=True)
    contest_id = Column(UUID(as_uuid=True), nullable=True)
    entry_id = Column(UUID(as_uuid=True), nullable=True)
    comment_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "id": str(self.id),
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "contest_id": str(self.contest_id) if self.contest_id else None,
            "entry_id": str(self.entry_id) if self.entry_id else None,
            "comment_id": str(self.comment_id) if self.comment_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
