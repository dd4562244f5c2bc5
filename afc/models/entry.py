"""
Contest entry model matching the DDL schema
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, Text, UniqueConstraint, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


def _utcnow():
    return datetime.now(timezone.utc)


class Entry(Base):
    """Entry model - one user's staged submission to one contest"""
    __tablename__ = "entries"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contest_id = Column(UUID(as_uuid=True), ForeignKey('contests.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    phase_1_url = Column(Text, nullable=False)
    phase_2_url = Column(Text, nullable=True)
    phase_3_url = Column(Text, nullable=True)
    phase_4_url = Column(Text, nullable=True)
    status = Column(
        sa.Enum('draft', 'pending', 'approved', 'rejected', name='entry_status'),
        nullable=False,
        default='pending'
    )
    rejection_reason = Column(Text, nullable=True)
    reactions_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    # Client-side default keeps sub-second precision for the ranking tie-break
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    # Constraints
    __table_args__ = (
        UniqueConstraint('contest_id', 'user_id', name='uq_entry_contest_user'),
    )

    def __repr__(self):
        return f"<Entry(id={self.id}, contest_id={self.contest_id}, user_id={self.user_id}, status={self.status})>"

    @property
    def phase_urls(self):
        return [url for url in (self.phase_1_url, self.phase_2_url, self.phase_3_url, self.phase_4_url) if url]

    def to_dict(self):
        """Convert entry to dictionary for API responses"""
        return {
            "id": str(self.id),
            "contest_id": str(self.contest_id),
            "user_id": str(self.user_id),
            "title": self.title,
            "description": self.description,
            "phase_1_url": self.phase_1_url,
            "phase_2_url": self.phase_2_url,
            "phase_3_url": self.phase_3_url,
            "phase_4_url": self.phase_4_url,
            "status": self.status,
            "rejection_reason": self.rejection_reason,
            "reactions_count": self.reactions_count,
            "comments_count": self.comments_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
