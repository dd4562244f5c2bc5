"""
Contest model matching the DDL schema
"""

from sqlalchemy import Column, String, Integer, DateTime, Text, Boolean, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


class Contest(Base):
    """Contest model - status is derived from the dates, see services.status"""
    __tablename__ = "contests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(
        sa.Enum('art', 'cosplay', 'photography', 'music', 'video', name='contest_category'),
        nullable=False,
        default='art'
    )
    thumbnail_url = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    # Null until finalization commits; never changed afterwards
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    entries_count = Column(Integer, nullable=False, default=0)
    # Advisory display value only; finalization pays out of the reaction pool
    prize_pool = Column(Integer, nullable=False, default=0)
    prize_pool_distributed = Column(Boolean, nullable=False, default=False)
    winner_1st_entry_id = Column(UUID(as_uuid=True), nullable=True)
    winner_2nd_entry_id = Column(UUID(as_uuid=True), nullable=True)
    winner_3rd_entry_id = Column(UUID(as_uuid=True), nullable=True)
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_contests_unfinalized_end', 'finalized_at', 'end_date'),
    )

    def __repr__(self):
        return f"<Contest(id={self.id}, title={self.title}, category={self.category})>"

    def to_dict(self, status=None):
        """Convert contest to dictionary for API responses"""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "thumbnail_url": self.thumbnail_url,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "finalized_at": self.finalized_at.isoformat() if self.finalized_at else None,
            "entries_count": self.entries_count,
            "prize_pool": self.prize_pool,
            "prize_pool_distributed": self.prize_pool_distributed,
            "winner_1st_entry_id": str(self.winner_1st_entry_id) if self.winner_1st_entry_id else None,
            "winner_2nd_entry_id": str(self.winner_2nd_entry_id) if self.winner_2nd_entry_id else None,
            "winner_3rd_entry_id": str(self.winner_3rd_entry_id) if self.winner_3rd_entry_id else None,
            "status": status.value if status else None,
        }
