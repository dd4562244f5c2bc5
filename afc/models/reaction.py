"""
Reaction model matching the DDL schema
"""

from sqlalchemy import Column, DateTime, UniqueConstraint, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


class Reaction(Base):
    """Reaction model - at most one per (entry, user)"""
    __tablename__ = "reactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(UUID(as_uuid=True), ForeignKey('entries.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reaction_type = Column(
        sa.Enum('like', 'love', 'fire', 'clap', 'star', name='reaction_type'),
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('entry_id', 'user_id', name='uq_reaction_entry_user'),
    )

    def __repr__(self):
        return f"<Reaction(entry_id={self.entry_id}, user_id={self.user_id}, type={self.reaction_type})>"
