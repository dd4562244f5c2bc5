"""
User model matching the DDL schema
"""

from sqlalchemy import Column, String, Integer, DateTime, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


class User(Base):
    """User model - holds denormalized aggregates maintained by the counter service"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(48), nullable=False, unique=True)
    display_name = Column(String(128), nullable=True)
    avatar_url = Column(Text, nullable=True)
    role = Column(sa.Enum('user', 'admin', name='user_role'), nullable=False, default='user')
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    points_balance = Column(Integer, nullable=False, default=0)
    entries_count = Column(Integer, nullable=False, default=0)
    wins_count = Column(Integer, nullable=False, default=0)
    total_reactions_received = Column(Integer, nullable=False, default=0)
    followers_count = Column(Integer, nullable=False, default=0)
    following_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint('points_balance >= 0', name='chk_points_nonneg'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, level={self.level})>"

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": str(self.id),
            "username": self.username,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "role": self.role,
            "xp": self.xp,
            "level": self.level,
            "points_balance": self.points_balance,
            "entries_count": self.entries_count,
            "wins_count": self.wins_count,
            "total_reactions_received": self.total_reactions_received,
            "followers_count": self.followers_count,
            "following_count": self.following_count,
        }
