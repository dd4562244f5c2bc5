"""
Contest winner model - written only by the finalization service
"""

from sqlalchemy import Column, Integer, DateTime, UniqueConstraint, CheckConstraint, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import uuid


class ContestWinner(Base):
    """Contest winner model - 0 to 3 rows per contest"""
    __tablename__ = "contest_winners"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contest_id = Column(UUID(as_uuid=True), ForeignKey('contests.id', ondelete='CASCADE'), nullable=False, index=True)
    entry_id = Column(UUID(as_uuid=True), ForeignKey('entries.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    placement = Column(Integer, nullable=False)
    reactions_count = Column(Integer, nullable=False, default=0)
    prize_amount = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('contest_id', 'placement', name='uq_winner_contest_placement'),
        CheckConstraint('placement BETWEEN 1 AND 3', name='chk_winner_placement'),
    )

    def __repr__(self):
        return f"<ContestWinner(contest_id={self.contest_id}, placement={self.placement}, prize={self.prize_amount})>"

    def to_dict(self):
        return {
            "contest_id": str(self.contest_id),
            "entry_id": str(self.entry_id),
            "user_id": str(self.user_id),
            "placement": self.placement,
            "reactions_count": self.reactions_count,
            "prize_amount": self.prize_amount,
        }
