"""
Points transaction model matching the DDL schema
"""

from sqlalchemy import Column, String, Integer, DateTime, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from afc.db.base import Base
import sqlalchemy as sa
import uuid


class Transaction(Base):
    """Transaction model - virtual points ledger"""
    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    tx_type = Column(
        sa.Enum('prize', 'purchase', 'refund', 'bonus', 'transfer', name='transaction_type'),
        nullable=False
    )
    points = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default='completed')
    description = Column(Text, nullable=True)
    related_id = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Transaction(id={self.id}, user_id={self.user_id}, type={self.tx_type}, points={self.points})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "tx_type": self.tx_type,
            "points": self.points,
            "status": self.status,
            "description": self.description,
            "related_id": str(self.related_id) if self.related_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
