"""
Points transaction repository
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from afc.models.transaction import Transaction


async def create_transaction(
    session: AsyncSession,
    user_id: UUID,
    tx_type: str,
    points: int,
    description: Optional[str] = None,
    related_id: Optional[UUID] = None
) -> Transaction:
    """
    Record a points transaction. Does not commit.
    
    Args:
        session: Database session
        user_id: User UUID
        tx_type: Transaction type (prize, purchase, refund, bonus, transfer)
        points: Points moved
        description: Human readable description
        related_id: Related entity (e.g. contest) UUID
    
    Returns:
        Created Transaction instance
    """
    transaction = Transaction(
        user_id=user_id,
        tx_type=tx_type,
        points=points,
        description=description,
        related_id=related_id
    )
    session.add(transaction)
    await session.flush()
    return transaction


async def get_user_transactions(
    session: AsyncSession,
    user_id: UUID,
    limit: int = 50,
    offset: int = 0
) -> List[Transaction]:
    """Get a user's transactions, newest first."""
    result = await session.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.created_at))
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()
