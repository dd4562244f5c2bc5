"""
Contest winner repository
"""

from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from afc.models.contest_winner import ContestWinner


async def get_contest_winners(session: AsyncSession, contest_id: UUID) -> List[ContestWinner]:
    """
    Get the recorded winners of a contest ordered by placement.
    
    Args:
        session: Database session
        contest_id: Contest UUID
    
    Returns:
        List of ContestWinner instances (0 to 3)
    """
    result = await session.execute(
        select(ContestWinner)
        .where(ContestWinner.contest_id == contest_id)
        .order_by(ContestWinner.placement)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def delete_contest_winners(session: AsyncSession, contest_id: UUID) -> int:
    """Remove winner rows left behind by an interrupted finalization."""
    result = await session.execute(
        delete(ContestWinner)
        .where(ContestWinner.contest_id == contest_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
