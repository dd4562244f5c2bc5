"""
Contest repository for contest management
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc

from afc.models.contest import Contest


async def create_contest(
    session: AsyncSession,
    title: str,
    category: str,
    start_date: datetime,
    end_date: datetime,
    description: Optional[str] = None,
    thumbnail_url: Optional[str] = None,
    prize_pool: int = 0,
    created_by: Optional[UUID] = None
) -> Contest:
    """
    Create a new contest.
    
    Args:
        session: Database session
        title: Contest title
        category: Contest category (art, cosplay, photography, music, video)
        start_date: When submissions open
        end_date: When the contest ends
        description: Optional description
        thumbnail_url: Optional thumbnail
        prize_pool: Advisory prize pool shown to users
        created_by: Admin user ID who created the contest (optional)
    
    Returns:
        Created Contest instance
    """
    contest = Contest(
        title=title,
        category=category,
        start_date=start_date,
        end_date=end_date,
        description=description,
        thumbnail_url=thumbnail_url,
        prize_pool=prize_pool,
        created_by=created_by
    )
    session.add(contest)
    await session.commit()
    await session.refresh(contest)
    return contest


async def get_contest_by_id(session: AsyncSession, contest_id: UUID) -> Optional[Contest]:
    """
    Get contest by ID.
    
    Args:
        session: Database session
        contest_id: Contest UUID
    
    Returns:
        Contest instance or None if not found
    """
    result = await session.execute(
        select(Contest)
        .where(Contest.id == contest_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def lock_contest(session: AsyncSession, contest_id: UUID) -> Optional[Contest]:
    """
    Load a contest with a row lock (SELECT ... FOR UPDATE) for the rest of the transaction.

    SQLite ignores the lock; the finalized_at compare-and-set still guards it.
    """
    result = await session.execute(
        select(Contest)
        .where(Contest.id == contest_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_contests(
    session: AsyncSession,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[Contest]:
    """
    Get list of contests, newest first.
    
    Args:
        session: Database session
        category: Filter by category
        limit: Maximum number of contests to return
        offset: Number of contests to skip
    
    Returns:
        List of Contest instances
    """
    query = select(Contest).order_by(desc(Contest.start_date))
    
    if category:
        query = query.where(Contest.category == category)
    
    query = query.limit(limit).offset(offset)
    
    result = await session.execute(query)
    return result.scalars().all()


async def get_ended_unfinalized_contests(session: AsyncSession, now: datetime) -> List[Contest]:
    """
    Contests whose end_date has passed but which have not been finalized.
    
    Args:
        session: Database session
        now: Reference time for the sweep
    
    Returns:
        List of Contest instances ordered by end_date
    """
    result = await session.execute(
        select(Contest)
        .where(Contest.finalized_at.is_(None))
        .where(Contest.end_date < now)
        .order_by(Contest.end_date)
    )
    return result.scalars().all()


async def mark_contest_finalized(session: AsyncSession, contest_id: UUID, finalized_at: datetime) -> bool:
    """
    Compare-and-set finalized_at: only writes if it is still NULL.
    
    Args:
        session: Database session
        contest_id: Contest UUID
        finalized_at: Finalization timestamp
    
    Returns:
        True if this call set finalized_at, False if it was already set
    """
    result = await session.execute(
        update(Contest)
        .where(Contest.id == contest_id)
        .where(Contest.finalized_at.is_(None))
        .values(finalized_at=finalized_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def update_contest_fields(
    session: AsyncSession,
    contest_id: UUID,
    values: dict,
    unfinalized_only: bool = False
) -> bool:
    """
    Write contest columns in one statement.
    
    Args:
        session: Database session
        contest_id: Contest UUID
        values: Column values to set
        unfinalized_only: Only write while finalized_at is still NULL
    
    Returns:
        True if the row was written
    """
    query = update(Contest).where(Contest.id == contest_id)
    if unfinalized_only:
        query = query.where(Contest.finalized_at.is_(None))
    result = await session.execute(
        query.values(**values).execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
