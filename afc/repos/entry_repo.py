"""
Entry repository for contest submissions
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc

from afc.models.entry import Entry
from afc.models.enums import EntryStatus


async def get_entry_by_id(session: AsyncSession, entry_id: UUID) -> Optional[Entry]:
    """
    Get entry by ID.
    
    Args:
        session: Database session
        entry_id: Entry UUID
    
    Returns:
        Entry instance or None if not found
    """
    result = await session.execute(
        select(Entry)
        .where(Entry.id == entry_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_approved_entry(session: AsyncSession, entry_id: UUID) -> Optional[Entry]:
    """Get an entry only if it exists and is approved."""
    result = await session.execute(
        select(Entry)
        .where(Entry.id == entry_id)
        .where(Entry.status == EntryStatus.APPROVED.value)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_entry_for_contest(
    session: AsyncSession,
    contest_id: UUID,
    user_id: UUID
) -> Optional[Entry]:
    """Get the (single) entry a user submitted to a contest."""
    result = await session.execute(
        select(Entry)
        .where(Entry.contest_id == contest_id)
        .where(Entry.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_ranked_approved_entries(session: AsyncSession, contest_id: UUID) -> List[Entry]:
    """
    Approved entries of a contest in ranking order.
    
    Ranking is reactions_count descending, then created_at ascending (earlier
    submission wins ties), then id for a total order.
    
    Args:
        session: Database session
        contest_id: Contest UUID
    
    Returns:
        List of Entry instances, best first
    """
    result = await session.execute(
        select(Entry)
        .where(Entry.contest_id == contest_id)
        .where(Entry.status == EntryStatus.APPROVED.value)
        .order_by(desc(Entry.reactions_count), Entry.created_at, Entry.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


async def get_contest_entries(
    session: AsyncSession,
    contest_id: UUID,
    status: Optional[str] = None,
    limit: int = 100,
    offset: int = 0
) -> List[Entry]:
    """
    Get contest entries, most reacted first.
    
    Args:
        session: Database session
        contest_id: Contest UUID
        status: Optional status filter
        limit: Maximum number of entries to return
        offset: Number of entries to skip
    
    Returns:
        List of Entry instances
    """
    query = select(Entry).where(Entry.contest_id == contest_id)
    
    if status:
        query = query.where(Entry.status == status)
    
    query = query.order_by(desc(Entry.reactions_count), Entry.created_at).limit(limit).offset(offset)
    
    result = await session.execute(query)
    return result.scalars().all()


async def get_user_entries(
    session: AsyncSession,
    user_id: UUID,
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> List[Entry]:
    """A user's own entries in every review state, newest first."""
    query = select(Entry).where(Entry.user_id == user_id)
    if status:
        query = query.where(Entry.status == status)
    result = await session.execute(
        query.order_by(desc(Entry.created_at), Entry.id).limit(limit).offset(offset)
    )
    return result.scalars().all()


async def review_pending_entry(
    session: AsyncSession,
    entry_id: UUID,
    new_status: str,
    rejection_reason: Optional[str] = None
) -> bool:
    """
    Move an entry out of pending review: only writes if it is still pending.
    
    Args:
        session: Database session
        entry_id: Entry UUID
        new_status: approved or rejected
        rejection_reason: Stored with a rejection
    
    Returns:
        True if this call reviewed the entry, False if it was no longer pending
    """
    result = await session.execute(
        update(Entry)
        .where(Entry.id == entry_id)
        .where(Entry.status == EntryStatus.PENDING.value)
        .values(status=new_status, rejection_reason=rejection_reason)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
