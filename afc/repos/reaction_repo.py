"""
Reaction repository
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func

from afc.db.upsert import insert_if_absent
from afc.models.reaction import Reaction


async def get_reaction(session: AsyncSession, entry_id: UUID, user_id: UUID) -> Optional[Reaction]:
    """
    Get a user's reaction on an entry.
    
    Args:
        session: Database session
        entry_id: Entry UUID
        user_id: User UUID
    
    Returns:
        Reaction instance or None if the user has not reacted
    """
    result = await session.execute(
        select(Reaction)
        .where(Reaction.entry_id == entry_id)
        .where(Reaction.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def insert_reaction(session: AsyncSession, entry_id: UUID, user_id: UUID, reaction_type: str) -> bool:
    """Insert a reaction; returns False if the user already had one on this entry."""
    reaction_id = await insert_if_absent(
        session,
        Reaction,
        ["entry_id", "user_id"],
        entry_id=entry_id,
        user_id=user_id,
        reaction_type=reaction_type
    )
    return reaction_id is not None


async def update_reaction_type(session: AsyncSession, entry_id: UUID, user_id: UUID, reaction_type: str) -> bool:
    """Change the type of an existing reaction in place."""
    result = await session.execute(
        update(Reaction)
        .where(Reaction.entry_id == entry_id)
        .where(Reaction.user_id == user_id)
        .values(reaction_type=reaction_type)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def delete_reaction(session: AsyncSession, entry_id: UUID, user_id: UUID) -> bool:
    """Delete a reaction; returns False if there was none."""
    result = await session.execute(
        delete(Reaction)
        .where(Reaction.entry_id == entry_id)
        .where(Reaction.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def count_reactions(session: AsyncSession, entry_id: UUID) -> int:
    """Count reaction rows for an entry (ground truth for reactions_count)."""
    result = await session.execute(
        select(func.count()).select_from(Reaction).where(Reaction.entry_id == entry_id)
    )
    return result.scalar_one()
