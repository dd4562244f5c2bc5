"""
Reaction ledger: at most one reaction per user per entry.

Entry.reactions_count always equals the number of users currently holding a
reaction on the entry, however many times they change or clear it.
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.errors import InvalidOperation, NotAuthorized, NotFound
from afc.core.metrics import REACTION_COUNT
from afc.models.entry import Entry
from afc.models.enums import NotificationType, ReactionType
from afc.models.user import User
from afc.repos.entry_repo import get_approved_entry
from afc.repos.notification_repo import create_notification
from afc.repos.reaction_repo import (
    delete_reaction, get_reaction, insert_reaction, update_reaction_type
)
from afc.services.counters import increment

logger = logging.getLogger(__name__)

REACTION_TYPES = frozenset(t.value for t in ReactionType)

WRITE_ATTEMPTS = 3


async def _load_reactable_entry(
    session: AsyncSession,
    entry_id: UUID,
    user_id: UUID,
    actor_id: UUID
) -> Entry:
    if user_id != actor_id:
        raise NotAuthorized("Cannot react on behalf of another user")

    entry = await get_approved_entry(session, entry_id)
    if entry is None:
        raise NotFound(f"Entry {entry_id} not found")
    return entry


async def _apply_count_change(session: AsyncSession, entry: Entry, delta: int) -> int:
    count = await increment(session, Entry.reactions_count, entry.id, delta)
    await increment(session, User.total_reactions_received, entry.user_id, delta)
    return count


async def set_reaction(
    session: AsyncSession,
    entry_id: UUID,
    user_id: UUID,
    reaction_type: str,
    actor_id: UUID
) -> Dict:
    """
    Create or change a user's reaction on an approved entry.

    - no reaction yet: insert and increment reactions_count
    - different type: update in place, counters unchanged
    - same type: no-op

    Concurrent inserts for the same (entry, user) resolve through the unique
    constraint: the loser updates the winner's row, so the counter moves once
    and the last committed type is kept. A reaction cleared between the read
    and the update is inserted again and counted.

    Returns:
        Dict with the action taken, stored type and current reactions_count
    """
    if reaction_type not in REACTION_TYPES:
        raise InvalidOperation(f"Unknown reaction type: {reaction_type}")

    try:
        entry = await _load_reactable_entry(session, entry_id, user_id, actor_id)

        existing = await get_reaction(session, entry_id, user_id)
        if existing is not None and existing.reaction_type == reaction_type:
            count = entry.reactions_count
            await session.commit()
            return {
                "entry_id": str(entry_id),
                "action": "unchanged",
                "reaction_type": reaction_type,
                "reactions_count": count
            }

        # Insert and update race with concurrent set/clear calls; alternate until one lands
        try_insert = existing is None
        for _ in range(WRITE_ATTEMPTS):
            if try_insert:
                if await insert_reaction(session, entry_id, user_id, reaction_type):
                    action = "created"
                    count = await _apply_count_change(session, entry, 1)
                    if entry.user_id != user_id:
                        await create_notification(
                            session,
                            user_id=entry.user_id,
                            type=NotificationType.REACTION.value,
                            title="New reaction",
                            message=f"Someone reacted {reaction_type} to your entry",
                            actor_id=user_id,
                            contest_id=entry.contest_id,
                            entry_id=entry.id
                        )
                    break
            elif await update_reaction_type(session, entry_id, user_id, reaction_type):
                action = "updated"
                count = entry.reactions_count
                break
            try_insert = not try_insert
        else:
            raise InvalidOperation(f"Reaction on entry {entry_id} kept changing concurrently; retry")

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Reaction {action} on entry {entry_id} by user {user_id}: {reaction_type}")
    REACTION_COUNT.labels(action=action).inc()
    return {
        "entry_id": str(entry_id),
        "action": action,
        "reaction_type": reaction_type,
        "reactions_count": count
    }


async def clear_reaction(
    session: AsyncSession,
    entry_id: UUID,
    user_id: UUID,
    actor_id: UUID
) -> Dict:
    """
    Withdraw a user's reaction; decrements reactions_count only if one existed.

    Returns:
        Dict with the action taken and current reactions_count
    """
    try:
        entry = await _load_reactable_entry(session, entry_id, user_id, actor_id)

        if await delete_reaction(session, entry_id, user_id):
            action = "deleted"
            count = await _apply_count_change(session, entry, -1)
        else:
            action = "unchanged"
            count = entry.reactions_count

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Reaction {action} on entry {entry_id} by user {user_id}")
    REACTION_COUNT.labels(action=action).inc()
    return {
        "entry_id": str(entry_id),
        "action": action,
        "reaction_type": None,
        "reactions_count": count
    }


async def react(
    session: AsyncSession,
    entry_id: UUID,
    user_id: UUID,
    reaction_type: Optional[str],
    actor_id: UUID
) -> Dict:
    """Set a reaction, or clear it when reaction_type is None."""
    if reaction_type is None:
        return await clear_reaction(session, entry_id, user_id, actor_id)
    return await set_reaction(session, entry_id, user_id, reaction_type, actor_id)
