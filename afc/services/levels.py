"""
XP and level policy
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from afc.models.user import User
from afc.models.xp_history import XpHistory
from afc.services.counters import increment

logger = logging.getLogger(__name__)

# XP required to reach levels 1..20
LEVEL_THRESHOLDS = [
    0, 100, 300, 600, 1000, 1500, 2100, 2800, 3600, 4500,
    5500, 6600, 7800, 9100, 10500, 12000, 13600, 15300, 17100, 19000,
]

LEVEL_TITLES = {
    1: "Newcomer",
    2: "Beginner",
    3: "Apprentice",
    4: "Artist",
    5: "Skilled Artist",
    6: "Expert",
    7: "Master",
    8: "Grand Master",
    9: "Legend",
    10: "Champion",
    11: "Elite",
    12: "Virtuoso",
    13: "Prodigy",
    14: "Maestro",
    15: "Legendary",
    16: "Mythic",
    17: "Divine",
    18: "Immortal",
    19: "Transcendent",
    20: "Ultimate",
}

MAX_LEVEL = len(LEVEL_THRESHOLDS)


def calculate_level(xp: int) -> int:
    """Return the level reached with the given XP."""
    for index in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if xp >= LEVEL_THRESHOLDS[index]:
            return index + 1
    return 1


def level_progress(xp: int) -> Dict[str, float]:
    """XP window of the current level and percent progress through it."""
    level = calculate_level(xp)
    if level >= MAX_LEVEL:
        top = LEVEL_THRESHOLDS[-1]
        return {"current": top, "next": top, "progress": 100.0}

    current = LEVEL_THRESHOLDS[level - 1]
    nxt = LEVEL_THRESHOLDS[level]
    progress = (xp - current) / (nxt - current) * 100
    return {"current": current, "next": nxt, "progress": min(progress, 100.0)}


def level_title(level: int) -> str:
    return LEVEL_TITLES.get(level, "Unknown")


async def award_xp(
    session: AsyncSession,
    user_id: UUID,
    amount: int,
    action: str,
    reference_id: Optional[UUID] = None,
    description: Optional[str] = None
) -> int:
    """
    Add XP to a user, record it in xp_history and recompute the level.

    Does not commit; the caller owns the transaction.

    Returns:
        The user's new level
    """
    new_xp = await increment(session, User.xp, user_id, amount)
    new_level = calculate_level(new_xp)
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(level=new_level)
        .execution_options(synchronize_session=False)
    )
    session.add(XpHistory(
        user_id=user_id,
        action=action,
        xp_earned=amount,
        reference_id=reference_id,
        description=description
    ))
    logger.info(f"Awarded {amount} XP to user {user_id} for {action} (level {new_level})")
    return new_level
