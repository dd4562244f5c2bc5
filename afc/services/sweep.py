"""
Auto-finalization sweep over ended, unfinalized contests
"""

import logging
import time
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from afc.core.errors import ContestPlatformError
from afc.core.metrics import SWEEP_DURATION
from afc.repos.contest_repo import get_ended_unfinalized_contests
from afc.services.finalization import finalize_contest
from afc.services.status import utcnow

logger = logging.getLogger(__name__)


async def sweep_ended_contests(
    session_factory: async_sessionmaker,
    now: Optional[datetime] = None
) -> List[Dict]:
    """
    Finalize every contest whose end_date has passed and finalized_at is NULL.

    Each contest is finalized in its own session, so one contest's failure is
    recorded in its outcome and never stops the rest of the sweep. Safe to run
    concurrently with itself or with an admin finalizing the same contest.

    Args:
        session_factory: Factory producing AsyncSession instances
        now: Sweep reference time (defaults to the current UTC time)

    Returns:
        One outcome per contest: contest_id, contest_title, finalized, message
    """
    now = now or utcnow()
    started = time.time()

    async with session_factory() as session:
        contests = await get_ended_unfinalized_contests(session, now)
        candidates = [(contest.id, contest.title) for contest in contests]

    logger.info(f"Sweep found {len(candidates)} ended contests awaiting finalization")

    outcomes = []
    for contest_id, title in candidates:
        async with session_factory() as session:
            try:
                result = await finalize_contest(session, contest_id, now=now, actor="scheduler")
                outcomes.append({
                    "contest_id": str(contest_id),
                    "contest_title": title,
                    "finalized": True,
                    "message": result["message"],
                })
            except ContestPlatformError as e:
                logger.error(f"Sweep could not finalize contest {contest_id}: {e.message}")
                outcomes.append({
                    "contest_id": str(contest_id),
                    "contest_title": title,
                    "finalized": False,
                    "message": e.message,
                })

    SWEEP_DURATION.observe(time.time() - started)
    finalized = sum(1 for outcome in outcomes if outcome["finalized"])
    logger.info(f"Sweep complete: {finalized}/{len(outcomes)} contests finalized")
    return outcomes
