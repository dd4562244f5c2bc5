"""
Celery tasks for contest finalization
"""

import asyncio
import logging
from typing import Dict, List, Optional
from uuid import UUID

from afc.celery_app import celery
from afc.core.errors import NotEligible, NotFound
from afc.db.session import task_session_factory
from afc.services.finalization import finalize_contest
from afc.services.sweep import sweep_ended_contests

# Configure logging
logger = logging.getLogger(__name__)


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def finalize_contest_task(self, contest_id: str, admin_id: Optional[str] = None) -> Dict:
    """
    Finalize one contest in the background.

    Args:
        contest_id: Contest UUID as string
        admin_id: Admin UUID as string who requested it (optional)

    Returns:
        Finalization result dict
    """
    async def _finalize():
        async with task_session_factory() as session_factory:
            async with session_factory() as session:
                return await finalize_contest(
                    session,
                    UUID(contest_id),
                    admin_id=UUID(admin_id) if admin_id else None,
                    actor=None if admin_id else "worker"
                )

    try:
        logger.info(f"Finalizing contest {contest_id}")
        return asyncio.run(_finalize())
    except (NotFound, NotEligible) as exc:
        # Retrying cannot change the outcome
        logger.warning(f"Contest {contest_id} not finalized: {exc.message}")
        return {"success": False, "contest_id": contest_id, "message": exc.message}
    except Exception as exc:
        logger.error(f"Error finalizing contest {contest_id}: {exc}")
        if self.request.retries < self.max_retries:
            logger.info(f"Retrying finalization of {contest_id} (attempt {self.request.retries + 1})")
            raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
        logger.error(f"Max retries exceeded for contest {contest_id}")
        raise


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def auto_finalize_ended_contests_task(self) -> List[Dict]:
    """
    Finalize every contest whose end date has passed.

    One contest failing does not stop the others; their outcomes are returned.
    """
    async def _sweep():
        async with task_session_factory() as session_factory:
            return await sweep_ended_contests(session_factory)

    try:
        outcomes = asyncio.run(_sweep())
        finalized = sum(1 for outcome in outcomes if outcome["finalized"])
        logger.info(f"Auto-finalization sweep finalized {finalized} of {len(outcomes)} contests")
        return outcomes
    except Exception as exc:
        logger.error(f"Auto-finalization sweep failed: {exc}")
        if self.request.retries < self.max_retries:
            raise self.retry(exc=exc, countdown=60)
        raise
