"""
Admin contest maintenance
"""

import logging
from typing import Dict
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.errors import InvalidOperation, NotEligible, NotFound
from afc.models.contest import Contest
from afc.repos.audit_log_repo import create_audit_log
from afc.repos.contest_repo import get_contest_by_id, update_contest_fields
from afc.repos.entry_repo import get_contest_entries
from afc.services.status import as_utc

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "title", "description", "thumbnail_url", "category", "start_date", "end_date", "prize_pool"
})

# Fields that shape the lifecycle or the result; frozen once finalized
SCHEDULE_FIELDS = frozenset({"category", "start_date", "end_date", "prize_pool"})


async def update_contest(session: AsyncSession, contest_id: UUID, admin_id: UUID, changes: Dict) -> Contest:
    """
    Apply an admin's partial update to a contest.

    A finalized contest keeps its schedule, category and prize pool; only its
    presentation (title, description, thumbnail) can still change. The
    category is also fixed once the contest has entries, since their phases
    were validated against it.

    Raises:
        NotFound: contest does not exist
        NotEligible: schedule change on a finalized contest
        InvalidOperation: unknown field, end not after start, or category change with entries
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidOperation(f"Cannot update contest fields: {', '.join(sorted(unknown))}")

    try:
        contest = await get_contest_by_id(session, contest_id)
        if contest is None:
            raise NotFound(f"Contest {contest_id} not found")

        changed = {key: value for key, value in changes.items() if getattr(contest, key) != value}
        if not changed:
            return contest

        schedule_change = bool(SCHEDULE_FIELDS & set(changed))
        if schedule_change and contest.finalized_at is not None:
            raise NotEligible(f"Contest {contest_id} is finalized; its schedule and prizes can no longer change")

        start_date = as_utc(changed.get("start_date", contest.start_date))
        end_date = as_utc(changed.get("end_date", contest.end_date))
        if end_date <= start_date:
            raise InvalidOperation("Contest end date must be after its start date")

        if "category" in changed and await get_contest_entries(session, contest_id, limit=1):
            raise InvalidOperation("Cannot change the category of a contest that has entries")

        if not await update_contest_fields(session, contest_id, changed, unfinalized_only=schedule_change):
            raise NotEligible(f"Contest {contest_id} was finalized while it was being updated")

        await create_audit_log(
            session,
            admin_id=admin_id,
            action="contest_updated",
            resource_type="contest",
            resource_id=contest_id,
            details={"fields": sorted(changed)}
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Admin {admin_id} updated contest {contest_id}: {', '.join(sorted(changed))}")
    return await get_contest_by_id(session, contest_id)
