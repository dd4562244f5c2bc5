"""
Entry submission and the approve/reject moderation gate
"""

import logging
from typing import Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.errors import InvalidOperation, NotAuthorized, NotEligible, NotFound
from afc.models.contest import Contest
from afc.models.entry import Entry
from afc.models.enums import ContestStatus, EntryStatus
from afc.models.user import User
from afc.repos.audit_log_repo import create_audit_log
from afc.repos.contest_repo import get_contest_by_id
from afc.repos.entry_repo import get_entry_by_id, get_user_entry_for_contest, review_pending_entry
from afc.services.counters import increment
from afc.services.status import get_contest_status

logger = logging.getLogger(__name__)

MAX_PHASES = 4

# Number of leading phases a submission must include, per contest category
REQUIRED_PHASES = {
    "art": 4,
    "cosplay": 3,
    "music": 2,
    "photography": 1,
    "video": 1,
}


def validate_phases(category: str, phase_urls: Sequence[Optional[str]]) -> list:
    """
    Check a submission's phase media against its contest category.

    Returns:
        The phase URLs padded to four slots

    Raises:
        InvalidOperation: too many phases or a required phase missing
    """
    phases = list(phase_urls)
    if len(phases) > MAX_PHASES:
        raise InvalidOperation(f"At most {MAX_PHASES} phases can be submitted")
    phases += [None] * (MAX_PHASES - len(phases))
    phases = [url.strip() if url and url.strip() else None for url in phases]

    required = REQUIRED_PHASES.get(category, 1)
    missing = [str(index + 1) for index in range(required) if not phases[index]]
    if missing:
        raise InvalidOperation(
            f"{category.capitalize()} entries require phases 1-{required}; missing phase {', '.join(missing)}"
        )
    return phases


async def submit_entry(
    session: AsyncSession,
    contest_id: UUID,
    user_id: UUID,
    actor_id: UUID,
    phase_urls: Sequence[Optional[str]],
    title: Optional[str] = None,
    description: Optional[str] = None
) -> Entry:
    """
    Submit an entry to an active contest. The entry starts pending review.

    Raises:
        NotAuthorized: actor is not the submitting user
        NotFound: contest does not exist
        NotEligible: contest is not active
        InvalidOperation: duplicate entry or missing phases
    """
    if user_id != actor_id:
        raise NotAuthorized("Cannot submit an entry on behalf of another user")

    contest = await get_contest_by_id(session, contest_id)
    if contest is None:
        raise NotFound(f"Contest {contest_id} not found")

    status = get_contest_status(contest)
    if status != ContestStatus.ACTIVE:
        raise NotEligible(f"Contest {contest_id} is {status.value}; entries are only accepted while active")

    phases = validate_phases(contest.category, phase_urls)

    if await get_user_entry_for_contest(session, contest_id, user_id) is not None:
        raise InvalidOperation("You have already submitted an entry to this contest")

    entry = Entry(
        contest_id=contest_id,
        user_id=user_id,
        title=title,
        description=description,
        phase_1_url=phases[0],
        phase_2_url=phases[1],
        phase_3_url=phases[2],
        phase_4_url=phases[3],
        status=EntryStatus.PENDING.value
    )
    session.add(entry)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise InvalidOperation("You have already submitted an entry to this contest")

    await session.refresh(entry)
    logger.info(f"User {user_id} submitted entry {entry.id} to contest {contest_id}")
    return entry


async def _review_entry(
    session: AsyncSession,
    entry_id: UUID,
    new_status: str,
    rejection_reason: Optional[str] = None
) -> Entry:
    # The conditional update decides the race; the read only gives a precise error
    entry = await get_entry_by_id(session, entry_id)
    if entry is None:
        raise NotFound(f"Entry {entry_id} not found")
    if entry.status != EntryStatus.PENDING.value:
        raise InvalidOperation(f"Entry {entry_id} is {entry.status}; only pending entries can be reviewed")

    if not await review_pending_entry(session, entry_id, new_status, rejection_reason):
        raise InvalidOperation(f"Entry {entry_id} was already reviewed")

    return await get_entry_by_id(session, entry_id)


async def approve_entry(session: AsyncSession, entry_id: UUID, admin_id: UUID) -> Dict:
    """
    Approve a pending entry, making it public, reactable and eligible to win.

    Approval counts the entry towards the contest's and the author's entries_count.
    Of two concurrent reviews exactly one succeeds; the other raises InvalidOperation.
    """
    try:
        entry = await _review_entry(session, entry_id, EntryStatus.APPROVED.value)

        await increment(session, Contest.entries_count, entry.contest_id, 1)
        await increment(session, User.entries_count, entry.user_id, 1)
        await create_audit_log(
            session,
            admin_id=admin_id,
            action="entry_approved",
            resource_type="entry",
            resource_id=entry.id,
            details={"contest_id": str(entry.contest_id), "user_id": str(entry.user_id)}
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Admin {admin_id} approved entry {entry_id}")
    return entry.to_dict()


async def reject_entry(session: AsyncSession, entry_id: UUID, admin_id: UUID, reason: str) -> Dict:
    """Reject a pending entry with a mandatory reason."""
    if not reason or not reason.strip():
        raise InvalidOperation("A rejection reason is required")

    try:
        entry = await _review_entry(session, entry_id, EntryStatus.REJECTED.value, reason.strip())
        await create_audit_log(
            session,
            admin_id=admin_id,
            action="entry_rejected",
            resource_type="entry",
            resource_id=entry.id,
            details={"contest_id": str(entry.contest_id), "reason": entry.rejection_reason}
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"Admin {admin_id} rejected entry {entry_id}")
    return entry.to_dict()
