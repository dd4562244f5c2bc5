"""
Contest finalization: ranks approved entries by reactions, records up to three
winners, credits their points and XP, and closes the contest.

Finalization runs in one transaction. The contest row is locked for update
where the database supports it, and finalized_at is written last through a
compare-and-set, so at most one caller ever commits a finalization and a
failed run leaves nothing behind to clean up.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from afc.core.config import settings
from afc.core.errors import (
    ConcurrentFinalizationLost, NotEligible, NotFound, PartialWriteFailure
)
from afc.core.metrics import FINALIZATION_COUNT
from afc.models.contest import Contest
from afc.models.contest_winner import ContestWinner
from afc.models.enums import ContestStatus, NotificationType, TransactionType
from afc.models.user import User
from afc.repos.audit_log_repo import create_audit_log
from afc.repos.contest_repo import get_contest_by_id, lock_contest, mark_contest_finalized
from afc.repos.entry_repo import get_ranked_approved_entries
from afc.repos.notification_repo import create_notification
from afc.repos.transaction_repo import create_transaction
from afc.repos.winner_repo import delete_contest_winners, get_contest_winners
from afc.services.counters import increment
from afc.services.levels import award_xp
from afc.services.status import as_utc, resolve_status, utcnow

# Configure logging
logger = logging.getLogger(__name__)

MAX_WINNERS = 3

PLACEMENT_LABELS = {1: "1st", 2: "2nd", 3: "3rd"}

WINNER_COLUMNS = {
    1: "winner_1st_entry_id",
    2: "winner_2nd_entry_id",
    3: "winner_3rd_entry_id",
}


def compute_prize_distribution(
    reaction_counts: Sequence[int],
    split_pct: Optional[Sequence[int]] = None
) -> Tuple[int, List[int]]:
    """
    Split the reaction pool between the winners.

    The pool is the sum of the winners' reaction counts (votes are points).
    Each placement gets its percentage rounded down; the rounding remainder
    and the unassigned share stay undistributed.

    Args:
        reaction_counts: reactions_count of the winners, best first (at most 3)
        split_pct: Percent per placement, defaults to settings.prize_split_pct

    Returns:
        Tuple of (pool, prize per placement)
    """
    split_pct = list(split_pct if split_pct is not None else settings.prize_split_pct)
    counts = list(reaction_counts)[:MAX_WINNERS]
    pool = sum(counts)
    prizes = [pool * split_pct[index] // 100 for index in range(len(counts))]
    return pool, prizes


def xp_for_placement(placement: int) -> int:
    """Default XP policy: configured award per placement."""
    awards = settings.winner_xp_awards
    if placement - 1 < len(awards):
        return awards[placement - 1]
    return 0


def _result(
    contest: Contest,
    status: str,
    winners: List[Dict],
    finalized_at: Optional[datetime],
    message: str
) -> Dict:
    return {
        "success": True,
        "contest_id": str(contest.id),
        "contest_title": contest.title,
        "status": status,
        "finalized_at": as_utc(finalized_at).isoformat() if finalized_at else None,
        "total_prize_pool": sum(w["reactions_count"] for w in winners),
        "total_prizes": sum(w["prize_amount"] for w in winners),
        "winners": winners,
        "message": message,
    }


async def get_finalization_result(session: AsyncSession, contest_id: UUID) -> Dict:
    """
    Rebuild a contest's finalization result from the stored winner rows.

    Winner rows of a contest that is not finalized are never reported.

    Raises:
        NotFound: if the contest does not exist
    """
    contest = await get_contest_by_id(session, contest_id)
    if contest is None:
        raise NotFound(f"Contest {contest_id} not found")

    if contest.finalized_at is None:
        status = resolve_status(contest.start_date, contest.end_date, None, utcnow())
        result = _result(contest, status.value, [], None, "Contest has not been finalized")
        result["success"] = False
        return result

    winners = [w.to_dict() for w in await get_contest_winners(session, contest_id)]
    message = "no winners" if not winners else f"{len(winners)} winner(s) selected"
    return _result(contest, "already_finalized", winners, contest.finalized_at, message)


async def _finalize_contest_inner(
    session: AsyncSession,
    contest_id: UUID,
    now: datetime,
    admin_id: Optional[UUID],
    actor: Optional[str],
    xp_policy: Callable[[int], int]
) -> Dict:
    # Step 1: Lock contest row for update to prevent concurrent finalizations
    contest = await lock_contest(session, contest_id)
    if contest is None:
        raise NotFound(f"Contest {contest_id} not found")

    # Step 2: Already finalized (idempotency)
    if contest.finalized_at is not None:
        logger.info(f"Contest {contest_id} already finalized, returning stored result")
        return await get_finalization_result(session, contest_id)

    # Step 3: Only ended contests can be finalized
    status = resolve_status(contest.start_date, contest.end_date, None, now)
    if status != ContestStatus.ENDED:
        raise NotEligible(f"Contest {contest_id} is {status.value}; only ended contests can be finalized")

    # Step 4: Drop winner rows left by an interrupted run
    stale = await delete_contest_winners(session, contest_id)
    if stale:
        logger.warning(f"Removed {stale} stale winner rows for contest {contest_id}")

    # Step 5: Rank approved entries
    ranked = await get_ranked_approved_entries(session, contest_id)
    top = ranked[:MAX_WINNERS]
    logger.info(f"Found {len(ranked)} approved entries for contest {contest_id}")

    # Step 6: Prize distribution
    pool, prizes = compute_prize_distribution([e.reactions_count for e in top])
    logger.info(f"Reaction pool: {pool}, prizes: {prizes}")

    # Step 7: Record winners and credit users
    winners = []
    winner_columns = {}
    for placement, (entry, prize) in enumerate(zip(top, prizes), start=1):
        label = PLACEMENT_LABELS[placement]
        session.add(ContestWinner(
            contest_id=contest_id,
            entry_id=entry.id,
            user_id=entry.user_id,
            placement=placement,
            reactions_count=entry.reactions_count,
            prize_amount=prize
        ))
        winner_columns[WINNER_COLUMNS[placement]] = entry.id

        await increment(session, User.wins_count, entry.user_id, 1)
        if prize > 0:
            await increment(session, User.points_balance, entry.user_id, prize)
            await create_transaction(
                session,
                user_id=entry.user_id,
                tx_type=TransactionType.PRIZE.value,
                points=prize,
                description=f"{label} place in {contest.title}",
                related_id=contest_id
            )

        xp = xp_policy(placement)
        if xp > 0:
            await award_xp(
                session,
                entry.user_id,
                xp,
                action="contest_win",
                reference_id=contest_id,
                description=f"{label} place in {contest.title}"
            )

        await create_notification(
            session,
            user_id=entry.user_id,
            type=NotificationType.WINNER.value,
            title=f"You placed {label}!",
            message=f"Your entry placed {label} in {contest.title} and earned {prize} points",
            contest_id=contest_id,
            entry_id=entry.id
        )

        winners.append({
            "contest_id": str(contest_id),
            "entry_id": str(entry.id),
            "user_id": str(entry.user_id),
            "placement": placement,
            "reactions_count": entry.reactions_count,
            "prize_amount": prize,
        })
        logger.info(f"Placement {placement}: entry {entry.id} ({entry.reactions_count} reactions) -> {prize} points")

    await session.execute(
        update(Contest)
        .where(Contest.id == contest_id)
        .values(prize_pool_distributed=True, **winner_columns)
        .execution_options(synchronize_session=False)
    )

    if admin_id is not None or actor is not None:
        await create_audit_log(
            session,
            admin_id=admin_id,
            actor=actor,
            action="contest_finalization",
            resource_type="contest",
            resource_id=contest_id,
            details={
                "contest_id": str(contest_id),
                "approved_entries": len(ranked),
                "total_prize_pool": pool,
                "winners": winners,
            }
        )

    await session.flush()

    # Step 8: Commit point - compare-and-set finalized_at as the last write
    if not await mark_contest_finalized(session, contest_id, now):
        raise ConcurrentFinalizationLost(f"Contest {contest_id} was finalized by another caller")

    set_committed_value(contest, "finalized_at", now)
    message = "no winners" if not winners else f"{len(winners)} winner(s) selected"
    return _result(contest, "finalized", winners, now, message)


async def finalize_contest(
    session: AsyncSession,
    contest_id: UUID,
    admin_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
    actor: Optional[str] = None,
    xp_policy: Callable[[int], int] = xp_for_placement
) -> Dict:
    """
    Finalize an ended contest and select its winners.

    This function is atomic and idempotent - calling it again on a finalized
    contest returns the stored result without crediting anyone twice, and
    losing a race to another finalizer is reported as success.

    Args:
        session: Database session
        contest_id: Contest UUID to finalize
        admin_id: Admin UUID who initiated finalization (optional)
        now: Evaluation time; one instant is used for every step
        actor: Label for non-admin callers such as the scheduler
        xp_policy: XP awarded per placement

    Returns:
        Dict with status ("finalized" or "already_finalized"), winners and prizes

    Raises:
        NotFound: contest does not exist
        NotEligible: contest is upcoming or still active
        PartialWriteFailure: a write failed; everything was rolled back
    """
    now = now or utcnow()
    logger.info(f"Starting finalization for contest {contest_id}")

    try:
        result = await _finalize_contest_inner(session, contest_id, now, admin_id, actor, xp_policy)
        await session.commit()
    except ConcurrentFinalizationLost as e:
        await session.rollback()
        logger.info(f"{e.message}; returning stored result")
        FINALIZATION_COUNT.labels(outcome="lost_race").inc()
        return await get_finalization_result(session, contest_id)
    except (NotFound, NotEligible):
        await session.rollback()
        FINALIZATION_COUNT.labels(outcome="rejected").inc()
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Error finalizing contest {contest_id}: {str(e)}")
        FINALIZATION_COUNT.labels(outcome="failed").inc()
        raise PartialWriteFailure(f"Finalization of contest {contest_id} failed and was rolled back: {e}") from e

    FINALIZATION_COUNT.labels(outcome=result["status"]).inc()
    logger.info(
        f"Finalization of contest {contest_id} complete: {result['status']}, "
        f"{len(result['winners'])} winner(s), pool {result['total_prize_pool']}"
    )
    return result
