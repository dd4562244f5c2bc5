"""
Contest status resolution.

A contest's status is never stored: it is derived from its dates and
finalized_at against a single `now` supplied by the caller.
"""

from datetime import datetime, timezone
from typing import Optional

from afc.models.enums import ContestStatus


def utcnow() -> datetime:
    """Single timestamp source for the contest services."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_status(
    start_date: datetime,
    end_date: datetime,
    finalized_at: Optional[datetime],
    now: datetime
) -> ContestStatus:
    """
    Resolve a contest's status.

    finalized_at dominates every date comparison. The boundaries themselves
    belong to the active window.
    """
    if finalized_at is not None:
        return ContestStatus.FINALIZED

    now = as_utc(now)
    if now < as_utc(start_date):
        return ContestStatus.UPCOMING
    if now > as_utc(end_date):
        return ContestStatus.ENDED
    return ContestStatus.ACTIVE


def get_contest_status(contest, now: Optional[datetime] = None) -> ContestStatus:
    """Resolve status for a Contest row."""
    return resolve_status(
        contest.start_date,
        contest.end_date,
        contest.finalized_at,
        now or utcnow()
    )
