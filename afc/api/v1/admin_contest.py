"""
Admin contest management API endpoints
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from afc.core.auth import get_current_admin
from afc.db.session import get_db, get_session_factory
from afc.models.enums import ContestCategory
from afc.models.user import User
from afc.repos.audit_log_repo import create_audit_log, get_audit_logs
from afc.repos.contest_repo import create_contest
from afc.services.contests import update_contest
from afc.services.entries import approve_entry, reject_entry
from afc.services.finalization import finalize_contest
from afc.services.status import as_utc, get_contest_status
from afc.services.sweep import sweep_ended_contests
from afc.tasks.contest_tasks import finalize_contest_task

logger = logging.getLogger(__name__)

router = APIRouter()


class ContestCreate(BaseModel):
    """Contest creation request model"""
    title: str = Field(..., min_length=1, max_length=255, description="Contest title")
    category: ContestCategory = Field(..., description="Contest category")
    start_date: datetime = Field(..., description="Submissions open (ISO format)")
    end_date: datetime = Field(..., description="Contest ends (ISO format)")
    description: Optional[str] = Field(None, description="Contest description")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail URL")
    prize_pool: int = Field(0, ge=0, description="Advisory prize pool shown to users")


REQUIRED_CONTEST_FIELDS = ("title", "category", "start_date", "end_date", "prize_pool")


class ContestUpdate(BaseModel):
    """Partial contest update; omitted fields are left alone"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[ContestCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    prize_pool: Optional[int] = Field(None, ge=0)


class EntryRejection(BaseModel):
    """Entry rejection request model"""
    reason: str = Field(..., description="Why the entry was rejected")


@router.post("/contests", status_code=201)
async def create_contest_endpoint(
    contest_data: ContestCreate,
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """
    Create a new contest (admin only).
    """
    start_date = as_utc(contest_data.start_date)
    end_date = as_utc(contest_data.end_date)
    if end_date <= start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be after start_date"
        )

    contest = await create_contest(
        session=session,
        title=contest_data.title,
        category=contest_data.category.value,
        start_date=start_date,
        end_date=end_date,
        description=contest_data.description,
        thumbnail_url=contest_data.thumbnail_url,
        prize_pool=contest_data.prize_pool,
        created_by=current_admin.id
    )

    await create_audit_log(
        session,
        admin_id=current_admin.id,
        action="contest_created",
        resource_type="contest",
        resource_id=contest.id,
        details={"title": contest.title, "category": contest.category}
    )
    await session.commit()

    logger.info(f"Admin {current_admin.id} created contest {contest.id}")
    return contest.to_dict(get_contest_status(contest))


@router.patch("/contests/{contest_id}")
async def update_contest_endpoint(
    contest_id: UUID,
    contest_data: ContestUpdate,
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """
    Update a contest (admin only). Finalized contests keep their dates, category and prize pool.
    """
    changes = contest_data.model_dump(exclude_unset=True)
    if changes.get("category") is not None:
        changes["category"] = changes["category"].value
    for field in ("start_date", "end_date"):
        if changes.get(field) is not None:
            changes[field] = as_utc(changes[field])
    cleared = [field for field in REQUIRED_CONTEST_FIELDS if field in changes and changes[field] is None]
    if cleared:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot clear required fields: {', '.join(cleared)}"
        )

    contest = await update_contest(session, contest_id, current_admin.id, changes)
    return contest.to_dict(get_contest_status(contest))


@router.post("/contests/sweep")
async def sweep_contests_endpoint(
    current_admin: User = Depends(get_current_admin),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """
    Finalize every ended contest now instead of waiting for the scheduled sweep (admin only).
    """
    outcomes = await sweep_ended_contests(session_factory)
    return {"outcomes": outcomes, "count": len(outcomes)}


@router.post("/contests/{contest_id}/finalize")
async def finalize_contest_endpoint(
    contest_id: UUID,
    background: bool = Query(False, description="Queue finalization on a worker instead"),
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """
    Finalize an ended contest and distribute prizes (admin only).

    This endpoint triggers the finalization process for a contest, which:
    1. Locks the contest to prevent concurrent finalizations
    2. Ranks approved entries by reactions
    3. Credits points and XP to the top three
    4. Records winners and marks the contest finalized
    5. Records audit log

    The operation is atomic and idempotent - it can be called multiple times
    safely without double-paying winners.
    """
    if background:
        task = finalize_contest_task.delay(str(contest_id), str(current_admin.id))
        return {"success": True, "contest_id": str(contest_id), "status": "queued", "task_id": task.id}

    return await finalize_contest(session, contest_id, admin_id=current_admin.id)


@router.post("/entries/{entry_id}/approve")
async def approve_entry_endpoint(
    entry_id: UUID,
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """Approve a pending entry (admin only)."""
    return await approve_entry(session, entry_id, current_admin.id)


@router.post("/entries/{entry_id}/reject")
async def reject_entry_endpoint(
    entry_id: UUID,
    rejection: EntryRejection,
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """Reject a pending entry with a reason (admin only)."""
    return await reject_entry(session, entry_id, current_admin.id, rejection.reason)


@router.get("/audit-logs")
async def audit_logs_endpoint(
    action: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_admin: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_db)
):
    """Recent admin and scheduler actions (admin only)."""
    logs = await get_audit_logs(session, limit=limit, offset=offset, action=action)
    return {"audit_logs": [log.to_dict() for log in logs], "count": len(logs)}
