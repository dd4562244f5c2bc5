"""
Contest, entry and social API endpoints
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from afc.core.auth import get_current_user
from afc.core.errors import NotFound
from afc.db.session import get_db
from afc.models.enums import ContestCategory, ContestStatus, EntryStatus
from afc.models.user import User
from afc.repos.comment_repo import get_entry_comments
from afc.repos.contest_repo import get_contest_by_id, get_contests
from afc.repos.entry_repo import get_contest_entries, get_user_entries
from afc.repos.notification_repo import get_user_notifications, mark_all_read, mark_notification_read
from afc.repos.transaction_repo import get_user_transactions
from afc.repos.user_repo import get_user_by_id
from afc.services.comments import add_comment, like_comment, unlike_comment
from afc.services.entries import submit_entry
from afc.services.finalization import get_finalization_result
from afc.services.levels import level_progress, level_title
from afc.services.reactions import clear_reaction, react
from afc.services.social import follow_user, unfollow_user
from afc.services.status import get_contest_status, utcnow

router = APIRouter()


class EntrySubmit(BaseModel):
    """Entry submission request model"""
    title: Optional[str] = Field(None, max_length=255, description="Entry title")
    description: Optional[str] = Field(None, description="Entry description")
    phase_urls: List[Optional[str]] = Field(..., min_length=1, max_length=4, description="Media URL per phase, phase 1 first")


class ReactionRequest(BaseModel):
    """Reaction request model - null clears the reaction"""
    reaction_type: Optional[str] = Field(None, description="like, love, fire, clap or star")


class CommentCreate(BaseModel):
    """Comment creation request model"""
    content: str = Field(..., description="Comment text")
    parent_id: Optional[UUID] = Field(None, description="Comment being replied to")


class ReactionResponse(BaseModel):
    """Reaction response model"""
    entry_id: str
    action: str
    reaction_type: Optional[str]
    reactions_count: int


@router.get("/contests")
async def list_contests_endpoint(
    status: Optional[ContestStatus] = Query(None),
    category: Optional[ContestCategory] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db)
):
    """List contests with their derived status, newest first."""
    now = utcnow()
    contests = await get_contests(
        session,
        category=category.value if category else None,
        limit=limit,
        offset=offset
    )
    results = []
    for contest in contests:
        contest_status = get_contest_status(contest, now)
        if status is None or contest_status == status:
            results.append(contest.to_dict(contest_status))
    return {"contests": results, "count": len(results)}


@router.get("/contests/{contest_id}")
async def get_contest_endpoint(contest_id: UUID, session: AsyncSession = Depends(get_db)):
    """Get one contest with its derived status."""
    contest = await get_contest_by_id(session, contest_id)
    if contest is None:
        raise NotFound(f"Contest {contest_id} not found")
    return contest.to_dict(get_contest_status(contest))


@router.get("/contests/{contest_id}/entries")
async def list_entries_endpoint(
    contest_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db)
):
    """List a contest's approved entries, most reacted first."""
    if await get_contest_by_id(session, contest_id) is None:
        raise NotFound(f"Contest {contest_id} not found")
    entries = await get_contest_entries(
        session, contest_id, status=EntryStatus.APPROVED.value, limit=limit, offset=offset
    )
    return {"entries": [entry.to_dict() for entry in entries], "count": len(entries)}


@router.get("/contests/{contest_id}/winners")
async def contest_winners_endpoint(contest_id: UUID, session: AsyncSession = Depends(get_db)):
    """Finalization result of a contest: winners, prizes and pool."""
    return await get_finalization_result(session, contest_id)


@router.post("/contests/{contest_id}/entries", status_code=201)
async def submit_entry_endpoint(
    contest_id: UUID,
    entry_data: EntrySubmit,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """
    Submit an entry to an active contest.

    The entry is pending until an admin approves it.
    """
    entry = await submit_entry(
        session,
        contest_id=contest_id,
        user_id=current_user.id,
        actor_id=current_user.id,
        phase_urls=entry_data.phase_urls,
        title=entry_data.title,
        description=entry_data.description
    )
    return entry.to_dict()


@router.put("/entries/{entry_id}/reaction", response_model=ReactionResponse)
async def set_reaction_endpoint(
    entry_id: UUID,
    reaction: ReactionRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Set, change or (with a null type) clear the caller's reaction."""
    return await react(session, entry_id, current_user.id, reaction.reaction_type, current_user.id)


@router.delete("/entries/{entry_id}/reaction", response_model=ReactionResponse)
async def clear_reaction_endpoint(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Withdraw the caller's reaction."""
    return await clear_reaction(session, entry_id, current_user.id, current_user.id)


@router.get("/entries/{entry_id}/comments")
async def list_comments_endpoint(
    entry_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_db)
):
    """List comments on an entry, oldest first."""
    comments = await get_entry_comments(session, entry_id, limit=limit, offset=offset)
    return {"comments": [comment.to_dict() for comment in comments], "count": len(comments)}


@router.post("/entries/{entry_id}/comments", status_code=201)
async def add_comment_endpoint(
    entry_id: UUID,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Comment on an approved entry, or reply to one of its comments."""
    comment = await add_comment(
        session,
        entry_id=entry_id,
        user_id=current_user.id,
        actor_id=current_user.id,
        content=comment_data.content,
        parent_id=comment_data.parent_id
    )
    return comment.to_dict()


@router.post("/comments/{comment_id}/like")
async def like_comment_endpoint(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    return await like_comment(session, comment_id, current_user.id, current_user.id)


@router.delete("/comments/{comment_id}/like")
async def unlike_comment_endpoint(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    return await unlike_comment(session, comment_id, current_user.id, current_user.id)


@router.post("/users/{user_id}/follow")
async def follow_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    return await follow_user(session, current_user.id, user_id, current_user.id)


@router.delete("/users/{user_id}/follow")
async def unfollow_endpoint(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    return await unfollow_user(session, current_user.id, user_id, current_user.id)


@router.get("/users/{user_id}")
async def user_profile_endpoint(user_id: UUID, session: AsyncSession = Depends(get_db)):
    """Public profile with counters and level progress."""
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    profile = user.to_dict()
    profile.pop("points_balance")
    profile["level_title"] = level_title(user.level)
    profile["level_progress"] = level_progress(user.xp)
    return profile


@router.get("/me/notifications")
async def my_notifications_endpoint(
    type: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    notifications = await get_user_notifications(session, current_user.id, notification_type=type, limit=limit)
    return {"notifications": [n.to_dict() for n in notifications], "count": len(notifications)}


@router.get("/me/transactions")
async def my_transactions_endpoint(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Points history of the caller, including contest prizes."""
    transactions = await get_user_transactions(session, current_user.id, limit=limit, offset=offset)
    return {
        "points_balance": current_user.points_balance,
        "transactions": [tx.to_dict() for tx in transactions],
        "count": len(transactions)
    }


@router.post("/me/notifications/read-all")
async def mark_all_notifications_read_endpoint(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    updated = await mark_all_read(session, current_user.id)
    await session.commit()
    return {"updated": updated}


@router.post("/me/notifications/{notification_id}/read")
async def mark_notification_read_endpoint(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """Mark one of the caller's notifications as read."""
    if not await mark_notification_read(session, notification_id, current_user.id):
        raise NotFound(f"Notification {notification_id} not found")
    await session.commit()
    return {"notification_id": str(notification_id), "is_read": True}


@router.get("/me/entries")
async def my_entries_endpoint(
    status: Optional[EntryStatus] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db)
):
    """
    The caller's own entries in every review state, with rejection reasons.
    """
    entries = await get_user_entries(
        session, current_user.id, status=status.value if status else None, limit=limit, offset=offset
    )
    return {"entries": [entry.to_dict() for entry in entries], "count": len(entries)}
