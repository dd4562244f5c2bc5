"""
User repository with async CRUD operations
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from afc.models.user import User
from afc.models.enums import UserRole


async def create_user(
    session: AsyncSession,
    username: str,
    display_name: Optional[str] = None,
    role: str = UserRole.USER.value
) -> User:
    """
    Create a new user.
    
    Args:
        session: Database session
        username: Username (must be unique)
        display_name: Optional display name
        role: User role (default: user)
    
    Returns:
        Created User instance
    """
    user = User(
        username=username,
        display_name=display_name,
        role=role
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def get_user_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    """
    Get user by ID.
    
    Args:
        session: Database session
        user_id: User UUID
    
    Returns:
        User instance or None if not found
    """
    result = await session.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    """
    Get user by username.
    
    Args:
        session: Database session
        username: Username
    
    Returns:
        User instance or None if not found
    """
    result = await session.execute(
        select(User).where(User.username == username)
    )
    return result.scalar_one_or_none()
