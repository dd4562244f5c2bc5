"""
Denormalized counter maintenance.

Every aggregate counter (entries_count, reactions_count, comments_count,
wins_count, followers_count, ...) is changed through `increment`, which issues
a single `UPDATE ... SET col = col + delta` so concurrent callers never lose
updates. Counters never go negative: an underflowing decrement is clamped to
zero and logged as an inconsistency instead of being raised.
"""

import logging
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import InstrumentedAttribute

from afc.core.errors import InvalidOperation, NotFound
from afc.models.comment import Comment
from afc.models.contest import Contest
from afc.models.entry import Entry
from afc.models.user import User

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = [
    Contest.entries_count,
    Entry.reactions_count,
    Entry.comments_count,
    Comment.likes_count,
    User.xp,
    User.points_balance,
    User.entries_count,
    User.wins_count,
    User.total_reactions_received,
    User.followers_count,
    User.following_count,
]

_REGISTERED = frozenset((column.class_, column.key) for column in COUNTER_COLUMNS)


async def _set_returning(session: AsyncSession, counter, entity_id, value, *conditions):
    model = counter.class_
    result = await session.execute(
        update(model)
        .where(model.id == entity_id, *conditions)
        .values({counter.key: value})
        .returning(counter)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


async def increment(
    session: AsyncSession,
    counter: InstrumentedAttribute,
    entity_id: UUID,
    delta: int
) -> int:
    """
    Atomically add `delta` to a counter column and return the stored value.

    Does not commit; the caller owns the transaction. ORM instances already
    loaded in the session are not refreshed.

    Args:
        session: Database session
        counter: Mapped counter column, e.g. Entry.reactions_count
        entity_id: Primary key of the owning row
        delta: Amount to add (may be negative)

    Returns:
        The counter value after the update

    Raises:
        NotFound: if no row has that id
        InvalidOperation: if the column is not a registered counter
    """
    if (counter.class_, counter.key) not in _REGISTERED:
        raise InvalidOperation(f"{counter.class_.__name__}.{counter.key} is not a counter column")

    model = counter.class_

    if delta >= 0:
        value = await _set_returning(session, counter, entity_id, counter + delta)
        if value is None:
            raise NotFound(f"{model.__name__} {entity_id} not found")
        return value

    # Conditional decrement: only applies while the result stays non-negative
    value = await _set_returning(session, counter, entity_id, counter + delta, counter + delta >= 0)
    if value is not None:
        return value

    # Either the row is missing or the counter would underflow
    value = await _set_returning(session, counter, entity_id, 0)
    if value is None:
        raise NotFound(f"{model.__name__} {entity_id} not found")

    logger.warning(
        f"Counter underflow: {model.__name__}.{counter.key} for {entity_id} "
        f"would go below zero (delta {delta}); clamped to 0"
    )
    return value
