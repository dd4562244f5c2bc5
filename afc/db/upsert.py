"""
Dialect-aware INSERT ... ON CONFLICT DO NOTHING
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def insert_if_absent(session: AsyncSession, model, conflict_columns, **values):
    """
    Insert a row unless one already exists for `conflict_columns`.

    The existence check and the insert are a single statement, so two
    concurrent callers can never both insert.

    Returns:
        The new row's id, or None if a conflicting row already existed
    """
    dialect = session.bind.dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"ON CONFLICT inserts are not supported for {dialect}")

    result = await session.execute(
        insert(model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=conflict_columns)
        .returning(model.id)
    )
    return result.scalar_one_or_none()
