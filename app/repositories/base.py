from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction


class BaseRepository:
    """Thin base class that holds the database session.

    Every concrete repository receives an ``AsyncSession`` at
    construction time so that multiple repositories can share the same
    unit-of-work within a single request or recompute run.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    def savepoint(self) -> AsyncSessionTransaction:
        """Return a nested transaction (SAVEPOINT) usable with ``async with``.

        Leaving the block with an exception rolls back only the work done
        inside it; the outer transaction stays usable.
        """
        return self._db.begin_nested()

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._db.commit()
