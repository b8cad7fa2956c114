from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select

from app.models.property import Property
from app.repositories.base import BaseRepository


class PropertyRepository(BaseRepository):
    """Encapsulates queries against the ``properties`` table."""

    async def get_by_id(self, property_id: UUID) -> Optional[Property]:
        result = await self._db.execute(
            select(Property).where(Property.property_id == property_id)
        )
        return result.scalar_one_or_none()

    async def get_many(self, property_ids: Sequence[UUID]) -> List[Property]:
        """Return the properties for *property_ids*, preserving request order."""
        if not property_ids:
            return []
        result = await self._db.execute(
            select(Property).where(Property.property_id.in_(property_ids))
        )
        by_id = {p.property_id: p for p in result.scalars().all()}
        return [by_id[pid] for pid in property_ids if pid in by_id]

    async def list_all(self, statuses: Optional[Iterable[str]] = None) -> List[Property]:
        """Return every property, optionally restricted to *statuses*."""
        query = select(Property)
        if statuses is not None:
            query = query.where(Property.status.in_(list(statuses)))
        result = await self._db.execute(query.order_by(Property.property_id))
        return list(result.scalars().all())
