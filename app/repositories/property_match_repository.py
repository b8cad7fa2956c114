from typing import Any, Dict, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select, delete

from app.models.property import Property
from app.models.property_match import LeadPropertyMatch
from app.repositories.base import BaseRepository


class PropertyMatchRepository(BaseRepository):
    """Encapsulates queries against the ``lead_property_matches`` table."""

    async def create(self, **kwargs: Any) -> LeadPropertyMatch:
        """Insert a new lead–property link and load its server defaults."""
        match = LeadPropertyMatch(**kwargs)
        self._db.add(match)
        await self._db.flush()
        await self._db.refresh(match)
        return match

    async def get_by_id(self, match_id: UUID) -> Optional[LeadPropertyMatch]:
        result = await self._db.execute(
            select(LeadPropertyMatch).where(LeadPropertyMatch.match_id == match_id)
        )
        return result.scalar_one_or_none()

    async def exists(self, lead_id: UUID, property_id: UUID) -> bool:
        result = await self._db.execute(
            select(LeadPropertyMatch.match_id).where(
                LeadPropertyMatch.lead_id == lead_id,
                LeadPropertyMatch.property_id == property_id,
            )
        )
        return result.first() is not None

    async def list_for_lead(
        self, lead_id: UUID
    ) -> List[Tuple[LeadPropertyMatch, Optional[Property]]]:
        """Return a lead's matches joined with their property (if it still exists)."""
        result = await self._db.execute(
            select(LeadPropertyMatch, Property)
            .outerjoin(Property, Property.property_id == LeadPropertyMatch.property_id)
            .where(LeadPropertyMatch.lead_id == lead_id)
            .order_by(LeadPropertyMatch.created_at, LeadPropertyMatch.match_id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def attached_property_ids(self, lead_id: UUID) -> Set[UUID]:
        result = await self._db.execute(
            select(LeadPropertyMatch.property_id).where(
                LeadPropertyMatch.lead_id == lead_id
            )
        )
        return set(result.scalars().all())

    async def attached_property_ids_by_lead(self) -> Dict[UUID, Set[UUID]]:
        """Return ``lead_id → {property_id, ...}`` for every existing link."""
        result = await self._db.execute(
            select(LeadPropertyMatch.lead_id, LeadPropertyMatch.property_id)
        )
        attached: Dict[UUID, Set[UUID]] = {}
        for lead_id, property_id in result.all():
            attached.setdefault(lead_id, set()).add(property_id)
        return attached

    async def delete(self, match_id: UUID) -> None:
        await self._db.execute(
            delete(LeadPropertyMatch).where(LeadPropertyMatch.match_id == match_id)
        )
