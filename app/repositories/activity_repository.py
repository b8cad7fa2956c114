from datetime import datetime
from typing import Dict, Optional, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import select, func

from app.models.activity import LeadActivity
from app.repositories.base import BaseRepository

ActivityStats = Tuple[int, Optional[datetime]]


class ActivityRepository(BaseRepository):
    """Read-only aggregates over the ``lead_activities`` table."""

    async def get_activity_stats(self, lead_id: UUID) -> ActivityStats:
        """Return ``(activity_count, latest_created_at)`` for one lead."""
        result = await self._db.execute(
            select(func.count(), func.max(LeadActivity.created_at)).where(
                LeadActivity.lead_id == lead_id
            )
        )
        count, last_at = result.one()
        return count or 0, last_at

    async def get_activity_stats_by_lead(self) -> Dict[UUID, ActivityStats]:
        """Return activity aggregates for every lead that has activities.

        One grouped query so that a bulk recompute does not issue a
        query per lead.  Leads without activities are absent.
        """
        result = await self._db.execute(
            select(
                LeadActivity.lead_id,
                func.count(),
                func.max(LeadActivity.created_at),
            ).group_by(LeadActivity.lead_id)
        )
        return {row[0]: (row[1], row[2]) for row in result.all()}

    async def lead_ids_with_activity_since(
        self, lead_ids: Sequence[UUID], since: datetime
    ) -> Set[UUID]:
        """Return the subset of *lead_ids* with an activity at or after *since*."""
        if not lead_ids:
            return set()
        result = await self._db.execute(
            select(LeadActivity.lead_id)
            .where(
                LeadActivity.lead_id.in_(lead_ids),
                LeadActivity.created_at >= since,
            )
            .distinct()
        )
        return set(result.scalars().all())
