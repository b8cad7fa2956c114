from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import case, func, select, update

from app.models.lead import Lead
from app.repositories.base import BaseRepository
from app.schemas.common import LeadScoreSort
from app.schemas.lead import LeadScoreFilter


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get_by_id(self, lead_id: UUID) -> Optional[Lead]:
        """Return a single lead by primary key, or ``None``."""
        result = await self._db.execute(select(Lead).where(Lead.lead_id == lead_id))
        return result.scalar_one_or_none()

    async def get_many(self, lead_ids: Sequence[UUID]) -> List[Lead]:
        """Return the leads whose ids are in *lead_ids* (missing ids are skipped)."""
        if not lead_ids:
            return []
        result = await self._db.execute(
            select(Lead).where(Lead.lead_id.in_(lead_ids)).order_by(Lead.lead_id)
        )
        return list(result.scalars().all())

    async def list_for_scoring(self) -> List[Lead]:
        """Return every non-archived lead, in a stable order."""
        result = await self._db.execute(
            select(Lead).where(Lead.is_archived.is_(False)).order_by(Lead.lead_id)
        )
        return list(result.scalars().all())

    async def list_open(self) -> List[Lead]:
        """Return non-archived leads that have not been closed."""
        result = await self._db.execute(
            select(Lead)
            .where(Lead.is_archived.is_(False), Lead.closed_at.is_(None))
            .order_by(Lead.lead_id)
        )
        return list(result.scalars().all())

    async def list_by_score(self, filters: LeadScoreFilter) -> List[Lead]:
        """List leads filtered by score bucket.

        ``unscored=True`` → ``score IS NULL``; ``unscored=False`` → scored
        leads only.  ``score_min``/``score_max`` compare against the
        stored score, so a NULL score never falls inside a range.
        """
        query = select(Lead).where(Lead.is_archived.is_(False))

        if filters.unscored is True:
            query = query.where(Lead.score.is_(None))
        elif filters.unscored is False:
            query = query.where(Lead.score.is_not(None))

        if filters.score_min is not None:
            query = query.where(Lead.score >= filters.score_min)
        if filters.score_max is not None:
            query = query.where(Lead.score <= filters.score_max)

        if filters.sort == LeadScoreSort.score_asc:
            order = Lead.score.asc().nulls_last()
        else:
            order = Lead.score.desc().nulls_last()

        query = (
            query.order_by(order, Lead.lead_id)
            .offset(filters.offset)
            .limit(filters.limit)
        )
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def score_summary(self) -> Tuple[int, int, Optional[float]]:
        """Return ``(active, scored, average_score)`` over non-archived leads.

        ``average_score`` ignores unscored leads and is ``None`` when
        none is scored.
        """
        result = await self._db.execute(
            select(func.count(), func.count(Lead.score), func.avg(Lead.score)).where(
                Lead.is_archived.is_(False)
            )
        )
        active, scored, average = result.one()
        return active or 0, scored or 0, (float(average) if average is not None else None)

    async def score_bucket_counts(self, floors: Sequence[float]) -> Dict[int, int]:
        """Count scored, non-archived leads per bucket.

        Bucket ``i`` holds scores from ``floors[i]`` up to
        ``floors[i + 1]``; buckets with no leads are absent.
        """
        bucket = case(
            *[
                (Lead.score >= floor, index)
                for index, floor in reversed(list(enumerate(floors)))
            ],
            else_=0,
        ).label("bucket")
        result = await self._db.execute(
            select(bucket, func.count())
            .where(Lead.is_archived.is_(False), Lead.score.is_not(None))
            .group_by(bucket)
        )
        return {row[0]: row[1] for row in result.all()}

    async def list_top_scored_open(self, limit: int) -> List[Lead]:
        """Open leads with a score above zero, highest first."""
        result = await self._db.execute(
            select(Lead)
            .where(
                Lead.is_archived.is_(False),
                Lead.closed_at.is_(None),
                Lead.score > 0,
            )
            .order_by(Lead.score.desc(), Lead.lead_id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update_score(
        self, lead_id: UUID, new_score: float, scored_at: datetime
    ) -> None:
        """Set ``score`` and ``last_scored_at`` together in one UPDATE."""
        await self._db.execute(
            update(Lead)
            .where(Lead.lead_id == lead_id)
            .values(score=new_score, last_scored_at=scored_at)
        )
