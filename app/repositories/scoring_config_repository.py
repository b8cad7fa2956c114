import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from app.core.constants import SCORING_CONFIG_ID
from app.models.scoring_config import ScoringConfig
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ScoringConfigRepository(BaseRepository):
    """Encapsulates queries against the singleton ``scoring_configs`` row."""

    async def get_current(self) -> Optional[ScoringConfig]:
        """Return the saved configuration, or ``None`` before the first save."""
        result = await self._db.execute(
            select(ScoringConfig).where(ScoringConfig.config_id == SCORING_CONFIG_ID)
        )
        return result.scalar_one_or_none()

    async def seed_if_empty(self, criteria: List[Dict[str, Any]]) -> None:
        """Insert *criteria* as generation 1 unless a configuration exists.

        ``ON CONFLICT DO NOTHING`` keeps this idempotent and safe when
        two processes start at once.
        """
        stmt = (
            pg_insert(ScoringConfig)
            .values(config_id=SCORING_CONFIG_ID, criteria=criteria, generation=1)
            .on_conflict_do_nothing(index_elements=[ScoringConfig.config_id])
        )
        result = await self._db.execute(stmt)
        if result.rowcount:
            logger.info("Seeded default scoring configuration (%d criteria)", len(criteria))

    async def replace_criteria(
        self,
        criteria: List[Dict[str, Any]],
        updated_by: Optional[str] = None,
    ) -> ScoringConfig:
        """Replace the whole criteria list and bump ``generation``.

        One ``INSERT … ON CONFLICT DO UPDATE`` statement: PostgreSQL
        row-locks the singleton, so concurrent saves serialize and a
        reader never sees half a list.
        """
        stmt = pg_insert(ScoringConfig).values(
            config_id=SCORING_CONFIG_ID,
            criteria=criteria,
            generation=1,
            updated_by=updated_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ScoringConfig.config_id],
            set_={
                "criteria": stmt.excluded.criteria,
                "generation": ScoringConfig.generation + 1,
                "updated_by": stmt.excluded.updated_by,
                "updated_at": func.now(),
            },
        ).returning(ScoringConfig)

        result = await self._db.execute(
            stmt, execution_options={"populate_existing": True}
        )
        return result.scalar_one()

    async def mark_recomputed(self, generation: int) -> bool:
        """Record that a full recompute finished using *generation*.

        Returns ``True`` only when the stored marker actually changed.
        """
        result = await self._db.execute(
            update(ScoringConfig)
            .where(
                ScoringConfig.config_id == SCORING_CONFIG_ID,
                ScoringConfig.recomputed_generation.is_distinct_from(generation),
            )
            .values(recomputed_generation=generation)
        )
        return bool(result.rowcount)
