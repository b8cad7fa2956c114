import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService
from app.repositories.activity_repository import ActivityRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.scoring_config_repository import ScoringConfigRepository
from app.schemas.scoring import RecomputeResult
from app.services.lead_facts import LeadFacts
from app.services.lead_scoring import evaluate
from app.services.scoring_config_service import ScoringConfigService

logger = logging.getLogger(__name__)


class ScoreRecomputeService:
    """Re-score the whole lead population against one config snapshot.

    The configuration is read exactly once, before any lead is touched;
    a failed read raises and nothing is written.  Each lead is then
    evaluated independently and written inside its own SAVEPOINT, only
    when its score actually changed.  A lead that cannot be evaluated or
    written is logged, rolled back and counted as failed; the run goes
    on.  Running twice with no data change updates nothing the second
    time.
    """

    def __init__(
        self,
        config_service: ScoringConfigService,
        config_repo: ScoringConfigRepository,
        lead_repo: LeadRepository,
        activity_repo: ActivityRepository,
    ) -> None:
        self._config_service = config_service
        self._config_repo = config_repo
        self._lead_repo = lead_repo
        self._activity_repo = activity_repo

    async def recompute_all(self, as_of: Optional[datetime] = None) -> RecomputeResult:
        config = await self._config_service.get_config(use_cache=False)
        criteria = tuple(config.criteria)
        as_of = as_of or datetime.now(timezone.utc)

        leads = await self._lead_repo.list_for_scoring()
        stats = await self._activity_repo.get_activity_stats_by_lead()

        result = RecomputeResult(generation=config.generation)

        for lead in leads:
            lead_id = lead.lead_id
            stored_score = lead.score
            try:
                activity_count, last_activity_at = stats.get(lead_id, (0, None))
                facts = LeadFacts.from_lead(
                    lead,
                    as_of=as_of,
                    activity_count=activity_count,
                    last_activity_at=last_activity_at,
                )
                total = evaluate(facts, criteria).total_score

                if stored_score is not None and stored_score == total:
                    result.unchanged += 1
                    continue

                async with self._lead_repo.savepoint():
                    await self._lead_repo.update_score(lead_id, total, as_of)
                result.updated += 1
            except Exception:
                result.failed += 1
                logger.warning("Failed to rescore lead %s", lead_id, exc_info=True)

        if result.failed == 0:
            await self._config_repo.mark_recomputed(config.generation)
        await self._lead_repo.commit()

        logger.info(
            "Score recompute finished: generation=%s updated=%d unchanged=%d failed=%d",
            result.generation,
            result.updated,
            result.unchanged,
            result.failed,
        )
        return result


async def run_score_recompute(
    session_factory: Callable[..., AsyncSession],
    cache: Optional[CacheService] = None,
) -> RecomputeResult:
    """One-shot recompute in a fresh session.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession`` (e.g. ``AsyncSessionLocal``).
        cache: Optional cache; only used by the config service.
    """
    async with session_factory() as session:
        config_repo = ScoringConfigRepository(session)
        service = ScoreRecomputeService(
            config_service=ScoringConfigService(config_repo, cache=cache),
            config_repo=config_repo,
            lead_repo=LeadRepository(session),
            activity_repo=ActivityRepository(session),
        )
        return await service.recompute_all()


async def start_score_recompute_loop(
    session_factory: Callable[..., AsyncSession],
    interval_seconds: int,
) -> None:
    """Infinite loop that recomputes every lead score on a fixed interval.

    Time-relative criteria (recent activity, days since contact) change
    without any write to the lead, so scores drift unless refreshed.
    """
    logger.info("Score recompute background task started (interval=%ds)", interval_seconds)
    while True:
        try:
            await run_score_recompute(session_factory)
        except Exception:
            logger.error("Score recompute cycle failed", exc_info=True)
        await asyncio.sleep(interval_seconds)
