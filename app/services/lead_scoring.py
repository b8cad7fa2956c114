import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from app.core.exceptions import LeadNotFoundError
from app.repositories.activity_repository import ActivityRepository
from app.repositories.lead_repository import LeadRepository
from app.schemas.common import CriterionKind
from app.schemas.scoring import (
    Criterion,
    LeadRescoreResponse,
    LeadScoreBreakdownOut,
    ScoreBreakdownItem,
    ScoreResult,
)
from app.services.lead_facts import FACT_RESOLVERS, FactDefinition, FactValue, LeadFacts
from app.services.scoring_config_service import ScoringConfigService

logger = logging.getLogger(__name__)


def evaluate(
    lead: Any,
    criteria: Iterable[Criterion],
    resolvers: Mapping[str, FactDefinition] = FACT_RESOLVERS,
) -> ScoreResult:
    """Score *lead* against *criteria*.

    Pure: no I/O and no clock.  Disabled criteria are left out of both
    the breakdown and ``max_possible``.  A fact that is missing, of the
    wrong type, or whose resolver blows up counts as "not met"; scoring
    never fails as a whole because of one odd field.
    """
    breakdown = []
    total = 0.0
    max_possible = 0.0

    for criterion in criteria:
        if not criterion.enabled:
            continue

        met = _is_met(criterion, _resolve(criterion.key, lead, resolvers))
        points = criterion.weight if met else 0.0
        total += points
        max_possible += criterion.weight
        breakdown.append(
            ScoreBreakdownItem(
                key=criterion.key,
                label=criterion.label,
                points=points,
                max_points=criterion.weight,
                met=met,
            )
        )

    return ScoreResult(total_score=total, max_possible=max_possible, breakdown=breakdown)


def _resolve(key: str, lead: Any, resolvers: Mapping[str, FactDefinition]) -> FactValue:
    definition = resolvers.get(key)
    if definition is None:
        return None
    try:
        return definition.resolver(lead)
    except (TypeError, ValueError, AttributeError, KeyError):
        logger.debug("Fact %r could not be resolved; treating as not met", key)
        return None


def _is_met(criterion: Criterion, fact: FactValue) -> bool:
    if criterion.kind is CriterionKind.boolean:
        return fact is True

    if criterion.threshold is None:
        return False
    if isinstance(fact, bool) or not isinstance(fact, (int, float)):
        return False
    if math.isnan(fact):
        return False
    return fact >= criterion.threshold


class LeadScoringEngine:
    """Single-lead scoring against the saved configuration.

    Bulk work lives in :mod:`app.services.score_recompute`; this class
    serves the lead-detail view (live breakdown) and the re-evaluation
    hook that lead edits call.
    """

    def __init__(
        self,
        config_service: ScoringConfigService,
        lead_repo: LeadRepository,
        activity_repo: ActivityRepository,
    ) -> None:
        self._config_service = config_service
        self._lead_repo = lead_repo
        self._activity_repo = activity_repo

    async def load_facts(self, lead: Any, as_of: datetime) -> LeadFacts:
        """Snapshot *lead* together with its activity aggregates."""
        activity_count, last_activity_at = await self._activity_repo.get_activity_stats(
            lead.lead_id
        )
        return LeadFacts.from_lead(
            lead,
            as_of=as_of,
            activity_count=activity_count,
            last_activity_at=last_activity_at,
        )

    async def get_score_breakdown(
        self, lead_id: UUID, as_of: Optional[datetime] = None
    ) -> LeadScoreBreakdownOut:
        lead = await self._lead_repo.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        config = await self._config_service.get_config()
        facts = await self.load_facts(lead, as_of or datetime.now(timezone.utc))
        result = evaluate(facts, config.criteria)

        return LeadScoreBreakdownOut(
            lead_id=lead.lead_id,
            result=result,
            stored_score=lead.score,
            last_scored_at=lead.last_scored_at,
            generation=config.generation,
            is_stale=lead.score is None or lead.score != result.total_score,
        )

    async def rescore_lead(self, lead_id: UUID) -> LeadRescoreResponse:
        """Re-evaluate one lead and persist the score only if it changed."""
        lead = await self._lead_repo.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        config = await self._config_service.get_config(use_cache=False)
        as_of = datetime.now(timezone.utc)
        facts = await self.load_facts(lead, as_of)
        total = evaluate(facts, config.criteria).total_score

        if lead.score is not None and lead.score == total:
            return LeadRescoreResponse(
                lead_id=lead.lead_id,
                score=total,
                last_scored_at=lead.last_scored_at,
                changed=False,
            )

        await self._lead_repo.update_score(lead.lead_id, total, as_of)
        await self._lead_repo.commit()
        logger.info("Lead %s rescored: %s -> %s", lead.lead_id, lead.score, total)

        return LeadRescoreResponse(
            lead_id=lead.lead_id,
            score=total,
            last_scored_at=as_of,
            changed=True,
        )
