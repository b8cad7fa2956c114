from datetime import datetime, timedelta, timezone
from typing import List, Optional

from app.core.constants import (
    SCORE_BUCKETS,
    SCORE_CEILING,
    UNWORKED_CANDIDATE_LIMIT,
    UNWORKED_LOOKBACK_DAYS,
    UNWORKED_RESULT_LIMIT,
)
from app.core.exceptions import InvalidLeadFilterError
from app.repositories.activity_repository import ActivityRepository
from app.repositories.lead_repository import LeadRepository
from app.schemas.lead import (
    LeadListResponse,
    LeadOut,
    LeadScoreFilter,
    LeadScoreStatsOut,
    ScoreBucketOut,
    UnworkedLeadOut,
)


def _bucket_ranges() -> List[str]:
    floors = [floor for _, floor in SCORE_BUCKETS]
    uppers = [f"{next_floor - 1:g}" for next_floor in floors[1:]]
    uppers.append(f"{SCORE_CEILING:g}")
    return [f"{floor:g}-{upper}" for floor, upper in zip(floors, uppers)]


class LeadQueryService:
    """Score-filtered lead listings and score statistics."""

    def __init__(
        self, lead_repo: LeadRepository, activity_repo: ActivityRepository
    ) -> None:
        self._lead_repo = lead_repo
        self._activity_repo = activity_repo

    @staticmethod
    def validate_filter(filters: LeadScoreFilter) -> None:
        has_range = filters.score_min is not None or filters.score_max is not None
        if filters.unscored is True and has_range:
            raise InvalidLeadFilterError(
                "unscored=true cannot be combined with score_min/score_max"
            )
        if (
            filters.score_min is not None
            and filters.score_max is not None
            and filters.score_min > filters.score_max
        ):
            raise InvalidLeadFilterError("score_min must not exceed score_max")

    async def list_leads(self, filters: LeadScoreFilter) -> LeadListResponse:
        self.validate_filter(filters)
        leads = await self._lead_repo.list_by_score(filters)
        items = [LeadOut.model_validate(lead) for lead in leads]
        return LeadListResponse(items=items, count=len(items))

    async def score_stats(self, as_of: Optional[datetime] = None) -> LeadScoreStatsOut:
        """Distribution, averages and high-score leads gone quiet.

        Unscored leads are counted apart and never land in the Cold
        bucket or drag the average toward zero.
        """
        as_of = as_of or datetime.now(timezone.utc)

        active, scored, average = await self._lead_repo.score_summary()
        counts = await self._lead_repo.score_bucket_counts(
            [floor for _, floor in SCORE_BUCKETS]
        )
        distribution = [
            ScoreBucketOut(label=label, range=span, count=counts.get(index, 0))
            for index, ((label, _), span) in enumerate(
                zip(SCORE_BUCKETS, _bucket_ranges())
            )
        ]

        candidates = await self._lead_repo.list_top_scored_open(
            UNWORKED_CANDIDATE_LIMIT
        )
        worked = await self._activity_repo.lead_ids_with_activity_since(
            [lead.lead_id for lead in candidates],
            as_of - timedelta(days=UNWORKED_LOOKBACK_DAYS),
        )
        top_unworked = [
            UnworkedLeadOut.model_validate(lead)
            for lead in candidates
            if lead.lead_id not in worked
        ][:UNWORKED_RESULT_LIMIT]

        return LeadScoreStatsOut(
            total_active=active,
            scored_count=scored,
            unscored_count=active - scored,
            average_score=round(average, 1) if average is not None else None,
            distribution=distribution,
            top_unworked=top_unworked,
        )
