import logging
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import UUID

from app.core.exceptions import LeadNotFoundError
from app.repositories.lead_repository import LeadRepository
from app.schemas.scoring import Criterion, ScorePreviewResponse
from app.services.lead_scoring import LeadScoringEngine, evaluate

logger = logging.getLogger(__name__)


class ScorePreviewService:
    """Score one stored lead against unsaved (draft) criteria.

    Read-only and uncached: drafts change on every keystroke in the
    admin screen, so every call evaluates from scratch.  Drafts are not
    validated: a threshold rule still missing its threshold simply
    scores as not met.
    """

    def __init__(self, lead_repo: LeadRepository, scoring_engine: LeadScoringEngine) -> None:
        self._lead_repo = lead_repo
        self._scoring_engine = scoring_engine

    async def preview(
        self,
        lead_id: Optional[UUID],
        draft_criteria: Sequence[Criterion],
        as_of: Optional[datetime] = None,
    ) -> ScorePreviewResponse:
        if lead_id is None:
            return ScorePreviewResponse(skipped=True)

        lead = await self._lead_repo.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")

        facts = await self._scoring_engine.load_facts(
            lead, as_of or datetime.now(timezone.utc)
        )
        return ScorePreviewResponse(
            lead_id=lead.lead_id,
            lead_name=lead.full_name,
            result=evaluate(facts, draft_criteria),
        )
