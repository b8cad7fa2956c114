from typing import Annotated, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.schemas.lead import LeadListResponse, LeadScoreFilter, LeadScoreStatsOut
from app.schemas.matching import (
    AttachPropertyRequest,
    LeadSuggestionResponse,
    MatchScoreResponse,
    PropertyMatchOut,
)
from app.schemas.scoring import LeadRescoreResponse, LeadScoreBreakdownOut
from app.services.lead_query_service import LeadQueryService
from app.services.lead_scoring import LeadScoringEngine
from app.services.property_suggestion_service import PropertySuggestionService
from app.api.deps import (
    get_lead_query_service,
    get_property_suggestion_service,
    get_scoring_engine,
)

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("", response_model=LeadListResponse)
async def list_leads(
    filters: Annotated[LeadScoreFilter, Query()],
    service: LeadQueryService = Depends(get_lead_query_service),
) -> LeadListResponse:
    """List leads by stored score, highest first unless ``sort=score_asc``.

    ``unscored=true`` returns only leads never scored and cannot be
    combined with a score range.
    """
    return await service.list_leads(filters)


@router.get("/score-stats", response_model=LeadScoreStatsOut)
async def get_score_stats(
    service: LeadQueryService = Depends(get_lead_query_service),
) -> LeadScoreStatsOut:
    """Score distribution, average and high-score leads with no recent activity."""
    return await service.score_stats()


@router.get("/{lead_id}/score", response_model=LeadScoreBreakdownOut)
async def get_score_breakdown(
    lead_id: UUID,
    engine: LeadScoringEngine = Depends(get_scoring_engine),
) -> LeadScoreBreakdownOut:
    """Live per-criterion breakdown next to the stored score."""
    return await engine.get_score_breakdown(lead_id)


@router.post("/{lead_id}/score", response_model=LeadRescoreResponse)
async def rescore_lead(
    lead_id: UUID,
    engine: LeadScoringEngine = Depends(get_scoring_engine),
) -> LeadRescoreResponse:
    return await engine.rescore_lead(lead_id)


@router.get("/{lead_id}/suggestions", response_model=LeadSuggestionResponse)
async def suggest_properties(
    lead_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=100, description="Max suggestions"),
    min_score: Optional[float] = Query(None, ge=0, le=100, description="Score floor"),
    exclude_attached: bool = Query(True, description="Hide already attached properties"),
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> LeadSuggestionResponse:
    """Properties ranked by how well they fit the lead's preferences."""
    return await service.suggest_for_lead(
        lead_id,
        limit=limit,
        min_score=min_score,
        exclude_attached=exclude_attached,
    )


@router.get(
    "/{lead_id}/properties/{property_id}/match",
    response_model=MatchScoreResponse,
)
async def get_match_score(
    lead_id: UUID,
    property_id: UUID,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> MatchScoreResponse:
    return await service.get_match_score(lead_id, property_id)


@router.post(
    "/{lead_id}/matches",
    response_model=PropertyMatchOut,
    status_code=201,
)
async def attach_property(
    lead_id: UUID,
    request_body: AttachPropertyRequest,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> PropertyMatchOut:
    """Link a property to the lead; a pair can only be linked once."""
    return await service.attach_property(
        lead_id,
        request_body.property_id,
        match_type=request_body.match_type,
        created_by=request_body.created_by,
    )


@router.get("/{lead_id}/matches", response_model=List[PropertyMatchOut])
async def list_matches(
    lead_id: UUID,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> List[PropertyMatchOut]:
    return await service.list_matches(lead_id)
