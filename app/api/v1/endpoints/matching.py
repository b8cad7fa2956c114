from uuid import UUID

from fastapi import APIRouter, Depends, Response

from app.schemas.matching import (
    BulkAttachRequest,
    BulkAttachResponse,
    BulkMatchRequest,
    BulkMatchResponse,
)
from app.services.property_suggestion_service import PropertySuggestionService
from app.api.deps import get_property_suggestion_service

router = APIRouter(tags=["Matching"])


@router.post("/matching/bulk", response_model=BulkMatchResponse)
async def bulk_match(
    request_body: BulkMatchRequest,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> BulkMatchResponse:
    """Top matches for the given leads, or for every open lead."""
    return await service.bulk_match(
        lead_ids=request_body.lead_ids,
        min_score=request_body.min_score,
        top_n=request_body.top_n,
    )


@router.post("/matching/bulk-attach", response_model=BulkAttachResponse)
async def bulk_attach(
    request_body: BulkAttachRequest,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> BulkAttachResponse:
    """Attach many lead/property pairs; failures are reported per pair."""
    return await service.bulk_attach(
        request_body.attachments, created_by=request_body.created_by
    )


@router.delete("/matches/{match_id}", status_code=204)
async def detach_property(
    match_id: UUID,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> Response:
    await service.detach(match_id)
    return Response(status_code=204)
