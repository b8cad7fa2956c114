from fastapi import APIRouter, Depends

from app.schemas.matching import PropertyCompareRequest, PropertyCompareResponse
from app.services.property_suggestion_service import PropertySuggestionService
from app.api.deps import get_property_suggestion_service

router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post("/compare", response_model=PropertyCompareResponse)
async def compare_properties(
    request_body: PropertyCompareRequest,
    service: PropertySuggestionService = Depends(get_property_suggestion_service),
) -> PropertyCompareResponse:
    """Side-by-side details for a handful of properties."""
    return await service.compare_properties(request_body.property_ids)
