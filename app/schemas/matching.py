"""Property matching and suggestion schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import InterestType, ListingType, MatchType


class LeadPreferences(BaseModel):
    """The slice of a lead the property matcher reads."""

    model_config = ConfigDict(from_attributes=True)

    interest_type: InterestType
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_areas: List[str] = Field(default_factory=list)


class PropertyListing(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    property_id: UUID
    title: str = ""
    type: str
    listing_type: ListingType
    price: float
    currency: str
    location: str
    area: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    status: str
    images: List[str] = Field(default_factory=list)


class PropertyDetail(PropertyListing):
    description: str = ""
    created_at: Optional[datetime] = None


class LeadSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lead_id: UUID
    full_name: str
    interest_type: InterestType
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    budget_currency: Optional[str] = None
    preferred_areas: List[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    """Per-facet match score for one lead–property pair."""

    interest_type_score: float = Field(..., ge=0, le=30)
    budget_score: float = Field(..., ge=0, le=35)
    location_score: float = Field(..., ge=0, le=25)
    availability_score: float = Field(..., ge=0, le=10)
    total_score: float = Field(..., ge=0, le=100)
    match_reasons: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class PropertySuggestion(MatchResult):
    property: PropertyListing


class SuggestionResult(BaseModel):
    matched_count: int
    total_available_properties: int
    suggestions: List[PropertySuggestion] = Field(default_factory=list)


class LeadSuggestionResponse(SuggestionResult):
    lead: LeadSummary


class MatchScoreResponse(MatchResult):
    lead: LeadSummary
    property: PropertyListing


# ---------------------------------------------------------------------------
# Bulk matching
# ---------------------------------------------------------------------------


class BulkMatchRequest(BaseModel):
    lead_ids: Optional[List[UUID]] = None
    min_score: Optional[float] = Field(default=None, ge=0, le=100)
    top_n: Optional[int] = Field(default=None, ge=1, le=50)


class BulkMatchLeadResult(BaseModel):
    lead: LeadSummary
    match_count: int
    top_matches: List[PropertySuggestion] = Field(default_factory=list)


class BulkMatchSummary(BaseModel):
    total_leads: int
    leads_with_matches: int
    avg_matches_per_lead: float
    total_properties_analyzed: int


class BulkMatchResponse(BaseModel):
    results: List[BulkMatchLeadResult]
    summary: BulkMatchSummary


# ---------------------------------------------------------------------------
# Attach / detach
# ---------------------------------------------------------------------------


class AttachPropertyRequest(BaseModel):
    property_id: UUID
    match_type: MatchType = MatchType.suggested
    created_by: Optional[str] = Field(default=None, max_length=100)


class PropertyMatchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    match_id: UUID
    lead_id: UUID
    property_id: UUID
    match_type: MatchType
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    property: Optional[PropertyListing] = None


class BulkAttachItem(BaseModel):
    lead_id: UUID
    property_id: UUID


class BulkAttachRequest(BaseModel):
    attachments: List[BulkAttachItem] = Field(..., min_length=1)
    created_by: Optional[str] = Field(default=None, max_length=100)


class BulkAttachItemResult(BaseModel):
    lead_id: UUID
    property_id: UUID
    success: bool
    error: Optional[str] = None


class BulkAttachResponse(BaseModel):
    results: List[BulkAttachItemResult]
    success_count: int
    failure_count: int


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class PropertyCompareRequest(BaseModel):
    property_ids: List[UUID] = Field(default_factory=list)


class PropertyCompareResponse(BaseModel):
    properties: List[PropertyDetail] = Field(default_factory=list)
