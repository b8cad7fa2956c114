"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    LeadSource as LeadSource,
    InterestType as InterestType,
    ListingType as ListingType,
    PropertyType as PropertyType,
    PropertyStatus as PropertyStatus,
    ActivityType as ActivityType,
    MatchType as MatchType,
    CriterionKind as CriterionKind,
    LeadScoreSort as LeadScoreSort,
)

# Scoring schemas
from app.schemas.scoring import (
    Criterion as Criterion,
    ScoreBreakdownItem as ScoreBreakdownItem,
    ScoreResult as ScoreResult,
    ScoringConfigOut as ScoringConfigOut,
    ScoringConfigSaveRequest as ScoringConfigSaveRequest,
    ScorePreviewRequest as ScorePreviewRequest,
    ScorePreviewResponse as ScorePreviewResponse,
    RecomputeResult as RecomputeResult,
)

# Matching schemas
from app.schemas.matching import (
    LeadPreferences as LeadPreferences,
    PropertyListing as PropertyListing,
    MatchResult as MatchResult,
    PropertySuggestion as PropertySuggestion,
    SuggestionResult as SuggestionResult,
)

# Lead schemas
from app.schemas.lead import (
    LeadScoreFilter as LeadScoreFilter,
    LeadOut as LeadOut,
    LeadListResponse as LeadListResponse,
    LeadScoreStatsOut as LeadScoreStatsOut,
)
