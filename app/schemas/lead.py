"""Lead listing schemas (score-filtered views)."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import InterestType, LeadScoreSort


class LeadScoreFilter(BaseModel):
    """Score filter for lead listings.

    ``unscored=True`` selects leads that were never scored
    (``score IS NULL``) and cannot be combined with a range.  A range
    only ever matches scored leads, so "scored zero" and "unscored"
    stay distinct.  Unscored leads sort last in either direction.
    """

    score_min: Optional[float] = Field(default=None, ge=0)
    score_max: Optional[float] = Field(default=None, ge=0)
    unscored: Optional[bool] = None
    sort: LeadScoreSort = LeadScoreSort.score_desc
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lead_id: UUID
    full_name: str
    email: Optional[str] = None
    interest_type: InterestType
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_areas: List[str] = Field(default_factory=list)
    score: Optional[float] = None
    last_scored_at: Optional[datetime] = None
    is_archived: bool = False


class LeadListResponse(BaseModel):
    items: List[LeadOut]
    count: int


# ---------------------------------------------------------------------------
# Score statistics
# ---------------------------------------------------------------------------


class ScoreBucketOut(BaseModel):
    label: str
    range: str
    count: int


class UnworkedLeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lead_id: UUID
    full_name: str
    score: float
    last_scored_at: Optional[datetime] = None


class LeadScoreStatsOut(BaseModel):
    """Score distribution over non-archived leads.

    Buckets only count scored leads; ``unscored_count`` reports the rest
    and ``average_score`` is ``None`` when nothing has been scored yet.
    """

    total_active: int
    scored_count: int
    unscored_count: int
    average_score: Optional[float] = None
    distribution: List[ScoreBucketOut]
    top_unworked: List[UnworkedLeadOut] = Field(default_factory=list)
