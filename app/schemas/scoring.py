"""Scoring configuration, preview and recompute schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from app.schemas.common import CriterionKind


class Criterion(BaseModel):
    """One weighted scoring rule.

    ``kind`` is also accepted as ``type`` on input and ``key`` is
    stripped, so saving and scoring see the same key.  Semantic checks
    (non-negative weight, threshold present for threshold rules, unique
    keys) run when a configuration is saved, not here, so that unsaved
    drafts can still be previewed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str
    label: str = ""
    kind: CriterionKind = Field(..., validation_alias=AliasChoices("kind", "type"))
    weight: float
    enabled: bool = True
    threshold: Optional[float] = None

    @field_validator("key")
    @classmethod
    def strip_key(cls, v: str) -> str:
        return v.strip()


class ScoreBreakdownItem(BaseModel):
    key: str
    label: str
    points: float
    max_points: float
    met: bool


class ScoreResult(BaseModel):
    """Total score with one breakdown line per enabled criterion."""

    total_score: float
    max_possible: float
    breakdown: List[ScoreBreakdownItem] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Configuration store
# ---------------------------------------------------------------------------


class ScoringConfigOut(BaseModel):
    criteria: List[Criterion]
    is_default: bool
    generation: int
    recomputed_generation: Optional[int] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def is_stale(self) -> bool:
        return self.generation != self.recomputed_generation


class ScoringConfigSaveRequest(BaseModel):
    """Request body for PUT /api/v1/scoring/config (whole-set replace)."""

    criteria: List[Criterion]
    updated_by: Optional[str] = Field(default=None, max_length=100)


class FactKeyOut(BaseModel):
    key: str
    kind: CriterionKind
    description: str


# ---------------------------------------------------------------------------
# Preview / recompute / single lead
# ---------------------------------------------------------------------------


class ScorePreviewRequest(BaseModel):
    """Draft criteria evaluated against one lead without saving."""

    lead_id: Optional[UUID] = None
    criteria: List[Criterion] = Field(default_factory=list)


class ScorePreviewResponse(BaseModel):
    skipped: bool = False
    lead_id: Optional[UUID] = None
    lead_name: Optional[str] = None
    result: Optional[ScoreResult] = None


class RecomputeResult(BaseModel):
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    generation: int


class LeadScoreBreakdownOut(BaseModel):
    lead_id: UUID
    result: ScoreResult
    stored_score: Optional[float] = None
    last_scored_at: Optional[datetime] = None
    generation: int
    is_stale: bool


class LeadRescoreResponse(BaseModel):
    lead_id: UUID
    score: float
    last_scored_at: Optional[datetime] = None
    changed: bool
