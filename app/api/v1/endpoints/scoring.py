from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.rate_limit import limiter
from app.schemas.scoring import (
    FactKeyOut,
    RecomputeResult,
    ScorePreviewRequest,
    ScorePreviewResponse,
    ScoringConfigOut,
    ScoringConfigSaveRequest,
)
from app.services.score_preview import ScorePreviewService
from app.services.score_recompute import ScoreRecomputeService, run_score_recompute
from app.services.scoring_config_service import ScoringConfigService
from app.api.deps import (
    get_score_preview_service,
    get_score_recompute_service,
    get_scoring_config_service,
)

router = APIRouter(prefix="/scoring", tags=["Scoring"])


@router.get("/config", response_model=ScoringConfigOut)
async def get_scoring_config(
    service: ScoringConfigService = Depends(get_scoring_config_service),
) -> ScoringConfigOut:
    """Current scoring criteria, or the built-in defaults if none were saved."""
    return await service.get_config()


@router.put("/config", response_model=ScoringConfigOut)
async def save_scoring_config(
    request_body: ScoringConfigSaveRequest,
    background_tasks: BackgroundTasks,
    service: ScoringConfigService = Depends(get_scoring_config_service),
) -> ScoringConfigOut:
    """Replace the whole criteria list.

    On success a full recompute is scheduled in the background; the
    response reports the new generation before that recompute lands.
    """
    config = await service.save_config(
        request_body.criteria, updated_by=request_body.updated_by
    )
    background_tasks.add_task(run_score_recompute, AsyncSessionLocal)
    return config


@router.get("/fact-keys", response_model=List[FactKeyOut])
async def list_fact_keys() -> List[FactKeyOut]:
    """Fact keys a criterion can reference, with their expected kind."""
    return ScoringConfigService.list_fact_keys()


@router.post("/preview", response_model=ScorePreviewResponse)
async def preview_score(
    request_body: ScorePreviewRequest,
    service: ScorePreviewService = Depends(get_score_preview_service),
) -> ScorePreviewResponse:
    """Score one lead against draft criteria without saving anything."""
    return await service.preview(request_body.lead_id, request_body.criteria)


@router.post("/recompute", response_model=RecomputeResult)
@limiter.limit(settings.RECOMPUTE_RATE_LIMIT)
async def recompute_scores(
    request: Request,
    service: ScoreRecomputeService = Depends(get_score_recompute_service),
) -> RecomputeResult:
    """Re-score every lead against the saved configuration now."""
    return await service.recompute_all()
