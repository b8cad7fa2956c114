import logging
from typing import Optional

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.services.lead_scoring import LeadScoringEngine
from app.services.scoring_config_service import ScoringConfigService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> Optional[Redis]:
    """Get an async Redis client, or ``None`` when Redis is unreachable."""
    try:
        client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        await client.ping()
        return client
    except Exception:
        logger.warning("Redis unavailable – caching disabled for this request")
        return None


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_lead_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.lead_repository import LeadRepository

    return LeadRepository(db)


async def get_activity_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.activity_repository import ActivityRepository

    return ActivityRepository(db)


async def get_property_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.property_repository import PropertyRepository

    return PropertyRepository(db)


async def get_property_match_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.property_match_repository import PropertyMatchRepository

    return PropertyMatchRepository(db)


async def get_scoring_config_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.scoring_config_repository import ScoringConfigRepository

    return ScoringConfigRepository(db)


# ---------------------------------------------------------------------------
# Cache service factory
# ---------------------------------------------------------------------------


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the shared Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_scoring_config_service(
    config_repo=Depends(get_scoring_config_repo),
    cache=Depends(get_cache_service),
) -> ScoringConfigService:
    return ScoringConfigService(config_repo=config_repo, cache=cache)


async def get_scoring_engine(
    config_service: ScoringConfigService = Depends(get_scoring_config_service),
    lead_repo=Depends(get_lead_repo),
    activity_repo=Depends(get_activity_repo),
) -> LeadScoringEngine:
    return LeadScoringEngine(
        config_service=config_service,
        lead_repo=lead_repo,
        activity_repo=activity_repo,
    )


async def get_score_preview_service(
    lead_repo=Depends(get_lead_repo),
    scoring_engine: LeadScoringEngine = Depends(get_scoring_engine),
):
    """Build a :class:`ScorePreviewService` with injected dependencies."""
    from app.services.score_preview import ScorePreviewService

    return ScorePreviewService(lead_repo=lead_repo, scoring_engine=scoring_engine)


async def get_score_recompute_service(
    config_service: ScoringConfigService = Depends(get_scoring_config_service),
    config_repo=Depends(get_scoring_config_repo),
    lead_repo=Depends(get_lead_repo),
    activity_repo=Depends(get_activity_repo),
):
    """Build a :class:`ScoreRecomputeService` with injected dependencies."""
    from app.services.score_recompute import ScoreRecomputeService

    return ScoreRecomputeService(
        config_service=config_service,
        config_repo=config_repo,
        lead_repo=lead_repo,
        activity_repo=activity_repo,
    )


async def get_lead_query_service(
    lead_repo=Depends(get_lead_repo),
    activity_repo=Depends(get_activity_repo),
):
    from app.services.lead_query_service import LeadQueryService

    return LeadQueryService(lead_repo=lead_repo, activity_repo=activity_repo)


async def get_property_suggestion_service(
    lead_repo=Depends(get_lead_repo),
    property_repo=Depends(get_property_repo),
    match_repo=Depends(get_property_match_repo),
):
    """Build a :class:`PropertySuggestionService` with injected repositories."""
    from app.services.property_suggestion_service import PropertySuggestionService

    return PropertySuggestionService(
        lead_repo=lead_repo,
        property_repo=property_repo,
        match_repo=match_repo,
    )
