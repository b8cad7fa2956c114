"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Repository factories
    get_lead_repo,
    get_activity_repo,
    get_property_repo,
    get_property_match_repo,
    get_scoring_config_repo,
    # Service factories
    get_scoring_config_service,
    get_scoring_engine,
    get_score_preview_service,
    get_score_recompute_service,
    get_lead_query_service,
    get_property_suggestion_service,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_lead_repo",
    "get_activity_repo",
    "get_property_repo",
    "get_property_match_repo",
    "get_scoring_config_repo",
    "get_scoring_config_service",
    "get_scoring_engine",
    "get_score_preview_service",
    "get_score_recompute_service",
    "get_lead_query_service",
    "get_property_suggestion_service",
    "get_redis_client",
    "get_cache_service",
]
