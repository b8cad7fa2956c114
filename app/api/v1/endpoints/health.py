from fastapi import APIRouter, Depends

from app.api.deps import get_cache_service
from app.core.cache import CacheService

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(cache: CacheService = Depends(get_cache_service)) -> dict:
    """Liveness probe; reports whether the cache is reachable."""
    return {"status": "ok", "cache": cache.is_available}
