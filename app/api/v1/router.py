from fastapi import APIRouter

from app.api.v1.endpoints import health, leads, matching, properties, scoring

router = APIRouter(prefix="/api/v1")

router.include_router(scoring.router)
router.include_router(leads.router)
router.include_router(matching.router)
router.include_router(properties.router)
router.include_router(health.router)
