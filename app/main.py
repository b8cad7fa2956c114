import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.api.v1.router import router as api_v1_router
from app.core.exceptions import (
    DuplicatePropertyMatchError,
    InvalidLeadFilterError,
    InvalidScoringConfigError,
    LeadNotFoundError,
    PropertyComparisonLimitError,
    PropertyMatchNotFoundError,
    PropertyNotFoundError,
    ScoringConfigUnavailableError,
)
from app.core.config import settings as app_settings
from app.core.rate_limit import limiter
from app.core.database import AsyncSessionLocal
from app.repositories.scoring_config_repository import ScoringConfigRepository
from app.services.score_recompute import start_score_recompute_loop
from app.services.scoring_config_service import ScoringConfigService

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def _seed_scoring_config() -> None:
    async with AsyncSessionLocal() as session:
        await ScoringConfigService(ScoringConfigRepository(session)).ensure_seeded()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the default scoring config and manage the recompute loop."""
    try:
        await _seed_scoring_config()
    except (SQLAlchemyError, OSError):
        logger.warning("Could not seed default scoring config", exc_info=True)

    recompute_task = None
    if app_settings.SCORE_RECOMPUTE_INTERVAL_SECONDS > 0:
        recompute_task = asyncio.create_task(
            start_score_recompute_loop(
                AsyncSessionLocal, app_settings.SCORE_RECOMPUTE_INTERVAL_SECONDS
            )
        )
        logger.info("Background score recompute task scheduled")
    yield
    if recompute_task is not None:
        recompute_task.cancel()
        try:
            await recompute_task
        except asyncio.CancelledError:
            logger.info("Background score recompute task stopped")


app = FastAPI(
    title="Pipeline CRM Scoring & Matching",
    description="Configurable lead scoring and lead–property matching for a real-estate CRM",
    version="0.1.0",
    lifespan=lifespan,
)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(LeadNotFoundError)
async def lead_not_found_handler(request: Request, exc: LeadNotFoundError):
    logger.warning("Lead not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "lead_not_found"},
    )


@app.exception_handler(PropertyNotFoundError)
async def property_not_found_handler(request: Request, exc: PropertyNotFoundError):
    logger.warning("Property not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "property_not_found"},
    )


@app.exception_handler(PropertyMatchNotFoundError)
async def property_match_not_found_handler(
    request: Request, exc: PropertyMatchNotFoundError
):
    logger.warning("Property match not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "property_match_not_found"},
    )


@app.exception_handler(DuplicatePropertyMatchError)
async def duplicate_property_match_handler(
    request: Request, exc: DuplicatePropertyMatchError
):
    logger.warning("Duplicate property match: %s", exc.detail)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.detail, "type": "duplicate_property_match"},
    )


@app.exception_handler(InvalidScoringConfigError)
async def invalid_scoring_config_handler(
    request: Request, exc: InvalidScoringConfigError
):
    logger.warning("Invalid scoring config: %s", exc.errors)
    return JSONResponse(
        status_code=422,
        content={
            "detail": exc.detail,
            "errors": exc.errors,
            "type": "invalid_scoring_config",
        },
    )


@app.exception_handler(ScoringConfigUnavailableError)
async def scoring_config_unavailable_handler(
    request: Request, exc: ScoringConfigUnavailableError
):
    logger.error("Scoring config unavailable: %s", exc.detail)
    return JSONResponse(
        status_code=503,
        content={"detail": exc.detail, "type": "scoring_config_unavailable"},
    )


@app.exception_handler(InvalidLeadFilterError)
async def invalid_lead_filter_handler(request: Request, exc: InvalidLeadFilterError):
    logger.warning("Invalid lead filter: %s", exc.detail)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.detail, "type": "invalid_lead_filter"},
    )


@app.exception_handler(PropertyComparisonLimitError)
async def property_comparison_limit_handler(
    request: Request, exc: PropertyComparisonLimitError
):
    logger.warning("Property comparison limit: %s", exc.detail)
    return JSONResponse(
        status_code=422,
        content={"detail": exc.detail, "type": "property_comparison_limit"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
