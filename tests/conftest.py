from datetime import datetime, timezone
from typing import TYPE_CHECKING, AsyncGenerator, Iterator
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

if TYPE_CHECKING:
    from app.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def override_dependency() -> Iterator:
    """Register ``app.dependency_overrides`` entries, cleared after the test."""

    def _override(dependency, value) -> None:
        app.dependency_overrides[dependency] = lambda: value

    yield _override
    app.dependency_overrides.clear()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.ping = AsyncMock()
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


def _make_lead(**overrides) -> SimpleNamespace:
    lead = SimpleNamespace()
    lead.lead_id = overrides.pop("lead_id", uuid4())
    lead.full_name = "Test Lead"
    lead.email = "lead@example.com"
    lead.phone = "+254700000000"
    lead.interest_type = "buy"
    lead.budget_currency = "KES"
    lead.budget_min = None
    lead.budget_max = None
    lead.preferred_areas = []
    lead.notes = ""
    lead.score = None
    lead.last_scored_at = None
    lead.is_archived = False
    for key, value in overrides.items():
        setattr(lead, key, value)
    return lead


def _make_property(**overrides) -> SimpleNamespace:
    prop = SimpleNamespace()
    prop.property_id = overrides.pop("property_id", uuid4())
    prop.title = "Listing"
    prop.type = "apartment"
    prop.listing_type = "sale"
    prop.price = 100_000.0
    prop.currency = "KES"
    prop.location = "Westlands"
    prop.area = 0.0
    prop.bedrooms = 2
    prop.bathrooms = 1
    prop.status = "available"
    prop.images = []
    prop.description = ""
    prop.created_at = NOW
    for key, value in overrides.items():
        setattr(prop, key, value)
    return prop


@pytest.fixture
def make_lead():
    """Factory for ``Lead``-shaped rows with sensible defaults."""
    return _make_lead


@pytest.fixture
def make_property():
    """Factory for ``Property``-shaped rows with sensible defaults."""
    return _make_property
