from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.api.deps import (
    get_lead_query_service,
    get_property_suggestion_service,
    get_redis_client,
    get_score_preview_service,
    get_scoring_config_service,
)
from app.core.exceptions import (
    DuplicatePropertyMatchError,
    InvalidScoringConfigError,
    LeadNotFoundError,
    ScoringConfigUnavailableError,
)
from app.schemas.common import LeadScoreSort
from app.schemas.scoring import ScorePreviewResponse, ScoringConfigOut
from app.services.lead_query_service import LeadQueryService
from app.services.property_suggestion_service import PropertySuggestionService
from app.services.scoring_config_service import default_criteria


def _config_out(generation=2) -> ScoringConfigOut:
    return ScoringConfigOut(
        criteria=default_criteria(), is_default=False, generation=generation
    )


class TestCORSMiddleware:
    """Verify that CORS headers are present on responses."""

    @pytest.mark.asyncio
    async def test_cors_headers_on_preflight(self, async_client):
        """OPTIONS request should return Access-Control-Allow-Origin."""
        response = await async_client.options(
            "/api/v1/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert "access-control-allow-origin" in response.headers

    @pytest.mark.asyncio
    async def test_unknown_origin_is_not_echoed(self, async_client, override_dependency):
        override_dependency(get_redis_client, None)

        response = await async_client.get(
            "/api/v1/health", headers={"Origin": "http://evil.example"}
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health_without_cache(self, async_client, override_dependency):
        override_dependency(get_redis_client, None)

        response = await async_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "cache": False}

    @pytest.mark.asyncio
    async def test_health_with_cache(self, async_client, override_dependency, mock_redis):
        override_dependency(get_redis_client, mock_redis)

        response = await async_client.get("/api/v1/health")

        assert response.json() == {"status": "ok", "cache": True}


class TestScoringEndpoints:
    """Configuration, preview and fact-key routes."""

    @pytest.mark.asyncio
    async def test_get_config(self, async_client, override_dependency):
        service = AsyncMock()
        service.get_config = AsyncMock(return_value=_config_out())
        override_dependency(get_scoring_config_service, service)

        response = await async_client.get("/api/v1/scoring/config")

        assert response.status_code == 200
        body = response.json()
        assert body["generation"] == 2
        assert body["criteria"][0]["key"] == "has_email"
        assert body["is_stale"] is True

    @pytest.mark.asyncio
    async def test_config_unavailable_is_503(self, async_client, override_dependency):
        service = AsyncMock()
        service.get_config = AsyncMock(side_effect=ScoringConfigUnavailableError())
        override_dependency(get_scoring_config_service, service)

        response = await async_client.get("/api/v1/scoring/config")

        assert response.status_code == 503
        assert response.json()["type"] == "scoring_config_unavailable"

    @pytest.mark.asyncio
    async def test_save_schedules_recompute(
        self, async_client, override_dependency, monkeypatch
    ):
        service = AsyncMock()
        service.save_config = AsyncMock(return_value=_config_out(generation=3))
        override_dependency(get_scoring_config_service, service)
        recompute = AsyncMock()
        monkeypatch.setattr(
            "app.api.v1.endpoints.scoring.run_score_recompute", recompute
        )

        response = await async_client.put(
            "/api/v1/scoring/config",
            json={
                "criteria": [{"key": "has_email", "type": "boolean", "weight": 10}],
                "updated_by": "admin",
            },
        )

        assert response.status_code == 200
        assert response.json()["generation"] == 3
        saved = service.save_config.await_args.args[0]
        assert saved[0].key == "has_email"
        recompute.assert_called_once()

    @pytest.mark.asyncio
    async def test_invalid_save_lists_errors(self, async_client, override_dependency):
        service = AsyncMock()
        service.save_config = AsyncMock(
            side_effect=InvalidScoringConfigError(errors=["criteria[0]: duplicate key"])
        )
        override_dependency(get_scoring_config_service, service)

        response = await async_client.put(
            "/api/v1/scoring/config",
            json={"criteria": [{"key": "has_email", "kind": "boolean", "weight": 10}]},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "invalid_scoring_config"
        assert body["errors"] == ["criteria[0]: duplicate key"]

    @pytest.mark.asyncio
    async def test_unknown_kind_fails_request_validation(
        self, async_client, override_dependency
    ):
        override_dependency(get_scoring_config_service, AsyncMock())

        response = await async_client.put(
            "/api/v1/scoring/config",
            json={"criteria": [{"key": "has_email", "kind": "maybe", "weight": 10}]},
        )

        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_fact_keys(self, async_client):
        response = await async_client.get("/api/v1/scoring/fact-keys")

        assert response.status_code == 200
        keys = {item["key"] for item in response.json()}
        assert {"has_email", "days_since_contact"} <= keys

    @pytest.mark.asyncio
    async def test_preview_without_lead(self, async_client, override_dependency):
        service = AsyncMock()
        service.preview = AsyncMock(return_value=ScorePreviewResponse(skipped=True))
        override_dependency(get_score_preview_service, service)

        response = await async_client.post("/api/v1/scoring/preview", json={})

        assert response.status_code == 200
        assert response.json()["skipped"] is True


class TestLeadEndpoints:
    @pytest.mark.asyncio
    async def test_unscored_with_range_is_422(self, async_client, override_dependency):
        override_dependency(
            get_lead_query_service, LeadQueryService(AsyncMock(), AsyncMock())
        )

        response = await async_client.get(
            "/api/v1/leads", params={"unscored": "true", "score_min": 0}
        )

        assert response.status_code == 422
        assert response.json()["type"] == "invalid_lead_filter"

    @pytest.mark.asyncio
    async def test_negative_score_min_is_422(self, async_client, override_dependency):
        override_dependency(
            get_lead_query_service, LeadQueryService(AsyncMock(), AsyncMock())
        )

        response = await async_client.get("/api/v1/leads", params={"score_min": -1})

        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_list_leads(self, async_client, override_dependency, make_lead):
        repo = AsyncMock()
        repo.list_by_score = AsyncMock(return_value=[make_lead(score=42.0)])
        override_dependency(get_lead_query_service, LeadQueryService(repo, AsyncMock()))

        response = await async_client.get("/api/v1/leads", params={"score_min": 40})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert repo.list_by_score.await_args.args[0].score_min == 40

    @pytest.mark.asyncio
    async def test_list_leads_ascending(self, async_client, override_dependency):
        repo = AsyncMock()
        repo.list_by_score = AsyncMock(return_value=[])
        override_dependency(get_lead_query_service, LeadQueryService(repo, AsyncMock()))

        response = await async_client.get("/api/v1/leads", params={"sort": "score_asc"})

        assert response.status_code == 200
        assert repo.list_by_score.await_args.args[0].sort == LeadScoreSort.score_asc

    @pytest.mark.asyncio
    async def test_score_stats(self, async_client, override_dependency):
        lead_repo = AsyncMock()
        lead_repo.score_summary = AsyncMock(return_value=(5, 2, 30.0))
        lead_repo.score_bucket_counts = AsyncMock(return_value={0: 1, 2: 1})
        lead_repo.list_top_scored_open = AsyncMock(return_value=[])
        override_dependency(
            get_lead_query_service, LeadQueryService(lead_repo, AsyncMock())
        )

        response = await async_client.get("/api/v1/leads/score-stats")

        assert response.status_code == 200
        body = response.json()
        assert body["unscored_count"] == 3
        assert body["average_score"] == 30.0
        assert [b["count"] for b in body["distribution"]] == [1, 0, 1, 0, 0]
        assert body["top_unworked"] == []

    @pytest.mark.asyncio
    async def test_suggestions_for_unknown_lead(self, async_client, override_dependency):
        service = AsyncMock()
        service.suggest_for_lead = AsyncMock(side_effect=LeadNotFoundError())
        override_dependency(get_property_suggestion_service, service)

        response = await async_client.get(f"/api/v1/leads/{uuid4()}/suggestions")

        assert response.status_code == 404
        assert response.json()["type"] == "lead_not_found"

    @pytest.mark.asyncio
    async def test_duplicate_attach_is_409(self, async_client, override_dependency):
        service = AsyncMock()
        service.attach_property = AsyncMock(side_effect=DuplicatePropertyMatchError())
        override_dependency(get_property_suggestion_service, service)

        response = await async_client.post(
            f"/api/v1/leads/{uuid4()}/matches", json={"property_id": str(uuid4())}
        )

        assert response.status_code == 409
        assert response.json()["type"] == "duplicate_property_match"


class TestMatchingEndpoints:
    @pytest.mark.asyncio
    async def test_detach_returns_204(self, async_client, override_dependency):
        service = AsyncMock()
        override_dependency(get_property_suggestion_service, service)
        match_id = uuid4()

        response = await async_client.delete(f"/api/v1/matches/{match_id}")

        assert response.status_code == 204
        service.detach.assert_awaited_once_with(match_id)

    @pytest.mark.asyncio
    async def test_bulk_attach_requires_items(self, async_client, override_dependency):
        override_dependency(get_property_suggestion_service, AsyncMock())

        response = await async_client.post(
            "/api/v1/matching/bulk-attach", json={"attachments": []}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_compare_limit_is_422(self, async_client, override_dependency):
        service = PropertySuggestionService(AsyncMock(), AsyncMock(), AsyncMock())
        override_dependency(get_property_suggestion_service, service)

        response = await async_client.post(
            "/api/v1/properties/compare",
            json={"property_ids": [str(uuid4()) for _ in range(6)]},
        )

        assert response.status_code == 422
        assert response.json()["type"] == "property_comparison_limit"
