from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.constants import SCORING_CONFIG_CACHE_KEY
from app.core.default_scoring_criteria import DEFAULT_SCORING_CRITERIA
from app.core.exceptions import InvalidScoringConfigError, ScoringConfigUnavailableError
from app.schemas.scoring import Criterion
from app.services.scoring_config_service import ScoringConfigService, default_criteria


def _row(criteria=None, generation=2, recomputed_generation=1):
    return SimpleNamespace(
        criteria=criteria if criteria is not None else DEFAULT_SCORING_CRITERIA,
        generation=generation,
        recomputed_generation=recomputed_generation,
        updated_by="admin",
        updated_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


def _make_service(row=None, cache=None):
    repo = AsyncMock()
    repo.get_current = AsyncMock(return_value=row)
    repo.replace_criteria = AsyncMock(return_value=_row(generation=5))
    return ScoringConfigService(config_repo=repo, cache=cache), repo


class TestValidateCriteria:
    """Saves are rejected with every problem listed."""

    def test_defaults_are_valid(self):
        ScoringConfigService.validate_criteria(default_criteria())

    def test_collects_all_errors(self):
        criteria = [
            Criterion(key="has_email", kind="boolean", weight=-1),
            Criterion(key="has_email", kind="boolean", weight=5),
            Criterion(key="activity_count", kind="threshold", weight=10),
            Criterion(key=" ", kind="boolean", weight=1),
        ]

        with pytest.raises(InvalidScoringConfigError) as exc_info:
            ScoringConfigService.validate_criteria(criteria)

        errors = exc_info.value.errors
        assert len(errors) == 4
        assert any("weight must be a non-negative number" in e for e in errors)
        assert any("duplicate key" in e for e in errors)
        assert any("require a threshold" in e for e in errors)
        assert any("must not be blank" in e for e in errors)

    def test_rejects_kind_mismatch(self):
        criteria = [Criterion(key="has_email", kind="threshold", weight=5, threshold=1)]

        with pytest.raises(InvalidScoringConfigError) as exc_info:
            ScoringConfigService.validate_criteria(criteria)

        assert "boolean fact" in exc_info.value.errors[0]

    def test_rejects_non_finite_weight(self):
        criteria = [Criterion(key="has_email", kind="boolean", weight=float("inf"))]

        with pytest.raises(InvalidScoringConfigError):
            ScoringConfigService.validate_criteria(criteria)

    def test_unknown_key_is_allowed(self):
        ScoringConfigService.validate_criteria(
            [Criterion(key="custom_flag", kind="boolean", weight=5)]
        )

    def test_zero_weight_is_allowed(self):
        ScoringConfigService.validate_criteria(
            [Criterion(key="has_email", kind="boolean", weight=0)]
        )

    def test_padded_key_is_normalised(self):
        criterion = Criterion(key=" has_email ", kind="boolean", weight=10)

        assert criterion.key == "has_email"

    def test_padded_duplicate_is_rejected(self):
        criteria = [
            Criterion(key="has_email", kind="boolean", weight=10),
            Criterion(key="has_email ", kind="boolean", weight=5),
        ]

        with pytest.raises(InvalidScoringConfigError) as exc_info:
            ScoringConfigService.validate_criteria(criteria)

        assert "duplicate key" in exc_info.value.errors[0]


class TestGetConfig:
    """Reading the current configuration."""

    @pytest.mark.asyncio
    async def test_returns_defaults_before_first_save(self):
        service, _ = _make_service(row=None)

        config = await service.get_config()

        assert config.is_default is True
        assert config.generation == 0
        assert [c.key for c in config.criteria] == [
            c["key"] for c in DEFAULT_SCORING_CRITERIA
        ]

    @pytest.mark.asyncio
    async def test_reports_staleness(self):
        service, _ = _make_service(row=_row(generation=4, recomputed_generation=3))

        config = await service.get_config()

        assert config.is_default is False
        assert config.is_stale is True

    @pytest.mark.asyncio
    async def test_database_failure_raises_unavailable(self):
        service, repo = _make_service()
        repo.get_current.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(ScoringConfigUnavailableError):
            await service.get_config()

    @pytest.mark.asyncio
    async def test_malformed_row_raises_unavailable(self):
        service, _ = _make_service(row=_row(criteria=[{"key": "x", "kind": "maybe"}]))

        with pytest.raises(ScoringConfigUnavailableError):
            await service.get_config()

    @pytest.mark.asyncio
    async def test_cache_hit_skips_database(self, mock_cache, mock_redis):
        cached = ScoringConfigService._to_out(_row()).model_dump_json()
        mock_redis.get.return_value = cached
        service, repo = _make_service(cache=mock_cache)

        config = await service.get_config()

        assert config.generation == 2
        repo.get_current.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_miss_populates_cache(self, mock_cache, mock_redis):
        service, _ = _make_service(row=_row(), cache=mock_cache)

        await service.get_config()

        mock_redis.setex.assert_awaited_once()
        assert mock_redis.setex.await_args.args[0] == SCORING_CONFIG_CACHE_KEY

    @pytest.mark.asyncio
    async def test_uncached_read_bypasses_cache(self, mock_cache, mock_redis):
        service, repo = _make_service(row=_row(), cache=mock_cache)

        await service.get_config(use_cache=False)

        mock_redis.get.assert_not_awaited()
        repo.get_current.assert_awaited_once()


class TestSaveConfig:
    """Whole-set replacement."""

    @pytest.mark.asyncio
    async def test_save_replaces_and_invalidates_cache(self, mock_cache, mock_redis):
        service, repo = _make_service(cache=mock_cache)

        out = await service.save_config(default_criteria(), updated_by="admin")

        assert out.generation == 5
        repo.replace_criteria.assert_awaited_once()
        saved = repo.replace_criteria.await_args.args[0]
        assert saved[0]["key"] == "has_email"
        assert saved[0]["kind"] == "boolean"
        repo.commit.assert_awaited_once()
        mock_redis.delete.assert_awaited_once_with(SCORING_CONFIG_CACHE_KEY)

    @pytest.mark.asyncio
    async def test_invalid_save_writes_nothing(self):
        service, repo = _make_service()

        with pytest.raises(InvalidScoringConfigError):
            await service.save_config(
                [Criterion(key="has_email", kind="boolean", weight=-5)]
            )

        repo.replace_criteria.assert_not_awaited()
        repo.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ensure_seeded_inserts_defaults(self):
        service, repo = _make_service()

        await service.ensure_seeded()

        seeded = repo.seed_if_empty.await_args.args[0]
        assert len(seeded) == len(DEFAULT_SCORING_CRITERIA)
        repo.commit.assert_awaited_once()


class TestFactKeys:
    def test_fact_keys_are_sorted_and_typed(self):
        keys = ScoringConfigService.list_fact_keys()

        names = [k.key for k in keys]
        assert names == sorted(names)
        by_name = {k.key: k.kind.value for k in keys}
        assert by_name["has_email"] == "boolean"
        assert by_name["activity_count"] == "threshold"
