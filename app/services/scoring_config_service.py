import logging
import math
from typing import List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import SCORING_CONFIG_CACHE_KEY
from app.core.default_scoring_criteria import DEFAULT_SCORING_CRITERIA
from app.core.exceptions import InvalidScoringConfigError, ScoringConfigUnavailableError
from app.models.scoring_config import ScoringConfig
from app.repositories.scoring_config_repository import ScoringConfigRepository
from app.schemas.common import CriterionKind
from app.schemas.scoring import Criterion, FactKeyOut, ScoringConfigOut
from app.services.lead_facts import FACT_RESOLVERS

logger = logging.getLogger(__name__)


def default_criteria() -> List[Criterion]:
    return [Criterion.model_validate(c) for c in DEFAULT_SCORING_CRITERIA]


class ScoringConfigService:
    """Read and replace the scoring configuration.

    Saves are whole-set replacements validated up front; a rejected save
    leaves the stored configuration untouched.  Reads go through Redis
    when a cache is configured; the cache entry is dropped on every
    save.
    """

    def __init__(
        self,
        config_repo: ScoringConfigRepository,
        cache: Optional[CacheService] = None,
    ) -> None:
        self._repo = config_repo
        self._cache = cache

    async def get_config(self, use_cache: bool = True) -> ScoringConfigOut:
        """Return the current configuration, or the defaults if none was saved.

        Raises :class:`ScoringConfigUnavailableError` when the stored
        configuration cannot be read or parsed.
        """
        if use_cache and self._cache is not None:
            cached = await self._cache.get_json(SCORING_CONFIG_CACHE_KEY)
            if cached is not None:
                try:
                    return ScoringConfigOut.model_validate(cached)
                except ValidationError:
                    logger.warning("Discarding malformed cached scoring config")

        try:
            row = await self._repo.get_current()
            config = self._to_out(row) if row is not None else self._default_out()
        except SQLAlchemyError as exc:
            logger.error("Failed to read scoring configuration: %s", exc)
            raise ScoringConfigUnavailableError(
                "Scoring configuration could not be read"
            ) from exc
        except ValidationError as exc:
            logger.error("Stored scoring configuration is malformed: %s", exc)
            raise ScoringConfigUnavailableError(
                "Stored scoring configuration is malformed"
            ) from exc

        if use_cache and self._cache is not None and not config.is_default:
            await self._cache.set_json(
                SCORING_CONFIG_CACHE_KEY,
                config.model_dump(mode="json"),
                ttl=settings.REDIS_CACHE_TTL,
            )
        return config

    async def save_config(
        self,
        criteria: Sequence[Criterion],
        updated_by: Optional[str] = None,
    ) -> ScoringConfigOut:
        """Validate and atomically replace the whole criteria list."""
        self.validate_criteria(criteria)

        row = await self._repo.replace_criteria(
            [c.model_dump(mode="json") for c in criteria],
            updated_by=updated_by,
        )
        await self._repo.commit()

        if self._cache is not None:
            await self._cache.delete(SCORING_CONFIG_CACHE_KEY)

        logger.info(
            "Scoring configuration saved: generation=%s, %d criteria (%d enabled), by=%s",
            row.generation,
            len(criteria),
            sum(1 for c in criteria if c.enabled),
            updated_by or "-",
        )
        return self._to_out(row)

    async def ensure_seeded(self) -> None:
        """Persist the default criteria if nothing has been saved yet."""
        await self._repo.seed_if_empty(
            [c.model_dump(mode="json") for c in default_criteria()]
        )
        await self._repo.commit()

    @staticmethod
    def validate_criteria(criteria: Sequence[Criterion]) -> None:
        """Raise :class:`InvalidScoringConfigError` listing every problem.

        Rejects blank or duplicate keys, negative or non-finite weights,
        threshold criteria without a threshold, and a kind that
        contradicts the registered fact for a known key.  Unknown keys
        are allowed (they never match) but logged.
        """
        errors: List[str] = []
        seen = set()

        for index, criterion in enumerate(criteria):
            key = criterion.key
            where = f"criteria[{index}] ({criterion.key!r})"

            if not key:
                errors.append(f"criteria[{index}]: key must not be blank")
            elif key in seen:
                errors.append(f"{where}: duplicate key")
            seen.add(key)

            if not math.isfinite(criterion.weight) or criterion.weight < 0:
                errors.append(f"{where}: weight must be a non-negative number")

            if criterion.kind is CriterionKind.threshold:
                if criterion.threshold is None:
                    errors.append(f"{where}: threshold criteria require a threshold")
                elif not math.isfinite(criterion.threshold):
                    errors.append(f"{where}: threshold must be a finite number")

            definition = FACT_RESOLVERS.get(key)
            if definition is None:
                if key:
                    logger.warning(
                        "Criterion %r has no registered lead fact and will never be met",
                        key,
                    )
            elif definition.kind is not criterion.kind:
                errors.append(
                    f"{where}: '{key}' is a {definition.kind.value} fact, "
                    f"not {criterion.kind.value}"
                )

        if errors:
            logger.warning("Rejected scoring configuration: %s", "; ".join(errors))
            raise InvalidScoringConfigError(
                "Scoring configuration is invalid", errors=errors
            )

    @staticmethod
    def list_fact_keys() -> List[FactKeyOut]:
        return [
            FactKeyOut(key=key, kind=definition.kind, description=definition.description)
            for key, definition in sorted(FACT_RESOLVERS.items())
        ]

    @staticmethod
    def _to_out(row: ScoringConfig) -> ScoringConfigOut:
        return ScoringConfigOut(
            criteria=[Criterion.model_validate(c) for c in row.criteria or []],
            is_default=False,
            generation=row.generation,
            recomputed_generation=row.recomputed_generation,
            updated_by=row.updated_by,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _default_out() -> ScoringConfigOut:
        return ScoringConfigOut(
            criteria=default_criteria(),
            is_default=True,
            generation=0,
        )
