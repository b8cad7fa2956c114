import logging
from typing import List, Optional, Sequence
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.config import settings
from app.core.constants import MATCHABLE_PROPERTY_STATUSES, MAX_COMPARE_PROPERTIES
from app.core.exceptions import (
    DuplicatePropertyMatchError,
    LeadNotFoundError,
    PipelineCRMError,
    PropertyComparisonLimitError,
    PropertyMatchNotFoundError,
    PropertyNotFoundError,
)
from app.models.lead import Lead
from app.models.property import Property
from app.repositories.lead_repository import LeadRepository
from app.repositories.property_match_repository import PropertyMatchRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.common import MatchType
from app.schemas.matching import (
    BulkAttachItem,
    BulkAttachItemResult,
    BulkAttachResponse,
    BulkMatchLeadResult,
    BulkMatchResponse,
    BulkMatchSummary,
    LeadPreferences,
    LeadSuggestionResponse,
    LeadSummary,
    MatchScoreResponse,
    PropertyCompareResponse,
    PropertyDetail,
    PropertyListing,
    PropertyMatchOut,
)
from app.services.property_matching import match, rank_suggestions

logger = logging.getLogger(__name__)


class PropertySuggestionService:
    """Suggest, score, attach and compare properties for leads.

    Ranking itself is the pure :func:`rank_suggestions`; this service
    loads the lead and candidate listings and owns the lead–property
    link records.
    """

    def __init__(
        self,
        lead_repo: LeadRepository,
        property_repo: PropertyRepository,
        match_repo: PropertyMatchRepository,
    ) -> None:
        self._lead_repo = lead_repo
        self._property_repo = property_repo
        self._match_repo = match_repo

    async def _get_lead(self, lead_id: UUID) -> Lead:
        lead = await self._lead_repo.get_by_id(lead_id)
        if lead is None:
            raise LeadNotFoundError(f"Lead {lead_id} not found")
        return lead

    async def _get_property(self, property_id: UUID) -> Property:
        prop = await self._property_repo.get_by_id(property_id)
        if prop is None:
            raise PropertyNotFoundError(f"Property {property_id} not found")
        return prop

    async def suggest_for_lead(
        self,
        lead_id: UUID,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
        exclude_attached: bool = True,
    ) -> LeadSuggestionResponse:
        """Rank every property for one lead.

        Properties already attached to the lead are removed from the
        candidate set when *exclude_attached* is set, but still count
        toward ``total_available_properties``.
        """
        lead = await self._get_lead(lead_id)
        properties = await self._property_repo.list_all()
        inventory_size = len(properties)

        if exclude_attached:
            attached = await self._match_repo.attached_property_ids(lead.lead_id)
            properties = [p for p in properties if p.property_id not in attached]

        ranked = rank_suggestions(
            LeadPreferences.model_validate(lead),
            [PropertyListing.model_validate(p) for p in properties],
            limit=limit if limit is not None else settings.SUGGESTION_DEFAULT_LIMIT,
            min_score=(
                min_score
                if min_score is not None
                else settings.SUGGESTION_DEFAULT_MIN_SCORE
            ),
            total_available=inventory_size,
        )
        return LeadSuggestionResponse(
            lead=LeadSummary.model_validate(lead),
            **ranked.model_dump(),
        )

    async def get_match_score(self, lead_id: UUID, property_id: UUID) -> MatchScoreResponse:
        lead = await self._get_lead(lead_id)
        listing = PropertyListing.model_validate(await self._get_property(property_id))
        result = match(LeadPreferences.model_validate(lead), listing)
        return MatchScoreResponse(
            lead=LeadSummary.model_validate(lead),
            property=listing,
            **result.model_dump(),
        )

    async def bulk_match(
        self,
        lead_ids: Optional[Sequence[UUID]] = None,
        min_score: Optional[float] = None,
        top_n: Optional[int] = None,
    ) -> BulkMatchResponse:
        """Top matches for many leads at once.

        Without *lead_ids* every open lead is matched.  Only available
        and under-offer properties are considered, and pairs that are
        already attached are skipped.
        """
        min_score = (
            min_score if min_score is not None else settings.BULK_MATCH_DEFAULT_MIN_SCORE
        )
        top_n = top_n if top_n is not None else settings.BULK_MATCH_DEFAULT_TOP_N

        if lead_ids:
            leads = await self._lead_repo.get_many(list(lead_ids))
        else:
            leads = await self._lead_repo.list_open()

        listings = [
            PropertyListing.model_validate(p)
            for p in await self._property_repo.list_all(MATCHABLE_PROPERTY_STATUSES)
        ]
        attached_by_lead = await self._match_repo.attached_property_ids_by_lead()

        results: List[BulkMatchLeadResult] = []
        for lead in leads:
            try:
                prefs = LeadPreferences.model_validate(lead)
                summary = LeadSummary.model_validate(lead)
            except ValidationError:
                logger.warning("Skipping lead %s with unreadable preferences", lead.lead_id)
                continue

            attached = attached_by_lead.get(lead.lead_id, set())
            ranked = rank_suggestions(
                prefs,
                [item for item in listings if item.property_id not in attached],
                limit=top_n,
                min_score=min_score,
            )
            results.append(
                BulkMatchLeadResult(
                    lead=summary,
                    match_count=len(ranked.suggestions),
                    top_matches=ranked.suggestions,
                )
            )

        total_leads = len(results)
        avg = (
            sum(r.match_count for r in results) / total_leads if total_leads else 0.0
        )
        return BulkMatchResponse(
            results=results,
            summary=BulkMatchSummary(
                total_leads=total_leads,
                leads_with_matches=sum(1 for r in results if r.match_count > 0),
                avg_matches_per_lead=round(avg, 1),
                total_properties_analyzed=len(listings),
            ),
        )

    # ------------------------------------------------------------------
    # Lead–property links
    # ------------------------------------------------------------------

    async def _attach(
        self,
        lead_id: UUID,
        property_id: UUID,
        match_type: MatchType,
        created_by: Optional[str],
    ):
        await self._get_lead(lead_id)
        prop = await self._get_property(property_id)
        if await self._match_repo.exists(lead_id, property_id):
            raise DuplicatePropertyMatchError()

        try:
            async with self._match_repo.savepoint():
                link = await self._match_repo.create(
                    lead_id=lead_id,
                    property_id=property_id,
                    match_type=match_type.value,
                    created_by=created_by,
                )
        except IntegrityError:
            # lost a race with a concurrent attach of the same pair
            raise DuplicatePropertyMatchError()
        return link, prop

    async def attach_property(
        self,
        lead_id: UUID,
        property_id: UUID,
        match_type: MatchType = MatchType.suggested,
        created_by: Optional[str] = None,
    ) -> PropertyMatchOut:
        link, prop = await self._attach(lead_id, property_id, match_type, created_by)
        await self._match_repo.commit()
        logger.info(
            "Attached property %s to lead %s (%s)", property_id, lead_id, match_type.value
        )
        return PropertyMatchOut(
            match_id=link.match_id,
            lead_id=link.lead_id,
            property_id=link.property_id,
            match_type=link.match_type,
            created_by=link.created_by,
            created_at=link.created_at,
            property=PropertyListing.model_validate(prop),
        )

    async def bulk_attach(
        self,
        attachments: Sequence[BulkAttachItem],
        created_by: Optional[str] = None,
    ) -> BulkAttachResponse:
        """Attach many suggested pairs; each pair succeeds or fails on its own."""
        results: List[BulkAttachItemResult] = []
        for item in attachments:
            try:
                await self._attach(
                    item.lead_id, item.property_id, MatchType.suggested, created_by
                )
                results.append(
                    BulkAttachItemResult(
                        lead_id=item.lead_id, property_id=item.property_id, success=True
                    )
                )
            except PipelineCRMError as exc:
                results.append(
                    BulkAttachItemResult(
                        lead_id=item.lead_id,
                        property_id=item.property_id,
                        success=False,
                        error=exc.detail,
                    )
                )
            except SQLAlchemyError:
                logger.warning(
                    "Bulk attach failed for lead %s / property %s",
                    item.lead_id,
                    item.property_id,
                    exc_info=True,
                )
                results.append(
                    BulkAttachItemResult(
                        lead_id=item.lead_id,
                        property_id=item.property_id,
                        success=False,
                        error="Database error",
                    )
                )

        await self._match_repo.commit()
        success_count = sum(1 for r in results if r.success)
        return BulkAttachResponse(
            results=results,
            success_count=success_count,
            failure_count=len(results) - success_count,
        )

    async def list_matches(self, lead_id: UUID) -> List[PropertyMatchOut]:
        await self._get_lead(lead_id)
        rows = await self._match_repo.list_for_lead(lead_id)
        return [
            PropertyMatchOut(
                match_id=link.match_id,
                lead_id=link.lead_id,
                property_id=link.property_id,
                match_type=link.match_type,
                created_by=link.created_by,
                created_at=link.created_at,
                property=PropertyListing.model_validate(prop) if prop else None,
            )
            for link, prop in rows
        ]

    async def detach(self, match_id: UUID) -> None:
        link = await self._match_repo.get_by_id(match_id)
        if link is None:
            raise PropertyMatchNotFoundError(f"Property match {match_id} not found")
        await self._match_repo.delete(match_id)
        await self._match_repo.commit()

    async def compare_properties(
        self, property_ids: Sequence[UUID]
    ) -> PropertyCompareResponse:
        """Side-by-side details for up to ``MAX_COMPARE_PROPERTIES`` listings."""
        if not property_ids:
            return PropertyCompareResponse(properties=[])
        if len(property_ids) > MAX_COMPARE_PROPERTIES:
            raise PropertyComparisonLimitError(
                f"Maximum {MAX_COMPARE_PROPERTIES} properties can be compared at once"
            )
        properties = await self._property_repo.get_many(list(property_ids))
        return PropertyCompareResponse(
            properties=[PropertyDetail.model_validate(p) for p in properties]
        )
