"""Lead ↔ property match scoring and suggestion ranking.

A match is four independent facets with fixed maxima (see
``MATCH_WEIGHTS``): interest type 30, budget 35, location 25,
availability 10.  Each facet appends its own reasons/warnings, always in
that facet order, so identical input gives byte-identical output.

Nothing here touches the database; :mod:`property_suggestion_service`
loads leads and listings and calls in.
"""

import math
from typing import Iterable, List, Optional

from app.core.constants import INTEREST_TO_LISTING, MATCH_WEIGHTS
from app.schemas.common import PropertyStatus
from app.schemas.matching import (
    LeadPreferences,
    MatchResult,
    PropertyListing,
    PropertySuggestion,
    SuggestionResult,
)

# Budget bands (fraction of the facet maximum)
_SLIGHTLY_UNDER_PCT = 20
_SLIGHTLY_OVER_PCT = 10
_OVER_PCT = 25

_BUDGET_SLIGHTLY_UNDER = 0.8
_BUDGET_FAR_UNDER = 0.5
_BUDGET_SLIGHTLY_OVER = 0.7
_BUDGET_OVER = 0.4

_LOCATION_PARTIAL = 0.6
_LOCATION_NO_PREFERENCE = 0.5

_AVAILABILITY_UNDER_OFFER = 0.5


def _points(facet: str, fraction: float = 1.0) -> float:
    return round(MATCH_WEIGHTS[facet] * fraction, 2)


def _interest_type_facet(
    prefs: LeadPreferences,
    listing: PropertyListing,
    reasons: List[str],
    warnings: List[str],
) -> float:
    if INTEREST_TO_LISTING[prefs.interest_type.value] == listing.listing_type.value:
        label = "For sale" if listing.listing_type.value == "sale" else "For rent"
        reasons.append(f"{label} matches interest")
        return _points("interest_type")

    warnings.append(
        f"Lead wants to {prefs.interest_type.value}, "
        f"but property is for {listing.listing_type.value}"
    )
    return 0.0


def _budget_facet(
    prefs: LeadPreferences,
    listing: PropertyListing,
    reasons: List[str],
    warnings: List[str],
) -> float:
    if prefs.budget_min is None and prefs.budget_max is None:
        reasons.append("No budget constraint")
        return _points("budget")

    low = prefs.budget_min if prefs.budget_min is not None else 0.0
    high = prefs.budget_max if prefs.budget_max is not None else math.inf
    price = listing.price

    if low <= price <= high:
        reasons.append("Price within budget range")
        return _points("budget")

    if price < low:
        under_pct = (low - price) / low * 100
        if under_pct <= _SLIGHTLY_UNDER_PCT:
            reasons.append("Price slightly under budget")
            return _points("budget", _BUDGET_SLIGHTLY_UNDER)
        warnings.append(f"Price {under_pct:.0f}% under minimum budget")
        return _points("budget", _BUDGET_FAR_UNDER)

    over_pct = (price - high) / high * 100 if high > 0 else math.inf
    if over_pct <= _SLIGHTLY_OVER_PCT:
        warnings.append(f"Price slightly over budget ({over_pct:.0f}%)")
        return _points("budget", _BUDGET_SLIGHTLY_OVER)
    if over_pct <= _OVER_PCT:
        warnings.append(f"Price over budget by {over_pct:.0f}%")
        return _points("budget", _BUDGET_OVER)

    if math.isfinite(over_pct):
        warnings.append(f"Price significantly over budget ({over_pct:.0f}%)")
    else:
        warnings.append("Price significantly over budget")
    return 0.0


def _sorted_areas(areas: Iterable[str]) -> List[str]:
    return sorted(set(areas), key=lambda a: (a.lower(), a))


def _location_facet(
    prefs: LeadPreferences,
    listing: PropertyListing,
    reasons: List[str],
    warnings: List[str],
) -> float:
    areas = [a.strip() for a in prefs.preferred_areas if a and a.strip()]
    if not areas:
        reasons.append("No area preference")
        return _points("location", _LOCATION_NO_PREFERENCE)

    location = listing.location.strip().lower()
    if location:
        contained = _sorted_areas(
            a for a in areas if a.lower() in location or location in a.lower()
        )
        if contained:
            reasons.append(f"Location matches: {', '.join(contained)}")
            return _points("location")

        location_words = location.split()
        partial = _sorted_areas(
            a
            for a in areas
            if any(
                lw in w or w in lw
                for w in a.lower().split()
                for lw in location_words
            )
        )
        if partial:
            reasons.append(f"Partial location match: {', '.join(partial)}")
            return _points("location", _LOCATION_PARTIAL)

    warnings.append(f'Location "{listing.location}" not in preferred areas')
    return 0.0


def _availability_facet(
    listing: PropertyListing,
    reasons: List[str],
    warnings: List[str],
) -> float:
    if listing.status == PropertyStatus.available.value:
        reasons.append("Property is available")
        return _points("availability")
    if listing.status == PropertyStatus.under_offer.value:
        warnings.append("Property is under offer")
        return _points("availability", _AVAILABILITY_UNDER_OFFER)

    warnings.append(f"Property status: {listing.status}")
    return 0.0


def match(prefs: LeadPreferences, listing: PropertyListing) -> MatchResult:
    """Score how well *listing* fits a lead's stated preferences."""
    reasons: List[str] = []
    warnings: List[str] = []

    interest_type_score = _interest_type_facet(prefs, listing, reasons, warnings)
    budget_score = _budget_facet(prefs, listing, reasons, warnings)
    location_score = _location_facet(prefs, listing, reasons, warnings)
    availability_score = _availability_facet(listing, reasons, warnings)

    return MatchResult(
        interest_type_score=interest_type_score,
        budget_score=budget_score,
        location_score=location_score,
        availability_score=availability_score,
        total_score=round(
            interest_type_score + budget_score + location_score + availability_score,
            2,
        ),
        match_reasons=reasons,
        warnings=warnings,
    )


def rank_suggestions(
    prefs: LeadPreferences,
    candidates: Iterable[PropertyListing],
    limit: int,
    min_score: float,
    total_available: Optional[int] = None,
) -> SuggestionResult:
    """Match every candidate, drop those under *min_score*, rank, then cut.

    Ordering is total score descending, ties by property id, so the same
    candidate set always comes back in the same order.  ``matched_count``
    is taken before the *limit* cut; ``total_available_properties`` is
    *total_available* when the caller trimmed the inventory itself,
    otherwise the candidate count before filtering.
    """
    candidates = list(candidates)

    kept: List[PropertySuggestion] = []
    for listing in candidates:
        result = match(prefs, listing)
        if result.total_score < min_score:
            continue
        kept.append(PropertySuggestion(property=listing, **result.model_dump()))

    kept.sort(key=lambda s: (-s.total_score, str(s.property.property_id)))

    return SuggestionResult(
        matched_count=len(kept),
        total_available_properties=(
            total_available if total_available is not None else len(candidates)
        ),
        suggestions=kept[: max(limit, 0)],
    )
