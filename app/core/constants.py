from typing import Dict, FrozenSet, Tuple

from app.schemas.common import (
    ActivityType,
    InterestType,
    LeadSource,
    ListingType,
    MatchType,
    PropertyStatus,
    PropertyType,
)


def _check_clause(column: str, values: FrozenSet[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in sorted(values))})"


LEAD_SOURCES: FrozenSet[str] = frozenset(s.value for s in LeadSource)
INTEREST_TYPES: FrozenSet[str] = frozenset(i.value for i in InterestType)
LISTING_TYPES: FrozenSet[str] = frozenset(t.value for t in ListingType)
PROPERTY_TYPES: FrozenSet[str] = frozenset(t.value for t in PropertyType)
PROPERTY_STATUSES: FrozenSet[str] = frozenset(s.value for s in PropertyStatus)
ACTIVITY_TYPES: FrozenSet[str] = frozenset(t.value for t in ActivityType)
MATCH_TYPES: FrozenSet[str] = frozenset(m.value for m in MatchType)

LEAD_SOURCE_CHECK_CLAUSE: str = _check_clause("source", LEAD_SOURCES)
INTEREST_TYPE_CHECK_CLAUSE: str = _check_clause("interest_type", INTEREST_TYPES)
LISTING_TYPE_CHECK_CLAUSE: str = _check_clause("listing_type", LISTING_TYPES)
PROPERTY_TYPE_CHECK_CLAUSE: str = _check_clause("type", PROPERTY_TYPES)
PROPERTY_STATUS_CHECK_CLAUSE: str = _check_clause("status", PROPERTY_STATUSES)
ACTIVITY_TYPE_CHECK_CLAUSE: str = _check_clause("type", ACTIVITY_TYPES)
MATCH_TYPE_CHECK_CLAUSE: str = _check_clause("match_type", MATCH_TYPES)

# Which listing type satisfies each lead interest
INTEREST_TO_LISTING: Dict[str, str] = {
    InterestType.buy.value: ListingType.sale.value,
    InterestType.rent.value: ListingType.rent.value,
}

# Property match facet maxima, must sum to 100
MATCH_WEIGHTS: Dict[str, float] = {
    "interest_type": 30,
    "budget": 35,
    "location": 25,
    "availability": 10,
}

# Statuses considered for bulk matching
MATCHABLE_PROPERTY_STATUSES: FrozenSet[str] = frozenset(
    {PropertyStatus.available.value, PropertyStatus.under_offer.value}
)

MAX_COMPARE_PROPERTIES: int = 5

# Singleton primary key of the scoring configuration row
SCORING_CONFIG_ID: int = 1
SCORING_CONFIG_CACHE_KEY: str = "scoring_config:current"

# Score distribution buckets as (label, floor); each runs up to the next floor
SCORE_BUCKETS: Tuple[Tuple[str, float], ...] = (
    ("Cold", 0),
    ("Cool", 20),
    ("Warm", 40),
    ("Hot", 60),
    ("On Fire", 80),
)
SCORE_CEILING: float = 100

# High-score open leads nobody has touched recently
UNWORKED_LOOKBACK_DAYS: int = 7
UNWORKED_CANDIDATE_LIMIT: int = 20
UNWORKED_RESULT_LIMIT: int = 5
