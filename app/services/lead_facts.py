"""Criterion key → lead fact registry.

The scoring evaluator never knows what a criterion *means*; it looks the
key up in :data:`FACT_RESOLVERS` and asks the resolver for a value.
Adding a new criterion is a new entry here, nothing else.

Resolvers read an immutable :class:`LeadFacts` snapshot.  Anything
time-relative is measured against ``LeadFacts.as_of`` so that evaluating
the same snapshot always produces the same answer.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple, Union

from app.core.config import settings
from app.schemas.common import CriterionKind

FactValue = Union[bool, float, int, None]


@dataclass(frozen=True)
class LeadFacts:
    """Point-in-time view of everything scoring may read off a lead."""

    as_of: datetime
    email: Optional[str] = None
    phone: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_areas: Tuple[str, ...] = ()
    notes: str = ""
    activity_count: int = 0
    last_activity_at: Optional[datetime] = None

    @classmethod
    def from_lead(
        cls,
        lead: Any,
        as_of: datetime,
        activity_count: int = 0,
        last_activity_at: Optional[datetime] = None,
    ) -> "LeadFacts":
        """Build a snapshot from a ``Lead`` row (or anything shaped like one).

        Raises ``TypeError``/``ValueError`` on data that cannot be
        coerced, e.g. a non-numeric budget; bulk recompute counts those
        leads as failures.
        """
        return cls(
            as_of=as_of,
            email=lead.email,
            phone=lead.phone,
            budget_min=_to_float(lead.budget_min),
            budget_max=_to_float(lead.budget_max),
            preferred_areas=tuple(lead.preferred_areas or ()),
            notes=lead.notes or "",
            activity_count=int(activity_count),
            last_activity_at=last_activity_at,
        )


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return float(value)
    raise TypeError(f"expected a number, got {type(value).__name__}")


@dataclass(frozen=True)
class FactDefinition:
    kind: CriterionKind
    resolver: Callable[[LeadFacts], FactValue]
    description: str


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _has_recent_activity(facts: LeadFacts) -> bool:
    if facts.last_activity_at is None:
        return False
    window = timedelta(days=settings.RECENT_ACTIVITY_DAYS)
    return facts.last_activity_at >= facts.as_of - window


def _days_since_contact(facts: LeadFacts) -> Optional[float]:
    if facts.last_activity_at is None:
        return None
    return (facts.as_of - facts.last_activity_at).total_seconds() / 86400


FACT_RESOLVERS: Dict[str, FactDefinition] = {
    "has_email": FactDefinition(
        CriterionKind.boolean,
        lambda f: _has_text(f.email),
        "Lead has a non-blank email address",
    ),
    "has_phone": FactDefinition(
        CriterionKind.boolean,
        lambda f: _has_text(f.phone),
        "Lead has a non-blank phone number",
    ),
    "has_budget": FactDefinition(
        CriterionKind.boolean,
        lambda f: f.budget_min is not None or f.budget_max is not None,
        "Lead has a minimum or maximum budget",
    ),
    "has_preferred_areas": FactDefinition(
        CriterionKind.boolean,
        lambda f: any(_has_text(a) for a in f.preferred_areas),
        "Lead listed at least one preferred area",
    ),
    "has_notes": FactDefinition(
        CriterionKind.boolean,
        lambda f: _has_text(f.notes),
        "Lead has non-blank notes",
    ),
    "activity_count": FactDefinition(
        CriterionKind.threshold,
        lambda f: f.activity_count,
        "Number of logged activities",
    ),
    "budget_min": FactDefinition(
        CriterionKind.threshold,
        lambda f: f.budget_min,
        "Lead's minimum budget",
    ),
    "budget_max": FactDefinition(
        CriterionKind.threshold,
        lambda f: f.budget_max,
        "Lead's maximum budget",
    ),
    "recent_activity": FactDefinition(
        CriterionKind.boolean,
        _has_recent_activity,
        "Any activity within the recent-activity window",
    ),
    "days_since_contact": FactDefinition(
        CriterionKind.threshold,
        _days_since_contact,
        "Days since the most recent activity",
    ),
}
