from typing import Any, Dict, List


DEFAULT_SCORING_CRITERIA: List[Dict[str, Any]] = [
    {
        "key": "has_email",
        "label": "Has email address",
        "kind": "boolean",
        "weight": 10,
        "enabled": True,
    },
    {
        "key": "has_budget",
        "label": "Has budget set",
        "kind": "boolean",
        "weight": 15,
        "enabled": True,
    },
    {
        "key": "has_preferred_areas",
        "label": "Has preferred areas",
        "kind": "boolean",
        "weight": 10,
        "enabled": True,
    },
    {
        "key": "has_notes",
        "label": "Has notes",
        "kind": "boolean",
        "weight": 5,
        "enabled": True,
    },
    {
        "key": "activity_count",
        "label": "Number of activities",
        "kind": "threshold",
        "weight": 20,
        "enabled": True,
        "threshold": 3,
    },
    {
        "key": "budget_min",
        "label": "Minimum budget amount",
        "kind": "threshold",
        "weight": 15,
        "enabled": True,
        "threshold": 50_000,
    },
    {
        "key": "recent_activity",
        "label": "Activity in last 7 days",
        "kind": "boolean",
        "weight": 25,
        "enabled": True,
    },
]
