"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains scoring and matching logic.
"""

from app.repositories.lead_repository import LeadRepository
from app.repositories.activity_repository import ActivityRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.property_match_repository import PropertyMatchRepository
from app.repositories.scoring_config_repository import ScoringConfigRepository

__all__ = [
    "LeadRepository",
    "ActivityRepository",
    "PropertyRepository",
    "PropertyMatchRepository",
    "ScoringConfigRepository",
]
