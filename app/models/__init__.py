from app.models.base import Base
from app.models.lead import Lead
from app.models.activity import LeadActivity
from app.models.property import Property
from app.models.property_match import LeadPropertyMatch
from app.models.scoring_config import ScoringConfig

# Import event listeners to register them
from app.models import listeners  # noqa: F401

__all__ = [
    "Base",
    "Lead",
    "LeadActivity",
    "Property",
    "LeadPropertyMatch",
    "ScoringConfig",
]
