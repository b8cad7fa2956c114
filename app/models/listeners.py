from datetime import datetime, timezone
from sqlalchemy import event, inspect

from app.models.lead import Lead
from app.models.property import Property
from app.models.scoring_config import ScoringConfig


# Auto updated_at
@event.listens_for(Lead, "before_update")
@event.listens_for(Property, "before_update")
@event.listens_for(ScoringConfig, "before_update")
def update_timestamp(mapper, connection, target):
    target.updated_at = datetime.now(timezone.utc)


# A score written through the ORM always carries its own timestamp
@event.listens_for(Lead, "before_update")
def stamp_score_change(mapper, connection, target):
    state = inspect(target)
    score_history = state.attrs.score.history
    if not score_history.has_changes():
        return
    if not state.attrs.last_scored_at.history.has_changes():
        target.last_scored_at = datetime.now(timezone.utc)
