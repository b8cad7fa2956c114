from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from app.models.base import Base
from sqlalchemy.sql import func


class ScoringConfig(Base):
    """The single, process-wide lead scoring configuration.

    ``criteria`` holds the ordered criterion list as JSONB and is always
    replaced as a whole.  ``generation`` increases on every save;
    ``recomputed_generation`` is the generation used by the last finished
    bulk recompute, so the two differing means stored scores may be
    stale.  A CHECK constraint pins the table to one row.
    """

    __tablename__ = "scoring_configs"
    config_id = Column(Integer, primary_key=True)
    criteria = Column(JSONB, nullable=False)
    generation = Column(Integer, nullable=False, server_default=text("1"))
    recomputed_generation = Column(Integer)
    updated_by = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("config_id = 1", name="ck_scoring_configs_singleton"),
    )
