from sqlalchemy import (
    Boolean,
    Column,
    String,
    Numeric,
    Float,
    Text,
    DateTime,
    CheckConstraint,
    Index,
    ARRAY,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func
from sqlalchemy import text

from app.core.constants import INTEREST_TYPE_CHECK_CLAUSE, LEAD_SOURCE_CHECK_CLAUSE


class Lead(Base):
    """Real-estate prospect moving through the sales pipeline.

    Holds contact details, rent/buy interest, budget range and preferred
    areas.  ``score`` is the last total computed by the scoring engine;
    ``NULL`` means the lead has never been scored, which is distinct
    from a computed score of zero.  ``score`` and ``last_scored_at`` are
    always written together in the same UPDATE.
    """

    __tablename__ = "leads"
    lead_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    full_name = Column(String(200), nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(255))
    source = Column(String(50), nullable=False)
    interest_type = Column(String(10), nullable=False)
    budget_currency = Column(String(3))
    budget_min = Column(Numeric(15, 2))
    budget_max = Column(Numeric(15, 2))
    preferred_areas = Column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    notes = Column(Text, nullable=False, server_default="")
    score = Column(Float, nullable=True)
    last_scored_at = Column(DateTime(timezone=True))
    is_archived = Column(Boolean, nullable=False, server_default=text("false"))
    closed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    activities = relationship(
        "LeadActivity", back_populates="lead", cascade="all, delete-orphan"
    )
    property_matches = relationship(
        "LeadPropertyMatch", back_populates="lead", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_leads_score", "score"),
        Index(
            "ix_leads_unscored",
            "lead_id",
            postgresql_where=text("score IS NULL"),
        ),
        CheckConstraint("score IS NULL OR score >= 0", name="ck_leads_score_non_negative"),
        CheckConstraint(INTEREST_TYPE_CHECK_CLAUSE, name="ck_leads_interest_type"),
        CheckConstraint(LEAD_SOURCE_CHECK_CLAUSE, name="ck_leads_source"),
        CheckConstraint(
            "budget_min IS NULL OR budget_max IS NULL OR budget_min <= budget_max",
            name="ck_leads_budget_min_lte_max",
        ),
    )
