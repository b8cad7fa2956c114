from sqlalchemy import (
    Column,
    Index,
    String,
    DateTime,
    CheckConstraint,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import MATCH_TYPE_CHECK_CLAUSE


class LeadPropertyMatch(Base):
    """Links a lead to a property an agent chose to show them.

    A UNIQUE constraint on ``(lead_id, property_id)`` prevents attaching
    the same property twice; attached properties are excluded from
    further suggestions for that lead.
    """

    __tablename__ = "lead_property_matches"
    match_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    lead_id = Column(
        UUID(as_uuid=True),
        ForeignKey("leads.lead_id", ondelete="CASCADE"),
        nullable=False,
    )
    property_id = Column(
        UUID(as_uuid=True),
        ForeignKey("properties.property_id", ondelete="CASCADE"),
        nullable=False,
    )
    match_type = Column(String(20), nullable=False)
    created_by = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lead = relationship("Lead", back_populates="property_matches")

    __table_args__ = (
        CheckConstraint(MATCH_TYPE_CHECK_CLAUSE, name="ck_lead_property_matches_type"),
        UniqueConstraint("lead_id", "property_id", name="uq_lead_property_match"),
        Index("ix_lead_property_matches_property_id", "property_id"),
    )
