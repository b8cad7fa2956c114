from sqlalchemy import Column, String, Text, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import ACTIVITY_TYPE_CHECK_CLAUSE


class LeadActivity(Base):
    """A logged interaction with a lead (call, viewing, note, ...).

    The scoring engine only reads activity counts and the most recent
    ``created_at`` per lead.
    """

    __tablename__ = "lead_activities"
    activity_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    lead_id = Column(
        UUID(as_uuid=True),
        ForeignKey("leads.lead_id", ondelete="CASCADE"),
        nullable=False,
    )
    type = Column(String(20), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, server_default="")
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    lead = relationship("Lead", back_populates="activities")

    __table_args__ = (
        CheckConstraint(ACTIVITY_TYPE_CHECK_CLAUSE, name="ck_lead_activities_type"),
        Index("ix_lead_activities_lead_created", "lead_id", "created_at"),
    )
