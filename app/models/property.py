from sqlalchemy import (
    Column,
    String,
    Numeric,
    Integer,
    Text,
    DateTime,
    CheckConstraint,
    Index,
    ARRAY,
)
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base
from sqlalchemy.sql import func
from sqlalchemy import text

from app.core.constants import (
    LISTING_TYPE_CHECK_CLAUSE,
    PROPERTY_STATUS_CHECK_CLAUSE,
    PROPERTY_TYPE_CHECK_CLAUSE,
)


class Property(Base):
    """A listing offered for rent or sale.

    Only ``price``, ``listing_type``, ``location`` and ``status`` feed the
    match score; the rest is carried through to suggestion responses.
    """

    __tablename__ = "properties"
    property_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    title = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False)
    listing_type = Column(String(10), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    location = Column(String(200), nullable=False)
    area = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    status = Column(String(20), nullable=False, server_default="available")
    description = Column(Text, nullable=False, server_default="")
    images = Column(ARRAY(String), nullable=False, server_default=text("'{}'"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        CheckConstraint(PROPERTY_TYPE_CHECK_CLAUSE, name="ck_properties_type"),
        CheckConstraint(LISTING_TYPE_CHECK_CLAUSE, name="ck_properties_listing_type"),
        CheckConstraint(PROPERTY_STATUS_CHECK_CLAUSE, name="ck_properties_status"),
        Index("ix_properties_location", "location"),
        Index("ix_properties_filters", "type", "listing_type", "status"),
    )
