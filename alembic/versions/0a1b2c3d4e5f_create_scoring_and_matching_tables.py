"""create scoring and matching tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-17 09:00:00.000000

Creates leads, lead_activities, properties, lead_property_matches and
the single-row scoring_configs table, with the score indexes used by
the lead listing filters.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from app.core.constants import (
    ACTIVITY_TYPE_CHECK_CLAUSE,
    INTEREST_TYPE_CHECK_CLAUSE,
    LEAD_SOURCE_CHECK_CLAUSE,
    LISTING_TYPE_CHECK_CLAUSE,
    MATCH_TYPE_CHECK_CLAUSE,
    PROPERTY_STATUS_CHECK_CLAUSE,
    PROPERTY_TYPE_CHECK_CLAUSE,
)

# revision identifiers, used by Alembic.
revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "leads",
        _uuid_pk("lead_id"),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("interest_type", sa.String(10), nullable=False),
        sa.Column("budget_currency", sa.String(3)),
        sa.Column("budget_min", sa.Numeric(15, 2)),
        sa.Column("budget_max", sa.Numeric(15, 2)),
        sa.Column(
            "preferred_areas",
            postgresql.ARRAY(sa.String),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("score", sa.Float, nullable=True),
        sa.Column("last_scored_at", sa.DateTime(timezone=True)),
        sa.Column(
            "is_archived", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("closed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint("score IS NULL OR score >= 0", name="ck_leads_score_non_negative"),
        sa.CheckConstraint(INTEREST_TYPE_CHECK_CLAUSE, name="ck_leads_interest_type"),
        sa.CheckConstraint(LEAD_SOURCE_CHECK_CLAUSE, name="ck_leads_source"),
        sa.CheckConstraint(
            "budget_min IS NULL OR budget_max IS NULL OR budget_min <= budget_max",
            name="ck_leads_budget_min_lte_max",
        ),
    )
    op.create_index("ix_leads_score", "leads", ["score"])
    op.create_index(
        "ix_leads_unscored",
        "leads",
        ["lead_id"],
        postgresql_where=sa.text("score IS NULL"),
    )

    op.create_table(
        "lead_activities",
        _uuid_pk("activity_id"),
        sa.Column(
            "lead_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.lead_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(ACTIVITY_TYPE_CHECK_CLAUSE, name="ck_lead_activities_type"),
    )
    op.create_index(
        "ix_lead_activities_lead_created", "lead_activities", ["lead_id", "created_at"]
    )

    op.create_table(
        "properties",
        _uuid_pk("property_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("listing_type", sa.String(10), nullable=False),
        sa.Column("price", sa.Numeric(15, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("location", sa.String(200), nullable=False),
        sa.Column("area", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("bedrooms", sa.Integer),
        sa.Column("bathrooms", sa.Integer),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "images",
            postgresql.ARRAY(sa.String),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        sa.CheckConstraint(PROPERTY_TYPE_CHECK_CLAUSE, name="ck_properties_type"),
        sa.CheckConstraint(LISTING_TYPE_CHECK_CLAUSE, name="ck_properties_listing_type"),
        sa.CheckConstraint(PROPERTY_STATUS_CHECK_CLAUSE, name="ck_properties_status"),
    )
    op.create_index("ix_properties_location", "properties", ["location"])
    op.create_index(
        "ix_properties_filters", "properties", ["type", "listing_type", "status"]
    )

    op.create_table(
        "lead_property_matches",
        _uuid_pk("match_id"),
        sa.Column(
            "lead_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("leads.lead_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("properties.property_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("match_type", sa.String(20), nullable=False),
        sa.Column("created_by", sa.String(100)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(MATCH_TYPE_CHECK_CLAUSE, name="ck_lead_property_matches_type"),
        sa.UniqueConstraint("lead_id", "property_id", name="uq_lead_property_match"),
    )
    op.create_index(
        "ix_lead_property_matches_property_id", "lead_property_matches", ["property_id"]
    )

    op.create_table(
        "scoring_configs",
        sa.Column("config_id", sa.Integer, primary_key=True),
        sa.Column("criteria", postgresql.JSONB, nullable=False),
        sa.Column("generation", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("recomputed_generation", sa.Integer),
        sa.Column("updated_by", sa.String(100)),
        *_timestamps(),
        sa.CheckConstraint("config_id = 1", name="ck_scoring_configs_singleton"),
    )


def downgrade() -> None:
    op.drop_table("scoring_configs")
    op.drop_index("ix_lead_property_matches_property_id", table_name="lead_property_matches")
    op.drop_table("lead_property_matches")
    op.drop_index("ix_properties_filters", table_name="properties")
    op.drop_index("ix_properties_location", table_name="properties")
    op.drop_table("properties")
    op.drop_index("ix_lead_activities_lead_created", table_name="lead_activities")
    op.drop_table("lead_activities")
    op.drop_index("ix_leads_unscored", table_name="leads")
    op.drop_index("ix_leads_score", table_name="leads")
    op.drop_table("leads")
