"""Sample data seeder for local development.

Creates a handful of leads with activity histories, a small property
inventory and the default scoring config, then runs one full score
recompute so the lead listing has scores to filter on.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.models import Lead, LeadActivity, Property
from app.repositories.scoring_config_repository import ScoringConfigRepository
from app.schemas.common import ActivityType, LeadSource
from app.services.score_recompute import run_score_recompute
from app.services.scoring_config_service import ScoringConfigService

LEADS = [
    {
        "full_name": "Amina Otieno",
        "phone": "+254700000001",
        "email": "amina@example.com",
        "source": LeadSource.REFERRAL.value,
        "interest_type": "buy",
        "budget_currency": "KES",
        "budget_min": Decimal("8000000"),
        "budget_max": Decimal("12000000"),
        "preferred_areas": ["Westlands", "Kilimani"],
        "notes": "Wants a 3-bedroom near schools",
        "activities": 5,
    },
    {
        "full_name": "Brian Mwangi",
        "phone": "+254700000002",
        "email": None,
        "source": LeadSource.WHATSAPP.value,
        "interest_type": "rent",
        "budget_currency": "KES",
        "budget_min": Decimal("40000"),
        "budget_max": Decimal("80000"),
        "preferred_areas": ["Kileleshwa"],
        "notes": "",
        "activities": 1,
    },
    {
        "full_name": "Carol Njeri",
        "phone": "+254700000003",
        "email": "carol@example.com",
        "source": LeadSource.WEBSITE.value,
        "interest_type": "buy",
        "budget_currency": None,
        "budget_min": None,
        "budget_max": None,
        "preferred_areas": [],
        "notes": "Investor, flexible on area",
        "activities": 0,
    },
    {
        "full_name": "David Kamau",
        "phone": "+254700000004",
        "email": "david@example.com",
        "source": LeadSource.PROPERTY_PORTAL.value,
        "interest_type": "rent",
        "budget_currency": "KES",
        "budget_min": Decimal("150000"),
        "budget_max": Decimal("250000"),
        "preferred_areas": ["Karen", "Runda"],
        "notes": "Relocating in Q1",
        "activities": 3,
    },
]

PROPERTIES = [
    ("Garden apartment", "apartment", "sale", "9500000", "Westlands", 3, "available"),
    ("Townhouse with pool", "house", "sale", "13000000", "Kilimani", 4, "under_offer"),
    ("Studio near Yaya", "apartment", "rent", "55000", "Kilimani", 1, "available"),
    ("Two-bed flat", "apartment", "rent", "75000", "Kileleshwa", 2, "available"),
    ("Family home", "house", "rent", "220000", "Karen", 5, "available"),
    ("Villa", "house", "sale", "45000000", "Runda", 6, "sold"),
    ("Half-acre plot", "land", "sale", "18000000", "Karen", None, "available"),
    ("Office floor", "commercial", "rent", "400000", "Upper Hill", None, "off_market"),
]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_maker() as session:
        print("Seeding sample data")

        await session.execute(
            text(
                "TRUNCATE TABLE "
                "lead_property_matches, "
                "lead_activities, "
                "properties, "
                "leads, "
                "scoring_configs "
                "CASCADE"
            )
        )
        await session.commit()
        print("Cleared existing data")

        await ScoringConfigService(ScoringConfigRepository(session)).ensure_seeded()
        print("Seeded default scoring config")

        now = datetime.now(timezone.utc)
        activity_types = [a.value for a in ActivityType]
        activity_count = 0
        for data in LEADS:
            data = dict(data)
            n_activities = data.pop("activities")
            lead = Lead(**data)
            session.add(lead)
            await session.flush()
            for i in range(n_activities):
                session.add(
                    LeadActivity(
                        lead_id=lead.lead_id,
                        type=activity_types[i % len(activity_types)],
                        title=f"Follow-up #{i + 1}",
                        created_at=now - timedelta(days=2 * i + 1),
                    )
                )
                activity_count += 1
        print(f"Created {len(LEADS)} leads with {activity_count} activities")

        for title, ptype, listing, price, location, bedrooms, status in PROPERTIES:
            session.add(
                Property(
                    title=title,
                    type=ptype,
                    listing_type=listing,
                    price=Decimal(price),
                    currency="KES",
                    location=location,
                    bedrooms=bedrooms,
                    bathrooms=bedrooms,
                    status=status,
                )
            )
        await session.commit()
        print(f"Created {len(PROPERTIES)} properties")

    result = await run_score_recompute(session_maker)
    print(
        f"Scored leads: updated={result.updated} "
        f"unchanged={result.unchanged} failed={result.failed}"
    )

    await engine.dispose()
    print("Seeding complete")


if __name__ == "__main__":
    asyncio.run(seed())
