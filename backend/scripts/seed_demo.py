# backend/scripts/seed_demo.py
"""
Usage:
  # ensure DATABASE_URL is set (or use .env)
  python backend/scripts/seed_demo.py
This script will:
 - create the events/bookings tables if they are missing
 - create 3 sample events (skipped when an event with the same title exists)
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select

from eventbook.config import load_settings
from eventbook.db import Database
from eventbook.main import configure_logging
from eventbook.models import Event

logger = logging.getLogger("eventbook.seed")


def demo_events(now: datetime) -> list[dict]:
    # small capacities to exercise sold-out paths
    return [
        {"title": "Indie Concert", "location": "Stadium A", "date": now + timedelta(days=7),
         "total_seats": 5, "price": Decimal("25.00"), "description": "An evening of local bands."},
        {"title": "Tech Talk", "location": "Hall B", "date": now + timedelta(days=14),
         "total_seats": 50, "price": Decimal("0.00"), "description": "Lightning talks and demos."},
        {"title": "Art Expo", "location": "Gallery C", "date": now + timedelta(days=21),
         "total_seats": 100, "price": Decimal("12.50"), "description": "Contemporary art showcase."},
    ]


async def seed(database: Database) -> tuple[list[str], list[str]]:
    await database.create_all()
    created, existing = [], []
    async with database.sessionmaker() as session:
        async with session.begin():
            for ev in demo_events(datetime.now(timezone.utc)):
                res = await session.execute(select(Event).where(Event.title == ev["title"]))
                if res.scalars().first():
                    existing.append(ev["title"])
                    continue
                session.add(Event(available_seats=ev["total_seats"], **ev))
                created.append(ev["title"])
    return created, existing


async def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    database = Database.from_settings(settings)
    try:
        created, existing = await seed(database)
    finally:
        await database.dispose()
    logger.info("Seed complete. created=%s existing=%s", created, existing)


if __name__ == "__main__":
    asyncio.run(main())
