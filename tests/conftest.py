from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from eventbook.config import Settings
from eventbook.db import Database
from eventbook.main import create_app
from eventbook.models import Event

ADMIN_KEY = "test-admin-key"
ADMIN_HEADERS = {"X-Admin-Key": ADMIN_KEY}
JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'eventbook.db'}",
        admin_key=ADMIN_KEY,
        jwt_secret=JWT_SECRET,
        admin_username="admin",
        admin_password="s3cret",
    )


@pytest.fixture
async def database(settings):
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def make_event(database):
    """Insert an event directly; returns its id."""

    async def _make(total_seats=10, available_seats=None, price="20.00", title="Jazz Night",
                    location="Blue Hall", date=datetime(2026, 11, 20, 19, 0), description=None):
        async with database.sessionmaker() as session:
            async with session.begin():
                event = Event(
                    title=title,
                    description=description,
                    location=location,
                    date=date,
                    total_seats=total_seats,
                    available_seats=total_seats if available_seats is None else available_seats,
                    price=Decimal(price),
                )
                session.add(event)
                await session.flush()
                return event.id

    return _make


def booking_payload(event_id, quantity=1, **overrides):
    payload = {
        "event_id": event_id,
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "mobile": "+44 20 7946 0000",
        "quantity": quantity,
    }
    payload.update(overrides)
    return payload
