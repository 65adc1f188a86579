"""
Shared fixtures: a fresh in-memory database per test, seeded reference data,
and an HTTP client bound to the app with the database dependency overridden.
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["LOG_FORMAT"] = "console"
os.environ["APP_ENV"] = "test"

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from dolu import models  # noqa: F401
from dolu.db.database import Base, get_db
from dolu.db.seed import seed_all
from dolu.models import Area, Zone, ZoneRate, Addon, ItemCategory, City, State, Booking
from dolu.models.booking import BookingStatus
from dolu.schemas import BookingCreate
from dolu.services.tracking import TrackingIdGenerator

BOOKING_DAY = datetime(2024, 2, 9, 10, 30)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seeded(session_maker):
    """Default reference data; exposes plain ids so tests never touch expired rows."""
    async with session_maker() as session:
        await seed_all(session)

        zones = {zone.name: zone.id for zone in (await session.execute(select(Zone))).scalars()}
        zone_names = {zone_id: name for name, zone_id in zones.items()}
        rates = {
            (zone_names[rate.from_zone_id], zone_names[rate.to_zone_id]): rate.id
            for rate in (await session.execute(select(ZoneRate))).scalars()
        }
        return SimpleNamespace(
            state_id=(await session.execute(select(State.id))).scalar_one(),
            city_id=(await session.execute(select(City.id))).scalar_one(),
            zones=zones,
            areas={area.name: area.id for area in (await session.execute(select(Area))).scalars()},
            rates=rates,
            addons={addon.code: addon.id for addon in (await session.execute(select(Addon))).scalars()},
            categories={
                category.code: category.id
                for category in (await session.execute(select(ItemCategory))).scalars()
            },
        )


@pytest.fixture
def generator():
    return TrackingIdGenerator(clock=lambda: BOOKING_DAY)


@pytest.fixture
def booking_payload(seeded):
    def build(**overrides) -> BookingCreate:
        data = {
            "sender_name": "Ada Obi",
            "sender_phone": "0803 123 4567",
            "pickup_state_id": seeded.state_id,
            "pickup_city_id": seeded.city_id,
            "pickup_area_id": seeded.areas["Rumuola"],
            "pickup_address": "12 Rumuola Road",
            "receiver_name": "Chidi Eze",
            "receiver_phone": "+2348091112222",
            "dropoff_state_id": seeded.state_id,
            "dropoff_city_id": seeded.city_id,
            "dropoff_area_id": seeded.areas["Eliozu"],
            "dropoff_address": "4 Eliozu Close",
            "item_category_id": seeded.categories["DOCUMENTS"],
            "addons_selected": ["FRAGILE"],
        }
        data.update(overrides)
        return BookingCreate(**data)

    return build


@pytest.fixture
def insert_booking(db):
    """Raw booking rows, bypassing the lifecycle service (for id-sequence tests)."""

    async def insert(tracking_id: str, status=BookingStatus.PENDING) -> Booking:
        booking = Booking(
            tracking_id=tracking_id,
            sender_name="Seed",
            sender_phone="08000000000",
            pickup_address="-",
            receiver_name="Seed",
            receiver_phone="08000000001",
            dropoff_address="-",
            price_base=Decimal("800.00"),
            price_addons=Decimal("0.00"),
            price_total=Decimal("800.00"),
            status=status,
        )
        db.add(booking)
        await db.commit()
        return booking

    return insert


@pytest.fixture
async def client(session_maker):
    from dolu.main import app

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def staff_headers(client):
    response = await client.post("/api/auth/login", json={"password": "test-password"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
