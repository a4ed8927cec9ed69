"""Shared pytest fixtures for all test suites."""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from backend.planner.db.inmemory import InMemoryItineraryStore, InMemoryTripPlanStore
from backend.planner.db.models import Base
from backend.planner.errors import GeocodeUnavailable
from backend.planner.models.common import GeocodeResult, TravelerType
from backend.planner.models.trip import BudgetDescriptor, Day, Trip, TripCreate
from backend.planner.services.trips import TripService

USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


class FakeGeocoder:
    """Geocoder double that records lookups.

    Places listed in `known` resolve; `unavailable` makes every call raise
    GeocodeUnavailable; anything else resolves to None.
    """

    def __init__(
        self,
        known: dict[str, GeocodeResult] | None = None,
        unavailable: bool = False,
    ) -> None:
        self.known = known or {}
        self.unavailable = unavailable
        self.calls: list[tuple[str, str]] = []

    async def resolve(self, place_name: str, city_name: str) -> GeocodeResult | None:
        self.calls.append((place_name, city_name))
        if self.unavailable:
            raise GeocodeUnavailable("geocoder down")
        return self.known.get(place_name)


@pytest.fixture
def user_id() -> uuid.UUID:
    return USER_ID


@pytest.fixture
def store() -> InMemoryItineraryStore:
    return InMemoryItineraryStore()


@pytest.fixture
def plan_store() -> InMemoryTripPlanStore:
    return InMemoryTripPlanStore()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest_asyncio.fixture
async def trip(store: InMemoryItineraryStore) -> Trip:
    """Three-day Tokyo trip with empty days."""
    return await TripService(store).create_trip(
        USER_ID,
        TripCreate(
            name="Trip to Japan",
            destination="Tokyo, Japan",
            start_date=date(2025, 10, 10),
            end_date=date(2025, 10, 12),
            traveler_type=TravelerType.combination,
            budget=BudgetDescriptor(total=Decimal("1000")),
        ),
    )


@pytest.fixture
def day(trip: Trip) -> Day:
    """First day of the trip fixture."""
    assert trip.days
    return trip.days[0]


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created.

    StaticPool keeps one connection so the in-memory database survives
    between sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(sqlite_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(postgres_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
