"""Dev seeding helper - sample Tokyo trip for the stub-auth user."""

import asyncio
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from backend.planner.db.engine import get_async_engine
from backend.planner.db.repositories import ItineraryStore
from backend.planner.db.sql_repositories import SqlItineraryStore
from backend.planner.models.common import PlaceCategory, TravelerType
from backend.planner.models.trip import BudgetDescriptor, PlaceCreate, Trip, TripCreate
from backend.planner.services.assembler import ItineraryAssembler
from backend.planner.services.place_store import PlaceStore
from backend.planner.services.trips import TripService

# Fixed ID matching stub auth in backend/planner/api/auth.py
DEV_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")

SAMPLE_DAY_ONE = [
    {
        "name": "Tokyo Disneyland",
        "category": PlaceCategory.attraction,
        "description": (
            "Tokyo offshoot of the iconic theme park known for its rides, "
            "live shows & costumed characters."
        ),
        "image_url": "https://images.pexels.com/photos/2413613/pexels-photo-2413613.jpeg?auto=compress&cs=tinysrgb&w=800",
        "hours": "Open 8AM-10PM",
        "cost": Decimal("0"),
        "latitude": 35.6329,
        "longitude": 139.8804,
        "address": "1-1 Maihama, Urayasu, Chiba 279-0031, Japan",
        "rating": 4.5,
        "website": "https://www.tokyodisneyresort.jp/en/tdl/",
        "duration": 240,
        "distance_to_next": 0.25,
        "time_to_next": 5,
    },
    {
        "name": "Tokyo Disney Resort",
        "category": PlaceCategory.hotel,
        "description": "Official Disney resort hotels with magical themed rooms and amenities.",
        "image_url": "https://images.pexels.com/photos/1049298/pexels-photo-1049298.jpeg?auto=compress&cs=tinysrgb&w=800",
        "hours": "Open 24 hours",
        "cost": Decimal("1000"),
        "notes": "Add notes, links, etc. here",
        "latitude": 35.6351,
        "longitude": 139.8822,
        "address": "Tokyo Disney Resort, Maihama, Urayasu, Chiba",
        "rating": 4.7,
        "website": "https://www.tokyodisneyresort.jp/en/hotel/",
        "duration": 60,
        "distance_to_next": 1.7,
        "time_to_next": 32,
    },
    {
        "name": "Tokyo DisneySea",
        "category": PlaceCategory.attraction,
        "description": (
            "Part of the Disney resort, this large park has 7 themed ports of call "
            "with rides, shows & dining."
        ),
        "image_url": "https://images.pexels.com/photos/2070033/pexels-photo-2070033.jpeg?auto=compress&cs=tinysrgb&w=800",
        "hours": "Open 8AM-10PM",
        "cost": Decimal("0"),
        "latitude": 35.6267,
        "longitude": 139.8886,
        "address": "1-13 Maihama, Urayasu, Chiba 279-0031, Japan",
        "rating": 4.6,
        "website": "https://www.tokyodisneyresort.jp/en/tds/",
        "duration": 300,
        "distance_to_next": 0.0,
        "time_to_next": 0,
    },
]


async def seed_sample_tokyo_trip(store: ItineraryStore, user_id: uuid.UUID) -> Trip:
    """Create the three-day sample Tokyo trip with three places on day 1.

    Returns:
        The assembled trip tree
    """
    trip = await TripService(store).create_trip(
        user_id,
        TripCreate(
            name="Trip to Japan",
            destination="Tokyo, Japan",
            start_date=date(2025, 10, 10),
            end_date=date(2025, 10, 12),
            traveler_type=TravelerType.combination,
            budget=BudgetDescriptor(total=Decimal("5000"), currency="USD"),
        ),
    )

    day_one = (trip.days or [])[0]
    place_store = PlaceStore(store)
    for position, fields in enumerate(SAMPLE_DAY_ONE):
        await place_store.add(
            PlaceCreate(trip_day_id=day_one.id, position=position, **fields)
        )

    return await ItineraryAssembler(store).load(trip.id)


async def main() -> None:
    async with AsyncSession(get_async_engine(), expire_on_commit=False) as session:
        trip = await seed_sample_tokyo_trip(SqlItineraryStore(session), DEV_USER_ID)
        print(f"Created sample trip {trip.id} for dev user {DEV_USER_ID}")


if __name__ == "__main__":
    asyncio.run(main())
