"""In-memory implementations of repository interfaces."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from backend.planner.errors import InvalidReference
from backend.planner.models.plan import DailyItinerary, TripPlan
from backend.planner.models.trip import Day, Place, PlaceCreate, Trip, TripCreate


class InMemoryItineraryStore:
    """In-memory implementation of ItineraryStore.

    Returned models are copies so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._trips: dict[uuid.UUID, Trip] = {}
        self._days: dict[uuid.UUID, Day] = {}
        self._places: dict[uuid.UUID, Place] = {}

    async def create_trip(self, user_id: uuid.UUID, fields: TripCreate) -> Trip:
        """Create a trip row."""
        if fields.budget is None:
            raise ValueError("budget must be resolved before persisting a trip")

        now = datetime.now(UTC)
        trip = Trip(
            id=uuid.uuid4(),
            user_id=user_id,
            name=fields.name,
            destination=fields.destination,
            start_date=fields.start_date,
            end_date=fields.end_date,
            traveler_type=fields.traveler_type,
            budget=fields.budget,
            created_at=now,
            updated_at=now,
        )
        self._trips[trip.id] = trip
        return trip.model_copy(deep=True)

    async def create_days_for_trip(self, trip_id: uuid.UUID, dates: list[date]) -> list[Day]:
        """Create one day per date."""
        days = []
        for i, day_date in enumerate(dates):
            day = Day(
                id=uuid.uuid4(),
                trip_id=trip_id,
                date=day_date,
                day_number=i + 1,
                created_at=datetime.now(UTC),
            )
            self._days[day.id] = day
            days.append(day.model_copy(deep=True))
        return days

    async def get_trip(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID."""
        trip = self._trips.get(trip_id)
        return trip.model_copy(deep=True) if trip else None

    async def list_user_trips(self, user_id: uuid.UUID) -> list[Trip]:
        """List a user's trips, newest first."""
        trips = [t for t in self._trips.values() if t.user_id == user_id]
        trips.sort(key=lambda t: t.created_at or datetime.min.replace(tzinfo=UTC), reverse=True)
        return [t.model_copy(deep=True) for t in trips]

    async def delete_trip(self, trip_id: uuid.UUID) -> bool:
        """Delete a trip with its days and places."""
        if self._trips.pop(trip_id, None) is None:
            return False

        day_ids = {d.id for d in self._days.values() if d.trip_id == trip_id}
        for place_id in [p.id for p in self._places.values() if p.trip_day_id in day_ids]:
            del self._places[place_id]
        for day_id in day_ids:
            del self._days[day_id]
        return True

    async def list_days(self, trip_id: uuid.UUID) -> list[Day]:
        """List days ordered by day_number."""
        days = sorted(
            (d for d in self._days.values() if d.trip_id == trip_id),
            key=lambda d: d.day_number,
        )
        return [d.model_copy(deep=True) for d in days]

    async def get_day(self, day_id: uuid.UUID) -> Day | None:
        """Get day by ID."""
        day = self._days.get(day_id)
        return day.model_copy(deep=True) if day else None

    async def create_place(self, fields: PlaceCreate) -> Place:
        """Insert a place."""
        if fields.position is None:
            raise ValueError("position must be resolved before persisting a place")

        place = Place(
            id=uuid.uuid4(),
            created_at=datetime.now(UTC),
            **fields.model_dump(),
        )
        self._places[place.id] = place
        return place.model_copy(deep=True)

    async def get_place(self, place_id: uuid.UUID) -> Place | None:
        """Get place by ID."""
        place = self._places.get(place_id)
        return place.model_copy(deep=True) if place else None

    async def update_place(self, place_id: uuid.UUID, changes: dict[str, Any]) -> Place | None:
        """Apply a partial update."""
        place = self._places.get(place_id)
        if place is None:
            return None

        updated = Place.model_validate({**place.model_dump(), **changes})
        self._places[place_id] = updated
        return updated.model_copy(deep=True)

    async def delete_place(self, place_id: uuid.UUID) -> bool:
        """Delete a place."""
        return self._places.pop(place_id, None) is not None

    async def list_places_by_day(self, day_id: uuid.UUID) -> list[Place]:
        """List a day's places ordered by position."""
        places = sorted(
            (p for p in self._places.values() if p.trip_day_id == day_id),
            key=lambda p: p.position,
        )
        return [p.model_copy(deep=True) for p in places]

    async def set_positions(self, day_id: uuid.UUID, positions: dict[uuid.UUID, int]) -> None:
        """Write several positions at once."""
        for place_id in positions:
            place = self._places.get(place_id)
            if place is None or place.trip_day_id != day_id:
                raise InvalidReference("place", place_id)

        for place_id, position in positions.items():
            self._places[place_id] = self._places[place_id].model_copy(
                update={"position": position}
            )

    async def update_day_aggregates(
        self, day_id: uuid.UUID, total_distance: float, total_duration: int
    ) -> bool:
        """Store derived day totals."""
        day = self._days.get(day_id)
        if day is None:
            return False

        self._days[day_id] = day.model_copy(
            update={"total_distance": total_distance, "total_duration": total_duration}
        )
        return True


class InMemoryTripPlanStore:
    """In-memory implementation of TripPlanStore."""

    def __init__(self) -> None:
        self._plans: dict[str, TripPlan] = {}

    async def save_plan(self, plan: TripPlan) -> None:
        """Insert or replace a plan."""
        existing = self._plans.get(plan.id)
        if existing is not None and existing.user_id != plan.user_id:
            raise InvalidReference("plan", plan.id)

        self._plans[plan.id] = plan.model_copy(deep=True)

    async def get_plan(self, plan_id: str, user_id: uuid.UUID) -> TripPlan | None:
        """Get a plan owned by user_id."""
        plan = self._plans.get(plan_id)

        # Enforce ownership
        if plan is None or plan.user_id != user_id:
            return None

        return plan.model_copy(deep=True)

    async def replace_itinerary(
        self,
        plan_id: str,
        user_id: uuid.UUID,
        itinerary: list[DailyItinerary],
        total_cost: Decimal,
    ) -> bool:
        """Replace a plan's day list and total cost."""
        plan = self._plans.get(plan_id)
        if plan is None or plan.user_id != user_id:
            return False

        self._plans[plan_id] = plan.model_copy(
            update={
                "itinerary": [d.model_copy(deep=True) for d in itinerary],
                "total_cost": total_cost,
            }
        )
        return True
