"""Repository protocol interfaces for itinerary persistence."""

from datetime import date
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from backend.planner.models.plan import DailyItinerary, TripPlan
from backend.planner.models.trip import Day, Place, PlaceCreate, Trip, TripCreate


class ItineraryStore(Protocol):
    """Persistence collaborator for the trip -> day -> place tree.

    Implementations raise StorageFailure when the backing store rejects a call
    and return None/False for ids that do not exist.
    """

    async def create_trip(self, user_id: UUID, fields: TripCreate) -> Trip:
        """Create a trip row. fields.budget is always populated by the caller."""
        ...

    async def create_days_for_trip(self, trip_id: UUID, dates: list[date]) -> list[Day]:
        """Create one day per date, numbered 1..len(dates) in the given order."""
        ...

    async def get_trip(self, trip_id: UUID) -> Trip | None:
        """Get trip by ID (without days)."""
        ...

    async def list_user_trips(self, user_id: UUID) -> list[Trip]:
        """List a user's trips, newest first."""
        ...

    async def delete_trip(self, trip_id: UUID) -> bool:
        """Delete a trip with its days and places."""
        ...

    async def list_days(self, trip_id: UUID) -> list[Day]:
        """List a trip's days ordered by day_number."""
        ...

    async def get_day(self, day_id: UUID) -> Day | None:
        """Get day by ID (without places)."""
        ...

    async def create_place(self, fields: PlaceCreate) -> Place:
        """Insert a place. fields.position is always resolved by the caller."""
        ...

    async def get_place(self, place_id: UUID) -> Place | None:
        """Get place by ID."""
        ...

    async def update_place(self, place_id: UUID, changes: dict[str, Any]) -> Place | None:
        """Apply a partial update and return the stored place."""
        ...

    async def delete_place(self, place_id: UUID) -> bool:
        """Delete a place. Returns False if it did not exist."""
        ...

    async def list_places_by_day(self, day_id: UUID) -> list[Place]:
        """List a day's places ordered by position."""
        ...

    async def set_positions(self, day_id: UUID, positions: dict[UUID, int]) -> None:
        """Write several positions of one day as a single unit."""
        ...

    async def update_day_aggregates(
        self, day_id: UUID, total_distance: float, total_duration: int
    ) -> bool:
        """Store derived day totals."""
        ...


class TripPlanStore(Protocol):
    """Persistence for generated trip plans."""

    async def save_plan(self, plan: TripPlan) -> None:
        """Insert or replace a plan.

        Raises:
            InvalidReference: plan.id is already stored for another user
        """
        ...

    async def get_plan(self, plan_id: str, user_id: UUID) -> TripPlan | None:
        """Get a plan owned by user_id."""
        ...

    async def replace_itinerary(
        self,
        plan_id: str,
        user_id: UUID,
        itinerary: list[DailyItinerary],
        total_cost: Decimal,
    ) -> bool:
        """Replace a plan's day list and total cost."""
        ...
