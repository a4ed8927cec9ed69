"""Itinerary Assembler - loads the full trip -> day -> place tree."""

from uuid import UUID

from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidReference
from backend.planner.models.trip import Trip
from backend.planner.services.budget import total_cost


class ItineraryAssembler:
    """Re-reads a trip tree after mutations; there is no incremental cache."""

    def __init__(self, store: ItineraryStore) -> None:
        self._store = store

    async def load(self, trip_id: UUID) -> Trip:
        """Load a trip with days by day_number and places by position.

        budget.spent is derived from the loaded place costs.

        Raises:
            InvalidReference: Trip does not exist
        """
        trip = await self._store.get_trip(trip_id)
        if trip is None:
            raise InvalidReference("trip", trip_id)

        days = await self._store.list_days(trip_id)
        loaded = []
        for day in sorted(days, key=lambda d: d.day_number):
            places = await self._store.list_places_by_day(day.id)
            loaded.append(
                day.model_copy(update={"places": sorted(places, key=lambda p: p.position)})
            )

        tree = trip.model_copy(update={"days": loaded})
        spent = total_cost(tree)
        return tree.model_copy(
            update={"budget": trip.budget.model_copy(update={"spent": spent})}
        )
