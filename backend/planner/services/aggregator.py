"""Per-day distance and duration totals."""

from collections.abc import Sequence
from uuid import UUID

from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidReference
from backend.planner.models.trip import DayAggregates, Place


def compute_aggregates(places: Sequence[Place]) -> DayAggregates:
    """Sum the outbound legs of a day's places."""
    return DayAggregates(
        total_distance=sum((p.distance_to_next for p in places), 0.0),
        total_duration=sum(p.time_to_next for p in places),
    )


class DayAggregator:
    """Re-derives and stores a day's totals from its current place list."""

    def __init__(self, store: ItineraryStore) -> None:
        self._store = store

    async def recompute(self, day_id: UUID) -> DayAggregates:
        """Read the day's places and write both totals.

        Raises:
            InvalidReference: Day does not exist
            StorageFailure: Persistence call failed
        """
        places = await self._store.list_places_by_day(day_id)
        aggregates = compute_aggregates(places)

        stored = await self._store.update_day_aggregates(
            day_id, aggregates.total_distance, aggregates.total_duration
        )
        if not stored:
            raise InvalidReference("day", day_id)

        return aggregates
