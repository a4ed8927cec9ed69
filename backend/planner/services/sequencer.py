"""Position sequencing for a day's places.

Positions are rewritten through a single set_positions call so a reader never
sees a half-applied ordering. After every rewrite the terminal place has no
outbound leg and the day's totals are recomputed.
"""

from collections.abc import Sequence
from uuid import UUID

from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidReference, OrderMismatch
from backend.planner.models.trip import Place
from backend.planner.services.aggregator import DayAggregator


class PositionSequencer:
    """Keeps a day's positions contiguous (0..n-1)."""

    def __init__(self, store: ItineraryStore, aggregator: DayAggregator) -> None:
        self._store = store
        self._aggregator = aggregator

    async def compact(self, day_id: UUID) -> list[Place]:
        """Renumber a day's places to 0..n-1, keeping their relative order."""
        places = await self._load(day_id)
        return await self._write_order(day_id, places)

    async def apply_order(self, day_id: UUID, ordered_ids: Sequence[UUID]) -> list[Place]:
        """Assign position = index for a full permutation of the day's places.

        Raises:
            OrderMismatch: ordered_ids is not exactly the day's current id set
            InvalidReference: Day does not exist
        """
        places = await self._load(day_id)
        by_id = {p.id: p for p in places}

        if len(ordered_ids) != len(places) or set(ordered_ids) != set(by_id):
            raise OrderMismatch(
                f"order for day {day_id} has {len(ordered_ids)} ids, "
                f"expected a permutation of {len(places)}"
            )

        return await self._write_order(day_id, [by_id[place_id] for place_id in ordered_ids])

    async def _load(self, day_id: UUID) -> list[Place]:
        if await self._store.get_day(day_id) is None:
            raise InvalidReference("day", day_id)
        return await self._store.list_places_by_day(day_id)

    async def _write_order(self, day_id: UUID, ordered: list[Place]) -> list[Place]:
        moved = {p.id: i for i, p in enumerate(ordered) if p.position != i}
        if moved:
            await self._store.set_positions(day_id, moved)

        result = [p.model_copy(update={"position": i}) for i, p in enumerate(ordered)]

        # Terminal place has nowhere to go
        if result and (result[-1].distance_to_next or result[-1].time_to_next):
            last = await self._store.update_place(
                result[-1].id, {"distance_to_next": 0.0, "time_to_next": 0}
            )
            if last is None:
                raise InvalidReference("place", result[-1].id)
            result[-1] = last

        await self._aggregator.recompute(day_id)
        return result
