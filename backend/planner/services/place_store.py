"""Place Store - single entry point for place mutations.

Every structural mutation finishes with the day's totals recomputed, so a
caller that re-reads after an awaited call never sees stale aggregates.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from uuid import UUID

from backend.planner.adapters.geocoding import Geocoder, resolve_or_blank
from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidPosition, InvalidReference, ItineraryError
from backend.planner.models.trip import Place, PlaceCreate, PlaceUpdate
from backend.planner.services.aggregator import DayAggregator
from backend.planner.services.sequencer import PositionSequencer
from backend.planner.utils.metrics import record_mutation

logger = logging.getLogger(__name__)

LEG_FIELDS = frozenset({"distance_to_next", "time_to_next"})


@contextmanager
def _tracked(operation: str, **fields: object) -> Iterator[None]:
    """Count and log a mutation outcome; errors propagate unchanged."""
    try:
        yield
    except ItineraryError as e:
        record_mutation(operation, "failure")
        logger.warning(
            f"Place mutation failed: {operation}",
            extra={"structured": {"operation": operation, "error": type(e).__name__, **fields}},
        )
        raise
    record_mutation(operation, "success")
    logger.info(
        f"Place mutation: {operation}",
        extra={"structured": {"operation": operation, **fields}},
    )


class PlaceStore:
    """Add, edit, remove, list and reorder the places of a day."""

    def __init__(
        self,
        store: ItineraryStore,
        aggregator: DayAggregator | None = None,
        sequencer: PositionSequencer | None = None,
        geocoder: Geocoder | None = None,
    ) -> None:
        """Initialize place store.

        Args:
            store: Persistence collaborator
            aggregator: Day aggregator (built over store if omitted)
            sequencer: Position sequencer (built over store if omitted)
            geocoder: Optional geocoder used by add() when a city is given
        """
        self._store = store
        self._aggregator = aggregator or DayAggregator(store)
        self._sequencer = sequencer or PositionSequencer(store, self._aggregator)
        self._geocoder = geocoder

    async def add(self, fields: PlaceCreate, city_name: str | None = None) -> Place:
        """Insert a place and recompute the day's totals.

        Position defaults to append. An explicit position in 0..n shifts the
        places at or after it down by one; the shift is undone if the insert
        fails.

        When city_name is given and the place has no coordinates, the place is
        geocoded before anything is written; a missing match leaves it at 0/0
        with an empty address.

        Raises:
            InvalidReference: Parent day does not exist
            InvalidPosition: Explicit position outside 0..n
            StorageFailure: Persistence call failed
        """
        day_id = fields.trip_day_id

        with _tracked("add_place", day_id=str(day_id)):
            if await self._store.get_day(day_id) is None:
                raise InvalidReference("day", day_id)

            places = await self._store.list_places_by_day(day_id)
            position = _insert_position(day_id, places, fields.position)

            if city_name is not None and self._geocoder is not None and fields.latitude is None:
                location = await resolve_or_blank(self._geocoder, fields.name, city_name)
                fields = fields.model_copy(
                    update={
                        "latitude": location.latitude,
                        "longitude": location.longitude,
                        "address": location.address,
                    }
                )

            shifted = {p.id: p.position for p in places if p.position >= position}
            if shifted:
                await self._store.set_positions(
                    day_id, {place_id: pos + 1 for place_id, pos in shifted.items()}
                )

            try:
                place = await self._store.create_place(
                    fields.model_copy(update={"position": position})
                )
            except ItineraryError:
                if shifted:
                    await self._store.set_positions(day_id, shifted)
                raise

            await self._aggregator.recompute(day_id)

        return place

    async def update(self, place_id: UUID, fields: PlaceUpdate) -> Place:
        """Apply a partial edit; leg changes recompute the day's totals.

        Raises:
            InvalidReference: Place does not exist
            StorageFailure: Persistence call failed
        """
        changes = fields.changes()

        with _tracked("update_place", place_id=str(place_id), fields=sorted(changes)):
            if not changes:
                current = await self._store.get_place(place_id)
                if current is None:
                    raise InvalidReference("place", place_id)
                return current

            place = await self._store.update_place(place_id, changes)
            if place is None:
                raise InvalidReference("place", place_id)

            if LEG_FIELDS & changes.keys():
                await self._aggregator.recompute(place.trip_day_id)

        return place

    async def remove(self, place_id: UUID) -> None:
        """Delete, then compact, then recompute; a failing step stops the rest.

        Raises:
            InvalidReference: Place does not exist
            StorageFailure: Persistence call failed
        """
        with _tracked("remove_place", place_id=str(place_id)):
            place = await self._store.get_place(place_id)
            if place is None:
                raise InvalidReference("place", place_id)

            if not await self._store.delete_place(place_id):
                raise InvalidReference("place", place_id)

            # compact() finishes with the aggregate recompute
            await self._sequencer.compact(place.trip_day_id)

    async def list_by_day(self, day_id: UUID) -> list[Place]:
        """List a day's places ordered by position.

        Raises:
            InvalidReference: Day does not exist
        """
        if await self._store.get_day(day_id) is None:
            raise InvalidReference("day", day_id)
        return await self._store.list_places_by_day(day_id)

    async def reorder(self, day_id: UUID, ordered_ids: Sequence[UUID]) -> list[Place]:
        """Apply a full ordering and recompute the day's totals.

        Raises:
            OrderMismatch: ordered_ids is not a permutation of the day's places
            InvalidReference: Day does not exist
        """
        with _tracked("reorder_places", day_id=str(day_id)):
            places = await self._sequencer.apply_order(day_id, ordered_ids)
        return places


def _insert_position(day_id: UUID, places: Sequence[Place], requested: int | None) -> int:
    """Resolve the insert position; append when none is requested."""
    if requested is None:
        return max((p.position for p in places), default=-1) + 1

    if requested > len(places):
        raise InvalidPosition(f"position {requested} outside 0..{len(places)} for day {day_id}")
    return requested
