"""Store wrappers that route every persistence call through the executor."""

import uuid
from collections.abc import Awaitable, Callable
from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from backend.planner.collaborators.executor import (
    CallContext,
    CollaboratorCallError,
    CollaboratorExecutor,
    CollaboratorTimeoutError,
)
from backend.planner.db.repositories import ItineraryStore, TripPlanStore
from backend.planner.errors import StorageFailure
from backend.planner.models.plan import DailyItinerary, TripPlan
from backend.planner.models.trip import Day, Place, PlaceCreate, Trip, TripCreate

T = TypeVar("T")

COLLABORATOR = "persistence"


class _ExecutorGuard:
    """Timeouts, read retries and a single error type for store calls.

    Reads are retried within the executor budget. Writes are attempted once.
    Timeouts and driver errors surface as StorageFailure; domain errors such
    as InvalidReference pass through unchanged.
    """

    def __init__(self, executor: CollaboratorExecutor) -> None:
        self._executor = executor

    async def _read(self, operation: str, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        ctx = CallContext(collaborator=COLLABORATOR, operation=operation)
        try:
            return await self._executor.read(ctx, fn, *args)
        except CollaboratorTimeoutError as e:
            raise StorageFailure(str(e)) from e
        except CollaboratorCallError as e:
            raise _storage_failure(e) from e.__cause__

    async def _write(self, operation: str, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        ctx = CallContext(collaborator=COLLABORATOR, operation=operation)
        try:
            return await self._executor.write(ctx, fn, *args)
        except CollaboratorTimeoutError as e:
            raise StorageFailure(str(e)) from e
        except CollaboratorCallError as e:
            raise _storage_failure(e) from e.__cause__


class GuardedItineraryStore(_ExecutorGuard):
    """ItineraryStore behind the collaborator executor."""

    def __init__(self, store: ItineraryStore, executor: CollaboratorExecutor) -> None:
        super().__init__(executor)
        self._store = store

    async def create_trip(self, user_id: uuid.UUID, fields: TripCreate) -> Trip:
        return await self._write("create_trip", self._store.create_trip, user_id, fields)

    async def create_days_for_trip(self, trip_id: uuid.UUID, dates: list[date]) -> list[Day]:
        return await self._write(
            "create_days_for_trip", self._store.create_days_for_trip, trip_id, dates
        )

    async def get_trip(self, trip_id: uuid.UUID) -> Trip | None:
        return await self._read("get_trip", self._store.get_trip, trip_id)

    async def list_user_trips(self, user_id: uuid.UUID) -> list[Trip]:
        return await self._read("list_user_trips", self._store.list_user_trips, user_id)

    async def delete_trip(self, trip_id: uuid.UUID) -> bool:
        return await self._write("delete_trip", self._store.delete_trip, trip_id)

    async def list_days(self, trip_id: uuid.UUID) -> list[Day]:
        return await self._read("list_days", self._store.list_days, trip_id)

    async def get_day(self, day_id: uuid.UUID) -> Day | None:
        return await self._read("get_day", self._store.get_day, day_id)

    async def create_place(self, fields: PlaceCreate) -> Place:
        return await self._write("create_place", self._store.create_place, fields)

    async def get_place(self, place_id: uuid.UUID) -> Place | None:
        return await self._read("get_place", self._store.get_place, place_id)

    async def update_place(self, place_id: uuid.UUID, changes: dict[str, Any]) -> Place | None:
        return await self._write("update_place", self._store.update_place, place_id, changes)

    async def delete_place(self, place_id: uuid.UUID) -> bool:
        return await self._write("delete_place", self._store.delete_place, place_id)

    async def list_places_by_day(self, day_id: uuid.UUID) -> list[Place]:
        return await self._read("list_places_by_day", self._store.list_places_by_day, day_id)

    async def set_positions(self, day_id: uuid.UUID, positions: dict[uuid.UUID, int]) -> None:
        return await self._write("set_positions", self._store.set_positions, day_id, positions)

    async def update_day_aggregates(
        self, day_id: uuid.UUID, total_distance: float, total_duration: int
    ) -> bool:
        return await self._write(
            "update_day_aggregates",
            self._store.update_day_aggregates,
            day_id,
            total_distance,
            total_duration,
        )


class GuardedTripPlanStore(_ExecutorGuard):
    """TripPlanStore behind the collaborator executor."""

    def __init__(self, store: TripPlanStore, executor: CollaboratorExecutor) -> None:
        super().__init__(executor)
        self._store = store

    async def save_plan(self, plan: TripPlan) -> None:
        return await self._write("save_plan", self._store.save_plan, plan)

    async def get_plan(self, plan_id: str, user_id: uuid.UUID) -> TripPlan | None:
        return await self._read("get_plan", self._store.get_plan, plan_id, user_id)

    async def replace_itinerary(
        self,
        plan_id: str,
        user_id: uuid.UUID,
        itinerary: list[DailyItinerary],
        total_cost: Decimal,
    ) -> bool:
        return await self._write(
            "replace_itinerary",
            self._store.replace_itinerary,
            plan_id,
            user_id,
            itinerary,
            total_cost,
        )


def _storage_failure(error: CollaboratorCallError) -> StorageFailure:
    """Keep the store's own StorageFailure message when it raised one."""
    cause = error.__cause__
    if isinstance(cause, StorageFailure):
        return StorageFailure(str(cause))
    return StorageFailure(str(error))
