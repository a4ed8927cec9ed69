"""SQL implementations of repository interfaces."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.planner.db.models import Base, TripDayRow, TripPlaceRow, TripPlanRow, TripRow
from backend.planner.errors import InvalidReference, StorageFailure
from backend.planner.models.plan import DailyItinerary, TripPlan
from backend.planner.models.trip import Day, Place, PlaceCreate, Trip, TripCreate


def _columns(row: Base) -> dict[str, Any]:
    """Read mapped column values without touching relationships."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def _to_trip(row: TripRow) -> Trip:
    return Trip.model_validate(_columns(row))


def _to_day(row: TripDayRow) -> Day:
    return Day.model_validate(_columns(row))


def _to_place(row: TripPlaceRow) -> Place:
    return Place.model_validate(_columns(row))


def _to_plan(row: TripPlanRow) -> TripPlan:
    data = _columns(row)
    data["id"] = data.pop("trip_plan_id")
    data.pop("created_at", None)
    return TripPlan.model_validate(data)


class SqlItineraryStore:
    """SQL implementation of ItineraryStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        """Roll back and raise StorageFailure on driver errors."""
        try:
            yield
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageFailure(f"{operation} failed: {type(e).__name__}") from e

    async def create_trip(self, user_id: uuid.UUID, fields: TripCreate) -> Trip:
        """Create a trip row."""
        if fields.budget is None:
            raise ValueError("budget must be resolved before persisting a trip")

        now = datetime.now(UTC)
        row = TripRow(
            id=uuid.uuid4(),
            user_id=user_id,
            name=fields.name,
            destination=fields.destination,
            start_date=fields.start_date,
            end_date=fields.end_date,
            traveler_type=fields.traveler_type.value,
            budget=fields.budget.model_dump(mode="json"),
            created_at=now,
            updated_at=now,
        )

        async with self._guard("create_trip"):
            self._session.add(row)
            await self._session.commit()
            await self._session.refresh(row)

        return _to_trip(row)

    async def create_days_for_trip(self, trip_id: uuid.UUID, dates: list[date]) -> list[Day]:
        """Create one day per date in a single commit."""
        rows = [
            TripDayRow(
                id=uuid.uuid4(),
                trip_id=trip_id,
                date=day_date,
                day_number=i + 1,
                total_distance=0.0,
                total_duration=0,
                created_at=datetime.now(UTC),
            )
            for i, day_date in enumerate(dates)
        ]

        async with self._guard("create_days_for_trip"):
            self._session.add_all(rows)
            await self._session.commit()
            for row in rows:
                await self._session.refresh(row)

        return [_to_day(row) for row in rows]

    async def get_trip(self, trip_id: uuid.UUID) -> Trip | None:
        """Get trip by ID."""
        async with self._guard("get_trip"):
            row = await self._session.get(TripRow, trip_id)
        return _to_trip(row) if row else None

    async def list_user_trips(self, user_id: uuid.UUID) -> list[Trip]:
        """List a user's trips, newest first."""
        async with self._guard("list_user_trips"):
            result = await self._session.execute(
                select(TripRow)
                .where(TripRow.user_id == user_id)
                .order_by(TripRow.created_at.desc())
            )
            rows = result.scalars().all()
        return [_to_trip(row) for row in rows]

    async def delete_trip(self, trip_id: uuid.UUID) -> bool:
        """Delete a trip, its days and their places in one transaction."""
        async with self._guard("delete_trip"):
            row = await self._session.get(TripRow, trip_id)
            if row is None:
                return False

            day_ids = select(TripDayRow.id).where(TripDayRow.trip_id == trip_id)
            await self._session.execute(
                delete(TripPlaceRow).where(TripPlaceRow.trip_day_id.in_(day_ids))
            )
            await self._session.execute(delete(TripDayRow).where(TripDayRow.trip_id == trip_id))
            await self._session.execute(delete(TripRow).where(TripRow.id == trip_id))
            await self._session.commit()

        # Drop identity-map entries for the deleted rows
        self._session.expunge_all()
        return True

    async def list_days(self, trip_id: uuid.UUID) -> list[Day]:
        """List days ordered by day_number."""
        async with self._guard("list_days"):
            result = await self._session.execute(
                select(TripDayRow)
                .where(TripDayRow.trip_id == trip_id)
                .order_by(TripDayRow.day_number)
            )
            rows = result.scalars().all()
        return [_to_day(row) for row in rows]

    async def get_day(self, day_id: uuid.UUID) -> Day | None:
        """Get day by ID."""
        async with self._guard("get_day"):
            row = await self._session.get(TripDayRow, day_id)
        return _to_day(row) if row else None

    async def create_place(self, fields: PlaceCreate) -> Place:
        """Insert a place."""
        if fields.position is None:
            raise ValueError("position must be resolved before persisting a place")

        data = fields.model_dump()
        data["category"] = fields.category.value
        row = TripPlaceRow(id=uuid.uuid4(), created_at=datetime.now(UTC), **data)

        async with self._guard("create_place"):
            self._session.add(row)
            await self._session.commit()
            await self._session.refresh(row)

        return _to_place(row)

    async def get_place(self, place_id: uuid.UUID) -> Place | None:
        """Get place by ID."""
        async with self._guard("get_place"):
            row = await self._session.get(TripPlaceRow, place_id)
        return _to_place(row) if row else None

    async def update_place(self, place_id: uuid.UUID, changes: dict[str, Any]) -> Place | None:
        """Apply a partial update."""
        async with self._guard("update_place"):
            row = await self._session.get(TripPlaceRow, place_id)
            if row is None:
                return None

            for key, value in changes.items():
                if key == "category" and value is not None:
                    value = getattr(value, "value", value)
                setattr(row, key, value)

            await self._session.commit()
            await self._session.refresh(row)

        return _to_place(row)

    async def delete_place(self, place_id: uuid.UUID) -> bool:
        """Delete a place."""
        async with self._guard("delete_place"):
            result = await self._session.execute(
                delete(TripPlaceRow).where(TripPlaceRow.id == place_id)
            )
            await self._session.commit()

        return bool(result.rowcount)

    async def list_places_by_day(self, day_id: uuid.UUID) -> list[Place]:
        """List a day's places ordered by position."""
        async with self._guard("list_places_by_day"):
            result = await self._session.execute(
                select(TripPlaceRow)
                .where(TripPlaceRow.trip_day_id == day_id)
                .order_by(TripPlaceRow.position, TripPlaceRow.created_at)
                .execution_options(populate_existing=True)
            )
            rows = result.scalars().all()
        return [_to_place(row) for row in rows]

    async def set_positions(self, day_id: uuid.UUID, positions: dict[uuid.UUID, int]) -> None:
        """Write several positions in one transaction."""
        async with self._guard("set_positions"):
            for place_id, position in positions.items():
                result = await self._session.execute(
                    update(TripPlaceRow)
                    .where(TripPlaceRow.id == place_id, TripPlaceRow.trip_day_id == day_id)
                    .values(position=position)
                )
                if result.rowcount != 1:
                    await self._session.rollback()
                    raise InvalidReference("place", place_id)
            await self._session.commit()

    async def update_day_aggregates(
        self, day_id: uuid.UUID, total_distance: float, total_duration: int
    ) -> bool:
        """Store derived day totals."""
        async with self._guard("update_day_aggregates"):
            result = await self._session.execute(
                update(TripDayRow)
                .where(TripDayRow.id == day_id)
                .values(total_distance=total_distance, total_duration=total_duration)
            )
            await self._session.commit()
        return bool(result.rowcount)


class SqlTripPlanStore:
    """SQL implementation of TripPlanStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_plan(self, plan: TripPlan) -> None:
        """Insert or replace a plan."""
        row = TripPlanRow(
            trip_plan_id=plan.id,
            user_id=plan.user_id,
            destination=plan.destination,
            start_date=plan.start_date,
            end_date=plan.end_date,
            budget=plan.budget,
            travelers=plan.travelers,
            itinerary=[day.model_dump(mode="json") for day in plan.itinerary],
            total_cost=plan.total_cost,
            suggestions=list(plan.suggestions),
            created_at=datetime.now(UTC),
        )

        try:
            existing = await self._session.get(TripPlanRow, plan.id)
            if existing is not None and existing.user_id != plan.user_id:
                raise InvalidReference("plan", plan.id)

            await self._session.merge(row)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageFailure(f"save_plan failed: {type(e).__name__}") from e

    async def get_plan(self, plan_id: str, user_id: uuid.UUID) -> TripPlan | None:
        """Get a plan owned by user_id."""
        try:
            result = await self._session.execute(
                select(TripPlanRow)
                .where(TripPlanRow.trip_plan_id == plan_id, TripPlanRow.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageFailure(f"get_plan failed: {type(e).__name__}") from e

        return _to_plan(row) if row else None

    async def replace_itinerary(
        self,
        plan_id: str,
        user_id: uuid.UUID,
        itinerary: list[DailyItinerary],
        total_cost: Decimal,
    ) -> bool:
        """Replace a plan's day list and total cost."""
        try:
            result = await self._session.execute(
                update(TripPlanRow)
                .where(TripPlanRow.trip_plan_id == plan_id, TripPlanRow.user_id == user_id)
                .values(
                    itinerary=[day.model_dump(mode="json") for day in itinerary],
                    total_cost=total_cost,
                )
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StorageFailure(f"replace_itinerary failed: {type(e).__name__}") from e

        return bool(result.rowcount)
