"""Trip lifecycle - creation with one day per calendar date, lookup, delete."""

import logging
from datetime import date, timedelta
from uuid import UUID

from backend.planner.config import Settings, get_settings
from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidReference
from backend.planner.models.trip import BudgetDescriptor, Trip, TripCreate
from backend.planner.utils.metrics import record_mutation

logger = logging.getLogger(__name__)


def trip_dates(start_date: date, end_date: date) -> list[date]:
    """Every calendar date in [start_date, end_date]."""
    return [start_date + timedelta(days=i) for i in range((end_date - start_date).days + 1)]


class TripService:
    """Creates, reads and deletes trips for a user."""

    def __init__(self, store: ItineraryStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def create_trip(self, user_id: UUID, fields: TripCreate) -> Trip:
        """Create a trip and its days, numbered 1..d.

        A trip created without a budget gets the configured default ceiling.
        """
        if fields.budget is None:
            fields = fields.model_copy(
                update={
                    "budget": BudgetDescriptor(
                        total=self._settings.default_budget_total,
                        currency=self._settings.default_currency,
                    )
                }
            )

        trip = await self._store.create_trip(user_id, fields)
        days = await self._store.create_days_for_trip(
            trip.id, trip_dates(trip.start_date, trip.end_date)
        )
        record_mutation("create_trip", "success")

        logger.info(
            "Trip created",
            extra={
                "structured": {
                    "trip_id": str(trip.id),
                    "user_id": str(user_id),
                    "days": len(days),
                }
            },
        )
        return trip.model_copy(update={"days": days})

    async def get_trip(self, trip_id: UUID, user_id: UUID) -> Trip:
        """Get a trip owned by user_id.

        Raises:
            InvalidReference: Trip does not exist or belongs to someone else
        """
        trip = await self._store.get_trip(trip_id)
        if trip is None or trip.user_id != user_id:
            raise InvalidReference("trip", trip_id)
        return trip

    async def list_user_trips(self, user_id: UUID) -> list[Trip]:
        """List a user's trips, newest first."""
        return await self._store.list_user_trips(user_id)

    async def delete_trip(self, trip_id: UUID, user_id: UUID) -> None:
        """Delete a trip with its days and places.

        Raises:
            InvalidReference: Trip does not exist or belongs to someone else
        """
        await self.get_trip(trip_id, user_id)
        if not await self._store.delete_trip(trip_id):
            raise InvalidReference("trip", trip_id)
        record_mutation("delete_trip", "success")
        logger.info("Trip deleted", extra={"structured": {"trip_id": str(trip_id)}})
