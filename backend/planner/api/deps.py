"""FastAPI dependencies wiring stores, collaborators and services.

Tests override get_itinerary_store, get_plan_store and get_geocoder.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.planner.adapters.geocoding import Geocoder, NominatimGeocoder
from backend.planner.collaborators.executor import CallConfig, CollaboratorExecutor
from backend.planner.collaborators.guarded_store import (
    GuardedItineraryStore,
    GuardedTripPlanStore,
)
from backend.planner.config import get_settings
from backend.planner.db.engine import get_session
from backend.planner.db.repositories import ItineraryStore, TripPlanStore
from backend.planner.db.sql_repositories import SqlItineraryStore, SqlTripPlanStore
from backend.planner.services.assembler import ItineraryAssembler
from backend.planner.services.autofill import AutoFiller
from backend.planner.services.place_store import PlaceStore
from backend.planner.services.plan_editor import PlanEditor
from backend.planner.services.trips import TripService
from backend.planner.utils.logging import StructuredCallLogger
from backend.planner.utils.metrics import PrometheusCallMetrics


@lru_cache
def get_executor() -> CollaboratorExecutor:
    """Shared executor for persistence and geocoding calls."""
    return CollaboratorExecutor(
        CallConfig.from_settings(get_settings()),
        metrics=PrometheusCallMetrics(),
        logger=StructuredCallLogger(),
    )


@lru_cache
def get_geocoder() -> Geocoder:
    """Shared Nominatim geocoder."""
    return NominatimGeocoder(executor=get_executor())


async def get_itinerary_store(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ItineraryStore:
    """SQL itinerary store behind timeouts and read retries."""
    return GuardedItineraryStore(SqlItineraryStore(session), get_executor())


async def get_plan_store(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TripPlanStore:
    """SQL trip plan store behind timeouts and read retries."""
    return GuardedTripPlanStore(SqlTripPlanStore(session), get_executor())


StoreDep = Annotated[ItineraryStore, Depends(get_itinerary_store)]
PlanStoreDep = Annotated[TripPlanStore, Depends(get_plan_store)]
GeocoderDep = Annotated[Geocoder, Depends(get_geocoder)]


def get_place_store(store: StoreDep, geocoder: GeocoderDep) -> PlaceStore:
    return PlaceStore(store, geocoder=geocoder)


def get_trip_service(store: StoreDep) -> TripService:
    return TripService(store)


def get_assembler(store: StoreDep) -> ItineraryAssembler:
    return ItineraryAssembler(store)


def get_auto_filler(
    store: StoreDep,
    place_store: Annotated[PlaceStore, Depends(get_place_store)],
    geocoder: GeocoderDep,
) -> AutoFiller:
    return AutoFiller(store, place_store, geocoder)


def get_plan_editor(store: PlanStoreDep) -> PlanEditor:
    return PlanEditor(store)
