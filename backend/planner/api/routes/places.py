"""Place endpoints - list, add and reorder a day's places; edit and remove."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from backend.planner.api.auth import get_current_context
from backend.planner.api.deps import StoreDep, get_place_store
from backend.planner.db.context import RequestContext
from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import InvalidReference
from backend.planner.models.trip import Day, Place, PlaceCreate, PlaceUpdate, Trip
from backend.planner.services.autofill import city_name
from backend.planner.services.place_store import PlaceStore

router = APIRouter(tags=["places"])

ContextDep = Annotated[RequestContext, Depends(get_current_context)]
PlaceStoreDep = Annotated[PlaceStore, Depends(get_place_store)]


class AddPlaceRequest(PlaceCreate):
    """Request body for POST /days/{day_id}/places."""

    trip_day_id: UUID | None = None  # type: ignore[assignment]
    geocode: bool = Field(False, description="Resolve coordinates from the trip destination")


class ReorderRequest(BaseModel):
    """Request body for PUT /days/{day_id}/places/order."""

    place_ids: list[UUID]


async def _owned_day(store: ItineraryStore, day_id: UUID, ctx: RequestContext) -> tuple[Trip, Day]:
    """Resolve a day and its trip, hiding days of other users."""
    day = await store.get_day(day_id)
    if day is None:
        raise InvalidReference("day", day_id)

    trip = await store.get_trip(day.trip_id)
    if trip is None or trip.user_id != ctx.user_id:
        raise InvalidReference("day", day_id)

    return trip, day


async def _owned_place(store: ItineraryStore, place_id: UUID, ctx: RequestContext) -> Place:
    place = await store.get_place(place_id)
    if place is None:
        raise InvalidReference("place", place_id)

    await _owned_day(store, place.trip_day_id, ctx)
    return place


@router.get("/days/{day_id}/places", response_model=list[Place])
async def list_places(
    day_id: UUID, ctx: ContextDep, store: StoreDep, places: PlaceStoreDep
) -> list[Place]:
    """A day's places in position order."""
    await _owned_day(store, day_id, ctx)
    return await places.list_by_day(day_id)


@router.post("/days/{day_id}/places", response_model=Place, status_code=status.HTTP_201_CREATED)
async def add_place(
    day_id: UUID,
    request: AddPlaceRequest,
    ctx: ContextDep,
    store: StoreDep,
    places: PlaceStoreDep,
) -> Place:
    """Add a place; without a position it is appended."""
    trip, _ = await _owned_day(store, day_id, ctx)

    fields = PlaceCreate.model_validate(
        {**request.model_dump(exclude={"geocode", "trip_day_id"}), "trip_day_id": day_id}
    )
    city = city_name(trip.destination) if request.geocode else None
    return await places.add(fields, city_name=city)


@router.put("/days/{day_id}/places/order", response_model=list[Place])
async def reorder_places(
    day_id: UUID,
    request: ReorderRequest,
    ctx: ContextDep,
    store: StoreDep,
    places: PlaceStoreDep,
) -> list[Place]:
    """Replace the day's ordering with a full permutation of its place ids."""
    await _owned_day(store, day_id, ctx)
    return await places.reorder(day_id, request.place_ids)


@router.patch("/places/{place_id}", response_model=Place)
async def update_place(
    place_id: UUID,
    request: PlaceUpdate,
    ctx: ContextDep,
    store: StoreDep,
    places: PlaceStoreDep,
) -> Place:
    """Edit a place in place."""
    await _owned_place(store, place_id, ctx)
    return await places.update(place_id, request)


@router.delete("/places/{place_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_place(
    place_id: UUID, ctx: ContextDep, store: StoreDep, places: PlaceStoreDep
) -> Response:
    """Remove a place; the rest of the day is renumbered."""
    await _owned_place(store, place_id, ctx)
    await places.remove(place_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
