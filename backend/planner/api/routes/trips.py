"""Trip endpoints - create, list, load tree, delete, budget, auto-fill."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from backend.planner.api.auth import get_current_context
from backend.planner.api.deps import get_assembler, get_auto_filler, get_trip_service
from backend.planner.db.context import RequestContext
from backend.planner.models.budget import BudgetSummary
from backend.planner.models.trip import Place, Trip, TripCreate
from backend.planner.services.assembler import ItineraryAssembler
from backend.planner.services.autofill import AutoFiller
from backend.planner.services.budget import summarize
from backend.planner.services.trips import TripService

router = APIRouter(prefix="/trips", tags=["trips"])

ContextDep = Annotated[RequestContext, Depends(get_current_context)]
TripServiceDep = Annotated[TripService, Depends(get_trip_service)]
AssemblerDep = Annotated[ItineraryAssembler, Depends(get_assembler)]


@router.post("", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def create_trip(
    request: TripCreate,
    ctx: ContextDep,
    trips: TripServiceDep,
) -> Trip:
    """Create a trip with one empty day per date."""
    return await trips.create_trip(ctx.user_id, request)


@router.get("", response_model=list[Trip])
async def list_trips(ctx: ContextDep, trips: TripServiceDep) -> list[Trip]:
    """List the caller's trips, newest first."""
    return await trips.list_user_trips(ctx.user_id)


@router.get("/{trip_id}", response_model=Trip)
async def get_trip(
    trip_id: UUID,
    ctx: ContextDep,
    trips: TripServiceDep,
    assembler: AssemblerDep,
) -> Trip:
    """Full trip tree with days and places in order."""
    await trips.get_trip(trip_id, ctx.user_id)
    return await assembler.load(trip_id)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(trip_id: UUID, ctx: ContextDep, trips: TripServiceDep) -> Response:
    """Delete a trip with its days and places."""
    await trips.delete_trip(trip_id, ctx.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{trip_id}/budget", response_model=BudgetSummary)
async def trip_budget(
    trip_id: UUID,
    ctx: ContextDep,
    trips: TripServiceDep,
    assembler: AssemblerDep,
) -> BudgetSummary:
    """Spend summary against the trip's budget ceiling."""
    await trips.get_trip(trip_id, ctx.user_id)
    tree = await assembler.load(trip_id)
    return summarize(tree, tree.budget.total)


@router.post(
    "/{trip_id}/days/{day_id}/autofill",
    response_model=list[Place],
    status_code=status.HTTP_201_CREATED,
)
async def autofill_day(
    trip_id: UUID,
    day_id: UUID,
    ctx: ContextDep,
    trips: TripServiceDep,
    filler: Annotated[AutoFiller, Depends(get_auto_filler)],
) -> list[Place]:
    """Fill an empty day from the destination's templates."""
    trip = await trips.get_trip(trip_id, ctx.user_id)
    return await filler.fill_day(trip, day_id)
