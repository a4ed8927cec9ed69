"""Generated trip plan endpoints - store, read, budget, edit activities."""

from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from backend.planner.api.auth import get_current_context
from backend.planner.api.deps import get_plan_editor
from backend.planner.db.context import RequestContext
from backend.planner.models.budget import BudgetSummary
from backend.planner.models.plan import ActivityUpdate, DailyItinerary, TripPlan
from backend.planner.services.budget import summarize
from backend.planner.services.plan_editor import PlanEditor

router = APIRouter(prefix="/plans", tags=["plans"])

ContextDep = Annotated[RequestContext, Depends(get_current_context)]
EditorDep = Annotated[PlanEditor, Depends(get_plan_editor)]


class StorePlanRequest(BaseModel):
    """Request body for PUT /plans/{plan_id}; owner comes from the caller."""

    destination: str
    start_date: date
    end_date: date
    budget: Decimal
    travelers: int = Field(1, ge=1)
    itinerary: list[DailyItinerary] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class ReorderActivitiesRequest(BaseModel):
    """Request body for PUT .../activities/order."""

    activity_ids: list[str]


@router.put("/{plan_id}", response_model=TripPlan)
async def store_plan(
    plan_id: str, request: StorePlanRequest, ctx: ContextDep, editor: EditorDep
) -> TripPlan:
    """Insert or replace a generated plan for the caller."""
    plan = TripPlan.model_validate(
        {**request.model_dump(), "id": plan_id, "user_id": ctx.user_id}
    )
    return await editor.save_plan(plan)


@router.get("/{plan_id}", response_model=TripPlan)
async def get_plan(plan_id: str, ctx: ContextDep, editor: EditorDep) -> TripPlan:
    return await editor.get_plan(plan_id, ctx.user_id)


@router.get("/{plan_id}/budget", response_model=BudgetSummary)
async def plan_budget(plan_id: str, ctx: ContextDep, editor: EditorDep) -> BudgetSummary:
    """Spend summary against the plan's budget."""
    plan = await editor.get_plan(plan_id, ctx.user_id)
    return summarize(plan, plan.budget)


@router.patch("/{plan_id}/days/{day_id}/activities/{activity_id}", response_model=TripPlan)
async def update_activity(
    plan_id: str,
    day_id: str,
    activity_id: str,
    request: ActivityUpdate,
    ctx: ContextDep,
    editor: EditorDep,
) -> TripPlan:
    return await editor.update_activity(plan_id, ctx.user_id, day_id, activity_id, request)


@router.delete(
    "/{plan_id}/days/{day_id}/activities/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_activity(
    plan_id: str,
    day_id: str,
    activity_id: str,
    ctx: ContextDep,
    editor: EditorDep,
) -> Response:
    await editor.delete_activity(plan_id, ctx.user_id, day_id, activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{plan_id}/days/{day_id}/activities/order", response_model=TripPlan)
async def reorder_activities(
    plan_id: str,
    day_id: str,
    request: ReorderActivitiesRequest,
    ctx: ContextDep,
    editor: EditorDep,
) -> TripPlan:
    """Replace a plan day's activity order with a full permutation of its ids."""
    return await editor.reorder_activities(plan_id, ctx.user_id, day_id, request.activity_ids)
