"""Unit tests for PlanEditor - activity edits keep plan totals consistent."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from pydantic import ValidationError

from backend.planner.db.inmemory import InMemoryTripPlanStore
from backend.planner.errors import InvalidReference, OrderMismatch
from backend.planner.models.common import ActivityCategory
from backend.planner.models.plan import Activity, ActivityUpdate, DailyItinerary, TripPlan
from backend.planner.services.plan_editor import PlanEditor


def activity(activity_id: str, cost: str | None, order: int) -> Activity:
    return Activity(
        id=activity_id,
        title=f"Activity {activity_id}",
        time="10:00",
        duration="2 hours",
        category=ActivityCategory.activity,
        cost=Decimal(cost) if cost is not None else None,
        order=order,
    )


@pytest_asyncio.fixture
async def plan(plan_store: InMemoryTripPlanStore, user_id: uuid.UUID) -> TripPlan:
    """Stored two-day plan; totals are derived on save."""
    return await PlanEditor(plan_store).save_plan(
        TripPlan(
            id="plan-rome",
            user_id=user_id,
            destination="Rome",
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 2),
            budget=Decimal("800"),
            travelers=2,
            itinerary=[
                DailyItinerary(
                    id="day-1",
                    day=1,
                    date=date(2025, 6, 1),
                    activities=[
                        activity("a", "100", 0),
                        activity("b", None, 1),
                        activity("c", "50", 2),
                    ],
                ),
                DailyItinerary(
                    id="day-2",
                    day=2,
                    date=date(2025, 6, 2),
                    activities=[activity("d", "200", 0)],
                ),
            ],
        )
    )


@pytest.mark.asyncio
async def test_save_derives_totals(plan: TripPlan) -> None:
    assert plan.itinerary[0].total_cost == Decimal("150")
    assert plan.itinerary[1].total_cost == Decimal("200")
    assert plan.total_cost == Decimal("350")


@pytest.mark.asyncio
async def test_update_activity_cost_recomputes_totals(
    plan_store: InMemoryTripPlanStore, plan: TripPlan, user_id: uuid.UUID
) -> None:
    editor = PlanEditor(plan_store)

    updated = await editor.update_activity(
        plan.id, user_id, "day-1", "b", ActivityUpdate(cost=Decimal("75"), title="Colosseum")
    )

    assert updated.itinerary[0].activities[1].title == "Colosseum"
    assert updated.itinerary[0].total_cost == Decimal("225")
    assert updated.total_cost == Decimal("425")

    stored = await editor.get_plan(plan.id, user_id)
    assert stored.total_cost == Decimal("425")


@pytest.mark.asyncio
async def test_delete_activity_renumbers_and_recomputes(
    plan_store: InMemoryTripPlanStore, plan: TripPlan, user_id: uuid.UUID
) -> None:
    editor = PlanEditor(plan_store)

    updated = await editor.delete_activity(plan.id, user_id, "day-1", "a")

    day = updated.itinerary[0]
    assert [(a.id, a.order) for a in day.activities] == [("b", 0), ("c", 1)]
    assert day.total_cost == Decimal("50")
    assert updated.total_cost == Decimal("250")


@pytest.mark.asyncio
async def test_reorder_sets_order_to_index(
    plan_store: InMemoryTripPlanStore, plan: TripPlan, user_id: uuid.UUID
) -> None:
    editor = PlanEditor(plan_store)

    updated = await editor.reorder_activities(plan.id, user_id, "day-1", ["c", "a", "b"])

    assert [(a.id, a.order) for a in updated.itinerary[0].activities] == [
        ("c", 0),
        ("a", 1),
        ("b", 2),
    ]
    assert updated.total_cost == plan.total_cost


@pytest.mark.asyncio
async def test_reorder_requires_permutation(
    plan_store: InMemoryTripPlanStore, plan: TripPlan, user_id: uuid.UUID
) -> None:
    editor = PlanEditor(plan_store)

    with pytest.raises(OrderMismatch):
        await editor.reorder_activities(plan.id, user_id, "day-1", ["c", "a"])

    stored = await editor.get_plan(plan.id, user_id)
    assert [a.id for a in stored.itinerary[0].activities] == ["a", "b", "c"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("plan_id", "day_id", "activity_id", "kind"),
    [
        ("missing-plan", "day-1", "a", "plan"),
        ("plan-rome", "day-9", "a", "plan day"),
        ("plan-rome", "day-1", "zz", "activity"),
    ],
)
async def test_unknown_references(
    plan_store: InMemoryTripPlanStore,
    plan: TripPlan,
    user_id: uuid.UUID,
    plan_id: str,
    day_id: str,
    activity_id: str,
    kind: str,
) -> None:
    with pytest.raises(InvalidReference) as exc_info:
        await PlanEditor(plan_store).delete_activity(plan_id, user_id, day_id, activity_id)

    assert exc_info.value.kind == kind


@pytest.mark.asyncio
async def test_other_users_plan_is_invisible(
    plan_store: InMemoryTripPlanStore, plan: TripPlan
) -> None:
    with pytest.raises(InvalidReference):
        await PlanEditor(plan_store).get_plan(plan.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_save_cannot_take_over_another_users_plan_id(
    plan_store: InMemoryTripPlanStore, plan: TripPlan
) -> None:
    intruder = plan.model_copy(update={"user_id": uuid.uuid4(), "itinerary": []})

    with pytest.raises(InvalidReference):
        await PlanEditor(plan_store).save_plan(intruder)

    kept = await PlanEditor(plan_store).get_plan(plan.id, plan.user_id)
    assert len(kept.itinerary) == 2


def test_activity_cost_is_cent_precision() -> None:
    with pytest.raises(ValidationError):
        ActivityUpdate(cost=Decimal("4.999"))

    assert ActivityUpdate(cost=Decimal("4.99")).cost == Decimal("4.99")
