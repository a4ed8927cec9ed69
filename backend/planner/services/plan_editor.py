"""Activity editing for stored trip plans.

Each edit rewrites the plan's whole day list; day and plan totals are
re-derived from the activities every time rather than patched.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from backend.planner.db.repositories import TripPlanStore
from backend.planner.errors import InvalidReference, OrderMismatch
from backend.planner.models.plan import Activity, ActivityUpdate, DailyItinerary, TripPlan
from backend.planner.utils.metrics import record_mutation

logger = logging.getLogger(__name__)


def day_total(activities: Sequence[Activity]) -> Decimal:
    """Sum of activity costs; missing costs count as zero."""
    return sum((a.cost or Decimal("0") for a in activities), Decimal("0"))


def renumber(activities: Sequence[Activity]) -> list[Activity]:
    """Rewrite order to 0..n-1 following list order."""
    return [a.model_copy(update={"order": i}) for i, a in enumerate(activities)]


class PlanEditor:
    """Update, delete and reorder activities of a user's trip plan."""

    def __init__(self, store: TripPlanStore) -> None:
        self._store = store

    async def save_plan(self, plan: TripPlan) -> TripPlan:
        """Store a plan with its day and plan totals re-derived."""
        itinerary = [
            daily.model_copy(update={"total_cost": day_total(daily.activities)})
            for daily in plan.itinerary
        ]
        plan = plan.model_copy(
            update={
                "itinerary": itinerary,
                "total_cost": sum((d.total_cost for d in itinerary), Decimal("0")),
            }
        )
        await self._store.save_plan(plan)
        record_mutation("save_plan", "success")
        return plan

    async def get_plan(self, plan_id: str, user_id: UUID) -> TripPlan:
        """Get a plan owned by user_id.

        Raises:
            InvalidReference: Plan does not exist for this user
        """
        plan = await self._store.get_plan(plan_id, user_id)
        if plan is None:
            raise InvalidReference("plan", plan_id)
        return plan

    async def update_activity(
        self,
        plan_id: str,
        user_id: UUID,
        day_id: str,
        activity_id: str,
        fields: ActivityUpdate,
    ) -> TripPlan:
        """Merge a partial edit into one activity."""
        plan, index = await self._load_day(plan_id, user_id, day_id)
        activities = list(plan.itinerary[index].activities)

        position = _activity_index(activities, activity_id)
        changes = fields.model_dump(exclude_unset=True)
        activities[position] = Activity.model_validate(
            {**activities[position].model_dump(), **changes}
        )

        return await self._save_day(plan, user_id, index, activities, "update_activity")

    async def delete_activity(
        self, plan_id: str, user_id: UUID, day_id: str, activity_id: str
    ) -> TripPlan:
        """Remove one activity and renumber the rest."""
        plan, index = await self._load_day(plan_id, user_id, day_id)
        activities = list(plan.itinerary[index].activities)

        del activities[_activity_index(activities, activity_id)]

        return await self._save_day(
            plan, user_id, index, renumber(activities), "delete_activity"
        )

    async def reorder_activities(
        self, plan_id: str, user_id: UUID, day_id: str, ordered_ids: Sequence[str]
    ) -> TripPlan:
        """Apply a full ordering of the day's activities.

        Raises:
            OrderMismatch: ordered_ids is not a permutation of the day's activity ids
        """
        plan, index = await self._load_day(plan_id, user_id, day_id)
        by_id = {a.id: a for a in plan.itinerary[index].activities}

        if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
            raise OrderMismatch(
                f"order for plan day {day_id} is not a permutation of its activities"
            )

        activities = renumber([by_id[activity_id] for activity_id in ordered_ids])
        return await self._save_day(plan, user_id, index, activities, "reorder_activities")

    async def _load_day(self, plan_id: str, user_id: UUID, day_id: str) -> tuple[TripPlan, int]:
        plan = await self.get_plan(plan_id, user_id)
        for index, daily in enumerate(plan.itinerary):
            if daily.id == day_id:
                return plan, index
        raise InvalidReference("plan day", day_id)

    async def _save_day(
        self,
        plan: TripPlan,
        user_id: UUID,
        index: int,
        activities: list[Activity],
        operation: str,
    ) -> TripPlan:
        itinerary: list[DailyItinerary] = list(plan.itinerary)
        itinerary[index] = itinerary[index].model_copy(
            update={"activities": activities, "total_cost": day_total(activities)}
        )
        plan_total = sum((d.total_cost for d in itinerary), Decimal("0"))

        if not await self._store.replace_itinerary(plan.id, user_id, itinerary, plan_total):
            raise InvalidReference("plan", plan.id)

        record_mutation(operation, "success")
        logger.info(
            f"Plan edited: {operation}",
            extra={"structured": {"plan_id": plan.id, "day_id": itinerary[index].id}},
        )
        return plan.model_copy(update={"itinerary": itinerary, "total_cost": plan_total})


def _activity_index(activities: Sequence[Activity], activity_id: str) -> int:
    for i, activity in enumerate(activities):
        if activity.id == activity_id:
            return i
    raise InvalidReference("activity", activity_id)
