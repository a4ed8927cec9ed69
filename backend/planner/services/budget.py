"""Budget Aggregator - pure spend summary for a trip tree or a generated plan."""

from collections import defaultdict
from collections.abc import Iterator
from decimal import Decimal

from backend.planner.models.budget import BudgetSummary
from backend.planner.models.common import BudgetStatus
from backend.planner.models.plan import TripPlan
from backend.planner.models.trip import Trip

# Share of the ceiling above which spend is "nearing" the budget
NEARING_THRESHOLD = Decimal("0.80")


def _line_items(itinerary: Trip | TripPlan) -> Iterator[tuple[str, Decimal]]:
    """Yield (category, cost) for every place or activity."""
    if isinstance(itinerary, TripPlan):
        for daily in itinerary.itinerary:
            for activity in daily.activities:
                yield activity.category.value, activity.cost or Decimal("0")
        return

    for day in itinerary.days or []:
        for place in day.places or []:
            yield place.category.value, place.cost


def total_cost(itinerary: Trip | TripPlan) -> Decimal:
    """Sum of all place or activity costs."""
    return sum((cost for _, cost in _line_items(itinerary)), Decimal("0"))


def classify(total: Decimal, ceiling: Decimal) -> BudgetStatus:
    """Status band for a spend against a ceiling.

    A non-positive ceiling is over budget as soon as anything costs money.
    """
    if ceiling <= 0:
        return BudgetStatus.over_budget if total > 0 else BudgetStatus.within_budget
    if total > ceiling:
        return BudgetStatus.over_budget
    if total / ceiling > NEARING_THRESHOLD:
        return BudgetStatus.nearing_budget
    return BudgetStatus.within_budget


def summarize(itinerary: Trip | TripPlan, budget_ceiling: Decimal) -> BudgetSummary:
    """Summarize spend against a ceiling.

    Args:
        itinerary: Trip with days and places loaded, or a generated plan
        budget_ceiling: Spend limit in the trip's currency

    Returns:
        BudgetSummary whose category_breakdown omits zero categories, is
        ordered by descending amount, and sums to total_cost
    """
    by_category: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for category, cost in _line_items(itinerary):
        by_category[category] += cost

    total = sum(by_category.values(), Decimal("0"))
    breakdown = dict(
        sorted(
            ((category, amount) for category, amount in by_category.items() if amount != 0),
            key=lambda item: item[1],
            reverse=True,
        )
    )

    percentage_used: float | None
    if budget_ceiling > 0:
        percentage_used = float(total / budget_ceiling * 100)
        fill_percentage = min(max(percentage_used, 0.0), 100.0)
    else:
        percentage_used = None
        fill_percentage = 100.0 if total > 0 else 0.0

    return BudgetSummary(
        budget_ceiling=budget_ceiling,
        total_cost=total,
        remaining=budget_ceiling - total,
        percentage_used=percentage_used,
        fill_percentage=fill_percentage,
        status=classify(total, budget_ceiling),
        category_breakdown=breakdown,
    )
