"""Budget summary model."""

from decimal import Decimal

from pydantic import BaseModel

from backend.planner.models.common import BudgetStatus


class BudgetSummary(BaseModel):
    """Derived spend figures for a trip or plan.

    percentage_used is unclamped and None when the ceiling is not positive;
    fill_percentage is the display value clamped to [0, 100].
    """

    budget_ceiling: Decimal
    total_cost: Decimal
    remaining: Decimal
    percentage_used: float | None
    fill_percentage: float
    status: BudgetStatus
    category_breakdown: dict[str, Decimal]
