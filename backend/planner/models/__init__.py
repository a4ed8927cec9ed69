"""Models package - re-exports for convenience."""

from backend.planner.models.autofill import PlaceCandidate
from backend.planner.models.budget import BudgetSummary
from backend.planner.models.common import (
    ActivityCategory,
    BudgetStatus,
    GeocodeResult,
    PlaceCategory,
    TravelerType,
)
from backend.planner.models.plan import Activity, ActivityUpdate, DailyItinerary, TripPlan
from backend.planner.models.trip import (
    BudgetDescriptor,
    Day,
    DayAggregates,
    Place,
    PlaceCreate,
    PlaceUpdate,
    Trip,
    TripCreate,
)

__all__ = [
    # Common
    "TravelerType",
    "PlaceCategory",
    "ActivityCategory",
    "BudgetStatus",
    "GeocodeResult",
    # Trip tree
    "Trip",
    "TripCreate",
    "BudgetDescriptor",
    "Day",
    "DayAggregates",
    "Place",
    "PlaceCreate",
    "PlaceUpdate",
    # Plans
    "TripPlan",
    "DailyItinerary",
    "Activity",
    "ActivityUpdate",
    # Budget
    "BudgetSummary",
    # Auto-fill
    "PlaceCandidate",
]
