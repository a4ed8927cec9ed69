"""Generated trip plan models - activities keyed by an explicit order."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from backend.planner.models.common import ActivityCategory, NonNegativeMoney


class Activity(BaseModel):
    """Single activity in a generated plan."""

    id: str
    title: str
    description: str = ""
    time: str = ""
    duration: str = ""
    category: ActivityCategory
    location: str | None = None
    cost: NonNegativeMoney | None = None
    order: int = Field(..., ge=0)


class DailyItinerary(BaseModel):
    """Activities for one plan day."""

    id: str
    day: int = Field(..., ge=1)
    date: date
    activities: list[Activity] = Field(default_factory=list)
    total_cost: Decimal = Decimal("0")


class TripPlan(BaseModel):
    """Complete generated trip plan."""

    id: str
    user_id: UUID
    destination: str
    start_date: date
    end_date: date
    budget: Decimal
    travelers: int = Field(1, ge=1)
    itinerary: list[DailyItinerary] = Field(default_factory=list)
    total_cost: Decimal = Decimal("0")
    suggestions: list[str] = Field(default_factory=list)


class ActivityUpdate(BaseModel):
    """Partial activity edit. Order changes go through reorder."""

    title: str | None = None
    description: str | None = None
    time: str | None = None
    duration: str | None = None
    category: ActivityCategory | None = None
    location: str | None = None
    cost: NonNegativeMoney | None = None
