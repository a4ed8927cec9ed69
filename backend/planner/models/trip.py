"""Trip, day and place models - the itinerary tree."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from backend.planner.models.common import NonNegativeMoney, PlaceCategory, TravelerType


class BudgetDescriptor(BaseModel):
    """Trip budget ceiling and spend."""

    total: Decimal
    spent: Decimal = Decimal("0")
    currency: str = "USD"
    by_category: dict[str, Decimal] | None = None


class Place(BaseModel):
    """A stop on a trip day."""

    id: UUID
    trip_day_id: UUID
    position: int = Field(..., ge=0)
    name: str
    category: PlaceCategory
    description: str = ""
    image_url: str = ""
    hours: str = ""
    cost: NonNegativeMoney = Decimal("0")
    notes: str = ""
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    website: str | None = None
    duration: int = Field(0, ge=0, description="Minutes spent at the place")
    visited: bool = False
    distance_to_next: float = Field(0.0, ge=0)
    time_to_next: int = Field(0, ge=0, description="Travel minutes to the next place")
    created_at: datetime | None = None


class Day(BaseModel):
    """One calendar day of a trip."""

    id: UUID
    trip_id: UUID
    date: date
    day_number: int = Field(..., ge=1)
    subheading: str | None = None
    total_distance: float = 0.0
    total_duration: int = 0
    created_at: datetime | None = None
    places: list[Place] | None = None


class Trip(BaseModel):
    """User-owned travel plan spanning a date range."""

    id: UUID
    user_id: UUID
    name: str
    destination: str
    start_date: date
    end_date: date
    traveler_type: TravelerType
    budget: BudgetDescriptor
    created_at: datetime | None = None
    updated_at: datetime | None = None
    days: list[Day] | None = None


class TripCreate(BaseModel):
    """Fields supplied by the trip-creation flow."""

    name: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    traveler_type: TravelerType = TravelerType.combination
    budget: BudgetDescriptor | None = None

    @field_validator("end_date")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end >= start."""
        if "start_date" in info.data and v < info.data["start_date"]:
            raise ValueError("end_date must be >= start_date")
        return v


class PlaceCreate(BaseModel):
    """Fields for a new place. Position defaults to append."""

    trip_day_id: UUID
    position: int | None = Field(None, ge=0)
    name: str = Field(..., min_length=1)
    category: PlaceCategory
    description: str = ""
    image_url: str = ""
    hours: str = ""
    cost: NonNegativeMoney = Decimal("0")
    notes: str = ""
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    website: str | None = None
    duration: int = Field(0, ge=0)
    visited: bool = False
    distance_to_next: float = Field(0.0, ge=0)
    time_to_next: int = Field(0, ge=0)


class PlaceUpdate(BaseModel):
    """Partial place edit. Position changes go through the sequencer."""

    name: str | None = Field(None, min_length=1)
    category: PlaceCategory | None = None
    description: str | None = None
    image_url: str | None = None
    hours: str | None = None
    cost: NonNegativeMoney | None = None
    notes: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    website: str | None = None
    duration: int | None = Field(None, ge=0)
    visited: bool | None = None
    distance_to_next: float | None = Field(None, ge=0)
    time_to_next: int | None = Field(None, ge=0)

    def changes(self) -> dict[str, object]:
        """Return the fields the caller explicitly set.

        An explicit null only clears the optional location/rating fields.
        """
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE
        }


_CLEARABLE = frozenset({"latitude", "longitude", "address", "rating", "website"})


class DayAggregates(BaseModel):
    """Derived per-day totals."""

    total_distance: float
    total_duration: int
