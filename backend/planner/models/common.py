"""Common types and enums shared across all models."""

from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

# Same precision as the Numeric(12, 2) money columns
NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


class TravelerType(str, Enum):
    """Traveler profile chosen at trip creation."""

    budget = "budget"
    time = "time"
    combination = "combination"


class PlaceCategory(str, Enum):
    """Category of a place on a trip day."""

    attraction = "attraction"
    restaurant = "restaurant"
    hotel = "hotel"
    activity = "activity"
    transportation = "transportation"


class ActivityCategory(str, Enum):
    """Category of an activity in a generated trip plan."""

    flight = "flight"
    hotel = "hotel"
    restaurant = "restaurant"
    activity = "activity"
    transport = "transport"


class BudgetStatus(str, Enum):
    """Budget status band."""

    within_budget = "within_budget"
    nearing_budget = "nearing_budget"
    over_budget = "over_budget"


class GeocodeResult(BaseModel):
    """Resolved coordinates and display address (WGS84)."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = ""
