"""Auto-fill candidate model."""

from decimal import Decimal

from pydantic import BaseModel, Field

from backend.planner.models.common import PlaceCategory


class PlaceCandidate(BaseModel):
    """Template place suggested for a day."""

    name: str
    category: PlaceCategory
    description: str
    start_time: str
    duration: int = Field(..., ge=0)
    estimated_cost: Decimal = Field(..., ge=0)
    rating: float = Field(..., ge=0, le=5)
