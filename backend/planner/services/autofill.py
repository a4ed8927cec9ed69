"""Day Auto-Fill - template-driven places for an empty day.

Candidates come from a lookup table keyed by city (fixtures/day_templates.yaml)
with an explicit "_default" entry for unknown cities. Selection is
deterministic: day N uses template (N - 1) % number_of_templates.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any
from uuid import UUID

import yaml

from backend.planner.adapters.geocoding import Geocoder, resolve_or_blank
from backend.planner.config import Settings, get_settings
from backend.planner.db.repositories import ItineraryStore
from backend.planner.errors import (
    AutoFillInterrupted,
    DayNotEmpty,
    InvalidReference,
    StorageFailure,
)
from backend.planner.models.autofill import PlaceCandidate
from backend.planner.models.common import GeocodeResult, TravelerType
from backend.planner.models.trip import Place, PlaceCreate, Trip
from backend.planner.services.place_store import PlaceStore

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
TEMPLATES_PATH = FIXTURES_DIR / "day_templates.yaml"
DEFAULT_KEY = "_default"


@dataclass(frozen=True)
class TemplateTable:
    """Parsed auto-fill fixture."""

    image_urls: tuple[str, ...]
    templates: dict[str, list[list[dict[str, Any]]]]


@lru_cache
def load_template_table(path: Path = TEMPLATES_PATH) -> TemplateTable:
    """Load and cache the template fixture."""
    with open(path) as f:
        data = yaml.safe_load(f)

    templates = data["templates"]
    if DEFAULT_KEY not in templates:
        raise ValueError(f"{path} has no {DEFAULT_KEY!r} template")

    return TemplateTable(image_urls=tuple(data["image_urls"]), templates=templates)


def city_name(destination: str) -> str:
    """First comma-separated component of a destination ("Tokyo, Japan" -> "Tokyo")."""
    return destination.split(",")[0].strip()


def generate(
    destination: str,
    day_number: int,
    traveler_type: TravelerType = TravelerType.combination,
    table: TemplateTable | None = None,
) -> list[PlaceCandidate]:
    """Candidate places for one day of a trip.

    traveler_type is accepted for the call contract; every profile currently
    receives the same templates.
    """
    if day_number < 1:
        raise ValueError(f"day_number must be >= 1, got {day_number}")

    table = table or load_template_table()
    city = city_name(destination)
    day_templates = table.templates.get(city.lower()) or table.templates[DEFAULT_KEY]
    template = day_templates[(day_number - 1) % len(day_templates)]

    return [
        PlaceCandidate(
            name=entry["name"].replace("{city}", city),
            category=entry["category"],
            description=entry["description"].replace("{city}", city),
            start_time=entry["start_time"],
            duration=entry["duration"],
            estimated_cost=Decimal(str(entry["estimated_cost"])),
            rating=entry["rating"],
        )
        for entry in template
    ]


class AutoFiller:
    """Inserts generated candidates into an empty day, one at a time."""

    def __init__(
        self,
        store: ItineraryStore,
        place_store: PlaceStore,
        geocoder: Geocoder | None = None,
        settings: Settings | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize auto-filler.

        Args:
            store: Persistence collaborator (for day lookups)
            place_store: Place Store that performs each insert
            geocoder: Geocoder for candidate locations (blank locations if None)
            settings: Settings for leg placeholders and pacing
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._store = store
        self._place_store = place_store
        self._geocoder = geocoder
        self._settings = settings or get_settings()
        self._sleep = sleep_fn or asyncio.sleep

    async def fill_day(self, trip: Trip, day_id: UUID) -> list[Place]:
        """Generate and insert places for an empty day.

        Inserts are sequential at positions 0..n-1. Every place but the last
        gets the placeholder leg estimate. Places already inserted when a
        storage call fails are kept.

        Raises:
            InvalidReference: Day does not exist or belongs to another trip
            DayNotEmpty: Day already has places
            AutoFillInterrupted: Storage failed partway; carries inserted ids
        """
        day = await self._store.get_day(day_id)
        if day is None or day.trip_id != trip.id:
            raise InvalidReference("day", day_id)

        if await self._store.list_places_by_day(day_id):
            raise DayNotEmpty(f"day {day_id} already has places")

        city = city_name(trip.destination)
        candidates = generate(trip.destination, day.day_number, trip.traveler_type)
        image_urls = load_template_table().image_urls

        inserted: list[Place] = []
        for i, candidate in enumerate(candidates):
            location = await self._locate(candidate, city, first=(i == 0))
            fields = self._to_place_fields(
                day_id, i, candidate, location, image_urls, last=(i == len(candidates) - 1)
            )

            try:
                place = await self._place_store.add(fields)
            except StorageFailure as e:
                inserted_ids = [p.id for p in inserted]
                logger.error(
                    "Auto-fill interrupted",
                    extra={
                        "structured": {
                            "day_id": str(day_id),
                            "inserted": len(inserted_ids),
                            "planned": len(candidates),
                        }
                    },
                )
                raise AutoFillInterrupted(
                    f"auto-fill of day {day_id} stopped after "
                    f"{len(inserted_ids)} of {len(candidates)} places",
                    inserted_ids,
                ) from e
            inserted.append(place)

        logger.info(
            "Auto-filled day",
            extra={
                "structured": {"day_id": str(day_id), "city": city, "places": len(inserted)}
            },
        )
        return inserted

    async def _locate(self, candidate: PlaceCandidate, city: str, first: bool) -> GeocodeResult:
        if self._geocoder is None:
            return GeocodeResult(latitude=0, longitude=0, address="")

        # Pace consecutive geocoder calls
        if not first:
            await self._sleep(self._settings.geocode_pacing_ms / 1000)

        return await resolve_or_blank(self._geocoder, candidate.name, city)

    def _to_place_fields(
        self,
        day_id: UUID,
        index: int,
        candidate: PlaceCandidate,
        location: GeocodeResult,
        image_urls: tuple[str, ...],
        last: bool,
    ) -> PlaceCreate:
        return PlaceCreate(
            trip_day_id=day_id,
            position=index,
            name=candidate.name,
            category=candidate.category,
            description=candidate.description,
            image_url=image_urls[index % len(image_urls)] if image_urls else "",
            hours=f"Opens at {candidate.start_time}",
            cost=candidate.estimated_cost,
            notes="",
            latitude=location.latitude,
            longitude=location.longitude,
            address=location.address,
            rating=candidate.rating,
            website="",
            duration=candidate.duration,
            visited=False,
            distance_to_next=0.0 if last else self._settings.autofill_leg_distance_km,
            time_to_next=0 if last else self._settings.autofill_leg_minutes,
        )
