"""Unit tests for day auto-fill - template lookup and sequential insert."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from backend.planner.config import Settings
from backend.planner.db.inmemory import InMemoryItineraryStore
from backend.planner.errors import (
    AutoFillInterrupted,
    DayNotEmpty,
    InvalidReference,
    StorageFailure,
)
from backend.planner.models.common import GeocodeResult, PlaceCategory, TravelerType
from backend.planner.models.trip import Day, Place, PlaceCreate, Trip, TripCreate
from backend.planner.services.autofill import (
    AutoFiller,
    city_name,
    generate,
    load_template_table,
)
from backend.planner.services.place_store import PlaceStore
from backend.planner.services.trips import TripService


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FailingAfterStore(InMemoryItineraryStore):
    """In-memory store whose create_place fails after N successful inserts."""

    def __init__(self, fail_after: int) -> None:
        super().__init__()
        self.fail_after = fail_after
        self.created = 0

    async def create_place(self, fields: PlaceCreate) -> Place:
        if self.created >= self.fail_after:
            raise StorageFailure("insert rejected")
        self.created += 1
        return await super().create_place(fields)


class TestGenerate:
    """Test template lookup."""

    def test_generate_is_deterministic(self) -> None:
        first = generate("Tokyo", 1, TravelerType.combination)
        second = generate("Tokyo", 1, TravelerType.combination)

        assert first == second
        assert [c.name for c in first][:2] == ["Senso-ji Temple", "Ichiran Ramen Asakusa"]

    def test_day_index_wraps_modulo_template_count(self) -> None:
        assert generate("Tokyo", 3) == generate("Tokyo", 1)
        assert generate("Tokyo", 4) == generate("Tokyo", 2)
        assert generate("Tokyo", 2) != generate("Tokyo", 1)

    def test_destination_uses_first_component_case_insensitively(self) -> None:
        assert generate("PARIS, France", 1) == generate("paris", 1)
        assert generate("New York, NY, USA", 1)[0].name == "Statue of Liberty"

    def test_unknown_city_uses_default_template(self) -> None:
        candidates = generate("Lisbon, Portugal", 1)

        assert [c.name for c in candidates] == [
            "Lisbon Main Square",
            "Local Restaurant in Lisbon",
            "Lisbon Museum",
            "Lisbon Park",
        ]
        assert "Lisbon" in candidates[0].description

    def test_candidate_fields(self) -> None:
        skytree = generate("Tokyo", 1)[2]

        assert skytree.name == "Tokyo Skytree"
        assert skytree.category == PlaceCategory.attraction
        assert skytree.start_time == "14:00"
        assert skytree.duration == 120
        assert skytree.estimated_cost == Decimal("25")
        assert skytree.rating == pytest.approx(4.5)

    def test_traveler_type_does_not_change_selection(self) -> None:
        assert generate("London", 1, TravelerType.budget) == generate(
            "London", 1, TravelerType.time
        )

    def test_day_number_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            generate("Tokyo", 0)

    def test_city_name(self) -> None:
        assert city_name("  Tokyo , Japan") == "Tokyo"
        assert city_name("Reykjavik") == "Reykjavik"

    def test_template_table_has_default_and_images(self) -> None:
        table = load_template_table()

        assert "_default" in table.templates
        assert len(table.image_urls) == 6


class TestAutoFiller:
    """Test AutoFiller.fill_day."""

    @pytest.mark.asyncio
    async def test_fill_day_inserts_candidates_in_order(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day, geocoder
    ) -> None:
        sleep = RecordingSleep()
        filler = AutoFiller(store, PlaceStore(store), geocoder, Settings(), sleep_fn=sleep)

        inserted = await filler.fill_day(trip, day.id)

        names = [c.name for c in generate(trip.destination, 1)]
        stored = await store.list_places_by_day(day.id)
        assert [p.name for p in stored] == names
        assert [p.position for p in stored] == list(range(len(names)))
        assert [p.id for p in inserted] == [p.id for p in stored]

    @pytest.mark.asyncio
    async def test_placeholder_legs_and_aggregates(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day, geocoder
    ) -> None:
        filler = AutoFiller(
            store, PlaceStore(store), geocoder, Settings(), sleep_fn=RecordingSleep()
        )

        places = await filler.fill_day(trip, day.id)

        assert all(p.distance_to_next == pytest.approx(1.5) for p in places[:-1])
        assert all(p.time_to_next == 20 for p in places[:-1])
        assert (places[-1].distance_to_next, places[-1].time_to_next) == (0, 0)

        stored = await store.get_day(day.id)
        assert stored is not None
        assert stored.total_distance == pytest.approx(1.5 * (len(places) - 1))
        assert stored.total_duration == 20 * (len(places) - 1)

    @pytest.mark.asyncio
    async def test_place_details_from_template(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day, geocoder
    ) -> None:
        geocoder.known["Senso-ji Temple"] = GeocodeResult(
            latitude=35.7148, longitude=139.7967, address="2 Chome-3-1 Asakusa, Taito City"
        )
        filler = AutoFiller(
            store, PlaceStore(store), geocoder, Settings(), sleep_fn=RecordingSleep()
        )

        places = await filler.fill_day(trip, day.id)

        temple, ramen = places[0], places[1]
        assert temple.hours == "Opens at 09:00"
        assert temple.latitude == pytest.approx(35.7148)
        assert temple.address == "2 Chome-3-1 Asakusa, Taito City"
        assert ramen.cost == Decimal("15")
        # Unmatched lookups degrade to a blank location
        assert (ramen.latitude, ramen.longitude, ramen.address) == (0, 0, "")
        assert temple.image_url != ramen.image_url

    @pytest.mark.asyncio
    async def test_geocoder_called_with_city_and_paced(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day, geocoder
    ) -> None:
        sleep = RecordingSleep()
        filler = AutoFiller(
            store, PlaceStore(store), geocoder, Settings(geocode_pacing_ms=1000), sleep_fn=sleep
        )

        places = await filler.fill_day(trip, day.id)

        assert all(city == "Tokyo" for _, city in geocoder.calls)
        assert len(geocoder.calls) == len(places)
        # One pause between each pair of consecutive lookups
        assert sleep.calls == [1.0] * (len(places) - 1)

    @pytest.mark.asyncio
    async def test_geocoder_outage_does_not_abort(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day, geocoder
    ) -> None:
        geocoder.unavailable = True
        filler = AutoFiller(
            store, PlaceStore(store), geocoder, Settings(), sleep_fn=RecordingSleep()
        )

        places = await filler.fill_day(trip, day.id)

        assert len(places) == 5
        assert all((p.latitude, p.longitude, p.address) == (0, 0, "") for p in places)

    @pytest.mark.asyncio
    async def test_third_day_repeats_first_template(
        self, store: InMemoryItineraryStore, trip: Trip
    ) -> None:
        assert trip.days
        filler = AutoFiller(store, PlaceStore(store), None, Settings(), sleep_fn=RecordingSleep())

        day_one = await filler.fill_day(trip, trip.days[0].id)
        day_three = await filler.fill_day(trip, trip.days[2].id)

        assert [p.name for p in day_three] == [p.name for p in day_one]

    @pytest.mark.asyncio
    async def test_refuses_non_empty_day(
        self, store: InMemoryItineraryStore, trip: Trip, day: Day
    ) -> None:
        await store.create_place(
            PlaceCreate(
                trip_day_id=day.id, position=0, name="Hotel", category=PlaceCategory.hotel
            )
        )
        filler = AutoFiller(store, PlaceStore(store), None, Settings(), sleep_fn=RecordingSleep())

        with pytest.raises(DayNotEmpty):
            await filler.fill_day(trip, day.id)

        assert len(await store.list_places_by_day(day.id)) == 1

    @pytest.mark.asyncio
    async def test_day_of_another_trip_is_invalid_reference(
        self, store: InMemoryItineraryStore, trip: Trip
    ) -> None:
        other = trip.model_copy(update={"id": uuid.uuid4()})
        assert trip.days
        filler = AutoFiller(store, PlaceStore(store), None, Settings(), sleep_fn=RecordingSleep())

        with pytest.raises(InvalidReference):
            await filler.fill_day(other, trip.days[0].id)

    @pytest.mark.asyncio
    async def test_interrupted_fill_keeps_inserted_places(self, user_id: uuid.UUID) -> None:
        store = FailingAfterStore(fail_after=2)
        trip = await TripService(store, Settings()).create_trip(
            user_id,
            TripCreate(
                name="Paris",
                destination="Paris",
                start_date=date(2025, 5, 1),
                end_date=date(2025, 5, 1),
            ),
        )
        assert trip.days
        day_id = trip.days[0].id
        filler = AutoFiller(store, PlaceStore(store), None, Settings(), sleep_fn=RecordingSleep())

        with pytest.raises(AutoFillInterrupted) as exc_info:
            await filler.fill_day(trip, day_id)

        stored = await store.list_places_by_day(day_id)
        assert [p.id for p in stored] == exc_info.value.inserted_ids
        assert [p.name for p in stored] == ["Eiffel Tower", "Cafe de l'Homme"]
        assert isinstance(exc_info.value, StorageFailure)
