"""Unit tests for the drag reorder state machine."""

import pytest

from backend.planner.db.inmemory import InMemoryItineraryStore
from backend.planner.models.common import PlaceCategory
from backend.planner.models.trip import Day, PlaceCreate
from backend.planner.services.place_store import PlaceStore
from backend.planner.services.reorder import (
    DayReorderSession,
    GesturePhase,
    ReorderGesture,
    splice,
)


class TestReorderGesture:
    """Test ReorderGesture transitions."""

    def test_starts_idle(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])
        assert gesture.state.phase == GesturePhase.idle

    def test_drag_first_over_last(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(0)
        gesture.drag_over(2)
        result = gesture.drag_end()

        assert result == ["B", "C", "A"]
        assert gesture.state.phase == GesturePhase.idle
        assert gesture.items == ["B", "C", "A"]

    def test_drag_last_over_first(self) -> None:
        gesture = ReorderGesture(["A", "B", "C", "D"])

        gesture.drag_start(3)
        gesture.drag_over(1)

        assert gesture.drag_end() == ["A", "D", "B", "C"]

    def test_drag_over_tracks_latest_target(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(0)
        gesture.drag_over(2)
        gesture.drag_over(1)

        assert gesture.state.hover_index == 1
        assert gesture.drag_end() == ["B", "A", "C"]

    def test_drag_end_without_hover_changes_nothing(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(1)
        assert gesture.drag_end() is None

        assert gesture.items == ["A", "B", "C"]
        assert gesture.state.phase == GesturePhase.idle

    def test_drag_leave_clears_hover_only(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(0)
        gesture.drag_over(2)
        gesture.drag_leave()

        assert gesture.state.phase == GesturePhase.dragging
        assert gesture.state.source_index == 0
        assert gesture.state.hover_index is None
        assert gesture.drag_end() is None
        assert gesture.items == ["A", "B", "C"]

    def test_drag_over_source_is_ignored(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(1)
        gesture.drag_over(1)

        assert gesture.state.hover_index is None
        assert gesture.drag_end() is None

    def test_events_while_idle_are_ignored(self) -> None:
        gesture = ReorderGesture(["A", "B"])

        gesture.drag_over(1)
        gesture.drag_leave()

        assert gesture.drag_end() is None
        assert gesture.state.phase == GesturePhase.idle

    def test_drag_start_while_dragging_restarts(self) -> None:
        gesture = ReorderGesture(["A", "B", "C"])

        gesture.drag_start(0)
        gesture.drag_over(2)
        gesture.drag_start(2)

        assert gesture.state.source_index == 2
        assert gesture.state.hover_index is None

    def test_out_of_range_index_raises(self) -> None:
        gesture = ReorderGesture(["A", "B"])

        with pytest.raises(IndexError):
            gesture.drag_start(2)

        gesture.drag_start(0)
        with pytest.raises(IndexError):
            gesture.drag_over(-1)

    def test_splice(self) -> None:
        assert splice([1, 2, 3, 4], 1, 3) == [1, 3, 4, 2]
        assert splice([1, 2, 3, 4], 3, 0) == [4, 1, 2, 3]


class TestDayReorderSession:
    """Test DayReorderSession against the Place Store."""

    @pytest.mark.asyncio
    async def test_drop_writes_new_positions(
        self, store: InMemoryItineraryStore, day: Day
    ) -> None:
        places = PlaceStore(store)
        for name in ("A", "B", "C"):
            await places.add(
                PlaceCreate(
                    trip_day_id=day.id,
                    name=name,
                    category=PlaceCategory.attraction,
                    distance_to_next=1.0,
                    time_to_next=10,
                )
            )

        session = await DayReorderSession.open(places, day.id)
        session.drag_start(0)
        session.drag_over(2)
        result = await session.drag_end()

        assert result is not None
        stored = await store.list_places_by_day(day.id)
        assert [(p.name, p.position) for p in stored] == [("B", 0), ("C", 1), ("A", 2)]

        # A is now terminal
        assert (stored[2].distance_to_next, stored[2].time_to_next) == (0, 0)
        stored_day = await store.get_day(day.id)
        assert stored_day is not None
        assert stored_day.total_duration == 20

    @pytest.mark.asyncio
    async def test_cancelled_drag_writes_nothing(
        self, store: InMemoryItineraryStore, day: Day
    ) -> None:
        places = PlaceStore(store)
        for name in ("A", "B"):
            await places.add(
                PlaceCreate(trip_day_id=day.id, name=name, category=PlaceCategory.restaurant)
            )
        before = await store.list_places_by_day(day.id)

        session = await DayReorderSession.open(places, day.id)
        session.drag_start(1)
        session.drag_over(0)
        session.drag_leave()

        assert await session.drag_end() is None
        assert await store.list_places_by_day(day.id) == before
