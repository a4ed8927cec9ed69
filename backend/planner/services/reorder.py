"""Reorder gesture handling as an explicit state machine.

Idle --drag_start(i)--> Dragging(source=i, hover=None)
Dragging --drag_over(j), j != source--> Dragging(source, hover=j)
Dragging --drag_leave()--> Dragging(source, hover=None)
Dragging --drag_end()--> Idle, with the spliced order when hover is set

Nothing here knows about pointers or rendering.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

from backend.planner.models.trip import Place
from backend.planner.services.place_store import PlaceStore

T = TypeVar("T")


class GesturePhase(str, Enum):
    """Phase of a drag gesture."""

    idle = "idle"
    dragging = "dragging"


@dataclass(frozen=True)
class GestureState:
    """Current phase with the source and hover indices while dragging."""

    phase: GesturePhase = GesturePhase.idle
    source_index: int | None = None
    hover_index: int | None = None


def splice(items: Sequence[T], source_index: int, target_index: int) -> list[T]:
    """Remove the item at source_index and reinsert it at target_index."""
    result = list(items)
    moved = result.pop(source_index)
    result.insert(target_index, moved)
    return result


class ReorderGesture(Generic[T]):
    """Drag state machine over one list of items.

    Events that make no sense in the current phase are ignored: drag_over,
    drag_leave and drag_end while idle do nothing, and drag_start while
    dragging restarts the gesture from the new source.
    """

    def __init__(self, items: Sequence[T]) -> None:
        self._items = list(items)
        self._state = GestureState()

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def items(self) -> list[T]:
        return list(self._items)

    def drag_start(self, source_index: int) -> None:
        """Begin dragging the item at source_index."""
        self._check_index(source_index)
        self._state = GestureState(phase=GesturePhase.dragging, source_index=source_index)

    def drag_over(self, target_index: int) -> None:
        """Hover over target_index; hovering the source itself is ignored."""
        if self._state.phase is not GesturePhase.dragging:
            return
        self._check_index(target_index)
        if target_index == self._state.source_index:
            return
        self._state = GestureState(
            phase=GesturePhase.dragging,
            source_index=self._state.source_index,
            hover_index=target_index,
        )

    def drag_leave(self) -> None:
        """Clear the hover target; the list is unchanged."""
        if self._state.phase is not GesturePhase.dragging:
            return
        self._state = GestureState(
            phase=GesturePhase.dragging, source_index=self._state.source_index
        )

    def drag_end(self) -> list[T] | None:
        """Finish the gesture.

        Returns:
            The new order when a hover target was set, otherwise None
        """
        state = self._state
        self._state = GestureState()

        if state.phase is not GesturePhase.dragging or state.hover_index is None:
            return None
        if state.source_index is None or state.hover_index == state.source_index:
            return None

        self._items = splice(self._items, state.source_index, state.hover_index)
        return list(self._items)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} outside 0..{len(self._items) - 1}")


class DayReorderSession:
    """Binds a drag gesture to a day and submits the result on drop."""

    def __init__(self, place_store: PlaceStore, day_id: UUID, places: Sequence[Place]) -> None:
        self._place_store = place_store
        self._day_id = day_id
        self.gesture: ReorderGesture[Place] = ReorderGesture(
            sorted(places, key=lambda p: p.position)
        )

    @classmethod
    async def open(cls, place_store: PlaceStore, day_id: UUID) -> "DayReorderSession":
        """Start a session over the day's current places."""
        return cls(place_store, day_id, await place_store.list_by_day(day_id))

    def drag_start(self, source_index: int) -> None:
        self.gesture.drag_start(source_index)

    def drag_over(self, target_index: int) -> None:
        self.gesture.drag_over(target_index)

    def drag_leave(self) -> None:
        self.gesture.drag_leave()

    async def drag_end(self) -> list[Place] | None:
        """Drop; a changed order is written through the position sequencer.

        Returns:
            The stored places in their new order, or None when nothing moved
        """
        new_order = self.gesture.drag_end()
        if new_order is None:
            return None

        places = await self._place_store.reorder(self._day_id, [p.id for p in new_order])
        self.gesture = ReorderGesture(places)
        return places
