"""Error taxonomy for itinerary operations.

StorageFailure and GeocodeUnavailable describe collaborator trouble, the rest
are data-integrity or caller errors. All derive from ItineraryError so the
API layer can map them in one place.
"""

from uuid import UUID


class ItineraryError(Exception):
    """Base class for itinerary errors."""

    pass


class StorageFailure(ItineraryError):
    """Persistence call was rejected, timed out or unreachable."""

    pass


class AutoFillInterrupted(StorageFailure):
    """Auto-fill stopped partway; places inserted so far are kept."""

    def __init__(self, message: str, inserted_ids: list[UUID]) -> None:
        super().__init__(message)
        self.inserted_ids = inserted_ids


class InvalidReference(ItineraryError):
    """Operation targets a trip, day, place, plan or activity that does not exist."""

    def __init__(self, kind: str, ref_id: object) -> None:
        super().__init__(f"{kind} {ref_id} does not exist")
        self.kind = kind
        self.ref_id = ref_id


class InvalidPosition(ItineraryError):
    """Explicit insert position falls outside 0..n."""

    pass


class OrderMismatch(ItineraryError):
    """Submitted ordering is not a permutation of the current id set."""

    pass


class DayNotEmpty(ItineraryError):
    """Auto-fill refused because the day already has places."""

    pass


class GeocodeUnavailable(ItineraryError):
    """Geocoding lookup failed at the transport level."""

    pass
