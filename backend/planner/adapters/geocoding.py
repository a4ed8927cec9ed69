"""Geocoding adapter using the Nominatim search API (keyless)."""

import logging
from typing import Any, Protocol

import httpx

from backend.planner.collaborators.executor import (
    CallConfig,
    CallContext,
    CollaboratorCallError,
    CollaboratorExecutor,
    CollaboratorTimeoutError,
)
from backend.planner.config import get_settings
from backend.planner.errors import GeocodeUnavailable
from backend.planner.models.common import GeocodeResult

logger = logging.getLogger(__name__)

COLLABORATOR = "geocoder"


class Geocoder(Protocol):
    """Resolves a place name within a city to coordinates."""

    async def resolve(self, place_name: str, city_name: str) -> GeocodeResult | None:
        """Return coordinates, or None when nothing matched.

        Raises:
            GeocodeUnavailable: Lookup failed at the transport level
        """
        ...


class NominatimGeocoder:
    """Geocoder backed by the OpenStreetMap Nominatim search endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
        executor: CollaboratorExecutor | None = None,
    ) -> None:
        """Initialize geocoder.

        Args:
            base_url: Nominatim search URL (defaults to settings)
            user_agent: User-Agent header, required by the Nominatim usage policy
            client: Optional httpx client (for testing with mocks)
            executor: Optional executor (defaults to one built from settings)
        """
        settings = get_settings()
        self._base_url = base_url or settings.geocoder_base_url
        self._user_agent = user_agent or settings.geocoder_user_agent
        self._client = client
        self._executor = executor or CollaboratorExecutor(CallConfig.from_settings(settings))

    async def resolve(self, place_name: str, city_name: str) -> GeocodeResult | None:
        """Look up "<place>, <city>" and return the first match."""
        query = f"{place_name}, {city_name}" if city_name else place_name
        ctx = CallContext(collaborator=COLLABORATOR, operation="resolve")

        try:
            data = await self._executor.read(ctx, self._search, query)
        except (CollaboratorTimeoutError, CollaboratorCallError) as e:
            raise GeocodeUnavailable(f"geocoding '{query}' failed: {e}") from e

        if not data:
            return None

        return _parse_match(data[0])

    async def _search(self, query: str) -> list[dict[str, Any]]:
        params: dict[str, str | int] = {
            "q": query,
            "format": "json",
            "limit": 1,
            "accept-language": "en",
        }
        headers = {"User-Agent": self._user_agent}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=4.0)
            close_client = True

        try:
            response = await client.get(self._base_url, params=params, headers=headers)
            response.raise_for_status()
            result: list[dict[str, Any]] = response.json()
            return result
        finally:
            if close_client:
                await client.aclose()


def _parse_match(match: dict[str, Any]) -> GeocodeResult:
    """Nominatim returns lat/lon as strings; missing values become 0."""
    return GeocodeResult(
        latitude=float(match.get("lat") or 0),
        longitude=float(match.get("lon") or 0),
        address=match.get("display_name") or "",
    )


async def resolve_or_blank(geocoder: Geocoder, place_name: str, city_name: str) -> GeocodeResult:
    """Resolve a place, degrading to 0/0/"" when the geocoder has no answer.

    A missing match and a transport failure are both non-fatal here: the
    caller still creates the place, only with degraded location data.
    """
    try:
        result = await geocoder.resolve(place_name, city_name)
    except GeocodeUnavailable as e:
        logger.warning(
            "Geocoding unavailable, using blank location",
            extra={"structured": {"place": place_name, "city": city_name, "error": str(e)}},
        )
        return GeocodeResult(latitude=0, longitude=0, address="")

    if result is None:
        logger.warning(
            "No geocoding match, using blank location",
            extra={"structured": {"place": place_name, "city": city_name}},
        )
        return GeocodeResult(latitude=0, longitude=0, address="")

    return result
