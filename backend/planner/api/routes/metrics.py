"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - collaborator_latency_ms{collaborator, outcome}
    - collaborator_errors_total{collaborator, reason}
    - itinerary_mutations_total{operation, outcome}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
