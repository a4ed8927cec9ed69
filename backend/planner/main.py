"""FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.planner.api.routes.health import router as health_router
from backend.planner.api.routes.metrics import router as metrics_router
from backend.planner.api.routes.places import router as places_router
from backend.planner.api.routes.plans import router as plans_router
from backend.planner.api.routes.trips import router as trips_router
from backend.planner.errors import (
    DayNotEmpty,
    InvalidPosition,
    InvalidReference,
    ItineraryError,
    OrderMismatch,
    StorageFailure,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Trip Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router, tags=["trips"])
app.include_router(places_router, tags=["places"])
app.include_router(plans_router, tags=["plans"])


def status_for(error: ItineraryError) -> int:
    """HTTP status for an itinerary error."""
    if isinstance(error, InvalidReference):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, (OrderMismatch, InvalidPosition)):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, DayNotEmpty):
        return status.HTTP_409_CONFLICT
    if isinstance(error, StorageFailure):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(ItineraryError)
async def itinerary_error_handler(request: Request, exc: ItineraryError) -> JSONResponse:
    """Map domain errors to HTTP responses."""
    status_code = status_for(exc)
    body: dict[str, object] = {"error": type(exc).__name__, "detail": str(exc)}

    inserted_ids = getattr(exc, "inserted_ids", None)
    if inserted_ids is not None:
        body["inserted_ids"] = [str(place_id) for place_id in inserted_ids]

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Request failed: {type(exc).__name__}",
        extra={
            "structured": {
                "path": request.url.path,
                "method": request.method,
                "status": status_code,
                "error": type(exc).__name__,
            }
        },
    )
    return JSONResponse(status_code=status_code, content=body)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Planner API", "version": "0.1.0"}
