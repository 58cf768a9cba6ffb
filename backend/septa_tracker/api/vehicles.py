"""Vehicle REST API endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse

from septa_tracker.core.aggregator import RouteValidationError, parse_route_tokens
from septa_tracker.core.septa_client import FeedError
from septa_tracker.schemas.vehicle import ErrorResponse, VehiclesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["vehicles"])

# Will be set by main.py
aggregator = None


def _error(status_code: int, message: str, details: str | None = None) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details=details).model_dump(exclude_none=True),
    )


@router.get(
    "/vehicles",
    response_model=VehiclesResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def list_vehicles(routes: str | None = None):
    """Live vehicles for a comma-separated list of routes, e.g. ``17,42,T101,Airport Line``.

    Upstream outages are absorbed: the affected routes simply have no vehicles.
    """
    if not routes:
        return _error(400, "Routes parameter is required")
    tokens = parse_route_tokens(routes)
    if not tokens:
        return _error(400, "At least one route must be specified")
    if aggregator is None:
        return _error(500, "Vehicle aggregator not initialized")

    try:
        vehicles = await aggregator.aggregate(tokens)
    except RouteValidationError as e:
        return _error(400, str(e))
    return VehiclesResponse(vehicles=vehicles)


@router.get(
    "/rail",
    response_model=VehiclesResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def list_rail_line(route: str | None = None):
    """Trains on a single regional rail line, e.g. ``Airport Line`` or ``Airport``."""
    route = (route or "").strip()
    if not route:
        return _error(400, "Route parameter is required")
    if aggregator is None:
        return _error(500, "Vehicle aggregator not initialized")

    try:
        vehicles = await aggregator.rail_line(route)
    except FeedError as e:
        return _error(502, "Failed to fetch Regional Rail data", str(e))
    return VehiclesResponse(vehicles=vehicles)
