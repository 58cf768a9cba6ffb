"""Route table REST API endpoints."""

from fastapi import APIRouter

from septa_tracker.core.aggregator import parse_route_tokens
from septa_tracker.core.route_classifier import RouteMode, classify
from septa_tracker.core.route_tables import get_route_tables
from septa_tracker.schemas.route import ClassifiedRoute, RailLineInfo, RouteLines, SubwayLineInfo

router = APIRouter(prefix="/api/routes", tags=["routes"])


@router.get("/lines", response_model=RouteLines)
async def list_lines():
    """Known regional rail lines (with TrainView names) and subway lines."""
    tables = get_route_tables()
    return RouteLines(
        trolley_prefix=tables.trolley_prefix,
        rail_lines=[
            RailLineInfo(name=name, upstream_name=upstream)
            for name, upstream in tables.rail_to_upstream.items()
        ],
        subway_lines=[
            SubwayLineInfo(code=code, name=name)
            for code, name in tables.subway_lines.items()
        ],
    )


@router.get("/classify", response_model=list[ClassifiedRoute])
async def classify_routes(routes: str | None = None):
    """Show which feed each route token would be served from."""
    tables = get_route_tables()
    result = []
    for token in parse_route_tokens(routes):
        mode = classify(token, tables)
        result.append(ClassifiedRoute(
            route=token,
            mode=mode,
            upstream_name=tables.rail_to_upstream.get(token) if mode is RouteMode.REGIONAL_RAIL else None,
        ))
    return result
