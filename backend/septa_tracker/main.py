"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from septa_tracker.api import diagnostics, routes, vehicles
from septa_tracker.config import settings
from septa_tracker.core.aggregator import VehicleAggregator
from septa_tracker.core.feed_monitor import FeedMonitor
from septa_tracker.core.route_tables import get_route_tables
from septa_tracker.core.scheduler import create_scheduler
from septa_tracker.core.septa_client import (
    BulkTransitClient,
    RailClient,
    SubwayTextClient,
    create_http_client,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Fail fast on a broken route table
    tables = get_route_tables()

    http = create_http_client()
    bulk = BulkTransitClient(http)
    rail = RailClient(http)
    subway = SubwayTextClient(http) if settings.subway_feed_enabled else None

    monitor = FeedMonitor([c for c in (bulk, rail, subway) if c is not None])
    aggregator = VehicleAggregator(bulk, rail, subway, monitor=monitor, tables=tables)

    # Wire up API modules
    vehicles.aggregator = aggregator
    diagnostics.monitor = monitor

    scheduler = None
    if settings.feed_probe_enabled:
        scheduler = create_scheduler(monitor)
        scheduler.start()
    logger.info(
        "SEPTA vehicle service started - feed probing %s",
        f"every {settings.feed_probe_interval_seconds}s" if scheduler else "disabled",
    )

    yield

    # Shutdown
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    vehicles.aggregator = None
    diagnostics.monitor = None
    await http.aclose()
    logger.info("SEPTA vehicle service shut down")


app = FastAPI(
    title="SEPTA Live Vehicles",
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["Content-Type"],
)

app.include_router(vehicles.router)
app.include_router(routes.router)
app.include_router(diagnostics.router)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error serving %s", request.url.path)
    return ORJSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred", "details": str(exc)},
    )


@app.get("/api/health")
async def health():
    return {"status": "ok"}
