"""Builds one vehicle list for a set of route tokens from all SEPTA feeds.

Tokens are partitioned by mode and each mode's feed is fetched once,
concurrently with the others. A feed that fails contributes no vehicles;
the request itself still succeeds.
"""

import asyncio
import itertools
import logging
from typing import Iterable

from septa_tracker.config import settings
from septa_tracker.core import gtfs_text_parser
from septa_tracker.core.feed_monitor import FeedMonitor
from septa_tracker.core.name_mapper import to_upstream_name
from septa_tracker.core.normalizers import (
    filter_entities,
    filter_trains,
    normalize_bus,
    normalize_subway,
    normalize_train,
)
from septa_tracker.core.route_classifier import partition, strip_trolley_prefix
from septa_tracker.core.route_tables import RouteTables, get_route_tables
from septa_tracker.core.septa_client import (
    BulkTransitClient,
    FeedResult,
    RailClient,
    SubwayTextClient,
    UpstreamUnavailable,
)
from septa_tracker.schemas.vehicle import NormalizedVehicle

logger = logging.getLogger(__name__)


class RouteValidationError(ValueError):
    """The caller did not ask for any route."""


def parse_route_tokens(raw: str | None) -> list[str]:
    """Split a comma-separated ``routes`` value into unique, trimmed tokens."""
    if not raw:
        return []
    return clean_tokens(raw.split(","))


def clean_tokens(tokens: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    cleaned = []
    for token in tokens:
        token = token.strip()
        if token and token not in seen:
            seen.add(token)
            cleaned.append(token)
    return cleaned


class VehicleAggregator:
    def __init__(
        self,
        bulk: BulkTransitClient,
        rail: RailClient,
        subway: SubwayTextClient | None = None,
        monitor: FeedMonitor | None = None,
        tables: RouteTables | None = None,
        deadline_seconds: float | None = None,
    ) -> None:
        self.bulk = bulk
        self.rail = rail
        self.subway = subway
        self.monitor = monitor
        self.tables = tables or get_route_tables()
        self.deadline_seconds = deadline_seconds or settings.feed_deadline_seconds

    async def aggregate(self, tokens: Iterable[str]) -> list[NormalizedVehicle]:
        """Vehicles for all requested routes. Raises only RouteValidationError."""
        routes = clean_tokens(tokens)
        if not routes:
            raise RouteValidationError("At least one route must be specified")

        groups = partition(routes, self.tables)
        jobs = []
        if groups.surface:
            jobs.append(self._guarded("bus/trolley", self._surface_vehicles(groups.surface)))
        if groups.rail:
            jobs.append(self._guarded("regional rail", self._rail_vehicles(groups.rail)))
        if groups.subway:
            if self.subway is not None:
                jobs.append(self._guarded("subway", self._subway_vehicles(groups.subway)))
            else:
                logger.info("Subway feed disabled, ignoring %s", groups.subway)

        results = await asyncio.gather(*jobs)
        vehicles = list(itertools.chain.from_iterable(results))
        logger.info("Aggregated %d vehicles for %d routes", len(vehicles), len(routes))
        return vehicles

    async def rail_line(self, token: str) -> list[NormalizedVehicle]:
        """Vehicles on one regional rail line. Raises FeedError if TrainView fails."""
        result = await self._fetch_result(self.rail)
        if not result.ok:
            raise result.error
        return self._normalize_rail(result.payload, [token])

    async def _guarded(self, label: str, job) -> list[NormalizedVehicle]:
        try:
            return await job
        except Exception:
            logger.exception("Dropping %s vehicles after an unexpected error", label)
            return []

    async def _fetch_result(self, client) -> FeedResult:
        try:
            result = await asyncio.wait_for(client.fetch(), timeout=self.deadline_seconds)
        except asyncio.TimeoutError:
            logger.warning("SEPTA feed %s gave no answer within %.1fs", client.feed, self.deadline_seconds)
            if self.monitor:
                self.monitor.record_timeout(client.feed, self.deadline_seconds)
            return FeedResult(feed=client.feed, error=UpstreamUnavailable(client.feed, "deadline exceeded"))
        if self.monitor:
            self.monitor.record(result)
        return result

    async def _fetch(self, client):
        result = await self._fetch_result(client)
        return result.payload if result.ok else None

    async def _surface_vehicles(self, tokens: list[str]) -> list[NormalizedVehicle]:
        grouped = await self._fetch(self.bulk)
        if grouped is None:
            return []
        vehicles = []
        for token in tokens:
            records = grouped.get(strip_trolley_prefix(token, self.tables))
            if not isinstance(records, list):
                logger.debug("No TransitViewAll vehicles for route %s", token)
                continue
            for record in records:
                if not isinstance(record, dict):
                    continue
                vehicle = normalize_bus(record, token)
                if vehicle is not None:
                    vehicles.append(vehicle)
        return vehicles

    async def _rail_vehicles(self, tokens: list[str]) -> list[NormalizedVehicle]:
        trains = await self._fetch(self.rail)
        if trains is None:
            return []
        return self._normalize_rail(trains, tokens)

    def _normalize_rail(self, trains: list[dict], tokens: list[str]) -> list[NormalizedVehicle]:
        vehicles = []
        for token in tokens:
            upstream = to_upstream_name(token, self.tables)
            for train in filter_trains(trains, upstream):
                vehicle = normalize_train(train, token)
                if vehicle is not None:
                    vehicles.append(vehicle)
        return vehicles

    async def _subway_vehicles(self, tokens: list[str]) -> list[NormalizedVehicle]:
        text = await self._fetch(self.subway)
        if text is None:
            return []
        entities = gtfs_text_parser.parse(text)
        vehicles = []
        for token in tokens:
            for entity in filter_entities(entities, token):
                vehicle = normalize_subway(entity, token)
                if vehicle is not None:
                    vehicles.append(vehicle)
        return vehicles
