"""Async clients for the three SEPTA real-time feeds.

Each client makes exactly one GET per ``fetch()`` and never raises for
upstream problems: failures come back as ``FeedResult.error``.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from septa_tracker.config import settings

logger = logging.getLogger(__name__)

FEED_TRANSIT_VIEW_ALL = "transit_view_all"
FEED_TRAIN_VIEW = "train_view"
FEED_GTFS_RT_VEHICLES = "gtfs_rt_vehicles"


class FeedError(Exception):
    """Base error for a SEPTA feed that could not be used."""

    def __init__(self, feed: str, message: str) -> None:
        super().__init__(f"{feed}: {message}")
        self.feed = feed


class UpstreamUnavailable(FeedError):
    """Transport failure, timeout or non-success HTTP status."""


class UpstreamPayloadError(FeedError):
    """The feed answered but the body was not in the expected shape."""


@dataclass
class FeedResult:
    feed: str
    payload: Any = None
    error: FeedError | None = None
    elapsed_ms: float = 0.0
    record_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def create_http_client() -> httpx.AsyncClient:
    """Shared HTTP client for all feeds."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


class _FeedClient(ABC):
    feed = ""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self.url = url

    async def _get(self) -> tuple[httpx.Response | None, FeedError | None]:
        """Single GET, no retry."""
        try:
            resp = await self._client.get(self.url)
            resp.raise_for_status()
            return resp, None
        except httpx.TimeoutException as e:
            return None, UpstreamUnavailable(self.feed, f"timed out ({type(e).__name__})")
        except httpx.HTTPStatusError as e:
            return None, UpstreamUnavailable(self.feed, f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            return None, UpstreamUnavailable(self.feed, f"{type(e).__name__}: {e}")

    @abstractmethod
    def _decode(self, resp: httpx.Response) -> tuple[Any, int]:
        """Turn a response into (payload, record_count). Raises UpstreamPayloadError."""

    async def fetch(self) -> FeedResult:
        started = time.monotonic()
        resp, error = await self._get()
        result = FeedResult(feed=self.feed, error=error)
        if resp is not None:
            try:
                result.payload, result.record_count = self._decode(resp)
            except UpstreamPayloadError as e:
                result.error = e
        result.elapsed_ms = (time.monotonic() - started) * 1000

        if result.error is not None:
            logger.warning("SEPTA feed %s failed: %s", self.feed, result.error)
        else:
            logger.debug(
                "Fetched %s: %d records in %.0fms",
                self.feed, result.record_count, result.elapsed_ms,
            )
        return result

    def _json(self, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamPayloadError(self.feed, f"response is not JSON: {e}") from e


class BulkTransitClient(_FeedClient):
    """TransitViewAll: every bus and trolley, grouped by route key."""

    feed = FEED_TRANSIT_VIEW_ALL

    def __init__(self, client: httpx.AsyncClient, url: str | None = None) -> None:
        super().__init__(client, url or settings.transit_view_all_url)

    def _decode(self, resp: httpx.Response) -> tuple[dict[str, list[dict]], int]:
        data = self._json(resp)
        # Shape: {"routes": [{"17": [...], "42": [...]}]}
        routes = data.get("routes") if isinstance(data, dict) else None
        if not isinstance(routes, list):
            raise UpstreamPayloadError(self.feed, "missing 'routes' array")
        if not routes:
            return {}, 0
        grouped = routes[0]
        if not isinstance(grouped, dict):
            raise UpstreamPayloadError(self.feed, "'routes[0]' is not an object")
        count = sum(len(v) for v in grouped.values() if isinstance(v, list))
        return grouped, count


class RailClient(_FeedClient):
    """TrainView: every regional rail train in one flat list."""

    feed = FEED_TRAIN_VIEW

    def __init__(self, client: httpx.AsyncClient, url: str | None = None) -> None:
        super().__init__(client, url or settings.train_view_url)

    def _decode(self, resp: httpx.Response) -> tuple[list[dict], int]:
        data = self._json(resp)
        if not isinstance(data, list):
            raise UpstreamPayloadError(self.feed, f"expected a JSON array, got {type(data).__name__}")
        trains = [t for t in data if isinstance(t, dict)]
        return trains, len(trains)


class SubwayTextClient(_FeedClient):
    """GTFS-realtime vehicle positions as SEPTA's pretty-printed HTML page.

    SEPTA does not publish subway vehicles in this feed yet, so in practice
    the page carries no BSL/MFL entities.
    """

    feed = FEED_GTFS_RT_VEHICLES

    def __init__(self, client: httpx.AsyncClient, url: str | None = None) -> None:
        super().__init__(client, url or settings.gtfs_rt_vehicle_url)

    def _decode(self, resp: httpx.Response) -> tuple[str, int]:
        text = resp.text
        return text, text.count("entity {")
