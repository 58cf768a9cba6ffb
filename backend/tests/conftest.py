"""Shared fixtures: canned SEPTA payloads and fake feed clients."""

import asyncio

import pytest

from septa_tracker.core.feed_monitor import FeedMonitor
from septa_tracker.core.septa_client import (
    FEED_GTFS_RT_VEHICLES,
    FEED_TRAIN_VIEW,
    FEED_TRANSIT_VIEW_ALL,
    FeedResult,
    UpstreamUnavailable,
)

GTFS_RT_PAGE = """<html><head><title>Pretty Print - Vehicle Positions</title></head><body>
<pre>
header {<br>
  gtfs_realtime_version: "2.0"<br>
  incrementality: FULL_DATASET<br>
  timestamp: 1770475343<br>
}<br>
entity {<br>
  id: "1001"<br>
  vehicle {<br>
    trip {<br>
      trip_id: "BSL_123"<br>
      route_id: "BSL"<br>
      direction_id: 0<br>
    }<br>
    vehicle {<br>
      id: "1001"<br>
      label: "1001"<br>
    }<br>
    position {<br>
      latitude: 39.9526<br>
      longitude: -75.1652<br>
      bearing: 180.0<br>
    }<br>
    current_stop_sequence: 15<br>
    stop_id: "BSL_CITY_HALL"<br>
    timestamp: 1770475343<br>
    occupancy_status: MANY_SEATS_AVAILABLE<br>
  }<br>
}<br>
entity {<br>
  id: "2002"<br>
  vehicle {<br>
    trip {<br>
      trip_id: "MFL_456"<br>
      route_id: "MFL"<br>
      direction_id: 1<br>
    }<br>
    vehicle {<br>
      id: "2002"<br>
      label: "2002"<br>
    }<br>
    position {<br>
      latitude: 39.9550<br>
      longitude: -75.1700<br>
      bearing: 90.5<br>
    }<br>
    stop_id: "MFL_15TH_ST"<br>
    timestamp: 1770475350<br>
  }<br>
}<br>
</pre></body></html>"""


def transit_view_all_payload() -> dict:
    return {
        "routes": [{
            "17": [
                {"lat": "39.9526", "lng": "-75.1652", "VehicleID": "1234",
                 "Direction": "NorthBound", "destination": "Suburban Station", "late": "5"},
            ],
            "42": [
                {"lat": "39.9600", "lng": "-75.1700", "VehicleID": "5678",
                 "Direction": "SouthBound", "destination": "City Hall", "late": "2"},
                {"lat": "", "lng": "-75.1700", "VehicleID": "9999"},
            ],
            "101": [
                {"lat": "39.9100", "lng": "-75.2500", "VehicleID": "9001",
                 "Direction": "WestBound", "destination": "Media", "late": 0},
            ],
        }],
    }


def train_view_payload() -> list[dict]:
    return [
        {"lat": "39.8770", "lon": "-75.2410", "line": "Airport", "trainno": "401",
         "consist": "701,702", "direction": "N", "dest": "Glenside", "late": "3",
         "service": "LOCAL", "track": "2"},
        {"lat": "40.1200", "lon": "-75.3400", "line": "Manayunk/Norristown", "trainno": "217",
         "heading": "NW", "nextstop": "Ivy Ridge", "late": "0"},
        {"lat": "40.0100", "lon": "-75.1900", "line": "Paoli/Thorndale", "trainno": "550",
         "direction": "W", "dest": "Thorndale", "late": "1"},
    ]


class FakeFeed:
    """Stands in for a SEPTA feed client and counts fetches."""

    def __init__(self, feed: str, payload=None, error: str | None = None,
                 exc: Exception | None = None, delay: float = 0.0) -> None:
        self.feed = feed
        self.payload = payload
        self.error = error
        self.exc = exc
        self.delay = delay
        self.calls = 0

    async def fetch(self) -> FeedResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        if self.error is not None:
            return FeedResult(feed=self.feed, error=UpstreamUnavailable(self.feed, self.error))
        return FeedResult(feed=self.feed, payload=self.payload, record_count=1)


@pytest.fixture
def bulk_feed() -> FakeFeed:
    return FakeFeed(FEED_TRANSIT_VIEW_ALL, payload=transit_view_all_payload()["routes"][0])


@pytest.fixture
def rail_feed() -> FakeFeed:
    return FakeFeed(FEED_TRAIN_VIEW, payload=train_view_payload())


@pytest.fixture
def subway_feed() -> FakeFeed:
    return FakeFeed(FEED_GTFS_RT_VEHICLES, payload=GTFS_RT_PAGE)


@pytest.fixture
def monitor() -> FeedMonitor:
    return FeedMonitor()
