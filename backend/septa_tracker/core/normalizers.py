"""Map raw records from each SEPTA feed onto ``NormalizedVehicle``.

Every normalizer returns ``None`` for a record it cannot place on the map
(missing/non-numeric coordinates or the 0,0 "no fix" position).
"""

import logging
import math
import re
from typing import Any, Iterable

from google.transit import gtfs_realtime_pb2

from septa_tracker.schemas.vehicle import NormalizedVehicle

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
RAIL_SERVICE = "Regional Rail"
SUBWAY_SERVICE = "Subway"

# GTFS-RT only carries a boolean direction flag
SUBWAY_DIRECTIONS = {0: "Northbound", 1: "Southbound"}

_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")


def _parse_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return parsed if math.isfinite(parsed) else None


def parse_delay_minutes(value: Any) -> int:
    """'5' -> 5, '5 min' -> 5, '' / None / 'On Time' -> 0. Never negative."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return max(0, int(value)) if math.isfinite(value) else 0
        except OverflowError:
            return 0
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return 0
    try:
        return max(0, int(match.group(1)))
    except (ValueError, OverflowError):
        # beyond the int string length limit
        return 0


def has_fix(lat: float, lon: float) -> bool:
    return not (lat == 0 and lon == 0)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first(*values: Any, default: str = UNKNOWN) -> str:
    for value in values:
        text = _text(value)
        if text:
            return text
    return default


def normalize_bus(record: dict, route_token: str) -> NormalizedVehicle | None:
    """TransitViewAll bus/trolley record -> vehicle labelled with the requested token."""
    lat = _parse_float(record.get("lat"))
    lon = _parse_float(record.get("lng"))
    if lat is None or lon is None or not has_fix(lat, lon):
        logger.debug("Dropping %s vehicle %r without a usable position", route_token, record.get("VehicleID"))
        return None
    return NormalizedVehicle(
        lat=lat,
        lon=lon,
        route_label=route_token,
        vehicle_id=_text(record.get("VehicleID")),
        direction=_text(record.get("Direction")),
        destination=_text(record.get("destination")),
        delay_minutes=parse_delay_minutes(record.get("late")),
    )


def filter_trains(trains: Iterable[dict], upstream_line: str) -> list[dict]:
    """Trains whose ``line`` contains ``upstream_line`` (case-insensitive)."""
    needle = upstream_line.strip().lower()
    if not needle:
        return []
    return [t for t in trains if needle in _text(t.get("line")).lower()]


def normalize_train(train: dict, route_token: str) -> NormalizedVehicle | None:
    """TrainView record -> vehicle.

    Field preference: trainno over consist, direction over heading,
    dest over nextstop.
    """
    lat = _parse_float(train.get("lat"))
    lon = _parse_float(train.get("lon"))
    lat = 0.0 if lat is None else lat
    lon = 0.0 if lon is None else lon
    if not has_fix(lat, lon):
        logger.debug("Dropping train %r without a usable position", train.get("trainno"))
        return None
    return NormalizedVehicle(
        lat=lat,
        lon=lon,
        route_label=route_token,
        vehicle_id=_first(train.get("trainno"), train.get("consist")),
        direction=_first(train.get("direction"), train.get("heading")),
        destination=_first(train.get("dest"), train.get("nextstop")),
        delay_minutes=parse_delay_minutes(train.get("late")),
        service=_first(train.get("service"), default=RAIL_SERVICE),
        track=_text(train.get("track")) or None,
    )


def _route_id(entity: gtfs_realtime_pb2.FeedEntity) -> str | None:
    if not entity.HasField("vehicle") or not entity.vehicle.HasField("trip"):
        return None
    return entity.vehicle.trip.route_id


def filter_entities(
    entities: Iterable[gtfs_realtime_pb2.FeedEntity], route_id: str
) -> list[gtfs_realtime_pb2.FeedEntity]:
    return [e for e in entities if _route_id(e) == route_id]


def normalize_subway(entity: gtfs_realtime_pb2.FeedEntity, route_token: str) -> NormalizedVehicle | None:
    """GTFS-RT entity -> vehicle. Needs both a position and an identity."""
    if not entity.HasField("vehicle"):
        return None
    vp = entity.vehicle
    if not vp.HasField("position"):
        return None
    position = vp.position
    if not (position.HasField("latitude") and position.HasField("longitude")):
        return None
    lat, lon = position.latitude, position.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)) or not has_fix(lat, lon):
        return None

    # unset string fields read as "", so the fallback chain skips them
    vehicle_id = _first(vp.vehicle.id, vp.vehicle.label, entity.id, default="")
    if not vehicle_id:
        return None

    direction_id = None
    if vp.HasField("trip") and vp.trip.HasField("direction_id"):
        direction_id = vp.trip.direction_id
    return NormalizedVehicle(
        lat=lat,
        lon=lon,
        route_label=route_token,
        vehicle_id=vehicle_id,
        direction=SUBWAY_DIRECTIONS[0] if direction_id == 0 else SUBWAY_DIRECTIONS[1],
        destination=vp.stop_id or UNKNOWN,
        delay_minutes=0,
        service=SUBWAY_SERVICE,
    )
