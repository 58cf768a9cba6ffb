"""Decide which transit mode a caller-supplied route token belongs to."""

import enum
from dataclasses import dataclass, field
from typing import Iterable

from septa_tracker.core.route_tables import RouteTables, get_route_tables


class RouteMode(str, enum.Enum):
    BUS = "bus"
    TROLLEY = "trolley"
    REGIONAL_RAIL = "rail"
    SUBWAY = "subway"


@dataclass
class RoutePartition:
    surface: list[str] = field(default_factory=list)  # bus + trolley, one bulk feed
    rail: list[str] = field(default_factory=list)
    subway: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.surface or self.rail or self.subway)


def classify(token: str, tables: RouteTables | None = None) -> RouteMode:
    """Classify a route token. Unknown tokens are treated as bus routes."""
    tables = tables or get_route_tables()
    if tables.is_rail(token):
        return RouteMode.REGIONAL_RAIL
    if tables.is_subway(token):
        return RouteMode.SUBWAY
    prefix = tables.trolley_prefix
    if token.startswith(prefix) and len(token) > len(prefix):
        return RouteMode.TROLLEY
    return RouteMode.BUS


def strip_trolley_prefix(token: str, tables: RouteTables | None = None) -> str:
    """Return the key a route is listed under in the bulk transit feed."""
    tables = tables or get_route_tables()
    if classify(token, tables) is RouteMode.TROLLEY:
        return token[len(tables.trolley_prefix):]
    return token


def partition(tokens: Iterable[str], tables: RouteTables | None = None) -> RoutePartition:
    """Group tokens by the feed that serves them, keeping caller order."""
    tables = tables or get_route_tables()
    groups = RoutePartition()
    for token in tokens:
        mode = classify(token, tables)
        if mode is RouteMode.REGIONAL_RAIL:
            groups.rail.append(token)
        elif mode is RouteMode.SUBWAY:
            groups.subway.append(token)
        else:
            groups.surface.append(token)
    return groups
