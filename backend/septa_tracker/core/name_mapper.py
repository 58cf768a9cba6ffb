"""Translate regional rail line names between our naming and TrainView's."""

from septa_tracker.core.route_tables import RouteTables, get_route_tables


def to_upstream_name(app_name: str, tables: RouteTables | None = None) -> str:
    """e.g. 'Norristown' -> 'Manayunk/Norristown'. Unmapped names pass through."""
    tables = tables or get_route_tables()
    return tables.rail_to_upstream.get(app_name, app_name)


def to_app_name(upstream_name: str, tables: RouteTables | None = None) -> str:
    """e.g. 'Airport' -> 'Airport Line'. Unmapped names pass through."""
    tables = tables or get_route_tables()
    return tables.upstream_to_rail.get(upstream_name, upstream_name)
