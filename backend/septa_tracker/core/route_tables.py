"""Static route tables: regional rail names, subway codes, trolley prefix.

The tables live in ``data/route_tables.json`` and are validated on load so
the app-name <-> upstream-name maps are guaranteed to be exact inverses.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

import orjson
from pydantic import BaseModel, ValidationError, field_validator

from septa_tracker.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).resolve().parent.parent / "data" / "route_tables.json"


class RouteTableError(Exception):
    """Raised when a route table file is unreadable or inconsistent."""


class _RailLineEntry(BaseModel):
    name: str
    upstream: str

    @field_validator("name", "upstream")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("rail line names must not be blank")
        return value


class _SubwayLineEntry(BaseModel):
    code: str
    name: str = ""

    @field_validator("code")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("subway line codes must not be blank")
        return value


class _RouteTablesFile(BaseModel):
    trolley_prefix: str = "T"
    subway_lines: list[_SubwayLineEntry] = []
    rail_lines: list[_RailLineEntry] = []


@dataclass(frozen=True)
class RouteTables:
    trolley_prefix: str
    rail_to_upstream: dict[str, str]
    upstream_to_rail: dict[str, str]
    subway_lines: dict[str, str]  # code -> display name
    rail_lines: tuple[str, ...] = field(default=())

    def is_rail(self, token: str) -> bool:
        return token in self.rail_to_upstream

    def is_subway(self, token: str) -> bool:
        return token in self.subway_lines


def build_route_tables(raw: dict) -> RouteTables:
    """Validate decoded table data and build forward/reverse lookups."""
    try:
        parsed = _RouteTablesFile.model_validate(raw)
    except ValidationError as e:
        raise RouteTableError(f"Invalid route table: {e}") from e

    if len(parsed.trolley_prefix) != 1:
        raise RouteTableError(f"Trolley prefix must be a single character, got {parsed.trolley_prefix!r}")

    forward: dict[str, str] = {}
    reverse: dict[str, str] = {}
    for entry in parsed.rail_lines:
        if entry.name in forward:
            raise RouteTableError(f"Duplicate rail line name: {entry.name!r}")
        if entry.upstream in reverse:
            raise RouteTableError(
                f"Upstream name {entry.upstream!r} is mapped from both "
                f"{reverse[entry.upstream]!r} and {entry.name!r}"
            )
        forward[entry.name] = entry.upstream
        reverse[entry.upstream] = entry.name

    subway: dict[str, str] = {}
    for line in parsed.subway_lines:
        if line.code in subway:
            raise RouteTableError(f"Duplicate subway line code: {line.code!r}")
        if line.code in forward:
            raise RouteTableError(f"{line.code!r} is listed as both rail and subway")
        subway[line.code] = line.name

    return RouteTables(
        trolley_prefix=parsed.trolley_prefix,
        rail_to_upstream=forward,
        upstream_to_rail=reverse,
        subway_lines=subway,
        rail_lines=tuple(forward),
    )


def load_route_tables(path: str | Path | None = None) -> RouteTables:
    """Read and validate a route table file (defaults to the packaged one)."""
    table_path = Path(path) if path else DEFAULT_TABLES_PATH
    try:
        raw = orjson.loads(table_path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        raise RouteTableError(f"Cannot read route table {table_path}: {e}") from e
    if not isinstance(raw, dict):
        raise RouteTableError(f"Route table {table_path} must be a JSON object")

    tables = build_route_tables(raw)
    logger.info(
        "Loaded route tables from %s: %d rail lines, %d subway lines",
        table_path, len(tables.rail_to_upstream), len(tables.subway_lines),
    )
    return tables


@lru_cache(maxsize=1)
def get_route_tables() -> RouteTables:
    return load_route_tables(settings.route_tables_path)
