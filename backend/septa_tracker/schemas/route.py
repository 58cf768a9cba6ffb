from pydantic import BaseModel

from septa_tracker.core.route_classifier import RouteMode


class RailLineInfo(BaseModel):
    name: str
    upstream_name: str


class SubwayLineInfo(BaseModel):
    code: str
    name: str


class RouteLines(BaseModel):
    trolley_prefix: str
    rail_lines: list[RailLineInfo] = []
    subway_lines: list[SubwayLineInfo] = []


class ClassifiedRoute(BaseModel):
    route: str
    mode: RouteMode
    upstream_name: str | None = None  # TrainView line name, rail only
