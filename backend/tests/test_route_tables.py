"""Tests for the route table loader."""

import orjson
import pytest

from septa_tracker.core.route_tables import (
    RouteTableError,
    build_route_tables,
    get_route_tables,
    load_route_tables,
)


def test_default_tables_loaded():
    tables = load_route_tables()
    assert len(tables.rail_to_upstream) == 13
    assert tables.trolley_prefix == "T"
    assert set(tables.subway_lines) == {"BSL", "MFL"}
    assert tables.rail_to_upstream["Norristown"] == "Manayunk/Norristown"
    assert tables.rail_to_upstream["Airport Line"] == "Airport"


def test_reverse_table_is_exact_inverse():
    tables = get_route_tables()
    assert len(tables.upstream_to_rail) == len(tables.rail_to_upstream)
    for name, upstream in tables.rail_to_upstream.items():
        assert tables.upstream_to_rail[upstream] == name
    for upstream, name in tables.upstream_to_rail.items():
        assert tables.rail_to_upstream[name] == upstream


def test_duplicate_upstream_name_rejected():
    raw = {
        "rail_lines": [
            {"name": "Trenton", "upstream": "Trenton"},
            {"name": "Trenton Express", "upstream": "Trenton"},
        ],
    }
    with pytest.raises(RouteTableError, match="Trenton"):
        build_route_tables(raw)


def test_duplicate_app_name_rejected():
    raw = {
        "rail_lines": [
            {"name": "Cynwyd", "upstream": "Cynwyd"},
            {"name": "Cynwyd", "upstream": "Bala Cynwyd"},
        ],
    }
    with pytest.raises(RouteTableError):
        build_route_tables(raw)


def test_blank_name_rejected():
    with pytest.raises(RouteTableError):
        build_route_tables({"rail_lines": [{"name": " ", "upstream": "Airport"}]})


def test_line_cannot_be_both_rail_and_subway():
    raw = {
        "rail_lines": [{"name": "BSL", "upstream": "BSL"}],
        "subway_lines": [{"code": "BSL"}],
    }
    with pytest.raises(RouteTableError):
        build_route_tables(raw)


def test_trolley_prefix_must_be_single_character():
    with pytest.raises(RouteTableError):
        build_route_tables({"trolley_prefix": "TR"})


def test_load_custom_file(tmp_path):
    path = tmp_path / "tables.json"
    path.write_bytes(orjson.dumps({
        "trolley_prefix": "T",
        "rail_lines": [{"name": "Airport Line", "upstream": "Airport"}],
    }))
    tables = load_route_tables(path)
    assert tables.rail_lines == ("Airport Line",)
    assert tables.subway_lines == {}


def test_unreadable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(RouteTableError):
        load_route_tables(path)
    with pytest.raises(RouteTableError):
        load_route_tables(tmp_path / "missing.json")
