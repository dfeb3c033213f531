# Auto-layout engine tests - ASCII only
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from constants import ZONE_COLORS, MECHANICAL_ZONE_COLOR, DEFAULT_GRID_SIZE, DEFAULT_LAYOUT_OPTIONS
from hydronic_model import (
    HydronicComponent, Port, Pipe, Connection, Zone, LayoutOptions, SystemDocument,
)
from pipe_routing import is_orthogonal
from auto_layout import auto_layout_system, apply_layout, calculate_zone_bounds, LayoutResult


def comp(cid, ctype, name, x=0.0, y=0.0):
    return HydronicComponent(id=cid, type=ctype, name=name, x=x, y=y,
                             ports=[Port("supply", "supply"), Port("return", "return")])


def chain_system():
    comps = {c.id: c for c in (
        comp("boiler", "boiler_gas", "Boiler"),
        comp("pump", "pump_variable", "Pump"),
        comp("sep", "air_separator", "Separator"),
        comp("north", "baseboard", "North hall"),
        comp("south", "baseboard", "South den"),
    )}
    conns = [
        Connection("c1", "p1", "boiler", "supply", "pump", "inlet"),
        Connection("c2", "p2", "pump", "outlet", "sep", "left"),
        Connection("c3", "p3", "sep", "right", "north", "supply"),
        Connection("c4", "p4", "sep", "right", "south", "supply"),
        Connection("c5", "p5", "north", "return", "boiler", "return"),
    ]
    pipes = {f"p{i}": Pipe(id=f"p{i}", role="return" if i == 5 else "supply") for i in range(1, 6)}
    zones = [Zone("zn", "North", 800), Zone("zs", "South", 800)]
    return comps, pipes, conns, zones


# ── 1. Basic placement ──

def test_every_component_gets_a_grid_aligned_position():
    comps, pipes, conns, zones = chain_system()
    result = auto_layout_system(comps, pipes, conns, zones)
    assert set(result.component_positions) == set(comps)
    for x, y in result.component_positions.values():
        assert x % DEFAULT_GRID_SIZE == 0
        assert y % DEFAULT_GRID_SIZE == 0


def test_left_to_right_follows_flow():
    comps, pipes, conns, zones = chain_system()
    pos = auto_layout_system(comps, pipes, conns, zones).component_positions
    assert pos["boiler"][0] < pos["pump"][0] < pos["sep"][0] < pos["north"][0]
    assert pos["north"][0] == pos["south"][0]


def test_top_to_bottom_follows_flow():
    comps, pipes, conns, zones = chain_system()
    pos = auto_layout_system(comps, pipes, conns, zones, LayoutOptions(direction="TB")).component_positions
    assert pos["boiler"][1] < pos["pump"][1] < pos["sep"][1] < pos["north"][1]


def test_locked_component_keeps_exact_position():
    comps, pipes, conns, zones = chain_system()
    comps["pump"].x, comps["pump"].y = 123.4, 457.9
    result = auto_layout_system(comps, pipes, conns, zones,
                                LayoutOptions(locked_component_ids={"pump"}))
    assert result.component_positions["pump"] == (123.4, 457.9)


def test_layout_does_not_mutate_input():
    comps, pipes, conns, zones = chain_system()
    auto_layout_system(comps, pipes, conns, zones)
    assert all(c.position == (0.0, 0.0) for c in comps.values())
    assert all(p.waypoints == [] for p in pipes.values())


def test_layout_options_defaults_match_constants():
    options = LayoutOptions()
    for key, value in DEFAULT_LAYOUT_OPTIONS.items():
        assert getattr(options, key) == value
    assert options.locked_component_ids == set()


# ── 2. Degenerate input ──

def test_empty_system():
    result = auto_layout_system({}, {}, [], [])
    assert result == LayoutResult()


def test_dangling_and_self_connections_are_skipped():
    comps, pipes, conns, zones = chain_system()
    conns = conns + [
        Connection("c8", "p8", "ghost", "x", "boiler", "return"),
        Connection("c9", "p9", "sep", "left", "sep", "right"),
    ]
    result = auto_layout_system(comps, pipes, conns, zones)
    assert set(result.component_positions) == set(comps)


def test_long_chain_with_closing_loop_is_placed():
    n = 1200
    comps = {f"v{i}": comp(f"v{i}", "check_valve", f"CV {i}") for i in range(n)}
    conns = [Connection(f"c{i}", f"p{i}", f"v{i}", "outlet", f"v{i + 1}", "inlet") for i in range(n - 1)]
    conns.append(Connection("close", "p-close", f"v{n - 1}", "outlet", "v0", "inlet"))
    pos = auto_layout_system(comps, {}, conns, []).component_positions
    assert len(pos) == n
    assert pos["v0"][0] < pos["v1"][0] < pos[f"v{n - 1}"][0]


def test_disconnected_components_still_placed():
    comps = {"a": comp("a", "baseboard", "A"), "b": comp("b", "panel_radiator", "B")}
    result = auto_layout_system(comps, {}, [], [Zone("z", "Zone", 100)])
    assert set(result.component_positions) == {"a", "b"}
    assert result.component_positions["a"] != result.component_positions["b"]


# ── 3. Zone bounds ──

def test_zone_bounds_order_and_colors():
    comps, pipes, conns, zones = chain_system()
    bounds = auto_layout_system(comps, pipes, conns, zones).zone_bounds
    assert [b.zone_id for b in bounds] == ["zn", "zs", "mechanical"]
    assert bounds[0].color == ZONE_COLORS[0]
    assert bounds[1].color == ZONE_COLORS[1]
    assert bounds[-1].color == MECHANICAL_ZONE_COLOR


def test_zone_bands_do_not_overlap():
    comps, pipes, conns, zones = chain_system()
    bounds = {b.zone_id: b for b in auto_layout_system(comps, pipes, conns, zones).zone_bounds}
    north, south = bounds["zn"], bounds["zs"]
    assert north.y + north.height <= south.y


def test_calculate_zone_bounds_padding_and_skipped_zone():
    comps = {
        "a": comp("a", "baseboard", "A"),
        "b": comp("b", "baseboard", "B"),
        "c": comp("c", "baseboard", "C"),
    }
    positions = {"a": (100, 100), "b": (300, 200), "c": (0, 0)}
    zone_map = {"a": "z1", "b": "z1", "c": "z3"}
    zones = [Zone("z1", "One", 1), Zone("z2", "Two", 1), Zone("z3", "Three", 1)]
    bounds = calculate_zone_bounds(comps, positions, zone_map, zones, padding=40)
    assert [b.zone_id for b in bounds] == ["z1", "z3"]
    first = bounds[0]
    assert (first.x, first.y, first.width, first.height) == (60, 60, 340, 240)
    assert bounds[1].color == ZONE_COLORS[1]


# ── 4. Re-routed pipes ──

def test_layout_reroutes_pipes_orthogonally():
    comps, pipes, conns, zones = chain_system()
    result = auto_layout_system(comps, pipes, conns, zones)
    assert set(result.pipe_waypoints) == set(pipes)
    for path in result.pipe_waypoints.values():
        assert len(path) >= 2
        assert is_orthogonal(path)


def test_apply_layout_returns_new_document():
    comps, pipes, conns, zones = chain_system()
    doc = SystemDocument(zones=zones, components=comps, pipes=pipes, connections=conns)
    result = auto_layout_system(comps, pipes, conns, zones)
    laid_out = apply_layout(doc, result)
    for cid, c in laid_out.components.items():
        assert c.position == result.component_positions[cid]
    assert laid_out.pipes["p1"].waypoints == result.pipe_waypoints["p1"]
    assert doc.components["boiler"].position == (0.0, 0.0)
