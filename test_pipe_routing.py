# Port geometry / orthogonal routing tests - ASCII only
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hydronic_model import HydronicComponent, Port, Pipe, Connection
from pipe_routing import (
    baseboard_width, component_dimensions, port_offset, absolute_port_position,
    snap_to_grid, generate_smart_orthogonal_path, is_orthogonal, polyline_length_ft, count_elbows,
    recalculate_pipe_waypoints, infer_pipe_role, create_pipe, reroute_component_pipes,
    move_component, rotate_component, flip_component, apply_waypoints,
)


def boiler(x=0.0, y=0.0, **kw):
    return HydronicComponent(
        id="boiler", type="boiler_gas", name="Boiler", x=x, y=y,
        ports=[Port("supply", "supply"), Port("return", "return")], **kw,
    )


def pump(x=200.0, y=0.0):
    return HydronicComponent(
        id="pump", type="pump_variable", name="Pump", x=x, y=y,
        ports=[Port("inlet", "return"), Port("outlet", "supply")],
    )


# ── 1. Dimensions / port offsets ──

def test_baseboard_width_is_clamped():
    def bb(ft):
        return HydronicComponent(id="b", type="baseboard", name="B", props={"lengthFt": ft})

    assert baseboard_width(bb(8)) == 120
    assert baseboard_width(bb(2)) == 60
    assert baseboard_width(bb(20)) == 200
    assert component_dimensions(bb(8)) == (120, 60)


def test_dimensions_table_and_default():
    assert component_dimensions(boiler()) == (80, 60)
    assert component_dimensions(HydronicComponent(id="x", type="trv", name="T")) == (60, 60)


def test_port_offset_priority():
    declared = HydronicComponent(id="b", type="boiler_gas", name="B",
                                 ports=[Port("supply", "supply", offset=(99, 99))])
    assert port_offset(declared, "supply") == (15, 0)

    rad = HydronicComponent(id="r", type="panel_radiator", name="R",
                            ports=[Port("return", "return", offset=(80, 30))])
    assert port_offset(rad, "return") == (80, 30)
    assert port_offset(rad, "supply") == (0, 30)
    assert port_offset(rad, "drain") == (60, 30)

    bb = HydronicComponent(id="bb", type="baseboard", name="BB", props={"lengthFt": 8})
    assert port_offset(bb, "return") == (120, 30)


def test_absolute_port_position_translate_flip_rotate():
    assert absolute_port_position(boiler(100, 200), "supply") == (115, 200)
    assert absolute_port_position(boiler(100, 200, flipped_h=True), "supply") == (85, 200)
    assert absolute_port_position(boiler(100, 200, rotation=90), "supply") == (100, 215)
    assert absolute_port_position(boiler(100, 200), "supply", position=(0, 0)) == (15, 0)


def test_flip_applies_before_rotation():
    # flip: (15, 0) -> (-15, 0); rotate 90: -> (0, -15)
    b = boiler(100, 200, flipped_h=True, rotation=90)
    assert absolute_port_position(b, "supply") == (100, 185)


# ── 2. Grid snap ──

def test_snap_to_grid_rounds_half_up():
    assert snap_to_grid(30, 20) == 40
    assert snap_to_grid(10, 20) == 20
    assert snap_to_grid(9, 20) == 0
    assert snap_to_grid(-10, 20) == 0
    assert snap_to_grid(33.3, 0) == 33.3


# ── 3. Orthogonal path ──

def test_supply_path_horizontal_first():
    path = generate_smart_orthogonal_path((0, 0), (100, 40), "supply", 20)
    assert path == [(0, 0), (60, 0), (60, 40), (100, 40)]


def test_supply_path_vertical_first():
    path = generate_smart_orthogonal_path((0, 0), (30, 100), "supply", 20)
    assert path == [(0, 0), (0, 60), (30, 60), (30, 100)]


def test_return_path_drops_to_header():
    path = generate_smart_orthogonal_path((0, 0), (100, 40), "return", 20)
    assert path == [(0, 0), (0, 100), (100, 100), (100, 40)]


def test_collinear_path_drops_duplicate_points():
    path = generate_smart_orthogonal_path((0, 0), (100, 0), "supply", 20)
    assert path == [(0, 0), (60, 0), (100, 0)]


def test_same_point_gives_two_point_path():
    for role in ("supply", "return"):
        path = generate_smart_orthogonal_path((40, 40), (40, 40), role, 20)
        assert len(path) >= 2
        assert path[0] == (40, 40) and path[-1] == (40, 40)
        assert is_orthogonal(path)


def test_paths_are_always_orthogonal():
    points = [(0, 0), (3, 7), (101, 53), (-40, 220), (17.5, -3.25), (500, 499)]
    for start in points:
        for end in points:
            if start == end:
                continue
            for role in ("supply", "return"):
                path = generate_smart_orthogonal_path(start, end, role, 20)
                assert len(path) >= 2
                assert path[0] == start and path[-1] == end
                for a, b in zip(path, path[1:]):
                    assert (a[0] == b[0]) != (a[1] == b[1])


def test_is_orthogonal_detects_diagonal():
    assert not is_orthogonal([(0, 0), (10, 10)])
    assert polyline_length_ft([(0, 0), (60, 0), (60, 40), (100, 40)]) == 7.0


# ── 4. Pipe creation / re-route ──

def test_create_pipe_supply():
    comps = {"boiler": boiler(), "pump": pump()}
    pipe, conn = create_pipe(comps, "p1", "c1", "boiler", "supply", "pump", "inlet")
    assert pipe.role == "supply"
    assert pipe.waypoints == [(15, 0), (100, 0), (100, 30), (200, 30)]
    assert pipe.fittings.elbows_90 == 2
    assert pipe.length_ft == 11.0
    assert pipe.insulation == "0.5"
    assert pipe.start_port == "boiler.supply"
    assert conn.pipe_id == "p1" and conn.to_port_id == "inlet"


def test_elbows_count_direction_changes_only():
    assert count_elbows([(0, 0), (60, 0), (100, 0)]) == 0
    assert count_elbows([(0, 0), (60, 0), (60, 40), (100, 40)]) == 2
    assert count_elbows([(0, 0), (0, 100), (100, 100), (100, 40)]) == 2
    assert count_elbows([(0, 0), (10, 0)]) == 0


def test_create_pipe_straight_run_has_no_elbows():
    comps = {"boiler": boiler(), "pump": pump(200, -30)}
    pipe, _ = create_pipe(comps, "p1", "c1", "boiler", "supply", "pump", "inlet")
    assert pipe.waypoints == [(15, 0), (100, 0), (200, 0)]
    assert pipe.fittings.elbows_90 == 0


def test_create_pipe_role_inference_and_rejections():
    comps = {"boiler": boiler(), "pump": pump()}
    assert infer_pipe_role(comps["pump"], "inlet") == "return"
    assert infer_pipe_role(comps["pump"], "nope") == "return"
    pipe, _ = create_pipe(comps, "p2", "c2", "pump", "inlet", "boiler", "return")
    assert pipe.role == "return"
    assert pipe.insulation == "none"
    assert create_pipe(comps, "p3", "c3", "boiler", "supply", "boiler", "supply") is None
    assert create_pipe(comps, "p4", "c4", "boiler", "supply", "ghost", "inlet") is None


def test_recalculate_skips_dangling():
    comps = {"boiler": boiler(), "pump": pump()}
    pipes = {"p1": Pipe(id="p1", role="supply")}
    conns = [
        Connection("c1", "p1", "boiler", "supply", "pump", "inlet"),
        Connection("c2", "missing-pipe", "boiler", "return", "pump", "outlet"),
        Connection("c3", "p1", "boiler", "return", "ghost", "inlet"),
    ]
    result = recalculate_pipe_waypoints(comps, pipes, conns, {"pump": (400, 0)})
    assert list(result) == ["p1"]
    assert result["p1"][-1] == (400, 30)


def test_reroute_component_snaps_new_position():
    comps = {"boiler": boiler(), "pump": pump()}
    pipes = {"p1": Pipe(id="p1", role="supply")}
    conns = [Connection("c1", "p1", "boiler", "supply", "pump", "inlet")]
    result = reroute_component_pipes(comps, pipes, conns, "pump", (301, 9))
    assert result["p1"][-1] == (300, 30)


def test_component_edits_return_copies():
    b = boiler(0, 0)
    moved = move_component(b, (31, 49))
    assert moved.position == (40, 40)
    assert b.position == (0, 0)
    assert rotate_component(rotate_component(b, 270), 180).rotation == 90
    assert flip_component(flip_component(b, "h"), "h").flipped_h is False
    assert flip_component(b, "v").flipped_v is True


def test_apply_waypoints_keeps_untouched_pipes():
    pipes = {"a": Pipe(id="a"), "b": Pipe(id="b", waypoints=[(0, 0), (0, 5)])}
    updated = apply_waypoints(pipes, {"a": [(1, 1), (1, 9)]})
    assert list(updated) == ["a", "b"]
    assert updated["a"].waypoints == [(1, 1), (1, 9)]
    assert updated["b"] is pipes["b"]
    assert pipes["a"].waypoints == []
