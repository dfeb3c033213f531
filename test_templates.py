# System template tests - ASCII only
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pipe_routing import is_orthogonal
from simulation import run_simulation_tick
from templates import TEMPLATE_IDS, get_template, list_templates, demo_simulation_settings


# ── 1. Catalogue ──

def test_list_templates():
    listed = list_templates()
    assert [t["id"] for t in listed] == TEMPLATE_IDS
    assert len(listed) == 5
    assert all(t["name"] and t["description"] for t in listed)


def test_unknown_template_is_none():
    assert get_template("no-such-template") is None


def test_get_template_returns_fresh_objects():
    first = get_template("single-zone-baseboard")
    second = get_template("single-zone-baseboard")
    assert first == second
    first.components["sz-boiler"].x = 999
    assert second.components["sz-boiler"].x != 999


# ── 2. Demo house ──

def test_demo_house_contents():
    demo = get_template("demo-3-story")
    assert [z.id for z in demo.zones] == ["demo-zone-1", "demo-zone-2", "demo-zone-3"]
    baseboards = [c for c in demo.components.values() if c.type == "baseboard"]
    assert len(baseboards) == 18
    assert len(demo.pipes) == 44
    assert len(demo.connections) == 44
    assert demo.building.floors == 3


def test_template_pipes_are_orthogonal_and_connected():
    for template_id in TEMPLATE_IDS:
        doc = get_template(template_id).to_document()
        pipe_ids = {c.pipe_id for c in doc.connections}
        assert pipe_ids == set(doc.pipes)
        for pipe in doc.pipes.values():
            assert len(pipe.waypoints) >= 2
            assert is_orthogonal(pipe.waypoints)
        for conn in doc.connections:
            assert conn.from_component_id in doc.components
            assert conn.to_component_id in doc.components


def test_empty_template():
    empty = get_template("empty")
    assert empty.zones == [] and empty.components == {} and empty.pipes == {}
    assert empty.building.foundation_type == "basement"


def test_demo_simulation_fires_boiler():
    settings = demo_simulation_settings()
    assert settings.running and settings.outdoor_temp == 20.0
    doc = get_template("demo-3-story").to_document()
    states = run_simulation_tick(doc.building, doc.zones, doc.components, doc.connections,
                                 settings.outdoor_temp)
    assert states["demo-boiler"].status == "firing"
    assert states["demo-primary-pump"].status == "running"
    assert states["demo-boiler"].flow_gpm > 0
