# Data model / input validation tests - ASCII only
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hydronic_model import (
    BuildingConfig, InsulationValues, WindowDoorConfig, InfiltrationConfig, SimulationSettings,
    ValidationError, validate_building_inputs, validate_time_scale, with_settings,
    remove_component, building_from_dict, zone_from_dict, component_from_dict,
    pipe_from_dict, port_from_dict, connection_from_dict,
)
from templates import get_template


# ── 1. Building validation ──

def test_default_building_is_valid():
    validate_building_inputs(BuildingConfig())


@pytest.mark.parametrize("building", [
    BuildingConfig(total_sq_ft=0),
    BuildingConfig(total_sq_ft=200000),
    BuildingConfig(floors=0),
    BuildingConfig(floors=11),
    BuildingConfig(floors=2.5),
    BuildingConfig(ceiling_height=0),
    BuildingConfig(foundation_type="stilts"),
    BuildingConfig(insulation=InsulationValues(walls=-1)),
    BuildingConfig(window_door=WindowDoorConfig(total_window_area=-5)),
    BuildingConfig(window_door=WindowDoorConfig(exterior_door_count=-1)),
    BuildingConfig(window_door=WindowDoorConfig(window_u_value=-0.1)),
    BuildingConfig(infiltration=InfiltrationConfig(ach=-0.2)),
])
def test_invalid_building_raises(building):
    with pytest.raises(ValidationError):
        validate_building_inputs(building)


def test_time_scale_validation():
    for scale in (1, 10, 60, 3600):
        validate_time_scale(scale)
    with pytest.raises(ValidationError):
        validate_time_scale(5)


# ── 2. dict converters ──

def test_building_from_dict_nested():
    building = building_from_dict({
        "total_sq_ft": 1800, "floors": 2, "ceiling_height": 8,
        "climate": {"design_outdoor_temp": -10},
        "infiltration": {"ach": 0.3, "blower_door_cfm50": 900},
    })
    assert building.climate.design_outdoor_temp == -10
    assert building.climate.indoor_design_temp == 70
    assert building.infiltration.blower_door_cfm50 == 900
    with pytest.raises(ValidationError):
        building_from_dict({"floors": 1, "ceiling_height": 8})
    with pytest.raises(ValidationError):
        building_from_dict({"total_sq_ft": 1, "floors": 1, "ceiling_height": 8,
                            "foundation_type": "raft"})


def test_component_from_dict():
    comp = component_from_dict({
        "id": "b", "type": "boiler_gas", "position": {"x": 10, "y": 20},
        "ports": [{"id": "supply", "role": "supply", "offset": [15, 0]}],
    })
    assert comp.position == (10.0, 20.0)
    assert comp.name == "boiler_gas"
    assert comp.ports[0].offset == (15, 0)
    with pytest.raises(ValidationError):
        component_from_dict({"id": "x", "type": "toaster"})
    with pytest.raises(ValidationError):
        component_from_dict({"type": "boiler_gas"})


def test_port_zone_pipe_connection_rejections():
    with pytest.raises(ValidationError):
        port_from_dict({"id": "p", "role": "sideways"})
    with pytest.raises(ValidationError):
        zone_from_dict({"id": "z", "name": "Z", "sq_ft": 10, "emitter_type": "fireplace"})
    with pytest.raises(ValidationError):
        pipe_from_dict({"id": "p", "material": "lead"})
    with pytest.raises(ValidationError):
        pipe_from_dict({"id": "p", "size": "3"})
    with pytest.raises(ValidationError):
        pipe_from_dict({"id": "p", "role": "bypass"})
    with pytest.raises(ValidationError):
        connection_from_dict({"id": "c", "pipe_id": "p"})


def test_pipe_from_dict_defaults():
    pipe = pipe_from_dict({"id": "p", "waypoints": [[0, 0], [0, 20]]})
    assert pipe.material == "copper" and pipe.size == "3/4" and pipe.role == "supply"
    assert pipe.waypoints == [(0, 0), (0, 20)]


# ── 3. Immutable edits ──

def test_with_settings_copies():
    base = SimulationSettings()
    changed = with_settings(base, running=True, outdoor_temp=5.0)
    assert changed.running and changed.outdoor_temp == 5.0
    assert base.running is False


def test_remove_component_cascades():
    doc = get_template("single-zone-baseboard").to_document()
    trimmed = remove_component(doc, "sz-pump")
    assert "sz-pump" not in trimmed.components
    assert all("sz-pump" not in (c.from_component_id, c.to_component_id)
               for c in trimmed.connections)
    assert set(trimmed.pipes) == {"sz-pipe-3"}
    assert len(doc.pipes) == 3
    assert "sz-pump" in doc.components


def test_remove_unknown_component_is_noop():
    doc = get_template("radiant-single").to_document()
    same = remove_component(doc, "ghost")
    assert same.components == doc.components
    assert same.pipes == doc.pipes
    assert same.connections == doc.connections
