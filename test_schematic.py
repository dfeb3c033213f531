# Schematic figure tests - ASCII only
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hydronic_model import ComponentSimState, SystemDocument
from auto_layout import ZoneBounds
from schematic import build_schematic_figure, PIPE_COLORS, STATUS_COLORS
from templates import get_template


def test_figure_has_pipe_and_component_traces():
    doc = get_template("single-zone-baseboard").to_document()
    fig = build_schematic_figure(doc)
    names = [t.name for t in fig.data]
    assert names.count("components") == 1
    assert len(fig.data) == len(doc.pipes) + 1
    assert fig.layout.yaxis.autorange == "reversed"
    assert len(fig.layout.shapes) == len(doc.components)


def test_pipe_colors_and_single_legend_entry_per_role():
    doc = get_template("two-zone-valves").to_document()
    fig = build_schematic_figure(doc)
    pipes = [t for t in fig.data if t.name in PIPE_COLORS]
    assert {t.line.color for t in pipes} == set(PIPE_COLORS.values())
    shown = [t.name for t in pipes if t.showlegend]
    assert sorted(shown) == ["return", "supply"]


def test_component_marker_colors_follow_status():
    doc = get_template("radiant-single").to_document()
    states = {"rf-boiler": ComponentSimState(status="firing"),
              "rf-pump": ComponentSimState(status="running")}
    fig = build_schematic_figure(doc, states=states)
    markers = next(t for t in fig.data if t.name == "components")
    by_name = dict(zip(markers.text, markers.marker.color))
    assert by_name["Condensing Boiler"] == STATUS_COLORS["firing"]
    assert by_name["Primary Pump"] == STATUS_COLORS["running"]
    assert by_name["Main Floor Radiant"] == STATUS_COLORS["off"]


def test_zone_boxes_and_labels():
    bounds = [ZoneBounds("z1", "Main", 0, 0, 200, 100, "rgba(0,0,255,0.1)")]
    fig = build_schematic_figure(SystemDocument(), zone_bounds=bounds)
    assert len(fig.data) == 0
    assert len(fig.layout.shapes) == 1
    assert fig.layout.annotations[0].text == "Main"
