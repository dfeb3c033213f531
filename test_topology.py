# Topology / zone classification tests - ASCII only
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hydronic_model import HydronicComponent, Connection, Zone
from topology import build_adjacency, classify_zones, group_by_zone


def comp(cid, ctype, name):
    return HydronicComponent(id=cid, type=ctype, name=name)


def conn(cid, a, b):
    return Connection(id=cid, pipe_id=f"p-{cid}", from_component_id=a, from_port_id="x",
                      to_component_id=b, to_port_id="y")


# ── 1. Adjacency ──

def test_adjacency_is_undirected_and_deduplicated():
    comps = {c.id: c for c in (comp("a", "boiler_gas", "A"), comp("b", "pump_variable", "B"),
                               comp("c", "baseboard", "C"))}
    conns = [conn("1", "a", "b"), conn("2", "b", "a"), conn("3", "b", "c")]
    adj = build_adjacency(comps, conns)
    assert adj["a"] == ["b"]
    assert adj["b"] == ["a", "c"]
    assert adj["c"] == ["b"]


def test_adjacency_skips_dangling_connections():
    comps = {"a": comp("a", "boiler_gas", "A")}
    adj = build_adjacency(comps, [conn("1", "a", "ghost")])
    assert adj == {}


# ── 2. Zone classification ──

def test_mechanical_types_go_to_mechanical_zone():
    comps = {c.id: c for c in (comp("b", "boiler_gas", "Boiler Floor 2"),
                               comp("p", "pump_variable", "Pump"),
                               comp("t", "expansion_tank", "Tank"))}
    zones = [Zone("z2", "Floor 2", 1000)]
    zone_map = classify_zones(comps, [], zones)
    assert set(zone_map.values()) == {"mechanical"}


def test_floor_keyword_matching():
    comps = {c.id: c for c in (comp("r1", "baseboard", "2F Office"),
                               comp("r2", "baseboard", "3F Bath"),
                               comp("g", "radiant_floor", "Garage slab"))}
    zones = [Zone("z1", "Floor 1 - Garage", 500), Zone("z2", "Floor 2 - Main", 1000),
             Zone("z3", "Floor 3 - Beds", 1000)]
    zone_map = classify_zones(comps, [], zones)
    assert zone_map == {"r1": "z2", "r2": "z3", "g": "z1"}


def test_zone_id_and_first_word_matching():
    comps = {c.id: c for c in (comp("r1", "panel_radiator", "kitchen-zone rad"),
                               comp("r2", "panel_radiator", "Upstairs hall"))}
    zones = [Zone("kitchen-zone", "Downstairs", 800), Zone("z9", "Upstairs Rooms", 800)]
    zone_map = classify_zones(comps, [], zones)
    assert zone_map["r1"] == "kitchen-zone"
    assert zone_map["r2"] == "z9"


def test_unmatched_emitter_falls_back_to_first_zone():
    comps = {"r": comp("r", "baseboard", "Mystery Radiator")}
    zones = [Zone("za", "North", 500), Zone("zb", "South", 500)]
    assert classify_zones(comps, [], zones)["r"] == "za"


def test_zone_valve_takes_zone_of_classified_neighbor():
    comps = {c.id: c for c in (comp("r", "baseboard", "South bedroom"),
                               comp("v", "zone_valve_2way", "North valve"))}
    zones = [Zone("zn", "North", 500), Zone("zs", "South", 500)]
    zone_map = classify_zones(comps, [conn("1", "v", "r")], zones)
    assert zone_map["r"] == "zs"
    assert zone_map["v"] == "zs"


def test_zone_valve_ignores_mechanical_neighbor():
    comps = {c.id: c for c in (comp("s", "air_separator", "Sep"),
                               comp("v", "zone_valve_2way", "North valve"))}
    zones = [Zone("zn", "North", 500)]
    zone_map = classify_zones(comps, [conn("1", "s", "v")], zones)
    assert zone_map["v"] == "zn"


def test_leftovers_inherit_neighbor_zone_or_mechanical():
    comps = {c.id: c for c in (comp("r", "baseboard", "South bedroom"),
                               comp("bv", "balancing_valve", "BV"),
                               comp("lonely", "check_valve", "CV"))}
    zones = [Zone("zn", "North", 500), Zone("zs", "South", 500)]
    zone_map = classify_zones(comps, [conn("1", "bv", "r")], zones)
    assert zone_map["bv"] == "zs"
    assert zone_map["lonely"] == "mechanical"


def test_every_component_is_classified_with_no_zones():
    comps = {c.id: c for c in (comp("r", "baseboard", "Rad"), comp("v", "zone_valve_2way", "ZV"))}
    zone_map = classify_zones(comps, [], [])
    assert zone_map == {"r": "mechanical", "v": "mechanical"}


def test_group_by_zone_keeps_order():
    groups = group_by_zone({"a": "z1", "b": "mechanical", "c": "z1"})
    assert groups == {"z1": ["a", "c"], "mechanical": ["b"]}
