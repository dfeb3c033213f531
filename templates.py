# ! 온수난방 설계 시뮬레이션: 시스템 템플릿 (데모 주택 + 빠른 시작 구성)
# * 기기/존/건물은 dict 로 선언 후 hydronic_model 변환기로 생성
# * 배관은 pipe_routing.create_pipe 로 생성 (직교 경로 자동 계산)
# * get_template() 은 호출마다 새 객체를 반환

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from hydronic_model import (
    BuildingConfig, Connection, HydronicComponent, Pipe, SimulationSettings,
    SystemDocument, Zone,
    building_from_dict, component_from_dict, zone_from_dict,
)
from pipe_routing import create_pipe


@dataclass
class SystemTemplate:
    id: str
    name: str
    description: str
    building: BuildingConfig
    zones: List[Zone] = field(default_factory=list)
    components: Dict[str, HydronicComponent] = field(default_factory=dict)
    pipes: Dict[str, Pipe] = field(default_factory=dict)
    connections: List[Connection] = field(default_factory=list)

    def to_document(self) -> SystemDocument:
        return SystemDocument(
            building=self.building,
            zones=self.zones,
            components=self.components,
            pipes=self.pipes,
            connections=self.connections,
        )


# ══════════════════════════════════════════════
#  PART 1: 기기 dict 생성 헬퍼
# ══════════════════════════════════════════════

def _boiler(cid, name, pos, input_btu, min_firing=0.2, pressure_drop=3, z=1):
    return {
        "id": cid, "type": "boiler_gas", "name": name, "position": pos, "z_index": z,
        "ports": [
            {"id": "supply", "role": "supply", "offset": (15, 0)},
            {"id": "return", "role": "return", "offset": (65, 0)},
        ],
        "props": {
            "fuelType": "natural_gas", "inputBtu": input_btu, "afue": 0.95,
            "boilerType": "condensing", "minFiringRate": min_firing,
            "maxSupplyTemp": 180, "minReturnTemp": 100, "pressureDrop": pressure_drop,
            "connectionSize": "1", "controlType": "modulating",
        },
    }


def _pump(cid, name, pos, curve, z, max_gpm, watts):
    return {
        "id": cid, "type": "pump_variable", "name": name, "position": pos, "z_index": z,
        "ports": [
            {"id": "inlet", "role": "return", "offset": (0, 30)},
            {"id": "outlet", "role": "supply", "offset": (60, 30)},
        ],
        "props": {
            "pumpType": "variable_ecm",
            "curve": [{"gpm": q, "head": h} for q, h in curve],
            "maxGpm": max_gpm, "maxHead": curve[0][1], "watts": watts,
            "connectionSize": "1", "location": "supply", "control": "delta_p",
        },
    }


def _air_separator(cid, pos, z, pressure_drop=0.5):
    return {
        "id": cid, "type": "air_separator", "name": "Air Separator", "position": pos, "z_index": z,
        "ports": [
            {"id": "left", "role": "general", "offset": (0, 30)},
            {"id": "right", "role": "general", "offset": (60, 30)},
        ],
        "props": {"separatorType": "microbubble", "maxGpm": 30, "pressureDrop": pressure_drop},
    }


def _expansion_tank(cid, name, pos, z, volume_gal):
    return {
        "id": cid, "type": "expansion_tank", "name": name, "position": pos, "z_index": z,
        "ports": [{"id": "connection", "role": "general", "offset": (30, 60)}],
        "props": {"tankType": "diaphragm", "volumeGal": volume_gal, "preChargePsi": 12, "maxWorkingPsi": 60},
    }


def _zone_valve(cid, name, pos, z, inlet_role="supply", size="3/4", cv=4.0, pressure_drop=0.5):
    return {
        "id": cid, "type": "zone_valve_2way", "name": name, "position": pos, "z_index": z,
        "ports": [
            {"id": "inlet", "role": inlet_role, "offset": (0, 30)},
            {"id": "outlet", "role": "supply", "offset": (60, 30)},
        ],
        "props": {
            "valveType": "2way", "size": size, "cv": cv, "actuatorType": "motor",
            "normallyOpen": False, "voltage": 24, "pressureDrop": pressure_drop,
        },
    }


def _baseboard(cid, name, pos, length_ft, z, btu_per_ft=(600, 470, 340)):
    return {
        "id": cid, "type": "baseboard", "name": name, "position": pos, "z_index": z,
        "ports": [
            {"id": "supply", "role": "supply", "offset": (0, 30)},
            {"id": "return", "role": "return", "offset": (length_ft * 15, 30)},
        ],
        "props": {
            "lengthFt": length_ft,
            "btuPerFtAt180": btu_per_ft[0], "btuPerFtAt160": btu_per_ft[1], "btuPerFtAt140": btu_per_ft[2],
            "connectionEnd": "opposite",
        },
    }


def _radiant_floor(cid, name, pos, sq_ft, z, loops, water_temp=110):
    return {
        "id": cid, "type": "radiant_floor", "name": name, "position": pos, "z_index": z,
        "ports": [
            {"id": "supply", "role": "supply", "offset": (10, 0)},
            {"id": "return", "role": "return", "offset": (70, 60)},
        ],
        "props": {
            "zoneArea": sq_ft, "tubingType": "pex", "tubingSize": "1/2",
            "loopCount": loops, "loopLength": 200, "designWaterTemp": water_temp,
        },
    }


# ──────────────────────────────────────────────
# ? 배관 목록 → Pipe / Connection
#   (from_id, from_port, to_id, to_port, role, material, size)
# ──────────────────────────────────────────────
PipeSpec = Tuple[str, str, str, str, str, str, str]


def _build(
    template_id: str,
    name: str,
    description: str,
    building: dict,
    zones: List[dict],
    components: List[dict],
    pipe_specs: List[PipeSpec],
    prefix: str,
) -> SystemTemplate:
    comps = {c["id"]: component_from_dict(c) for c in components}
    pipes: Dict[str, Pipe] = {}
    connections: List[Connection] = []
    for n, (fid, fport, tid, tport, role, material, size) in enumerate(pipe_specs, start=1):
        created = create_pipe(
            comps, f"{prefix}-pipe-{n}", f"{prefix}-conn-{n}",
            fid, fport, tid, tport, material=material, size=size, role=role,
        )
        if created is None:
            continue
        pipe, conn = created
        pipes[pipe.id] = pipe
        connections.append(conn)
    return SystemTemplate(
        id=template_id,
        name=name,
        description=description,
        building=building_from_dict(building),
        zones=[zone_from_dict(z) for z in zones],
        components=comps,
        pipes=pipes,
        connections=connections,
    )


# ══════════════════════════════════════════════
#  PART 2: 건물 기본값
# ══════════════════════════════════════════════

def _small_home(foundation: str = "basement") -> dict:
    return {
        "climate": {"design_outdoor_temp": 5, "indoor_design_temp": 70,
                    "heating_degree_days": 5500, "climate_zone": 5},
        "total_sq_ft": 1500, "floors": 1, "ceiling_height": 8,
        "foundation_type": foundation, "construction_era": "1980-2000",
        "insulation": {"walls": 13, "ceiling": 38, "floor": 19, "basement_walls": 10},
        "window_door": {"total_window_area": 150, "window_u_value": 0.35,
                        "exterior_door_count": 2, "door_u_value": 0.50, "door_area": 20},
        "infiltration": {"ach": 0.35, "blower_door_cfm50": None},
    }


def _medium_home() -> dict:
    return {
        "climate": {"design_outdoor_temp": 0, "indoor_design_temp": 70,
                    "heating_degree_days": 6000, "climate_zone": 5},
        "total_sq_ft": 2500, "floors": 2, "ceiling_height": 9,
        "foundation_type": "basement", "construction_era": "2000+",
        "insulation": {"walls": 19, "ceiling": 49, "floor": 25, "basement_walls": 15},
        "window_door": {"total_window_area": 280, "window_u_value": 0.28,
                        "exterior_door_count": 2, "door_u_value": 0.45, "door_area": 21},
        "infiltration": {"ach": 0.25, "blower_door_cfm50": 1200},
    }


_STANDARD_CURVE = [(0, 25), (10, 22), (20, 15), (25, 10)]


# ══════════════════════════════════════════════
#  PART 3: 데모 3층 주택 (3존)
# ══════════════════════════════════════════════

def _demo_house() -> SystemTemplate:
    """
    ! 3층 주택 데모
    * 1층 차고: 바닥 복사 4루프
    * 2층: 패널 방열기 9개 (사무실, 거실, 주방, 식당, 현관)
    * 3층: 패널 방열기 9개 (침실 4, 안방, 사무실, 욕실)
    """
    x_mech, y_mech = 60, 300
    x_zones = 500
    y_zone1, y_z2r1, y_z2r2, y_z3r1, y_z3r2 = 480, 60, 160, 640, 740
    spacing = 150
    rad_btu = (700, 550, 400)

    components = [
        _boiler("demo-boiler", "Gas Boiler 150k BTU", (x_mech, y_mech), 150000,
                min_firing=0.15, pressure_drop=5),
        _pump("demo-primary-pump", "Variable Speed Pump", (x_mech + 140, y_mech - 100),
              [(0, 25), (8, 22), (15, 18), (22, 12), (28, 0)], z=2, max_gpm=28, watts=120),
        _air_separator("demo-air-separator", (x_mech + 260, y_mech - 100), z=3),
        _expansion_tank("demo-expansion-tank", "Exp. Tank 8 gal", (x_mech + 260, y_mech - 200), z=4, volume_gal=8),
        _zone_valve("demo-zone1-valve", "Zone 1 Valve (Garage)", (x_zones - 60, y_zone1), z=5,
                    inlet_role="return", pressure_drop=1.2),
        _zone_valve("demo-zone2-valve", "Zone 2 Valve (Floor 2)", (x_zones - 60, y_z2r1 + 30), z=6,
                    inlet_role="return", size="1", cv=6.0, pressure_drop=1.5),
        _zone_valve("demo-zone3-valve", "Zone 3 Valve (Floor 3)", (x_zones - 60, y_z3r1 + 30), z=7,
                    inlet_role="return", size="1", cv=6.0, pressure_drop=1.5),
        _radiant_floor("demo-radiant-garage", "Garage Radiant (4 loops)", (x_zones + 60, y_zone1 - 10),
                       800, z=10, loops=4),
    ]

    floor2 = [
        [("office", "2F Office", 5), ("living1", "2F Living 1", 6), ("living2", "2F Living 2", 6),
         ("kitchen1", "2F Kitchen 1", 5), ("kitchen2", "2F Kitchen 2", 5)],
        [("dining1", "2F Dining 1", 5), ("dining2", "2F Dining 2", 5),
         ("foyer1", "2F Foyer 1", 4), ("foyer2", "2F Foyer 2", 4)],
    ]
    floor3 = [
        [("bed1", "3F Bedroom 1", 5), ("bed2", "3F Bedroom 2", 5), ("bed3", "3F Bedroom 3", 4),
         ("bed4", "3F Bedroom 4", 4), ("master1", "3F Master 1", 6)],
        [("master2", "3F Master 2", 6), ("office", "3F Office", 5),
         ("bath1", "3F Bath 1", 3), ("bath2", "3F Bath 2", 3)],
    ]

    z = 20
    rows_by_floor = {}
    for floor, rows, ys in ((2, floor2, (y_z2r1, y_z2r2)), (3, floor3, (y_z3r1, y_z3r2))):
        ids_rows = []
        for row, y in zip(rows, ys):
            ids = []
            for i, (key, name, length) in enumerate(row):
                cid = f"demo-rad-{floor}-{key}"
                components.append(_baseboard(cid, name, (x_zones + spacing * i, y), length, z, rad_btu))
                ids.append(cid)
                z += 1
            ids_rows.append(ids)
        rows_by_floor[floor] = ids_rows
        z = 30

    specs: List[PipeSpec] = [
        ("demo-boiler", "supply", "demo-primary-pump", "inlet", "supply", "copper", "1"),
        ("demo-primary-pump", "outlet", "demo-air-separator", "left", "supply", "copper", "1"),
        ("demo-air-separator", "left", "demo-expansion-tank", "connection", "supply", "copper", "3/4"),
        ("demo-air-separator", "right", "demo-zone1-valve", "inlet", "supply", "copper", "3/4"),
        ("demo-zone1-valve", "outlet", "demo-radiant-garage", "supply", "supply", "pex", "1/2"),
        ("demo-radiant-garage", "return", "demo-boiler", "return", "return", "pex", "1/2"),
    ]
    for floor in (2, 3):
        row1, row2 = rows_by_floor[floor]
        specs.append(("demo-air-separator", "right", f"demo-zone{floor}-valve", "inlet", "supply", "copper", "1"))
        specs.append((f"demo-zone{floor}-valve", "outlet", row1[0], "supply", "supply", "copper", "3/4"))
        for prev, cur in zip(row1, row1[1:]):
            specs.append((prev, "supply", cur, "supply", "supply", "copper", "3/4"))
        for i, cur in enumerate(row2):
            specs.append((row1[min(i, len(row1) - 1)], "supply", cur, "supply", "supply", "copper", "3/4"))
        all_rads = row1 + row2
        for i, rad in enumerate(all_rads):
            target = ("demo-boiler", "return") if i == 0 else (all_rads[0], "return")
            specs.append((rad, "return", target[0], target[1], "return", "copper", "3/4"))

    building = {
        "climate": {"design_outdoor_temp": -5, "indoor_design_temp": 70,
                    "heating_degree_days": 6500, "climate_zone": 5},
        "total_sq_ft": 4200, "floors": 3, "ceiling_height": 9,
        "foundation_type": "slab", "construction_era": "2000+",
        "insulation": {"walls": 21, "ceiling": 49, "floor": 30, "basement_walls": 15},
        "window_door": {"total_window_area": 380, "window_u_value": 0.25,
                        "exterior_door_count": 3, "door_u_value": 0.40, "door_area": 21},
        "infiltration": {"ach": 0.20, "blower_door_cfm50": 1000},
    }
    zones = [
        {"id": "demo-zone-1", "name": "Floor 1 - Garage (Radiant)", "sq_ft": 800,
         "design_water_temp": 110, "emitter_type": "radiant_floor", "priority": 3},
        {"id": "demo-zone-2", "name": "Floor 2 - Main Living", "sq_ft": 1800,
         "design_water_temp": 160, "emitter_type": "panel_radiator", "priority": 1},
        {"id": "demo-zone-3", "name": "Floor 3 - Bedrooms", "sq_ft": 1600,
         "design_water_temp": 160, "emitter_type": "panel_radiator", "priority": 2},
    ]
    return _build(
        "demo-3-story", "Demo - 3 Story Home",
        "Three-zone home: garage radiant floor plus two floors of radiators on zone valves.",
        building, zones, components, specs, prefix="demo",
    )


# ══════════════════════════════════════════════
#  PART 4: 빠른 시작 템플릿
# ══════════════════════════════════════════════

def _single_zone_baseboard() -> SystemTemplate:
    components = [
        _boiler("sz-boiler", "Gas Boiler", (60, 100), 75000),
        _pump("sz-pump", "Circulator", (180, 100), _STANDARD_CURVE, z=2, max_gpm=25, watts=87),
        _air_separator("sz-air-sep", (280, 100), z=3),
        _expansion_tank("sz-exp-tank", "Expansion Tank", (280, 180), z=4, volume_gal=4.4),
        _baseboard("sz-bb-1", "Living Room", (450, 60), 8, 5),
        _baseboard("sz-bb-2", "Bedroom 1", (450, 140), 6, 6),
        _baseboard("sz-bb-3", "Bedroom 2", (450, 220), 6, 7),
    ]
    specs: List[PipeSpec] = [
        ("sz-boiler", "supply", "sz-pump", "inlet", "supply", "copper", "3/4"),
        ("sz-pump", "outlet", "sz-air-sep", "left", "supply", "copper", "3/4"),
        ("sz-air-sep", "right", "sz-bb-1", "supply", "supply", "copper", "3/4"),
    ]
    zones = [{"id": "sz-zone-1", "name": "Main Floor", "sq_ft": 1500,
              "design_water_temp": 160, "emitter_type": "baseboard", "priority": 1}]
    return _build(
        "single-zone-baseboard", "Single Zone - Baseboard",
        "Simple single-zone system with baseboard heaters. Great for small homes or additions.",
        _small_home(), zones, components, specs, prefix="sz",
    )


def _two_zone_valves() -> SystemTemplate:
    components = [
        _boiler("tz-boiler", "Gas Boiler", (60, 150), 100000),
        _pump("tz-pump", "Primary Pump", (180, 150), _STANDARD_CURVE, z=2, max_gpm=25, watts=87),
        _air_separator("tz-air-sep", (280, 150), z=3),
        _expansion_tank("tz-exp-tank", "Expansion Tank", (280, 240), z=4, volume_gal=4.4),
        _zone_valve("tz-zv-1", "First Floor Valve", (400, 80), z=5),
        _zone_valve("tz-zv-2", "Second Floor Valve", (400, 220), z=6),
        _baseboard("tz-bb-1", "First Floor - Living", (520, 60), 8, 7),
        _baseboard("tz-bb-2", "First Floor - Kitchen", (520, 120), 6, 8),
        _baseboard("tz-bb-3", "Second Floor - Bedroom 1", (520, 200), 6, 9),
        _baseboard("tz-bb-4", "Second Floor - Bedroom 2", (520, 260), 6, 10),
    ]
    specs: List[PipeSpec] = [
        ("tz-boiler", "supply", "tz-pump", "inlet", "supply", "copper", "1"),
        ("tz-pump", "outlet", "tz-air-sep", "left", "supply", "copper", "1"),
        ("tz-air-sep", "left", "tz-exp-tank", "connection", "supply", "copper", "3/4"),
        ("tz-air-sep", "right", "tz-zv-1", "inlet", "supply", "copper", "3/4"),
        ("tz-air-sep", "right", "tz-zv-2", "inlet", "supply", "copper", "3/4"),
        ("tz-zv-1", "outlet", "tz-bb-1", "supply", "supply", "copper", "3/4"),
        ("tz-bb-1", "supply", "tz-bb-2", "supply", "supply", "copper", "3/4"),
        ("tz-zv-2", "outlet", "tz-bb-3", "supply", "supply", "copper", "3/4"),
        ("tz-bb-3", "supply", "tz-bb-4", "supply", "supply", "copper", "3/4"),
        ("tz-bb-1", "return", "tz-boiler", "return", "return", "copper", "3/4"),
        ("tz-bb-3", "return", "tz-boiler", "return", "return", "copper", "3/4"),
    ]
    zones = [
        {"id": "tz-zone-1", "name": "First Floor", "sq_ft": 1250,
         "design_water_temp": 160, "emitter_type": "baseboard", "priority": 1},
        {"id": "tz-zone-2", "name": "Second Floor", "sq_ft": 1250,
         "design_water_temp": 160, "emitter_type": "baseboard", "priority": 2},
    ]
    return _build(
        "two-zone-valves", "Two Zone - Zone Valves",
        "Two-zone system using zone valves with a single circulator. Ideal for 2-story homes.",
        _medium_home(), zones, components, specs, prefix="tz",
    )


def _radiant_single() -> SystemTemplate:
    components = [
        _boiler("rf-boiler", "Condensing Boiler", (60, 120), 60000),
        _pump("rf-pump", "Primary Pump", (180, 120), _STANDARD_CURVE, z=2, max_gpm=25, watts=87),
        _air_separator("rf-air-sep", (280, 120), z=3),
        _expansion_tank("rf-exp-tank", "Expansion Tank", (280, 200), z=4, volume_gal=4.4),
        _radiant_floor("rf-radiant", "Main Floor Radiant", (450, 100), 1200, z=6, loops=6),
    ]
    specs: List[PipeSpec] = [
        ("rf-boiler", "supply", "rf-pump", "inlet", "supply", "copper", "3/4"),
        ("rf-pump", "outlet", "rf-air-sep", "left", "supply", "copper", "3/4"),
        ("rf-air-sep", "left", "rf-exp-tank", "connection", "supply", "copper", "3/4"),
        ("rf-air-sep", "right", "rf-radiant", "supply", "supply", "pex", "3/4"),
        ("rf-radiant", "return", "rf-boiler", "return", "return", "pex", "3/4"),
    ]
    zones = [{"id": "rf-zone-1", "name": "Radiant Floor", "sq_ft": 1200,
              "design_water_temp": 110, "emitter_type": "radiant_floor", "priority": 1}]
    return _build(
        "radiant-single", "Radiant Floor - Single Zone",
        "Single radiant floor zone with mixed-down supply. Perfect for open floor plans.",
        _small_home(foundation="slab"), zones, components, specs, prefix="rf",
    )


def _empty() -> SystemTemplate:
    building = {
        "climate": {"design_outdoor_temp": 0, "indoor_design_temp": 70,
                    "heating_degree_days": 6000, "climate_zone": 5},
        "total_sq_ft": 2000, "floors": 2, "ceiling_height": 9,
        "foundation_type": "basement", "construction_era": "2000+",
        "insulation": {"walls": 19, "ceiling": 49, "floor": 25, "basement_walls": 15},
        "window_door": {"total_window_area": 200, "window_u_value": 0.30,
                        "exterior_door_count": 2, "door_u_value": 0.45, "door_area": 21},
        "infiltration": {"ach": 0.25, "blower_door_cfm50": None},
    }
    return _build(
        "empty", "Empty - Start Fresh",
        "Start with a blank canvas. Configure your building and add components manually.",
        building, [], [], [], prefix="empty",
    )


# ══════════════════════════════════════════════
#  PART 5: 공개 API
# ══════════════════════════════════════════════

_FACTORIES = {
    "demo-3-story": _demo_house,
    "single-zone-baseboard": _single_zone_baseboard,
    "two-zone-valves": _two_zone_valves,
    "radiant-single": _radiant_single,
    "empty": _empty,
}

TEMPLATE_IDS = list(_FACTORIES.keys())


def get_template(template_id: str) -> Optional[SystemTemplate]:
    """템플릿 새로 생성 (없는 id 는 None)"""
    factory = _FACTORIES.get(template_id)
    return factory() if factory is not None else None


def list_templates() -> List[dict]:
    """선택 목록용 [{id, name, description}]"""
    out = []
    for template_id in TEMPLATE_IDS:
        t = get_template(template_id)
        out.append({"id": t.id, "name": t.name, "description": t.description})
    return out


def demo_simulation_settings() -> SimulationSettings:
    """데모 시작 시 시뮬레이션 설정 (실행 중, 외기 20°F)"""
    return SimulationSettings(running=True, paused=False, time_scale=1, outdoor_temp=20.0)
