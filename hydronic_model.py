# ! 온수난방 설계 시뮬레이션: 설계 문서 데이터 구조 및 입력 검증
# * 건물(BuildingConfig) + 존(Zone) + 기기(HydronicComponent) + 배관(Pipe) + 연결(Connection)
# * 엔진은 이 구조의 스냅샷만 받아 새 결과를 돌려줍니다. (참조 보관 없음)

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Set, Tuple

from constants import (
    COMPONENT_TYPES, EMITTER_TYPES, FOUNDATION_TYPES, PORT_ROLES, PIPE_ROLES,
    PIPE_ID_IN, PIPE_SIZES, TIME_SCALE_OPTIONS,
    AMBIENT_TEMP_F, STATUS_OFF, DEFAULT_OUTDOOR_TEMP_F,
    DEFAULT_DIRECTION, DEFAULT_NODE_SEP, DEFAULT_RANK_SEP, DEFAULT_EDGE_SEP,
    DEFAULT_GRID_SIZE, DEFAULT_ZONE_PADDING,
    MAX_BUILDING_SQFT, MAX_FLOORS,
)

Point = Tuple[float, float]


# ══════════════════════════════════════════════
#  PART 1: 건물 외피 (BuildingConfig)
# ══════════════════════════════════════════════

@dataclass
class ClimateConfig:
    """기후 조건 (°F)"""
    design_outdoor_temp: float = 0.0
    indoor_design_temp: float = 70.0
    heating_degree_days: float = 6000.0
    climate_zone: int = 5


@dataclass
class InsulationValues:
    """외피 단열 R-value (hr·ft²·°F/BTU)"""
    walls: float = 13.0
    ceiling: float = 38.0
    floor: float = 19.0
    basement_walls: float = 10.0


@dataclass
class WindowDoorConfig:
    total_window_area: float = 200.0   # ft²
    window_u_value: float = 0.30       # BTU/(hr·ft²·°F)
    exterior_door_count: int = 2
    door_u_value: float = 0.50
    door_area: float = 20.0            # ft² (문 1개당)


@dataclass
class InfiltrationConfig:
    ach: float = 0.35
    blower_door_cfm50: Optional[float] = None


@dataclass
class BuildingConfig:
    """
    ! 열손실 계산용 건물 외피 정보 (불변 입력)

    * 정사각형 평면 가정: 층당 바닥면적 = total_sq_ft / floors
    * foundation_type ∈ {slab, crawlspace, basement}
    """
    climate: ClimateConfig = field(default_factory=ClimateConfig)
    total_sq_ft: float = 2000.0
    floors: int = 1
    ceiling_height: float = 8.0
    foundation_type: str = "slab"
    construction_era: str = "2000+"
    insulation: InsulationValues = field(default_factory=InsulationValues)
    window_door: WindowDoorConfig = field(default_factory=WindowDoorConfig)
    infiltration: InfiltrationConfig = field(default_factory=InfiltrationConfig)


# ══════════════════════════════════════════════
#  PART 2: 존 / 기기 / 배관 / 연결
# ══════════════════════════════════════════════

@dataclass
class Zone:
    """난방 존 (온도조절기 1개 단위)"""
    id: str
    name: str
    sq_ft: float
    heat_loss_override: Optional[float] = None   # BTU/hr 수동 입력값
    design_water_temp: float = 160.0
    emitter_type: Optional[str] = None
    priority: int = 1


@dataclass
class Port:
    """
    기기 연결구

    offset : 기기 원점 기준 로컬 좌표. None이면 PORT_OFFSETS 테이블 사용
    """
    id: str
    role: str = "general"
    offset: Optional[Point] = None


@dataclass
class HydronicComponent:
    """
    ! 배치된 기기 (배관망 그래프의 노드)

    * type   : 기기 타입 (boiler_gas, pump_variable, baseboard, ...)
    * props  : 타입별 속성 (inputBtu, afue, curve, lengthFt, ...)
    * 회전/반전은 포트 절대좌표 계산 시에만 반영 (반전 → 회전 순서)
    """
    id: str
    type: str
    name: str
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    flipped_h: bool = False
    flipped_v: bool = False
    ports: List[Port] = field(default_factory=list)
    z_index: int = 0
    props: Dict[str, Any] = field(default_factory=dict)

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def get_port(self, port_id: str) -> Optional[Port]:
        for port in self.ports:
            if port.id == port_id:
                return port
        return None


@dataclass
class PipeFittings:
    """등가 길이 계산용 이음쇠 개수"""
    elbows_90: int = 0
    elbows_45: int = 0
    tees_through: int = 0
    tees_branch: int = 0
    couplings: int = 0


@dataclass
class Pipe:
    """
    ! 배관 구간

    * waypoints 는 축 정렬 폴리라인: 인접한 두 점은 x 또는 y 중 하나만 다름
    * start_port / end_port 는 "componentId.portId" 형식
    """
    id: str
    material: str = "copper"
    size: str = "3/4"
    length_ft: float = 10.0
    role: str = "supply"
    insulation: str = "none"
    fittings: PipeFittings = field(default_factory=PipeFittings)
    waypoints: List[Point] = field(default_factory=list)
    start_port: Optional[str] = None
    end_port: Optional[str] = None


@dataclass
class Connection:
    """배관망 그래프의 간선 (포트 1개당 연결 1개)"""
    id: str
    pipe_id: str
    from_component_id: str
    from_port_id: str
    to_component_id: str
    to_port_id: str


@dataclass
class SystemDocument:
    """설계 문서 전체 (components/pipes 는 삽입 순서 유지)"""
    building: BuildingConfig = field(default_factory=BuildingConfig)
    zones: List[Zone] = field(default_factory=list)
    components: Dict[str, HydronicComponent] = field(default_factory=dict)
    pipes: Dict[str, Pipe] = field(default_factory=dict)
    connections: List[Connection] = field(default_factory=list)


# ══════════════════════════════════════════════
#  PART 3: 시뮬레이션 / 배치 런타임 데이터
# ══════════════════════════════════════════════

@dataclass
class SimulationSettings:
    running: bool = False
    paused: bool = False
    time_scale: int = 1
    outdoor_temp: float = DEFAULT_OUTDOOR_TEMP_F
    elapsed_seconds: float = 0.0


@dataclass
class ComponentSimState:
    """기기별 운전 상태 스냅샷 (매 tick 전체 재계산)"""
    supply_temp: float = AMBIENT_TEMP_F
    return_temp: float = AMBIENT_TEMP_F
    flow_gpm: float = 0.0
    status: str = STATUS_OFF


@dataclass
class LayoutOptions:
    """자동 배치 옵션 (기본값 = constants.DEFAULT_LAYOUT_OPTIONS)"""
    direction: str = DEFAULT_DIRECTION
    node_sep: float = DEFAULT_NODE_SEP
    rank_sep: float = DEFAULT_RANK_SEP
    edge_sep: float = DEFAULT_EDGE_SEP
    grid_size: float = DEFAULT_GRID_SIZE
    zone_padding: float = DEFAULT_ZONE_PADDING
    locked_component_ids: Set[str] = field(default_factory=set)


def remove_component(doc: SystemDocument, component_id: str) -> SystemDocument:
    """
    기기 삭제 (연쇄): 해당 기기에 닿는 연결과 그 배관도 함께 제거

    * 원본 문서는 변경하지 않음
    """
    dropped = [
        c for c in doc.connections
        if c.from_component_id == component_id or c.to_component_id == component_id
    ]
    dropped_pipes = {c.pipe_id for c in dropped}
    return replace(
        doc,
        components={cid: c for cid, c in doc.components.items() if cid != component_id},
        pipes={pid: p for pid, p in doc.pipes.items() if pid not in dropped_pipes},
        connections=[c for c in doc.connections if c not in dropped],
    )


def with_settings(settings: SimulationSettings, **changes) -> SimulationSettings:
    """설정 복사본 생성 (원본 불변)"""
    return replace(settings, **changes)


# ══════════════════════════════════════════════
#  PART 4: 입력 검증 (방어적 프로그래밍)
# ══════════════════════════════════════════════

class ValidationError(Exception):
    """사용자 입력 검증 실패 시 발생하는 예외"""
    pass


def validate_building_inputs(building: BuildingConfig) -> None:
    """
    ! 건물 입력값 검증: 잘못된 값 입력 시 명확한 에러 메시지

    * 엔진은 이 함수를 호출하지 않음 (엔진은 0/기본값으로 열화)
    * 대시보드가 계산 전에 호출하여 st.error 로 표시
    """
    if building.total_sq_ft <= 0:
        raise ValidationError(
            f"연면적은 양수여야 합니다. (입력값: {building.total_sq_ft} ft²)"
        )
    if building.total_sq_ft > MAX_BUILDING_SQFT:
        raise ValidationError(
            f"연면적이 최대 허용치({MAX_BUILDING_SQFT} ft²)를 초과합니다. (입력값: {building.total_sq_ft})"
        )
    if not isinstance(building.floors, int) or building.floors < 1:
        raise ValidationError(
            f"층수는 1 이상의 정수여야 합니다. (입력값: {building.floors})"
        )
    if building.floors > MAX_FLOORS:
        raise ValidationError(
            f"층수가 최대 허용치({MAX_FLOORS})를 초과합니다. (입력값: {building.floors})"
        )
    if building.ceiling_height <= 0:
        raise ValidationError(
            f"천장 높이는 양수여야 합니다. (입력값: {building.ceiling_height} ft)"
        )
    if building.foundation_type not in FOUNDATION_TYPES:
        raise ValidationError(
            f"알 수 없는 기초 형식입니다: '{building.foundation_type}' "
            f"(허용: {', '.join(FOUNDATION_TYPES)})"
        )

    ins = building.insulation
    for label, value in (("벽체", ins.walls), ("천장", ins.ceiling),
                         ("바닥", ins.floor), ("지하 벽체", ins.basement_walls)):
        if value < 0:
            raise ValidationError(
                f"{label} R-value 는 음수일 수 없습니다. (입력값: {value})"
            )

    wd = building.window_door
    if wd.total_window_area < 0:
        raise ValidationError(
            f"창호 면적은 음수일 수 없습니다. (입력값: {wd.total_window_area} ft²)"
        )
    if wd.door_area < 0 or wd.exterior_door_count < 0:
        raise ValidationError(
            f"외부 문 개수/면적은 음수일 수 없습니다. "
            f"(개수: {wd.exterior_door_count}, 면적: {wd.door_area} ft²)"
        )
    if wd.window_u_value < 0 or wd.door_u_value < 0:
        raise ValidationError(
            f"U-value 는 음수일 수 없습니다. (창호: {wd.window_u_value}, 문: {wd.door_u_value})"
        )
    if building.infiltration.ach < 0:
        raise ValidationError(
            f"환기 횟수(ACH)는 음수일 수 없습니다. (입력값: {building.infiltration.ach})"
        )


# ══════════════════════════════════════════════
#  PART 5: dict → dataclass 변환 (템플릿 / 외부 문서)
# ══════════════════════════════════════════════

def _require(data: dict, key: str, what: str):
    if key not in data:
        raise ValidationError(f"{what} 데이터에 필수 항목 '{key}' 가 없습니다.")
    return data[key]


def building_from_dict(data: dict) -> BuildingConfig:
    """중첩 dict (climate/insulation/window_door/infiltration) → BuildingConfig"""
    building = BuildingConfig(
        climate=ClimateConfig(**data.get("climate", {})),
        total_sq_ft=_require(data, "total_sq_ft", "건물"),
        floors=_require(data, "floors", "건물"),
        ceiling_height=_require(data, "ceiling_height", "건물"),
        foundation_type=data.get("foundation_type", "slab"),
        construction_era=data.get("construction_era", "2000+"),
        insulation=InsulationValues(**data.get("insulation", {})),
        window_door=WindowDoorConfig(**data.get("window_door", {})),
        infiltration=InfiltrationConfig(**data.get("infiltration", {})),
    )
    if building.foundation_type not in FOUNDATION_TYPES:
        raise ValidationError(f"알 수 없는 기초 형식입니다: '{building.foundation_type}'")
    return building


def zone_from_dict(data: dict) -> Zone:
    emitter_type = data.get("emitter_type")
    if emitter_type is not None and emitter_type not in EMITTER_TYPES:
        raise ValidationError(f"알 수 없는 방열기 형식입니다: '{emitter_type}'")
    return Zone(
        id=_require(data, "id", "존"),
        name=_require(data, "name", "존"),
        sq_ft=_require(data, "sq_ft", "존"),
        heat_loss_override=data.get("heat_loss_override"),
        design_water_temp=data.get("design_water_temp", 160.0),
        emitter_type=emitter_type,
        priority=data.get("priority", 1),
    )


def port_from_dict(data: dict) -> Port:
    role = data.get("role", "general")
    if role not in PORT_ROLES:
        raise ValidationError(f"알 수 없는 포트 역할입니다: '{role}' (포트 '{data.get('id')}')")
    offset = data.get("offset")
    return Port(
        id=_require(data, "id", "포트"),
        role=role,
        offset=tuple(offset) if offset is not None else None,
    )


def component_from_dict(data: dict) -> HydronicComponent:
    """
    기기 dict → HydronicComponent

    * position 은 (x, y) 또는 {"x":, "y":} 모두 허용
    """
    comp_type = _require(data, "type", "기기")
    if comp_type not in COMPONENT_TYPES:
        raise ValidationError(f"알 수 없는 기기 타입입니다: '{comp_type}'")
    pos = data.get("position", (0.0, 0.0))
    if isinstance(pos, dict):
        pos = (pos.get("x", 0.0), pos.get("y", 0.0))
    return HydronicComponent(
        id=_require(data, "id", "기기"),
        type=comp_type,
        name=data.get("name", comp_type),
        x=float(pos[0]),
        y=float(pos[1]),
        rotation=data.get("rotation", 0.0),
        flipped_h=data.get("flipped_h", False),
        flipped_v=data.get("flipped_v", False),
        ports=[port_from_dict(p) for p in data.get("ports", [])],
        z_index=data.get("z_index", 0),
        props=dict(data.get("props", {})),
    )


def pipe_from_dict(data: dict) -> Pipe:
    material = data.get("material", "copper")
    size = data.get("size", "3/4")
    role = data.get("role", "supply")
    if material not in PIPE_ID_IN:
        raise ValidationError(f"알 수 없는 배관 재질입니다: '{material}'")
    if size not in PIPE_SIZES:
        raise ValidationError(f"알 수 없는 배관 구경입니다: '{size}'")
    if role not in PIPE_ROLES:
        raise ValidationError(f"배관 역할은 supply/return 중 하나여야 합니다. (입력값: '{role}')")
    return Pipe(
        id=_require(data, "id", "배관"),
        material=material,
        size=size,
        length_ft=data.get("length_ft", 10.0),
        role=role,
        insulation=data.get("insulation", "none"),
        fittings=PipeFittings(**data.get("fittings", {})),
        waypoints=[tuple(p) for p in data.get("waypoints", [])],
        start_port=data.get("start_port"),
        end_port=data.get("end_port"),
    )


def connection_from_dict(data: dict) -> Connection:
    return Connection(
        id=_require(data, "id", "연결"),
        pipe_id=_require(data, "pipe_id", "연결"),
        from_component_id=_require(data, "from_component_id", "연결"),
        from_port_id=_require(data, "from_port_id", "연결"),
        to_component_id=_require(data, "to_component_id", "연결"),
        to_port_id=_require(data, "to_port_id", "연결"),
    )


def validate_time_scale(time_scale: int) -> None:
    if time_scale not in TIME_SCALE_OPTIONS:
        raise ValidationError(
            f"시간 배율은 {TIME_SCALE_OPTIONS} 중 하나여야 합니다. (입력값: {time_scale})"
        )
