# ! 온수난방 설계 시뮬레이션: 전역 상수 및 기본 파라미터 정의
# * 모든 모듈이 이 파일을 참조합니다. (단위: °F, BTU/hr, GPM, ft, inch)

# ──────────────────────────────────────────────
# ? 열물성 / 공식 계수
# ──────────────────────────────────────────────
WATER_BTU_FACTOR = 500.0       # BTU/hr = GPM × 500 × ΔT (물 8.33 lb/gal × 60 min)
INFILTRATION_FACTOR = 0.018    # 현열 침기 계수 (BTU/hr per CFM per °F)
GROUND_TEMP_F = 55.0           # 지하실/크롤스페이스 하부 지중 온도 근사
BTU_PER_KW = 3412.14           # 전기 보일러 kW → BTU/hr

# ──────────────────────────────────────────────
# ? 시뮬레이션 기본값
# ──────────────────────────────────────────────
AMBIENT_TEMP_F = 70.0              # 정지 상태 배관/기기 온도
LOW_FIRE_SUPPLY_TEMP_F = 140.0     # 최소 연소 시 공급 온도
MAX_BOILER_SUPPLY_TEMP_F = 180.0   # 공급 온도 상한
BOILER_DESIGN_DELTA_T_F = 20.0     # 보일러 설계 ΔT (공급 - 환수)
RADIANT_MAX_SUPPLY_TEMP_F = 120.0  # 바닥 복사 난방 혼합 밸브 상한
MAX_ZONE_DELTA_T_F = 30.0          # 존 환수 ΔT 상한

DEFAULT_OUTDOOR_TEMP_F = 30.0
TIME_SCALE_OPTIONS = [1, 10, 60, 3600]

STATUS_OFF = "off"
STATUS_RUNNING = "running"
STATUS_FIRING = "firing"

# * 열원 속성 기본값 (속성 누락 시)
DEFAULT_BOILER_INPUT_BTU = 100000.0
DEFAULT_BOILER_AFUE = 0.85
DEFAULT_MIN_FIRING_RATE = 0.2
DEFAULT_HEAT_PUMP_CAPACITY_BTU = 36000.0
DEFAULT_HEAT_PUMP_MAX_SUPPLY_F = 130.0

# ──────────────────────────────────────────────
# ? 기기 타입 분류 (Component Type Buckets)
# ──────────────────────────────────────────────
MECHANICAL_ZONE_ID = "mechanical"
MECHANICAL_ZONE_NAME = "Mechanical Room"

# * 기계실 배정 타입 (존 분류 1차 패스)
MECHANICAL_TYPES = frozenset({
    "boiler_gas", "boiler_oil", "boiler_electric", "heat_pump_a2w",
    "pump_fixed", "pump_variable",
    "air_separator", "expansion_tank", "buffer_tank", "hydraulic_separator",
    "pressure_relief", "fill_valve", "air_vent",
})

HEAT_SOURCE_TYPES = ("boiler_gas", "boiler_oil", "boiler_electric", "heat_pump_a2w")
PUMP_TYPES = frozenset({"pump_fixed", "pump_variable", "zone_pump"})
ZONE_VALVE_TYPES = frozenset({"zone_valve_2way", "zone_valve_3way"})
EMITTER_TYPES = frozenset({
    "baseboard", "panel_radiator", "cast_iron_radiator",
    "radiant_floor", "fan_coil", "towel_warmer",
})
PASSIVE_TYPES = frozenset({"air_separator", "expansion_tank"})

COMPONENT_TYPES = frozenset(
    set(MECHANICAL_TYPES) | set(PUMP_TYPES) | set(ZONE_VALVE_TYPES) | set(EMITTER_TYPES) | {
        "indirect_water_heater", "mixing_valve", "balancing_valve", "check_valve",
        "ball_valve", "trv", "manifold", "thermostat", "outdoor_reset", "aquastat",
    }
)

FOUNDATION_TYPES = ("slab", "crawlspace", "basement")
PORT_ROLES = ("supply", "return", "general")
PIPE_ROLES = ("supply", "return")

# ──────────────────────────────────────────────
# ? 기기 외형 치수 (렌더링 레이어와 동일해야 함)
#   key = 기기 타입, value = (width, height) px
# ──────────────────────────────────────────────
COMPONENT_DIMENSIONS = {
    "boiler_gas":      (80, 60),
    "boiler_oil":      (80, 60),
    "boiler_electric": (80, 60),
    "pump_fixed":      (60, 60),
    "pump_variable":   (60, 60),
    "zone_pump":       (60, 60),
    "air_separator":   (60, 60),
    "expansion_tank":  (60, 70),
    "zone_valve_2way": (60, 60),
    "zone_valve_3way": (60, 60),
    "mixing_valve":    (60, 60),
    "radiant_floor":   (80, 70),
    "baseboard":       (100, 60),
    "panel_radiator":  (80, 60),
}
DEFAULT_DIMENSIONS = (60, 60)

BASEBOARD_PX_PER_FT = 15
BASEBOARD_MIN_WIDTH = 60
BASEBOARD_MAX_WIDTH = 200
BASEBOARD_HEIGHT = 60
DEFAULT_BASEBOARD_LENGTH_FT = 4

# ──────────────────────────────────────────────
# ? 포트 오프셋 (기기 원점 기준 로컬 좌표)
# ──────────────────────────────────────────────
_INLINE_PORTS = {"inlet": (0, 30), "outlet": (60, 30)}

PORT_OFFSETS = {
    "boiler_gas":      {"supply": (15, 0), "return": (65, 0)},
    "boiler_oil":      {"supply": (15, 0), "return": (65, 0)},
    "boiler_electric": {"supply": (15, 0), "return": (65, 0)},
    "pump_fixed":      _INLINE_PORTS,
    "pump_variable":   _INLINE_PORTS,
    "zone_pump":       _INLINE_PORTS,
    "air_separator":   {"left": (0, 30), "right": (60, 30)},
    "expansion_tank":  {"connection": (30, 60)},
    "zone_valve_2way": _INLINE_PORTS,
    "zone_valve_3way": _INLINE_PORTS,
    "radiant_floor":   {"supply": (10, 0), "return": (70, 60)},
}
# * 테이블에 없는 포트: 유입측은 좌측, 나머지는 우측
INLET_SIDE_PORT_IDS = ("supply", "left", "inlet")
FALLBACK_INLET_OFFSET = (0, 30)
FALLBACK_OUTLET_OFFSET = (60, 30)

# ──────────────────────────────────────────────
# ? 배관 내경 테이블 (inch)
#   key = 재질, value = {호칭 구경: 내경}
# ──────────────────────────────────────────────
PIPE_SIZES = ("1/2", "3/4", "1", "1-1/4", "1-1/2", "2")

PIPE_ID_IN = {
    "copper":      {"1/2": 0.545, "3/4": 0.785, "1": 1.025, "1-1/4": 1.265, "1-1/2": 1.505, "2": 1.985},
    "pex":         {"1/2": 0.475, "3/4": 0.671, "1": 0.862, "1-1/4": 1.062, "1-1/2": 1.262, "2": 1.662},
    "pex_al_pex":  {"1/2": 0.5,   "3/4": 0.704, "1": 0.89,  "1-1/4": 1.1,   "1-1/2": 1.3,   "2": 1.7},
    "black_steel": {"1/2": 0.622, "3/4": 0.824, "1": 1.049, "1-1/4": 1.38,  "1-1/2": 1.61,  "2": 2.067},
    "cpvc":        {"1/2": 0.485, "3/4": 0.687, "1": 0.894, "1-1/4": 1.1,   "1-1/2": 1.3,   "2": 1.7},
}

# * Hazen-Williams 조도 계수 (C-factor)
C_FACTOR = {
    "copper": 130,
    "pex": 150,
    "pex_al_pex": 145,
    "black_steel": 100,
    "cpvc": 140,
}

# * 이음쇠 등가 길이 (ft), 동관 기준 대표값
FITTING_EQUIV_LENGTH_FT = {
    "1/2":   {"elbow90": 1.5, "elbow45": 0.8, "tee_through": 0.9, "tee_branch": 3,  "coupling": 0.3},
    "3/4":   {"elbow90": 2,   "elbow45": 1,   "tee_through": 1.2, "tee_branch": 4,  "coupling": 0.4},
    "1":     {"elbow90": 2.5, "elbow45": 1.3, "tee_through": 1.5, "tee_branch": 5,  "coupling": 0.5},
    "1-1/4": {"elbow90": 3,   "elbow45": 1.5, "tee_through": 1.8, "tee_branch": 6,  "coupling": 0.6},
    "1-1/2": {"elbow90": 4,   "elbow45": 2,   "tee_through": 2.2, "tee_branch": 8,  "coupling": 0.8},
    "2":     {"elbow90": 5,   "elbow45": 2.5, "tee_through": 3,   "tee_branch": 10, "coupling": 1},
}

# ──────────────────────────────────────────────
# ? 주거용 유속 기준 (fps)
# ──────────────────────────────────────────────
VELOCITY_LOW_FPS = 1.5
VELOCITY_HIGH_FPS = 4.0

# ──────────────────────────────────────────────
# ? 자동 배치 / 배관 경로 기본값
# ──────────────────────────────────────────────
DEFAULT_DIRECTION = "LR"           # "LR" (좌→우) 또는 "TB" (상→하)
DEFAULT_NODE_SEP = 80
DEFAULT_RANK_SEP = 150
DEFAULT_EDGE_SEP = 30
DEFAULT_GRID_SIZE = 20
DEFAULT_ZONE_PADDING = 40
LAYOUT_MARGIN = 60
ORDERING_SWEEPS = 4                # barycenter 순서 최적화 반복 횟수
RETURN_HEADER_DROP = 60            # 환수 헤더 = max(from.y, to.y) + 60
PX_PER_FT = 20                     # 캔버스 배관 길이 환산

ZONE_COLORS = [
    "rgba(66, 133, 244, 0.15)",   # Blue
    "rgba(52, 168, 83, 0.15)",    # Green
    "rgba(251, 188, 4, 0.15)",    # Yellow
    "rgba(234, 67, 53, 0.15)",    # Red
    "rgba(154, 66, 244, 0.15)",   # Purple
    "rgba(244, 66, 179, 0.15)",   # Pink
]
MECHANICAL_ZONE_COLOR = "rgba(100, 100, 100, 0.12)"

# ──────────────────────────────────────────────
# ? 설계 검토 기준
# ──────────────────────────────────────────────
MAX_BUILDING_SQFT = 100000
MAX_FLOORS = 10
DEFAULT_PUMP_EQUIPMENT_HEAD_FT = 5.0   # 보일러 + 밸브류 고정 손실 (ft)

# * 자동 배치 기본 옵션 (LayoutOptions 기본값과 동일)
DEFAULT_LAYOUT_OPTIONS = {
    "direction": DEFAULT_DIRECTION,
    "node_sep": DEFAULT_NODE_SEP,
    "rank_sep": DEFAULT_RANK_SEP,
    "edge_sep": DEFAULT_EDGE_SEP,
    "grid_size": DEFAULT_GRID_SIZE,
    "zone_padding": DEFAULT_ZONE_PADDING,
}
