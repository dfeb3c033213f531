# ! 온수난방 설계 시뮬레이션: 열 시뮬레이션 엔진 (정상상태, tick 단위)
# * 존 부하 → 보일러 → 존 유량 배분 → 방열기 → 전체 기기 상태
# * 매 tick 전체 상태를 새로 계산 (이전 tick 상태에 의존하지 않음)

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from constants import (
    AMBIENT_TEMP_F, LOW_FIRE_SUPPLY_TEMP_F, MAX_BOILER_SUPPLY_TEMP_F,
    BOILER_DESIGN_DELTA_T_F, RADIANT_MAX_SUPPLY_TEMP_F, MAX_ZONE_DELTA_T_F,
    WATER_BTU_FACTOR, BTU_PER_KW,
    HEAT_SOURCE_TYPES, PUMP_TYPES, ZONE_VALVE_TYPES, EMITTER_TYPES, PASSIVE_TYPES,
    DEFAULT_BOILER_INPUT_BTU, DEFAULT_BOILER_AFUE, DEFAULT_MIN_FIRING_RATE,
    DEFAULT_HEAT_PUMP_CAPACITY_BTU, DEFAULT_HEAT_PUMP_MAX_SUPPLY_F,
    STATUS_OFF, STATUS_RUNNING, STATUS_FIRING,
)
from hydronic_model import (
    BuildingConfig, Zone, HydronicComponent, Connection, Pipe,
    ComponentSimState, SimulationSettings, with_settings,
)
from heat_loss import calculate_heat_loss, allocate_zone_heat_loss, required_gpm
from topology import classify_zones


# ══════════════════════════════════════════════
#  PART 1: 결과 데이터 구조
# ══════════════════════════════════════════════

@dataclass
class ZoneDemand:
    """존별 현재 부하"""
    zone_id: str
    zone_name: str
    sq_ft: float
    design_heat_loss: float     # 설계 조건 BTU/hr
    current_heat_loss: float    # 현재 외기온도 BTU/hr
    is_calling: bool            # 난방 요구 여부
    zone_valve_id: Optional[str]
    design_water_temp: float
    emitter_type: Optional[str]


@dataclass
class BoilerState:
    firing_rate: float = 0.0    # 0 ~ 1
    output_btu: float = 0.0
    supply_temp: float = AMBIENT_TEMP_F
    return_temp: float = AMBIENT_TEMP_F
    flow_gpm: float = 0.0
    status: str = STATUS_OFF


@dataclass
class ZoneFlow:
    zone_id: str
    flow_gpm: float = 0.0
    supply_temp: float = AMBIENT_TEMP_F
    return_temp: float = AMBIENT_TEMP_F
    btu_delivered: float = 0.0


def _round_temp(value: float) -> float:
    """표시용 정수 반올림 (0.5 올림)"""
    return float(math.floor(value + 0.5))


def _round_flow(value: float) -> float:
    """표시용 0.1 GPM 반올림"""
    return math.floor(value * 10.0 + 0.5) / 10.0


# ══════════════════════════════════════════════
#  PART 2: 부하 스케일링 및 존 부하
# ══════════════════════════════════════════════

def scale_heat_loss_to_outdoor_temp(
    design_loss: float,
    indoor_temp: float,
    outdoor_temp: float,
    design_outdoor_temp: float,
) -> float:
    """
    ! 설계 부하 → 현재 외기온도 부하

    Q = Q_design × (T_in - T_out) / (T_in - T_design)

    * 설계 ΔT ≤ 0 → 0
    * 현재 ΔT ≤ 0 (외기 ≥ 실내) → 0
    """
    design_dt = indoor_temp - design_outdoor_temp
    if design_dt <= 0:
        return 0.0
    current_dt = indoor_temp - outdoor_temp
    if current_dt <= 0:
        return 0.0
    return design_loss * (current_dt / design_dt)


def calculate_zone_demands(
    building: BuildingConfig,
    zones: List[Zone],
    components: Dict[str, HydronicComponent],
    connections: List[Connection],
    outdoor_temp: float,
    zone_map: Optional[Dict[str, str]] = None,
) -> List[ZoneDemand]:
    """
    존별 부하 계산

    1. 건물 설계 열손실 → 존 배분
    2. 외기온도 스케일링
    3. 부하 > 0 이면 난방 요구 (데드밴드/지연 없음)
    4. 존 밸브 id 는 분류 결과에서 찾음 (같은 존에 여러 개면 마지막 것)
    """
    if not zones:
        return []

    design = calculate_heat_loss(building)
    allocations = allocate_zone_heat_loss(design["total"], building.total_sq_ft, zones)

    if zone_map is None:
        zone_map = classify_zones(components, connections, zones)

    zone_to_valve: Dict[str, str] = {}
    for comp_id, zone_id in zone_map.items():
        comp = components.get(comp_id)
        if comp is not None and comp.type in ZONE_VALVE_TYPES:
            zone_to_valve[zone_id] = comp_id

    climate = building.climate
    demands = []
    for zone in zones:
        design_loss = allocations.get(zone.id, 0.0)
        current_loss = scale_heat_loss_to_outdoor_temp(
            design_loss, climate.indoor_design_temp, outdoor_temp, climate.design_outdoor_temp,
        )
        demands.append(ZoneDemand(
            zone_id=zone.id,
            zone_name=zone.name,
            sq_ft=zone.sq_ft,
            design_heat_loss=design_loss,
            current_heat_loss=current_loss,
            is_calling=current_loss > 0,
            zone_valve_id=zone_to_valve.get(zone.id),
            design_water_temp=zone.design_water_temp,
            emitter_type=zone.emitter_type,
        ))
    return demands


# ══════════════════════════════════════════════
#  PART 3: 열원 (보일러 / 히트펌프)
# ══════════════════════════════════════════════

def find_heat_source(components: Dict[str, HydronicComponent]) -> Optional[HydronicComponent]:
    """삽입 순서상 첫 번째 열원 (다중 보일러 미지원)"""
    for comp in components.values():
        if comp.type in HEAT_SOURCE_TYPES:
            return comp
    return None


def heat_source_rating(comp: HydronicComponent) -> dict:
    """
    ! 열원 속성 → 정격 dict

    * 가스/오일 보일러 : inputBtu, afue, minFiringRate, maxSupplyTemp
    * 전기 보일러      : inputBtu = kwRating × 3412.14, afue = 1.0
    * 공기-물 히트펌프 : inputBtu = capacityBtu, afue = 1.0, 공급 상한 130°F

    반환 dict: input_btu, afue, min_firing_rate, max_supply_temp, max_output_btu
    """
    props = comp.props
    if comp.type == "boiler_electric":
        input_btu = props.get("kwRating", 0.0) * BTU_PER_KW
        afue = 1.0
        max_supply = props.get("maxSupplyTemp", MAX_BOILER_SUPPLY_TEMP_F)
    elif comp.type == "heat_pump_a2w":
        input_btu = props.get("capacityBtu", DEFAULT_HEAT_PUMP_CAPACITY_BTU)
        afue = 1.0
        max_supply = props.get("maxSupplyTemp", DEFAULT_HEAT_PUMP_MAX_SUPPLY_F)
    else:
        input_btu = props.get("inputBtu", DEFAULT_BOILER_INPUT_BTU)
        afue = props.get("afue", DEFAULT_BOILER_AFUE)
        max_supply = props.get("maxSupplyTemp", MAX_BOILER_SUPPLY_TEMP_F)

    return {
        "input_btu": input_btu,
        "afue": afue,
        "min_firing_rate": props.get("minFiringRate", DEFAULT_MIN_FIRING_RATE),
        "max_supply_temp": max_supply,
        "max_output_btu": input_btu * afue,
    }


def calculate_boiler_state(
    heat_source: HydronicComponent,
    total_demand_btu: float,
    any_zone_calling: bool,
) -> BoilerState:
    """
    ! 보일러 운전 상태

    연소율 = 총 부하 / (입력 × AFUE), [최소 연소율, 1] 로 제한
    공급온도 = 140 + (min(최고 공급온도, 180) - 140) × 연소율
    환수온도 = 공급온도 - 20
    유량 = 출력 / (500 × 20)

    * 요구 존 없음 / 부하 0 / 정격 출력 ≤ 0 → off (70°F, 0 GPM)
    * 최소 연소율 미만 부하도 최소 연소율로 운전 (on/off 사이클 모델 없음)
    * 히트펌프만 기준 140°F 를 공급 상한으로 낮춤
    """
    rating = heat_source_rating(heat_source)
    max_output = rating["max_output_btu"]
    if not any_zone_calling or total_demand_btu <= 0 or max_output <= 0:
        return BoilerState()

    firing_rate = total_demand_btu / max_output
    firing_rate = min(max(firing_rate, rating["min_firing_rate"]), 1.0)

    output_btu = max_output * firing_rate

    max_supply = min(rating["max_supply_temp"], MAX_BOILER_SUPPLY_TEMP_F)
    low_fire = LOW_FIRE_SUPPLY_TEMP_F
    if heat_source.type == "heat_pump_a2w":
        # * 히트펌프는 공급 상한(130°F)을 넘지 않도록 최소 연소 온도도 제한
        low_fire = min(low_fire, max_supply)
    supply_temp = low_fire + (max_supply - low_fire) * firing_rate
    return_temp = supply_temp - BOILER_DESIGN_DELTA_T_F
    flow_gpm = required_gpm(output_btu, BOILER_DESIGN_DELTA_T_F)

    return BoilerState(
        firing_rate=firing_rate,
        output_btu=output_btu,
        supply_temp=_round_temp(supply_temp),
        return_temp=_round_temp(return_temp),
        flow_gpm=_round_flow(flow_gpm),
        status=STATUS_FIRING,
    )


# ══════════════════════════════════════════════
#  PART 4: 존 유량 배분 / 방열기 상태
# ══════════════════════════════════════════════

def calculate_zone_flows(
    zone_demands: List[ZoneDemand],
    boiler_state: BoilerState,
) -> List[ZoneFlow]:
    """
    ! 보일러 유량을 요구 존에 부하 비례 배분

    * 비율 = 존 현재 부하 / 요구 존 부하 합
    * 바닥 복사 존: 공급온도 = min(존 설계 수온, 120°F) (혼합 밸브 가정)
    * 환수온도 = 공급온도 - min(Q / (500 × GPM), 30)
    """
    active = [z for z in zone_demands if z.is_calling]
    if not active or boiler_state.flow_gpm <= 0:
        return [ZoneFlow(zone_id=z.zone_id) for z in zone_demands]

    total_demand = sum(z.current_heat_loss for z in active)

    flows = []
    for zone in zone_demands:
        if not zone.is_calling or total_demand <= 0:
            flows.append(ZoneFlow(zone_id=zone.zone_id))
            continue

        flow_gpm = boiler_state.flow_gpm * (zone.current_heat_loss / total_demand)

        supply_temp = boiler_state.supply_temp
        if zone.emitter_type == "radiant_floor":
            supply_temp = min(zone.design_water_temp, RADIANT_MAX_SUPPLY_TEMP_F)

        dt = zone.current_heat_loss / (WATER_BTU_FACTOR * flow_gpm) if flow_gpm > 0 else 0.0
        return_temp = supply_temp - min(dt, MAX_ZONE_DELTA_T_F)

        flows.append(ZoneFlow(
            zone_id=zone.zone_id,
            flow_gpm=_round_flow(flow_gpm),
            supply_temp=_round_temp(supply_temp),
            return_temp=_round_temp(return_temp),
            btu_delivered=zone.current_heat_loss,
        ))
    return flows


def calculate_emitter_state(zone_flow: Optional[ZoneFlow], emitters_in_zone: int) -> ComponentSimState:
    """방열기 상태: 존 유량을 방열기 수로 균등 분배"""
    if zone_flow is None or zone_flow.flow_gpm <= 0:
        return ComponentSimState()
    return ComponentSimState(
        supply_temp=zone_flow.supply_temp,
        return_temp=zone_flow.return_temp,
        flow_gpm=_round_flow(zone_flow.flow_gpm / max(1, emitters_in_zone)),
        status=STATUS_RUNNING,
    )


# ══════════════════════════════════════════════
#  PART 5: 메인 시뮬레이션 tick
# ══════════════════════════════════════════════

def run_simulation_tick(
    building: BuildingConfig,
    zones: List[Zone],
    components: Dict[str, HydronicComponent],
    connections: List[Connection],
    outdoor_temp: float,
) -> Dict[str, ComponentSimState]:
    """
    ! 전체 기기 상태 계산 (순수 함수, 매 프레임 호출용)

    알고리즘:
    1. 모든 기기 off 상태로 초기화
    2. 첫 번째 열원 탐색 (없으면 전부 off 로 반환)
    3. 존 부하 → 보일러 상태 → 존 유량
    4. 타입별 상태 배정
       - 펌프: 보일러 온도/유량, 요구 존이 있으면 running
       - 존 밸브: 해당 존 유량, 존 요구 시 running
       - 방열기: 존 유량 균등 분배
       - 공기분리기/팽창탱크: 보일러 온도, 유량 0
       - 그 외: off 유지
    """
    states: Dict[str, ComponentSimState] = {
        comp_id: ComponentSimState() for comp_id in components
    }

    heat_source = find_heat_source(components)
    if heat_source is None:
        return states

    zone_map = classify_zones(components, connections, zones)
    demands = calculate_zone_demands(
        building, zones, components, connections, outdoor_temp, zone_map=zone_map,
    )
    total_demand = sum(d.current_heat_loss for d in demands)
    any_calling = any(d.is_calling for d in demands)

    boiler = calculate_boiler_state(heat_source, total_demand, any_calling)
    states[heat_source.id] = ComponentSimState(
        supply_temp=boiler.supply_temp,
        return_temp=boiler.return_temp,
        flow_gpm=boiler.flow_gpm,
        status=boiler.status,
    )

    flow_by_zone = {zf.zone_id: zf for zf in calculate_zone_flows(demands, boiler)}
    demand_by_zone = {d.zone_id: d for d in demands}

    emitters_per_zone: Dict[str, int] = {}
    for comp_id, zone_id in zone_map.items():
        if components[comp_id].type in EMITTER_TYPES:
            emitters_per_zone[zone_id] = emitters_per_zone.get(zone_id, 0) + 1

    running_if_calling = STATUS_RUNNING if any_calling else STATUS_OFF

    for comp_id, comp in components.items():
        if comp_id == heat_source.id:
            continue
        zone_id = zone_map.get(comp_id)
        zone_flow = flow_by_zone.get(zone_id)

        if comp.type in PUMP_TYPES:
            states[comp_id] = ComponentSimState(
                supply_temp=boiler.supply_temp,
                return_temp=boiler.return_temp,
                flow_gpm=boiler.flow_gpm,
                status=running_if_calling,
            )
        elif comp.type in ZONE_VALVE_TYPES:
            demand = demand_by_zone.get(zone_id)
            flow = zone_flow or ZoneFlow(zone_id=zone_id or "")
            states[comp_id] = ComponentSimState(
                supply_temp=flow.supply_temp,
                return_temp=flow.return_temp,
                flow_gpm=flow.flow_gpm,
                status=STATUS_RUNNING if demand is not None and demand.is_calling else STATUS_OFF,
            )
        elif comp.type in EMITTER_TYPES:
            states[comp_id] = calculate_emitter_state(zone_flow, emitters_per_zone.get(zone_id, 1))
        elif comp.type in PASSIVE_TYPES:
            states[comp_id] = ComponentSimState(
                supply_temp=boiler.supply_temp,
                return_temp=boiler.return_temp,
                flow_gpm=0.0,
                status=running_if_calling,
            )

    return states


# ══════════════════════════════════════════════
#  PART 6: 시뮬레이션 시계 / 배관 유량 추정
# ══════════════════════════════════════════════

def advance_simulation_clock(settings: SimulationSettings, dt_seconds: float) -> SimulationSettings:
    """
    경과 시간 갱신 (새 설정 객체 반환)

    * 실행 중이고 일시정지가 아닐 때만 elapsed += dt × time_scale
    """
    if not settings.running or settings.paused or dt_seconds <= 0:
        return with_settings(settings)
    return with_settings(
        settings,
        elapsed_seconds=settings.elapsed_seconds + dt_seconds * settings.time_scale,
    )


def estimate_pipe_flows(
    pipes: Dict[str, Pipe],
    connections: List[Connection],
    states: Dict[str, ComponentSimState],
) -> Dict[str, float]:
    """
    배관별 표시 유량 (GPM) = 연결의 출발(from) 기기 유량

    * 상태가 없는 기기 / 배관 없는 연결은 건너뜀
    * 병렬 분기 유량 해석은 하지 않음
    """
    flows: Dict[str, float] = {}
    for conn in connections:
        if conn.pipe_id not in pipes:
            continue
        state = states.get(conn.from_component_id)
        if state is None:
            continue
        flows[conn.pipe_id] = state.flow_gpm
    return flows
