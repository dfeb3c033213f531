# ! 온수난방 설계 시뮬레이션: 기기 기하 정보 및 직교 배관 경로 생성
# * 기기 외형 치수 / 포트 절대좌표 (반전 → 회전 → 원점 이동)
# * 직교(ㄱ/ㄷ자) 경로: 배관 생성, 드래그 재경로, 자동 배치 후 일괄 재경로가 공유

import math
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from constants import (
    COMPONENT_DIMENSIONS, DEFAULT_DIMENSIONS, PORT_OFFSETS,
    BASEBOARD_PX_PER_FT, BASEBOARD_MIN_WIDTH, BASEBOARD_MAX_WIDTH, BASEBOARD_HEIGHT,
    DEFAULT_BASEBOARD_LENGTH_FT,
    INLET_SIDE_PORT_IDS, FALLBACK_INLET_OFFSET, FALLBACK_OUTLET_OFFSET,
    DEFAULT_GRID_SIZE, RETURN_HEADER_DROP, PX_PER_FT,
)
from hydronic_model import (
    Connection, HydronicComponent, Pipe, PipeFittings, Point,
)


# ══════════════════════════════════════════════
#  PART 1: 기기 외형 / 포트 기하
# ══════════════════════════════════════════════

def baseboard_width(comp: HydronicComponent) -> float:
    """베이스보드 폭 = clamp(60, 200, lengthFt × 15)"""
    length_ft = comp.props.get("lengthFt", DEFAULT_BASEBOARD_LENGTH_FT)
    return min(BASEBOARD_MAX_WIDTH, max(BASEBOARD_MIN_WIDTH, length_ft * BASEBOARD_PX_PER_FT))


def component_dimensions(comp: HydronicComponent) -> Tuple[float, float]:
    """
    기기 외형 (width, height)

    * 렌더링 레이어와 같은 값을 써야 포트와 배관 끝점이 일치
    """
    if comp.type == "baseboard":
        return (baseboard_width(comp), BASEBOARD_HEIGHT)
    return COMPONENT_DIMENSIONS.get(comp.type, DEFAULT_DIMENSIONS)


def port_offset(comp: HydronicComponent, port_id: str) -> Point:
    """
    ! 포트 로컬 오프셋 조회

    우선순위:
    1. 베이스보드 supply/return (폭에 따라 가변)
    2. 타입별 PORT_OFFSETS 테이블
    3. 기기에 선언된 포트 오프셋
    4. 유입측 포트(supply/left/inlet)는 (0, 30), 그 외 (60, 30)
    """
    if comp.type == "baseboard":
        if port_id == "supply":
            return (0, 30)
        if port_id == "return":
            return (baseboard_width(comp), 30)

    type_offsets = PORT_OFFSETS.get(comp.type, {})
    if port_id in type_offsets:
        return type_offsets[port_id]

    port = comp.get_port(port_id)
    if port is not None and port.offset is not None:
        return port.offset

    if port_id in INLET_SIDE_PORT_IDS:
        return FALLBACK_INLET_OFFSET
    return FALLBACK_OUTLET_OFFSET


def absolute_port_position(
    comp: HydronicComponent,
    port_id: str,
    position: Optional[Point] = None,
) -> Point:
    """
    ! 포트 절대좌표

    1. 반전: flipped_h → x 부호 반전, flipped_v → y 부호 반전
    2. 회전: (x cosθ - y sinθ, x sinθ + y cosθ)
    3. 원점 이동: position (없으면 기기 현재 위치)

    * 부동소수 잔차 제거를 위해 소수 6자리 반올림
    """
    cx, cy = port_offset(comp, port_id)
    if comp.flipped_h:
        cx = -cx
    if comp.flipped_v:
        cy = -cy

    rad = math.radians(comp.rotation)
    cos_t, sin_t = math.cos(rad), math.sin(rad)
    rx = cx * cos_t - cy * sin_t
    ry = cx * sin_t + cy * cos_t

    ox, oy = position if position is not None else comp.position
    return (round(ox + rx, 6), round(oy + ry, 6))


def snap_to_grid(value: float, grid_size: float) -> float:
    """round(v / grid) × grid (0.5 올림), grid ≤ 0 이면 그대로"""
    if grid_size <= 0:
        return value
    return math.floor(value / grid_size + 0.5) * grid_size


# ══════════════════════════════════════════════
#  PART 2: 직교 경로 생성
# ══════════════════════════════════════════════

def _dedupe(points: List[Point]) -> List[Point]:
    out: List[Point] = []
    for p in points:
        if not out or out[-1] != p:
            out.append(p)
    return out


def generate_smart_orthogonal_path(
    start: Point,
    end: Point,
    role: str,
    grid_size: float = DEFAULT_GRID_SIZE,
) -> List[Point]:
    """
    ! 두 포트 사이 직교 경로 (수평/수직 구간만)

    supply:
        |dx| ≥ |dy| → 수평 → 수직 → 수평 (중간 x 를 격자에 맞춤)
        그 외       → 수직 → 수평 → 수직 (중간 y 를 격자에 맞춤)
    return:
        헤더 높이 H = snap(max(y1, y2) + 60) 로 내려갔다가 수평 이동 후 올라감

    * 연속 중복점은 제거, 최소 2점 [start, end] 보장
    """
    fx, fy = start
    tx, ty = end
    dx, dy = tx - fx, ty - fy

    if role == "supply":
        if abs(dx) >= abs(dy):
            mid_x = snap_to_grid(fx + dx / 2.0, grid_size)
            raw = [(fx, fy), (mid_x, fy), (mid_x, ty), (tx, ty)]
        else:
            mid_y = snap_to_grid(fy + dy / 2.0, grid_size)
            raw = [(fx, fy), (fx, mid_y), (tx, mid_y), (tx, ty)]
    else:
        header_y = snap_to_grid(max(fy, ty) + RETURN_HEADER_DROP, grid_size)
        raw = [(fx, fy), (fx, header_y), (tx, header_y), (tx, ty)]

    path = _dedupe(raw)
    if len(path) < 2:
        return [(fx, fy), (tx, ty)]
    return path


def is_orthogonal(waypoints: List[Point]) -> bool:
    """모든 인접 점 쌍이 x 또는 y 를 공유하는지 (대각선 없음)"""
    return all(
        a[0] == b[0] or a[1] == b[1]
        for a, b in zip(waypoints, waypoints[1:])
    )


def count_elbows(waypoints: List[Point]) -> int:
    """진행 방향이 바뀌는 꺾임점 개수 (일직선 위 중간점은 제외)"""
    elbows = 0
    for a, b, c in zip(waypoints, waypoints[1:], waypoints[2:]):
        horizontal_in = a[1] == b[1]
        horizontal_out = b[1] == c[1]
        if horizontal_in != horizontal_out:
            elbows += 1
    return elbows


def polyline_length_ft(waypoints: List[Point]) -> float:
    """폴리라인 맨해튼 길이 (ft), 20 px = 1 ft"""
    px = sum(abs(b[0] - a[0]) + abs(b[1] - a[1]) for a, b in zip(waypoints, waypoints[1:]))
    return px / PX_PER_FT


# ══════════════════════════════════════════════
#  PART 3: 일괄 재경로 (자동 배치 / 드래그 공용)
# ══════════════════════════════════════════════

def recalculate_pipe_waypoints(
    components: Dict[str, HydronicComponent],
    pipes: Dict[str, Pipe],
    connections: List[Connection],
    new_positions: Dict[str, Point],
    grid_size: float = DEFAULT_GRID_SIZE,
) -> Dict[str, List[Point]]:
    """
    연결별 배관 경로 재계산

    * 배관 / 양끝 기기가 없는 연결은 건너뜀
    * 위치: new_positions 우선, 없으면 기기 현재 위치
    """
    waypoints: Dict[str, List[Point]] = {}
    for conn in connections:
        pipe = pipes.get(conn.pipe_id)
        from_comp = components.get(conn.from_component_id)
        to_comp = components.get(conn.to_component_id)
        if pipe is None or from_comp is None or to_comp is None:
            continue

        from_pos = new_positions.get(conn.from_component_id, from_comp.position)
        to_pos = new_positions.get(conn.to_component_id, to_comp.position)

        start = absolute_port_position(from_comp, conn.from_port_id, from_pos)
        end = absolute_port_position(to_comp, conn.to_port_id, to_pos)
        waypoints[pipe.id] = generate_smart_orthogonal_path(start, end, pipe.role, grid_size)
    return waypoints


# ══════════════════════════════════════════════
#  PART 4: 대화형 편집 호출 지점
# ══════════════════════════════════════════════

def infer_pipe_role(comp: HydronicComponent, port_id: str) -> str:
    """출발 포트 역할이 supply 이면 supply 배관, 그 외는 return"""
    port = comp.get_port(port_id)
    return "supply" if port is not None and port.role == "supply" else "return"


def create_pipe(
    components: Dict[str, HydronicComponent],
    pipe_id: str,
    connection_id: str,
    from_component_id: str,
    from_port_id: str,
    to_component_id: str,
    to_port_id: str,
    material: str = "copper",
    size: str = "3/4",
    role: Optional[str] = None,
    grid_size: float = DEFAULT_GRID_SIZE,
) -> Optional[Tuple[Pipe, Connection]]:
    """
    ! 두 포트를 잇는 배관 + 연결 생성

    * role 미지정 시 출발 포트 역할로 추론
    * 90° 엘보 개수 = 진행 방향이 바뀌는 꺾임점 수
    * 길이 = ceil(맨해튼 길이 / 20 px)
    * 기기가 없거나 같은 포트끼리면 None
    """
    from_comp = components.get(from_component_id)
    to_comp = components.get(to_component_id)
    if from_comp is None or to_comp is None:
        return None
    if from_component_id == to_component_id and from_port_id == to_port_id:
        return None

    if role is None:
        role = infer_pipe_role(from_comp, from_port_id)

    start = absolute_port_position(from_comp, from_port_id)
    end = absolute_port_position(to_comp, to_port_id)
    waypoints = generate_smart_orthogonal_path(start, end, role, grid_size)

    pipe = Pipe(
        id=pipe_id,
        material=material,
        size=size,
        length_ft=float(math.ceil(polyline_length_ft(waypoints))),
        role=role,
        insulation="0.5" if role == "supply" else "none",
        fittings=PipeFittings(elbows_90=count_elbows(waypoints)),
        waypoints=waypoints,
        start_port=f"{from_component_id}.{from_port_id}",
        end_port=f"{to_component_id}.{to_port_id}",
    )
    connection = Connection(
        id=connection_id,
        pipe_id=pipe_id,
        from_component_id=from_component_id,
        from_port_id=from_port_id,
        to_component_id=to_component_id,
        to_port_id=to_port_id,
    )
    return pipe, connection


def reroute_component_pipes(
    components: Dict[str, HydronicComponent],
    pipes: Dict[str, Pipe],
    connections: List[Connection],
    component_id: str,
    new_position: Point,
    grid_size: float = DEFAULT_GRID_SIZE,
) -> Dict[str, List[Point]]:
    """드래그 중인 기기에 연결된 배관만 재경로 (위치는 격자에 맞춤)"""
    snapped = (snap_to_grid(new_position[0], grid_size), snap_to_grid(new_position[1], grid_size))
    touching = [
        c for c in connections
        if c.from_component_id == component_id or c.to_component_id == component_id
    ]
    return recalculate_pipe_waypoints(
        components, pipes, touching, {component_id: snapped}, grid_size,
    )


def move_component(comp: HydronicComponent, position: Point, grid_size: float = DEFAULT_GRID_SIZE) -> HydronicComponent:
    """격자에 맞춘 새 위치의 기기 복사본"""
    return replace(
        comp,
        x=snap_to_grid(position[0], grid_size),
        y=snap_to_grid(position[1], grid_size),
    )


def rotate_component(comp: HydronicComponent, degrees: float) -> HydronicComponent:
    """회전 누적 (mod 360)"""
    return replace(comp, rotation=(comp.rotation + degrees) % 360)


def flip_component(comp: HydronicComponent, axis: str) -> HydronicComponent:
    """axis = "h" (좌우) 또는 "v" (상하)"""
    if axis == "h":
        return replace(comp, flipped_h=not comp.flipped_h)
    return replace(comp, flipped_v=not comp.flipped_v)


def apply_waypoints(pipes: Dict[str, Pipe], waypoints: Dict[str, List[Point]]) -> Dict[str, Pipe]:
    """재경로 결과를 반영한 배관 dict (원본 불변, 삽입 순서 유지)"""
    return {
        pipe_id: replace(pipe, waypoints=waypoints[pipe_id]) if pipe_id in waypoints else pipe
        for pipe_id, pipe in pipes.items()
    }
