# ! 온수난방 설계 시뮬레이션: 순환펌프 곡선 보간 및 운전점 계산 (설계 검토용)
# * scipy interp1d(cubic) + brentq 루트 파인딩
# * 시스템 곡선 = 회로 배관 Hazen-Williams 손실 합 + 기기 압력손실

from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.interpolate import interp1d
from scipy.optimize import brentq

from constants import (
    PUMP_TYPES, HEAT_SOURCE_TYPES, ZONE_VALVE_TYPES, MECHANICAL_ZONE_ID,
    DEFAULT_PUMP_EQUIPMENT_HEAD_FT,
)
from hydronic_model import HydronicComponent, Pipe, SystemDocument
from hydraulics import pipe_head_loss, head_to_psi
from topology import classify_zones

WATTS_PER_GPM_FT = 0.1883   # 수동력 (W) = GPM × ft × 0.1883


# ──────────────────────────────────────────────
# ? 펌프 H-Q 곡선 클래스
# ──────────────────────────────────────────────

class PumpCurve:
    """
    ! 순환펌프 성능 곡선: 유량(GPM)별 양정(ft) 보간
    * 4점 이상 cubic, 그 외 linear 보간
    """

    def __init__(self, name: str, points: List[Tuple[float, float]], watts: float = 0.0):
        self.name = name
        self.watts = watts
        self.points = sorted(dict(points).items())

        flows = np.array([p[0] for p in self.points], dtype=float)
        heads = np.array([p[1] for p in self.points], dtype=float)

        self.min_flow = float(flows.min())
        self.max_flow = float(flows.max())

        kind = 'cubic' if len(self.points) >= 4 else 'linear'
        self.interp = interp1d(flows, heads, kind=kind, fill_value='extrapolate')

    def head_at_flow(self, gpm: float) -> float:
        return float(self.interp(gpm))

    def get_curve_points(self, n_points: int = 100) -> Tuple[np.ndarray, np.ndarray]:
        q = np.linspace(self.min_flow, self.max_flow, n_points)
        return q, self.interp(q)


def pump_from_component(comp: HydronicComponent) -> Optional[PumpCurve]:
    """
    펌프 기기 props["curve"] ([{gpm, head}, ...]) → PumpCurve

    * 펌프 타입이 아니거나 곡선 점이 2개 미만이면 None
    """
    if comp.type not in PUMP_TYPES:
        return None
    curve = comp.props.get("curve", [])
    points = [(float(p["gpm"]), float(p["head"])) for p in curve]
    if len({q for q, _ in points}) < 2:
        return None
    return PumpCurve(name=comp.name, points=points, watts=comp.props.get("watts", 0.0))


# ──────────────────────────────────────────────
# ? 회로 저항 곡선 클래스
# ──────────────────────────────────────────────

class CircuitCurve:
    """
    ! 배관 회로 저항 곡선 (밀폐 회로, 정수두 없음)

    H(Q) = Σ 배관 손실(Q) + 기기 손실 × (Q / Q_ref)^1.852

    * reference_gpm ≤ 0 이면 기기 손실은 유량 무관 상수로 취급
    """

    def __init__(self, pipes: List[Pipe], equipment_head_ft: float = 0.0, reference_gpm: float = 0.0):
        self.pipes = list(pipes)
        self.equipment_head_ft = equipment_head_ft
        self.reference_gpm = reference_gpm

    def equipment_head_at_flow(self, gpm: float) -> float:
        if gpm <= 0:
            return 0.0
        if self.reference_gpm <= 0:
            return self.equipment_head_ft
        return self.equipment_head_ft * (gpm / self.reference_gpm) ** 1.852

    def head_at_flow(self, gpm: float) -> float:
        """주어진 유량에서 회로가 요구하는 양정 (ft)"""
        if gpm <= 0:
            return 0.0
        piping = sum(
            pipe_head_loss(gpm, p.material, p.size, p.length_ft, p.fittings)
            for p in self.pipes
        )
        return piping + self.equipment_head_at_flow(gpm)

    def get_curve_points(self, n_points: int = 50, q_max: float = 30.0) -> Tuple[np.ndarray, np.ndarray]:
        q = np.linspace(0.0, q_max, n_points)
        h = np.array([self.head_at_flow(v) for v in q])
        return q, h


def equipment_head_ft(components: Dict[str, HydronicComponent]) -> float:
    """
    기기 압력손실 합 (ft): 열원 + 공기분리기 + 최대 존 밸브

    * props["pressureDrop"] 이 전혀 없으면 기본값 사용
    """
    heat_source, separator, valve = None, None, 0.0
    found = False
    for comp in components.values():
        drop = comp.props.get("pressureDrop")
        if drop is None:
            continue
        found = True
        if comp.type in HEAT_SOURCE_TYPES and heat_source is None:
            heat_source = drop
        elif comp.type == "air_separator" and separator is None:
            separator = drop
        elif comp.type in ZONE_VALVE_TYPES:
            valve = max(valve, drop)
    if not found:
        return DEFAULT_PUMP_EQUIPMENT_HEAD_FT
    return (heat_source or 0.0) + (separator or 0.0) + valve


def default_circuit_pipes(doc: SystemDocument) -> List[Pipe]:
    """기계실 기기에 연결된 배관 (1차 회로 근사)"""
    zone_map = classify_zones(doc.components, doc.connections, doc.zones)
    pipe_ids = []
    for conn in doc.connections:
        if conn.pipe_id not in doc.pipes or conn.pipe_id in pipe_ids:
            continue
        if MECHANICAL_ZONE_ID in (zone_map.get(conn.from_component_id), zone_map.get(conn.to_component_id)):
            pipe_ids.append(conn.pipe_id)
    return [doc.pipes[pid] for pid in pipe_ids]


# ──────────────────────────────────────────────
# ? 운전점 탐색 (H-Q ∩ 회로 곡선)
# ──────────────────────────────────────────────

def find_operating_point(pump: PumpCurve, system) -> Optional[dict]:
    """
    ! 펌프 곡선과 회로 저항 곡선의 교점 (운전점)

    system: head_at_flow 메서드를 가진 곡선 (CircuitCurve)
    반환 dict: gpm, head_ft, head_psi, hydraulic_w
    * 교점이 곡선 범위 밖이거나 brentq 실패 → None
    """

    def residual(q):
        return pump.head_at_flow(q) - system.head_at_flow(q)

    q_low = pump.min_flow
    q_high = pump.max_flow

    try:
        r_low = residual(q_low)
        r_high = residual(q_high)

        if r_low * r_high > 0:
            return None

        q_op = brentq(residual, q_low, q_high, xtol=0.01)
    except (ValueError, RuntimeError):
        return None

    h_op = pump.head_at_flow(q_op)
    return {
        "gpm": round(q_op, 2),
        "head_ft": round(h_op, 2),
        "head_psi": round(head_to_psi(h_op), 2),
        "hydraulic_w": round(q_op * h_op * WATTS_PER_GPM_FT, 1),
    }
