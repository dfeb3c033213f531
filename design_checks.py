# ! 온수난방 설계 시뮬레이션: 설계 검토 (누락 기기 / 미연결 / 용량 / 유속)
# * 결과는 ValidationMessage 목록 (error → warning → info 순)
# * 설계 문서 스냅샷만 읽음 (수정 없음)

from dataclasses import dataclass
from typing import Dict, List, Optional

from constants import HEAT_SOURCE_TYPES, PUMP_TYPES
from hydronic_model import ComponentSimState, SystemDocument
from heat_loss import calculate_heat_loss
from hydraulics import velocity, inside_diameter, velocity_warning
from simulation import find_heat_source, heat_source_rating, estimate_pipe_flows

SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2}


@dataclass
class ValidationMessage:
    id: str
    severity: str          # "error" | "warning" | "info"
    message: str
    component_id: Optional[str] = None


def _has_type(doc: SystemDocument, types) -> bool:
    return any(c.type in types for c in doc.components.values())


def check_design(
    doc: SystemDocument,
    states: Optional[Dict[str, ComponentSimState]] = None,
) -> List[ValidationMessage]:
    """
    ! 설계 검토 메시지 목록

    필수 기기:
    - 열원 없음 → error
    - 순환펌프 없음 → error
    - 팽창탱크 / 공기분리기 / 안전밸브 없음 → warning
    연결:
    - 열원은 있는데 배관 없음 → info
    - 배관이 있을 때 연결 안 된 기기 → warning
    용량 / 유속:
    - 열원 최대 출력 < 설계 열손실 → warning
    - states 가 주어지면 배관 유속 범위 이탈 → info
    """
    messages: List[ValidationMessage] = []

    has_source = _has_type(doc, HEAT_SOURCE_TYPES)
    if not has_source:
        messages.append(ValidationMessage(
            "no-boiler", "error", "No heat source (boiler/heat pump) in design"))
    if not _has_type(doc, PUMP_TYPES):
        messages.append(ValidationMessage(
            "no-pump", "error", "No circulator pump in design"))
    if not _has_type(doc, {"expansion_tank"}):
        messages.append(ValidationMessage(
            "no-exp-tank", "warning", "Missing expansion tank"))
    if not _has_type(doc, {"air_separator"}):
        messages.append(ValidationMessage(
            "no-air-sep", "warning", "Missing air separator"))
    if not _has_type(doc, {"pressure_relief"}):
        messages.append(ValidationMessage(
            "no-relief", "warning", "Missing pressure relief valve"))

    if has_source and not doc.pipes:
        messages.append(ValidationMessage(
            "no-pipes", "info", "No piping connections yet"))

    if doc.pipes:
        connected = set()
        for conn in doc.connections:
            connected.add(conn.from_component_id)
            connected.add(conn.to_component_id)
        for comp_id, comp in doc.components.items():
            if comp_id not in connected:
                messages.append(ValidationMessage(
                    f"unconnected-{comp_id}", "warning",
                    f"{comp.name} is not connected", component_id=comp_id))

    # * 열원 용량 vs 설계 열손실
    heat_source = find_heat_source(doc.components)
    if heat_source is not None:
        design_loss = calculate_heat_loss(doc.building)["total"]
        max_output = heat_source_rating(heat_source)["max_output_btu"]
        if max_output < design_loss:
            messages.append(ValidationMessage(
                f"undersized-{heat_source.id}", "warning",
                f"{heat_source.name} output {max_output:,.0f} BTU/hr is below "
                f"design heat loss {design_loss:,.0f} BTU/hr",
                component_id=heat_source.id))

    # * 배관 유속 (1.5 ~ 4 ft/s)
    if states:
        flows = estimate_pipe_flows(doc.pipes, doc.connections, states)
        for pipe_id, gpm in flows.items():
            if gpm <= 0:
                continue
            pipe = doc.pipes[pipe_id]
            status = velocity_warning(gpm, pipe.material, pipe.size)
            if status == "ok":
                continue
            v = velocity(gpm, inside_diameter(pipe.material, pipe.size))
            messages.append(ValidationMessage(
                f"velocity-{pipe_id}", "info",
                f"Pipe {pipe_id} velocity {v:.1f} ft/s is {status} "
                f"({pipe.size}\" {pipe.material} at {gpm:.1f} GPM)"))

    messages.sort(key=lambda m: SEVERITY_ORDER.get(m.severity, 3))
    return messages


def count_by_severity(messages: List[ValidationMessage]) -> Dict[str, int]:
    counts = {"error": 0, "warning": 0, "info": 0}
    for m in messages:
        counts[m.severity] = counts.get(m.severity, 0) + 1
    return counts
