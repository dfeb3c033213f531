# ! 온수난방 설계 시뮬레이션: 배관망 인접 구조 및 기기 → 존 분류
# * 시뮬레이션 엔진과 자동 배치 엔진이 같은 분류 함수를 공유합니다.

from typing import Dict, List

from constants import (
    MECHANICAL_TYPES, EMITTER_TYPES, ZONE_VALVE_TYPES, MECHANICAL_ZONE_ID,
)
from hydronic_model import Connection, HydronicComponent, Zone


# ──────────────────────────────────────────────
# ? 인접 구조 (Adjacency)
# ──────────────────────────────────────────────
def build_adjacency(
    components: Dict[str, HydronicComponent],
    connections: List[Connection],
) -> Dict[str, List[str]]:
    """
    무방향 인접 목록 생성

    * 이웃 순서 = 연결 목록의 삽입 순서 (중복 제거)
    * 존재하지 않는 기기를 가리키는 연결은 건너뜀
    """
    adjacency: Dict[str, List[str]] = {}
    for conn in connections:
        a, b = conn.from_component_id, conn.to_component_id
        if a not in components or b not in components:
            continue
        for node, other in ((a, b), (b, a)):
            neighbors = adjacency.setdefault(node, [])
            if other not in neighbors:
                neighbors.append(other)
    return adjacency


# ──────────────────────────────────────────────
# ? 이름 기반 존 매칭 규칙
# ──────────────────────────────────────────────
def _name_matches_zone(name: str, zone: Zone) -> bool:
    """
    기기 이름(소문자)이 존에 속하는지 판정

    우선순위 (하나라도 참이면 매칭):
    1. 존 id 포함
    2. 존 이름 "floor 1" → "1f" / "garage"
    3. 존 이름 "floor 2" → "2f" / "floor 2"
    4. 존 이름 "floor 3" → "3f" / "floor 3"
    5. 존 이름 "garage" → "garage"
    6. 존 이름 첫 단어 포함
    """
    zone_name = zone.name.lower()
    first_word = zone.name.split(" ")[0].lower()
    return (
        zone.id in name
        or ("floor 1" in zone_name and ("1f" in name or "garage" in name))
        or ("floor 2" in zone_name and ("2f" in name or "floor 2" in name))
        or ("floor 3" in zone_name and ("3f" in name or "floor 3" in name))
        or ("garage" in zone_name and "garage" in name)
        or first_word in name
    )


# ──────────────────────────────────────────────
# ? 기기 → 존 분류 (3-pass)
# ──────────────────────────────────────────────
def classify_zones(
    components: Dict[str, HydronicComponent],
    connections: List[Connection],
    zones: List[Zone],
) -> Dict[str, str]:
    """
    ! 모든 기기에 존 id 배정 (결정적, 삽입 순서 기준 타이브레이크)

    1차: 기계실 타입 → "mechanical"
    2차: 이름 매칭 (존 선언 순서 중 첫 매칭)
         존 밸브는 이웃 중 비-기계실 존이 있으면 그 존으로 덮어씀
         매칭 실패한 방열기는 첫 번째 존으로
    3차: 남은 기기는 이웃의 존을 상속, 그래도 없으면 "mechanical"
    """
    zone_map: Dict[str, str] = {}

    for comp_id, comp in components.items():
        if comp.type in MECHANICAL_TYPES:
            zone_map[comp_id] = MECHANICAL_ZONE_ID

    adjacency = build_adjacency(components, connections)

    for comp_id, comp in components.items():
        if comp_id in zone_map:
            continue

        name = comp.name.lower()
        for zone in zones:
            if _name_matches_zone(name, zone):
                zone_map[comp_id] = zone.id
                break

        # * 존 밸브: 연결된 기기의 존이 이름 매칭보다 우선
        if comp.type in ZONE_VALVE_TYPES:
            for neighbor_id in adjacency.get(comp_id, []):
                neighbor_zone = zone_map.get(neighbor_id)
                if neighbor_zone and neighbor_zone != MECHANICAL_ZONE_ID:
                    zone_map[comp_id] = neighbor_zone
                    break

        if comp_id not in zone_map and comp.type in EMITTER_TYPES and zones:
            zone_map[comp_id] = zones[0].id

    for comp_id in components:
        if comp_id not in zone_map:
            for neighbor_id in adjacency.get(comp_id, []):
                neighbor_zone = zone_map.get(neighbor_id)
                if neighbor_zone:
                    zone_map[comp_id] = neighbor_zone
                    break
        if comp_id not in zone_map:
            zone_map[comp_id] = MECHANICAL_ZONE_ID

    return zone_map


def group_by_zone(zone_map: Dict[str, str]) -> Dict[str, List[str]]:
    """존 id → 기기 id 목록 (분류 결과의 삽입 순서 유지)"""
    groups: Dict[str, List[str]] = {}
    for comp_id, zone_id in zone_map.items():
        groups.setdefault(zone_id, []).append(comp_id)
    return groups
