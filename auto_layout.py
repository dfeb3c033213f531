# ! 온수난방 설계 시뮬레이션: 자동 배치 엔진 (계층형 그래프 배치 + 존 그룹)
# * 기계실 → 존 방향 흐름 (LR / TB)
# * 존 분류 결과를 클러스터로 사용, 존 경계 상자 계산
# * 잠금(locked) 기기는 기존 위치 유지

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

import numpy as np

from constants import (
    LAYOUT_MARGIN, ORDERING_SWEEPS, ZONE_COLORS, MECHANICAL_ZONE_COLOR,
    MECHANICAL_ZONE_ID, MECHANICAL_ZONE_NAME, DEFAULT_ZONE_PADDING,
)
from hydronic_model import (
    Connection, HydronicComponent, LayoutOptions, Pipe, Point, SystemDocument, Zone,
)
from pipe_routing import (
    component_dimensions, snap_to_grid, recalculate_pipe_waypoints, apply_waypoints,
)
from topology import classify_zones, group_by_zone


# ══════════════════════════════════════════════
#  PART 1: 결과 데이터 구조
# ══════════════════════════════════════════════

@dataclass
class ZoneBounds:
    """존 경계 상자 (좌상단 기준)"""
    zone_id: str
    zone_name: str
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclass
class LayoutResult:
    component_positions: Dict[str, Point] = field(default_factory=dict)
    zone_bounds: List[ZoneBounds] = field(default_factory=list)
    pipe_waypoints: Dict[str, List[Point]] = field(default_factory=dict)


# ══════════════════════════════════════════════
#  PART 2: 계층 배치 (Sugiyama 방식)
# ══════════════════════════════════════════════

def _remove_cycles(nodes: list, edges: List[tuple]) -> List[tuple]:
    """
    DFS 역방향 간선을 뒤집어 DAG 생성

    * 방문 순서 = 기기 삽입 순서
    * 뒤집은 뒤 생기는 중복 간선은 제거
    """
    successors = {n: [] for n in nodes}
    for u, v in edges:
        successors[u].append(v)

    visiting, done, back = set(), set(), set()

    # * 명시적 스택 DFS (긴 체인에서도 재귀 한도 없음)
    for root in nodes:
        if root in done:
            continue
        visiting.add(root)
        stack = [(root, iter(successors[root]))]
        while stack:
            node, children = stack[-1]
            nxt = next(children, None)
            if nxt is None:
                stack.pop()
                visiting.discard(node)
                done.add(node)
            elif nxt in visiting:
                back.add((node, nxt))
            elif nxt not in done:
                visiting.add(nxt)
                stack.append((nxt, iter(successors[nxt])))

    flipped = [(v, u) if (u, v) in back else (u, v) for u, v in edges]
    return list(dict.fromkeys(flipped))


def _assign_ranks(nodes: list, edges: List[tuple]) -> Dict[object, int]:
    """
    ! 최장 경로 계층 배정

    * 진입 간선이 없는 노드 = 0 에서 시작, rank(v) = max(rank(u) + 1)
    * 출발 전용 노드는 자식 중 최소 rank - 1 로 당김 (긴 간선 감소)
    """
    successors = {n: [] for n in nodes}
    indegree = {n: 0 for n in nodes}
    for u, v in edges:
        successors[u].append(v)
        indegree[v] += 1

    sources = [n for n in nodes if indegree[n] == 0]
    rank = {n: 0 for n in nodes}
    remaining = dict(indegree)
    queue = list(sources)
    i = 0
    while i < len(queue):
        node = queue[i]
        i += 1
        for nxt in successors[node]:
            rank[nxt] = max(rank[nxt], rank[node] + 1)
            remaining[nxt] -= 1
            if remaining[nxt] == 0:
                queue.append(nxt)

    for node in sources:
        if successors[node]:
            rank[node] = min(rank[c] for c in successors[node]) - 1
    return rank


def _order_layers(
    layers: List[list],
    predecessors: Dict[object, list],
    successors: Dict[object, list],
    cluster_key: Dict[object, int],
) -> List[list]:
    """
    barycenter 교차 최소화 (하향 + 상향 스윕 반복)

    * 정렬 키 = (클러스터 순서, 이웃 위치 평균, 현재 위치)
    * 클러스터 순서가 1순위이므로 같은 존 노드는 항상 연속 배치
    """
    def sweep(r: int, ref_layer: list, neighbors: Dict[object, list]):
        ref_index = {n: i for i, n in enumerate(ref_layer)}
        keyed = []
        for idx, node in enumerate(layers[r]):
            nbr = [ref_index[m] for m in neighbors[node] if m in ref_index]
            bary = float(np.mean(nbr)) if nbr else float(idx)
            keyed.append((cluster_key[node], bary, idx, node))
        keyed.sort(key=lambda t: t[:3])
        layers[r] = [t[3] for t in keyed]

    for _ in range(ORDERING_SWEEPS):
        for r in range(1, len(layers)):
            sweep(r, layers[r - 1], predecessors)
        for r in range(len(layers) - 2, -1, -1):
            sweep(r, layers[r + 1], successors)
    return layers


def _layered_centers(
    components: Dict[str, HydronicComponent],
    connections: List[Connection],
    zone_map: Dict[str, str],
    zones: List[Zone],
    opts: LayoutOptions,
) -> Dict[str, Point]:
    """
    ! 기기 중심 좌표 계산

    알고리즘:
    1. 연결 → 방향 간선 (없는 기기 / 자기 자신 연결 제외)
    2. 순환 제거 → 최장 경로 계층
    3. 2단 이상 걸치는 간선에 더미 노드 삽입 (가까운 쪽 클러스터에 소속)
    4. barycenter 순서 최적화
    5. 계층 축: 계층별 최대 두께 + rank_sep 간격
       교차 축: 클러스터별 띠(band), 띠 사이 node_sep + 2 × zone_padding
    """
    nodes = list(components.keys())
    if not nodes:
        return {}

    horizontal = opts.direction != "TB"
    sizes = {cid: component_dimensions(c) for cid, c in components.items()}

    def rank_thickness(n) -> float:
        if n not in sizes:
            return 0.0
        return sizes[n][0] if horizontal else sizes[n][1]

    def cross_size(n) -> float:
        if n not in sizes:
            return float(opts.edge_sep)
        return sizes[n][1] if horizontal else sizes[n][0]

    edges = [
        (c.from_component_id, c.to_component_id) for c in connections
        if c.from_component_id in components and c.to_component_id in components
        and c.from_component_id != c.to_component_id
    ]
    dag = _remove_cycles(nodes, edges)
    rank = _assign_ranks(nodes, dag)

    # * 클러스터 순서: 기계실 → 존 선언 순서 → 기타
    cluster_order: Dict[str, int] = {MECHANICAL_ZONE_ID: 0}
    for zone in zones:
        cluster_order.setdefault(zone.id, len(cluster_order))
    for n in nodes:
        cluster_order.setdefault(zone_map.get(n, MECHANICAL_ZONE_ID), len(cluster_order))

    cluster = {n: zone_map.get(n, MECHANICAL_ZONE_ID) for n in nodes}
    seq = {n: i for i, n in enumerate(nodes)}

    predecessors: Dict[object, list] = {n: [] for n in nodes}
    successors: Dict[object, list] = {n: [] for n in nodes}

    def link(u, v):
        successors[u].append(v)
        predecessors[v].append(u)

    for u, v in dag:
        span = rank[v] - rank[u]
        prev = u
        for k in range(1, span):
            dummy = ("dummy", u, v, k)
            rank[dummy] = rank[u] + k
            cluster[dummy] = cluster[u] if k <= span / 2 else cluster[v]
            seq[dummy] = len(seq)
            predecessors[dummy] = []
            successors[dummy] = []
            link(prev, dummy)
            prev = dummy
        link(prev, v)

    cluster_key = {n: cluster_order[cluster[n]] for n in rank}
    max_rank = max(rank.values())
    layers: List[list] = [[] for _ in range(max_rank + 1)]
    for n in sorted(rank, key=lambda m: (cluster_key[m], seq[m])):
        layers[rank[n]].append(n)

    layers = _order_layers(layers, predecessors, successors, cluster_key)

    # * 계층 축 좌표
    thickness = np.array([max((rank_thickness(n) for n in layer), default=0.0) for layer in layers])
    starts = LAYOUT_MARGIN + np.concatenate(([0.0], np.cumsum(thickness[:-1] + opts.rank_sep)))
    rank_center = starts + thickness / 2.0

    # * 교차 축: 클러스터 × 계층별 적층 길이
    def gap(a, b) -> float:
        both_dummy = a not in sizes and b not in sizes
        return float(opts.edge_sep if both_dummy else opts.node_sep)

    stacks: Dict[Tuple[str, int], list] = {}
    for r, layer in enumerate(layers):
        for n in layer:
            stacks.setdefault((cluster[n], r), []).append(n)

    def stack_extent(members: list) -> float:
        total = sum(cross_size(n) for n in members)
        total += sum(gap(a, b) for a, b in zip(members, members[1:]))
        return total

    present = sorted({cluster[n] for n in rank}, key=lambda c: cluster_order[c])
    band_size = {
        c: max(stack_extent(members) for (cl, _), members in stacks.items() if cl == c)
        for c in present
    }

    band_start: Dict[str, float] = {}
    cursor = float(LAYOUT_MARGIN)
    for c in present:
        band_start[c] = cursor
        cursor += band_size[c] + opts.node_sep + 2 * opts.zone_padding

    centers: Dict[str, Point] = {}
    for (c, r), members in stacks.items():
        pos = band_start[c] + (band_size[c] - stack_extent(members)) / 2.0
        for i, n in enumerate(members):
            if i > 0:
                pos += gap(members[i - 1], n)
            cross_center = pos + cross_size(n) / 2.0
            pos += cross_size(n)
            if n in sizes:
                along = float(rank_center[r])
                centers[n] = (along, cross_center) if horizontal else (cross_center, along)
    return centers


# ══════════════════════════════════════════════
#  PART 3: 존 경계 상자
# ══════════════════════════════════════════════

def _bounding_box(
    comp_ids: List[str],
    components: Dict[str, HydronicComponent],
    positions: Dict[str, Point],
    padding: float,
) -> Optional[Tuple[float, float, float, float]]:
    xs_min, ys_min, xs_max, ys_max = [], [], [], []
    for cid in comp_ids:
        pos = positions.get(cid)
        comp = components.get(cid)
        if pos is None or comp is None:
            continue
        w, h = component_dimensions(comp)
        xs_min.append(pos[0])
        ys_min.append(pos[1])
        xs_max.append(pos[0] + w)
        ys_max.append(pos[1] + h)
    if not xs_min:
        return None
    min_x, min_y, max_x, max_y = min(xs_min), min(ys_min), max(xs_max), max(ys_max)
    return (min_x - padding, min_y - padding,
            max_x - min_x + 2 * padding, max_y - min_y + 2 * padding)


def calculate_zone_bounds(
    components: Dict[str, HydronicComponent],
    positions: Dict[str, Point],
    zone_map: Dict[str, str],
    zones: List[Zone],
    padding: float = DEFAULT_ZONE_PADDING,
) -> List[ZoneBounds]:
    """
    ! 존별 경계 상자

    * 존 선언 순서대로, 기기가 1개 이상인 존만 출력
    * 색상은 출력된 상자 순서로 팔레트 순환
    * 기계실은 마지막, 회색 고정
    """
    groups = group_by_zone(zone_map)
    bounds: List[ZoneBounds] = []
    color_index = 0

    for zone in zones:
        box = _bounding_box(groups.get(zone.id, []), components, positions, padding)
        if box is None:
            continue
        bounds.append(ZoneBounds(
            zone_id=zone.id, zone_name=zone.name,
            x=box[0], y=box[1], width=box[2], height=box[3],
            color=ZONE_COLORS[color_index % len(ZONE_COLORS)],
        ))
        color_index += 1

    box = _bounding_box(groups.get(MECHANICAL_ZONE_ID, []), components, positions, padding)
    if box is not None:
        bounds.append(ZoneBounds(
            zone_id=MECHANICAL_ZONE_ID, zone_name=MECHANICAL_ZONE_NAME,
            x=box[0], y=box[1], width=box[2], height=box[3],
            color=MECHANICAL_ZONE_COLOR,
        ))
    return bounds


# ══════════════════════════════════════════════
#  PART 4: 자동 배치 진입점
# ══════════════════════════════════════════════

def auto_layout_system(
    components: Dict[str, HydronicComponent],
    pipes: Dict[str, Pipe],
    connections: List[Connection],
    zones: List[Zone],
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """
    ! 전체 시스템 자동 배치

    1. 기기 → 존 분류 (시뮬레이션과 같은 함수)
    2. 계층 배치로 중심 좌표 계산
    3. 중심 → 좌상단, 격자 맞춤 (잠금 기기는 기존 위치)
    4. 존 경계 상자
    5. 새 위치 기준 배관 경로 재계산
    """
    opts = options or LayoutOptions()
    zone_map = classify_zones(components, connections, zones)
    centers = _layered_centers(components, connections, zone_map, zones, opts)

    positions: Dict[str, Point] = {}
    for cid, comp in components.items():
        if cid in opts.locked_component_ids or cid not in centers:
            positions[cid] = comp.position
            continue
        w, h = component_dimensions(comp)
        cx, cy = centers[cid]
        positions[cid] = (
            snap_to_grid(cx - w / 2.0, opts.grid_size),
            snap_to_grid(cy - h / 2.0, opts.grid_size),
        )

    return LayoutResult(
        component_positions=positions,
        zone_bounds=calculate_zone_bounds(components, positions, zone_map, zones, opts.zone_padding),
        pipe_waypoints=recalculate_pipe_waypoints(
            components, pipes, connections, positions, opts.grid_size,
        ),
    )


def apply_layout(doc: SystemDocument, result: LayoutResult) -> SystemDocument:
    """배치 결과를 반영한 새 설계 문서 (원본 불변)"""
    components = {
        cid: replace(comp, x=result.component_positions[cid][0], y=result.component_positions[cid][1])
        if cid in result.component_positions else comp
        for cid, comp in doc.components.items()
    }
    return replace(
        doc,
        components=components,
        pipes=apply_waypoints(doc.pipes, result.pipe_waypoints),
    )
