# ! 온수난방 설계 시뮬레이션: 배관 계통도 (plotly Figure)
# * 존 경계 상자 → 배관 폴리라인 → 기기 사각형 + 상태 마커
# * 캔버스 좌표계 (y 아래 방향) 그대로 사용, y 축 반전

from typing import Dict, List, Optional

import plotly.graph_objects as go

from constants import STATUS_OFF, STATUS_RUNNING, STATUS_FIRING
from hydronic_model import ComponentSimState, SystemDocument
from pipe_routing import component_dimensions
from auto_layout import ZoneBounds

PIPE_COLORS = {"supply": "#EF553B", "return": "#636EFA"}
STATUS_COLORS = {
    STATUS_FIRING: "#FF7F0E",
    STATUS_RUNNING: "#00CC96",
    STATUS_OFF: "#B0B0B0",
}


def _zone_shapes(zone_bounds: List[ZoneBounds]) -> list:
    return [
        dict(
            type="rect", layer="below",
            x0=b.x, y0=b.y, x1=b.x + b.width, y1=b.y + b.height,
            fillcolor=b.color, line=dict(color="rgba(120,120,120,0.5)", dash="dot", width=1),
        )
        for b in zone_bounds
    ]


def build_schematic_figure(
    doc: SystemDocument,
    zone_bounds: Optional[List[ZoneBounds]] = None,
    states: Optional[Dict[str, ComponentSimState]] = None,
    pipe_flows: Optional[Dict[str, float]] = None,
    height: int = 700,
) -> go.Figure:
    """
    ! 계통도 Figure 생성

    * 배관: 공급 빨강 / 환수 파랑, 호버에 재질/구경/길이/유량
    * 기기: 상태별 색 (firing 주황, running 초록, off 회색)
    * 존 상자: 반투명 사각형 + 좌상단 존 이름
    """
    states = states or {}
    pipe_flows = pipe_flows or {}
    zone_bounds = zone_bounds or []

    fig = go.Figure()

    # * 배관 (역할별 범례 1회만 표시)
    shown_roles = set()
    for pipe in doc.pipes.values():
        if len(pipe.waypoints) < 2:
            continue
        xs = [p[0] for p in pipe.waypoints]
        ys = [p[1] for p in pipe.waypoints]
        gpm = pipe_flows.get(pipe.id, 0.0)
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines",
            line=dict(color=PIPE_COLORS.get(pipe.role, "#888888"), width=3 if gpm > 0 else 2),
            name=pipe.role,
            legendgroup=pipe.role,
            showlegend=pipe.role not in shown_roles,
            hovertext=(
                f"{pipe.id}<br>{pipe.size}\" {pipe.material}, {pipe.length_ft:.0f} ft"
                f"<br>{gpm:.1f} GPM"
            ),
            hoverinfo="text",
        ))
        shown_roles.add(pipe.role)

    # * 기기 사각형 + 중심 마커
    shapes = _zone_shapes(zone_bounds)
    cx, cy, colors, labels, hovers = [], [], [], [], []
    for comp in doc.components.values():
        w, h = component_dimensions(comp)
        state = states.get(comp.id, ComponentSimState())
        color = STATUS_COLORS.get(state.status, STATUS_COLORS[STATUS_OFF])
        shapes.append(dict(
            type="rect", x0=comp.x, y0=comp.y, x1=comp.x + w, y1=comp.y + h,
            fillcolor="white", line=dict(color=color, width=2),
        ))
        cx.append(comp.x + w / 2.0)
        cy.append(comp.y + h / 2.0)
        colors.append(color)
        labels.append(comp.name)
        hovers.append(
            f"{comp.name} ({comp.type})<br>status: {state.status}"
            f"<br>S {state.supply_temp:.0f}°F / R {state.return_temp:.0f}°F"
            f"<br>{state.flow_gpm:.1f} GPM"
        )

    if cx:
        fig.add_trace(go.Scatter(
            x=cx, y=cy, mode="markers+text",
            marker=dict(size=10, color=colors, line=dict(color="#333333", width=1)),
            text=labels, textposition="bottom center", textfont=dict(size=9),
            hovertext=hovers, hoverinfo="text",
            name="components",
        ))

    annotations = [
        dict(x=b.x + 6, y=b.y + 6, text=b.zone_name, showarrow=False,
             xanchor="left", yanchor="top", font=dict(size=11, color="#555555"))
        for b in zone_bounds
    ]

    fig.update_layout(
        shapes=shapes,
        annotations=annotations,
        template="plotly_white", height=height,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, autorange="reversed", scaleanchor="x", scaleratio=1),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        margin=dict(l=10, r=10, t=40, b=10),
    )
    return fig
