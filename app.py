# ! 온수난방 설계 시뮬레이션: Streamlit UI 대시보드
# * 사이드바: 템플릿 + 건물 외피 + 운전 조건 + 자동 배치 옵션
# * KPI 대시보드 + 6개 탭 (계통도, 열손실, 기기 상태, 배관, 펌프, 설계 검토)

import sys
import os
from dataclasses import replace

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from constants import (
    FOUNDATION_TYPES, TIME_SCALE_OPTIONS,
    DEFAULT_NODE_SEP, DEFAULT_RANK_SEP, DEFAULT_GRID_SIZE,
    MAX_BUILDING_SQFT, MAX_FLOORS, PUMP_TYPES,
    MECHANICAL_ZONE_ID, MECHANICAL_ZONE_NAME,
)
from hydronic_model import (
    LayoutOptions, SimulationSettings, ValidationError,
    validate_building_inputs, validate_time_scale, with_settings,
)
from heat_loss import calculate_heat_loss, allocate_zone_heat_loss, ach_from_blower_door, building_volume
from hydraulics import pipe_design_summary
from topology import classify_zones
from simulation import (
    run_simulation_tick, calculate_zone_demands, advance_simulation_clock, estimate_pipe_flows,
    find_heat_source,
)
from auto_layout import auto_layout_system, apply_layout, calculate_zone_bounds
from pump import (
    pump_from_component, CircuitCurve, default_circuit_pipes, equipment_head_ft, find_operating_point,
)
from design_checks import check_design, count_by_severity
from schematic import build_schematic_figure
from templates import list_templates, get_template, demo_simulation_settings


# ──────────────────────────────────────────────
# ? 페이지 설정
# ──────────────────────────────────────────────
st.set_page_config(
    page_title="HydronicSim",
    page_icon="🔥",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(
    '<h1 style="margin-bottom:0">Hydronic<span style="color:#EF553B">Sim</span>: '
    'Hydronic Heating Design Simulator</h1>',
    unsafe_allow_html=True,
)
st.caption("건물 열손실 기반 온수난방 계통 설계, 정상상태 열 시뮬레이션, 자동 배치 및 직교 배관 경로")


# ══════════════════════════════════════════════
#  사이드바 입력
# ══════════════════════════════════════════════

# ── 1. 템플릿 ──
st.sidebar.header(":material/home: 시스템 템플릿")

_templates = list_templates()
_template_names = {t["id"]: t["name"] for t in _templates}
template_id = st.sidebar.selectbox(
    "템플릿",
    [t["id"] for t in _templates],
    format_func=lambda x: _template_names[x],
)
template = get_template(template_id)
st.sidebar.caption(template.description)
base = template.building

# ── 2. 건물 외피 ──
st.sidebar.header(":material/apartment: 건물 외피")

total_sq_ft = st.sidebar.number_input(
    "연면적 (ft²)", min_value=0.0, max_value=float(MAX_BUILDING_SQFT),
    value=float(base.total_sq_ft), step=100.0,
)
col_f1, col_f2 = st.sidebar.columns(2)
with col_f1:
    floors = st.number_input("층수", min_value=1, max_value=MAX_FLOORS, value=int(base.floors), step=1)
with col_f2:
    ceiling_height = st.number_input("천장 높이 (ft)", min_value=0.0, value=float(base.ceiling_height), step=0.5)

foundation_type = st.sidebar.selectbox(
    "기초 형식", list(FOUNDATION_TYPES), index=list(FOUNDATION_TYPES).index(base.foundation_type),
)

col_t1, col_t2 = st.sidebar.columns(2)
with col_t1:
    design_outdoor = st.number_input(
        "설계 외기 (°F)", value=float(base.climate.design_outdoor_temp), step=1.0,
    )
with col_t2:
    indoor_design = st.number_input(
        "실내 설계 (°F)", value=float(base.climate.indoor_design_temp), step=1.0,
    )

with st.sidebar.expander("단열 / 창호 / 침기"):
    r_walls = st.number_input("벽체 R", value=float(base.insulation.walls), step=1.0)
    r_ceiling = st.number_input("천장 R", value=float(base.insulation.ceiling), step=1.0)
    r_floor = st.number_input("바닥 R", value=float(base.insulation.floor), step=1.0)
    window_area = st.number_input("창호 면적 (ft²)", value=float(base.window_door.total_window_area), step=10.0)
    window_u = st.number_input("창호 U", value=float(base.window_door.window_u_value), step=0.01, format="%.2f")
    ach = st.number_input("환기 횟수 ACH", value=float(base.infiltration.ach), step=0.05, format="%.2f")

building = replace(
    base,
    total_sq_ft=total_sq_ft,
    floors=int(floors),
    ceiling_height=ceiling_height,
    foundation_type=foundation_type,
    climate=replace(base.climate, design_outdoor_temp=design_outdoor, indoor_design_temp=indoor_design),
    insulation=replace(base.insulation, walls=r_walls, ceiling=r_ceiling, floor=r_floor),
    window_door=replace(base.window_door, total_window_area=window_area, window_u_value=window_u),
    infiltration=replace(base.infiltration, ach=ach),
)

# ── 3. 운전 조건 ──
st.sidebar.header(":material/thermostat: 운전 조건")

_default_settings = demo_simulation_settings() if template_id == "demo-3-story" else SimulationSettings()
outdoor_temp = st.sidebar.slider(
    "현재 외기온도 (°F)",
    min_value=-30, max_value=80, value=int(_default_settings.outdoor_temp), step=1,
    help="외기온도가 실내 설계온도 이상이면 모든 존이 난방 요구를 멈춥니다.",
)
time_scale = st.sidebar.select_slider("시간 배율", options=TIME_SCALE_OPTIONS, value=1)

# ── 4. 자동 배치 ──
st.sidebar.header(":material/account_tree: 자동 배치")

run_layout = st.sidebar.checkbox("자동 배치 적용", value=False)
direction = st.sidebar.radio("흐름 방향", ["LR", "TB"], horizontal=True,
                             format_func=lambda x: "좌 → 우" if x == "LR" else "상 → 하")
col_l1, col_l2 = st.sidebar.columns(2)
with col_l1:
    node_sep = st.number_input("노드 간격", min_value=20, max_value=400, value=DEFAULT_NODE_SEP, step=10)
with col_l2:
    rank_sep = st.number_input("계층 간격", min_value=40, max_value=600, value=DEFAULT_RANK_SEP, step=10)


# ══════════════════════════════════════════════
#  메인 영역
# ══════════════════════════════════════════════

try:
    validate_building_inputs(building)
    validate_time_scale(time_scale)
except ValidationError as e:
    st.error(f"입력 오류: {e}")
    st.stop()

doc = replace(template.to_document(), building=building)

# * 시뮬레이션 시계 (템플릿이 바뀌면 초기화)
if st.session_state.get("clock_template") != template_id:
    st.session_state["clock_template"] = template_id
    st.session_state["settings"] = _default_settings
settings = with_settings(
    st.session_state["settings"], outdoor_temp=float(outdoor_temp), time_scale=time_scale,
)

zone_map = classify_zones(doc.components, doc.connections, doc.zones)

if run_layout:
    layout = auto_layout_system(
        doc.components, doc.pipes, doc.connections, doc.zones,
        LayoutOptions(direction=direction, node_sep=node_sep, rank_sep=rank_sep, grid_size=DEFAULT_GRID_SIZE),
    )
    doc = apply_layout(doc, layout)
    zone_bounds = layout.zone_bounds
else:
    zone_bounds = calculate_zone_bounds(
        doc.components, {cid: c.position for cid, c in doc.components.items()}, zone_map, doc.zones,
    )

states = run_simulation_tick(doc.building, doc.zones, doc.components, doc.connections, settings.outdoor_temp)
pipe_flows = estimate_pipe_flows(doc.pipes, doc.connections, states)
demands = calculate_zone_demands(
    doc.building, doc.zones, doc.components, doc.connections, settings.outdoor_temp, zone_map=zone_map,
)
heat_loss = calculate_heat_loss(doc.building)
messages = check_design(doc, states)

# ── KPI 대시보드 ──
st.markdown("---")
st.markdown(
    f"**시스템**: {template.name} | 기기 **{len(doc.components)}개** | "
    f"배관 **{len(doc.pipes)}개** | 존 **{len(doc.zones)}개** | "
    f"경과 시간 **{settings.elapsed_seconds:,.0f} s** (×{settings.time_scale})"
)

_heat_source = find_heat_source(doc.components)
source_state = states[_heat_source.id] if _heat_source is not None else None
calling = sum(1 for d in demands if d.is_calling)
counts = count_by_severity(messages)

kpi1, kpi2, kpi3, kpi4 = st.columns(4)
with kpi1:
    st.metric("설계 열손실", f"{heat_loss['total']:,.0f} BTU/hr")
with kpi2:
    current = sum(d.current_heat_loss for d in demands)
    st.metric("현재 부하", f"{current:,.0f} BTU/hr", delta=f"외기 {settings.outdoor_temp:.0f}°F",
              delta_color="off")
with kpi3:
    if source_state is not None:
        st.metric("열원", f"{source_state.supply_temp:.0f}°F / {source_state.return_temp:.0f}°F",
                  delta=f"{source_state.flow_gpm:.1f} GPM · {source_state.status}", delta_color="off")
    else:
        st.metric("열원", "N/A")
with kpi4:
    st.metric("난방 요구 존", f"{calling} / {len(doc.zones)}",
              delta=f"error {counts['error']} · warning {counts['warning']}", delta_color="off")

col_c1, col_c2 = st.columns([1, 5])
with col_c1:
    if st.button(":material/play_arrow: 1초 진행", use_container_width=True):
        st.session_state["settings"] = advance_simulation_clock(
            with_settings(settings, running=True, paused=False), 1.0,
        )
        st.rerun()
with col_c2:
    st.caption("매 tick 전체 상태를 다시 계산합니다. 이전 상태에 의존하지 않으므로 결과는 외기온도에만 의존합니다.")

st.markdown("---")

tab1, tab2, tab3, tab4, tab5, tab6 = st.tabs([
    ":material/schema: 계통도",
    ":material/thermostat: 열손실",
    ":material/memory: 기기 상태",
    ":material/plumbing: 배관",
    ":material/water_pump: 펌프",
    ":material/fact_check: 설계 검토",
])

# ═══ Tab 1: 계통도 ═══
with tab1:
    st.subheader("배관 계통도")
    fig = build_schematic_figure(doc, zone_bounds, states, pipe_flows)
    st.plotly_chart(fig, use_container_width=True)

    zone_names = {z.id: z.name for z in doc.zones}
    zone_names[MECHANICAL_ZONE_ID] = MECHANICAL_ZONE_NAME
    with st.expander("기기 존 분류 결과"):
        st.dataframe(pd.DataFrame([
            {"기기": doc.components[cid].name, "타입": doc.components[cid].type,
             "존": zone_names.get(zid, zid)}
            for cid, zid in zone_map.items()
        ]), use_container_width=True, hide_index=True)

# ═══ Tab 2: 열손실 ═══
with tab2:
    st.subheader("설계 조건 열손실 구성")
    parts = ["walls", "windows", "doors", "ceiling", "floor", "infiltration"]
    labels = ["벽체", "창호", "문", "천장", "바닥", "침기"]
    fig_hl = go.Figure()
    fig_hl.add_trace(go.Bar(
        x=labels, y=[heat_loss[p] for p in parts],
        marker_color="#EF553B", opacity=0.8,
        text=[f"{heat_loss[p]:,.0f}" for p in parts], textposition="outside",
    ))
    fig_hl.update_layout(
        xaxis_title="구성 요소", yaxis_title="열손실 (BTU/hr)",
        template="plotly_white", height=420,
    )
    st.plotly_chart(fig_hl, use_container_width=True)

    st.markdown("#### 존별 부하")
    allocation = allocate_zone_heat_loss(heat_loss["total"], doc.building.total_sq_ft, doc.zones)
    st.dataframe(pd.DataFrame([
        {"존": d.zone_name, "면적 (ft²)": d.sq_ft,
         "설계 부하 (BTU/hr)": round(allocation.get(d.zone_id, 0.0)),
         "현재 부하 (BTU/hr)": round(d.current_heat_loss),
         "난방 요구": "ON" if d.is_calling else "OFF",
         "설계 수온 (°F)": d.design_water_temp}
        for d in demands
    ]), use_container_width=True, hide_index=True)

    cfm50 = doc.building.infiltration.blower_door_cfm50
    if cfm50:
        st.info(
            f"블로어 도어 CFM50 {cfm50:,.0f} → 자연 환기 횟수 약 "
            f"**{ach_from_blower_door(cfm50, building_volume(doc.building)):.2f} ACH** "
            f"(계산에는 입력 ACH {doc.building.infiltration.ach:.2f} 사용)"
        )

# ═══ Tab 3: 기기 상태 ═══
with tab3:
    st.subheader("기기별 운전 상태")
    df_states = pd.DataFrame([
        {"기기": c.name, "타입": c.type, "상태": states[cid].status,
         "공급 (°F)": states[cid].supply_temp, "환수 (°F)": states[cid].return_temp,
         "유량 (GPM)": states[cid].flow_gpm}
        for cid, c in doc.components.items()
    ])
    st.dataframe(df_states, use_container_width=True, hide_index=True)
    st.download_button(
        ":material/download: 기기 상태 CSV",
        data=df_states.to_csv(index=False).encode("utf-8-sig"),
        file_name=f"component_states_{template_id}.csv",
        mime="text/csv",
    )

# ═══ Tab 4: 배관 ═══
with tab4:
    st.subheader("배관 설계 요약 (Hazen-Williams)")
    rows = []
    for pid, pipe in doc.pipes.items():
        gpm = pipe_flows.get(pid, 0.0)
        summary = pipe_design_summary(pipe, gpm)
        rows.append({
            "배관": pid, "역할": pipe.role, "재질": pipe.material, "구경": pipe.size,
            "길이 (ft)": pipe.length_ft, "엘보": pipe.fittings.elbows_90,
            "유량 (GPM)": gpm,
            "유속 (ft/s)": round(summary["velocity_fps"], 2),
            "유속 판정": summary["velocity_status"] if gpm > 0 else "-",
            "등가 길이 (ft)": round(summary["equivalent_length_ft"], 1),
            "손실 (ft)": round(summary["head_loss_ft"], 3),
        })
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.info("배관이 없습니다.")

# ═══ Tab 5: 펌프 ═══
with tab5:
    st.subheader("순환펌프 H-Q 곡선 및 운전점")
    pump_comp = next((c for c in doc.components.values() if c.type in PUMP_TYPES), None)
    pump = pump_from_component(pump_comp) if pump_comp is not None else None
    if pump is None:
        st.info("곡선 정보가 있는 순환펌프가 없습니다.")
    else:
        source_flow = source_state.flow_gpm if source_state is not None else 0.0
        circuit = CircuitCurve(
            default_circuit_pipes(doc),
            equipment_head_ft=equipment_head_ft(doc.components),
            reference_gpm=source_flow,
        )
        op = find_operating_point(pump, circuit)

        fig_pq = go.Figure()
        q_pump, h_pump = pump.get_curve_points(100)
        fig_pq.add_trace(go.Scatter(x=q_pump, y=h_pump, name=f"펌프: {pump.name}",
                                    line=dict(color="#00CC96", width=3)))
        q_sys, h_sys = circuit.get_curve_points(50, q_max=pump.max_flow)
        fig_pq.add_trace(go.Scatter(x=q_sys, y=h_sys, name="회로 저항",
                                    line=dict(color="#636EFA", dash="dash", width=2)))
        if op:
            fig_pq.add_trace(go.Scatter(
                x=[op["gpm"]], y=[op["head_ft"]],
                name=f"운전점 ({op['gpm']:.1f} GPM, {op['head_ft']:.1f} ft)",
                mode="markers", marker=dict(size=15, color="#EF553B", symbol="circle"),
            ))
        if source_flow > 0:
            fig_pq.add_vline(x=source_flow, line_dash="dot", line_color="orange",
                             annotation_text=f"필요 유량 {source_flow:.1f} GPM")
        fig_pq.update_layout(
            xaxis_title="유량 Q (GPM)", yaxis_title="양정 H (ft)",
            template="plotly_white", height=480,
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        )
        st.plotly_chart(fig_pq, use_container_width=True)

        if op:
            pc1, pc2, pc3 = st.columns(3)
            pc1.metric("운전 유량", f"{op['gpm']:.1f} GPM")
            pc2.metric("운전 양정", f"{op['head_ft']:.1f} ft", delta=f"{op['head_psi']:.2f} psi",
                       delta_color="off")
            pc3.metric("수동력", f"{op['hydraulic_w']:.0f} W")
            if source_flow > op["gpm"]:
                st.warning(
                    f"펌프 운전 유량({op['gpm']:.1f} GPM)이 열원 필요 유량"
                    f"({source_flow:.1f} GPM)보다 작습니다."
                )
        else:
            st.warning("펌프 곡선과 회로 저항 곡선의 교점을 찾지 못했습니다.")

# ═══ Tab 6: 설계 검토 ═══
with tab6:
    st.subheader("설계 검토")
    if not messages:
        st.success("검토 항목이 없습니다.")
    for m in messages:
        if m.severity == "error":
            st.error(m.message)
        elif m.severity == "warning":
            st.warning(m.message)
        else:
            st.info(m.message)
