"""
HydronicSim 외기온도 스윕 배치
조건: 데모 3층 주택, 외기 -20°F ~ 70°F (5°F 간격)
출력: 외기온도별 부하 / 보일러 연소율 / 공급·환수 온도 / 존별 유량 CSV
"""
import sys, os, time

import numpy as np
import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from templates import get_template
from simulation import (
    calculate_zone_demands, calculate_boiler_state, calculate_zone_flows, find_heat_source,
)
from topology import classify_zones

# ── 스윕 조건 ──
TEMPLATE_ID = "demo-3-story"
OUTDOOR_TEMPS = np.arange(-20, 75, 5)     # °F

OUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "Sweep_Results")


def run_outdoor_sweep(template_id, outdoor_temps) -> pd.DataFrame:
    """외기온도별 1행 DataFrame (존 유량은 '<존 이름> GPM' 열)"""
    template = get_template(template_id)
    if template is None:
        raise KeyError(f"알 수 없는 템플릿: {template_id}")
    doc = template.to_document()
    zone_map = classify_zones(doc.components, doc.connections, doc.zones)
    heat_source = find_heat_source(doc.components)
    zone_names = {z.id: z.name for z in doc.zones}

    rows = []
    for t_out in outdoor_temps:
        demands = calculate_zone_demands(
            doc.building, doc.zones, doc.components, doc.connections, float(t_out), zone_map=zone_map,
        )
        total = sum(d.current_heat_loss for d in demands)
        calling = any(d.is_calling for d in demands)

        row = {"외기 (°F)": float(t_out), "부하 (BTU/hr)": round(total)}
        if heat_source is None:
            rows.append(row)
            continue

        boiler = calculate_boiler_state(heat_source, total, calling)
        row.update({
            "연소율 (%)": round(boiler.firing_rate * 100.0, 1),
            "출력 (BTU/hr)": round(boiler.output_btu),
            "공급 (°F)": boiler.supply_temp,
            "환수 (°F)": boiler.return_temp,
            "유량 (GPM)": boiler.flow_gpm,
            "상태": boiler.status,
        })
        for zf in calculate_zone_flows(demands, boiler):
            row[f"{zone_names[zf.zone_id]} GPM"] = zf.flow_gpm
        rows.append(row)
    return pd.DataFrame(rows)


if __name__ == "__main__":
    os.makedirs(OUT_DIR, exist_ok=True)

    print("=" * 70)
    print(f"  HydronicSim 외기온도 스윕: {TEMPLATE_ID}")
    print(f"  외기: {OUTDOOR_TEMPS[0]}°F ~ {OUTDOOR_TEMPS[-1]}°F ({len(OUTDOOR_TEMPS)}개 조건)")
    print("=" * 70)
    print()

    t0 = time.time()
    df = run_outdoor_sweep(TEMPLATE_ID, OUTDOOR_TEMPS)
    elapsed = time.time() - t0

    for _, row in df.iterrows():
        print(
            f"  외기 {row['외기 (°F)']:6.1f}°F | 부하 {int(row['부하 (BTU/hr)']):>8,} BTU/hr | "
            f"연소율 {row.get('연소율 (%)', 0.0):5.1f}% | "
            f"공급 {row.get('공급 (°F)', 0.0):5.0f}°F | 유량 {row.get('유량 (GPM)', 0.0):4.1f} GPM"
        )

    csv_path = os.path.join(OUT_DIR, f"Sweep_{TEMPLATE_ID}.csv")
    df.to_csv(csv_path, index=False, encoding="utf-8-sig")

    print()
    print("=" * 70)
    print(f"  완료! {elapsed:.2f}초")
    print(f"  저장 위치: {csv_path}")
    print("=" * 70)
