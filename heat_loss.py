# ! 온수난방 설계 시뮬레이션: 건물 열손실 계산 엔진
# * 간이 Manual J 방식: 외피 전열 U × A × ΔT + 현열 침기 손실
# * 퇴화 입력(0 / 음수)은 예외 대신 0 또는 무단열 기본값으로 처리

import math
from typing import Dict, List

from constants import (
    WATER_BTU_FACTOR, INFILTRATION_FACTOR, GROUND_TEMP_F,
)
from hydronic_model import BuildingConfig, Zone


# ──────────────────────────────────────────────
# ? R-value → U-value
# ──────────────────────────────────────────────
def r_to_u(r: float) -> float:
    """
    U = 1 / R
    * R ≤ 0 → 1.0 (무단열 기본값)
    """
    return 1.0 / r if r > 0 else 1.0


def delta_t(building: BuildingConfig) -> float:
    """설계 실내외 온도차 ΔT = 실내 설계온도 - 외기 설계온도 (≤0 가능)"""
    return building.climate.indoor_design_temp - building.climate.design_outdoor_temp


# ──────────────────────────────────────────────
# ? 외피 면적 / 체적 추정
# ──────────────────────────────────────────────
def footprint_area(building: BuildingConfig) -> float:
    """층당 바닥면적 (ft²) = 연면적 / 층수"""
    if building.floors <= 0:
        return 0.0
    return building.total_sq_ft / building.floors


def estimate_wall_area(building: BuildingConfig) -> float:
    """
    ! 순 벽체 면적 추정 (정사각형 평면 가정)

    둘레 = 4 × √(층당 바닥면적)
    총 벽체 = 둘레 × 천장고 × 층수
    순 벽체 = max(0, 총 벽체 - 창호 면적 - 문 개수 × 문 면적)
    """
    footprint = footprint_area(building)
    if footprint <= 0:
        return 0.0
    perimeter = 4.0 * math.sqrt(footprint)
    gross_wall = perimeter * building.ceiling_height * building.floors
    wd = building.window_door
    door_area = wd.exterior_door_count * wd.door_area
    return max(0.0, gross_wall - wd.total_window_area - door_area)


def building_volume(building: BuildingConfig) -> float:
    """체적 (ft³) = 연면적 × 천장고"""
    return building.total_sq_ft * building.ceiling_height


def infiltration_cfm(building: BuildingConfig) -> float:
    """침기량 CFM = 체적 × ACH / 60"""
    return building_volume(building) * building.infiltration.ach / 60.0


def ach_from_blower_door(cfm50: float, volume: float, n_factor: float = 20.0) -> float:
    """
    블로어도어 CFM50 → 자연 환기 횟수 추정 (LBL 상관식)

    ACH_nat ≈ CFM50 × 60 / 체적 / N
    * N : 기후/건물 높이 보정 계수 (보통 14 ~ 23)
    """
    if volume <= 0 or n_factor <= 0 or cfm50 <= 0:
        return 0.0
    return cfm50 * 60.0 / volume / n_factor


# ──────────────────────────────────────────────
# ? 열손실 계산 (BTU/hr)
# ──────────────────────────────────────────────
def calculate_heat_loss(building: BuildingConfig) -> dict:
    """
    ! 설계 조건 열손실 분해

    반환 dict:
        walls, windows, doors, ceiling, floor, infiltration, total (BTU/hr)

    * 천장 = 최상층 바닥면적만 반영 (간이)
    * 바닥: slab 은 전체 ΔT, 지하실/크롤스페이스는 실내온도 - 55°F (지중 온도)
    * total = 6개 항목의 정확한 합
    """
    dt = delta_t(building)
    wd = building.window_door
    ins = building.insulation

    walls = r_to_u(ins.walls) * estimate_wall_area(building) * dt
    windows = wd.window_u_value * wd.total_window_area * dt
    doors = wd.door_u_value * (wd.exterior_door_count * wd.door_area) * dt

    top_area = footprint_area(building)
    ceiling = r_to_u(ins.ceiling) * top_area * dt

    if building.foundation_type == "slab":
        floor_dt = dt
    else:
        floor_dt = building.climate.indoor_design_temp - GROUND_TEMP_F
    floor = r_to_u(ins.floor) * top_area * max(0.0, floor_dt)

    infiltration = INFILTRATION_FACTOR * infiltration_cfm(building) * dt

    total = walls + windows + doors + ceiling + floor + infiltration

    return {
        "walls": walls,
        "windows": windows,
        "doors": doors,
        "ceiling": ceiling,
        "floor": floor,
        "infiltration": infiltration,
        "total": total,
    }


def allocate_zone_heat_loss(
    total_loss: float,
    total_sq_ft: float,
    zones: List[Zone],
) -> Dict[str, float]:
    """
    존별 열손실 배분

    * heat_loss_override 가 있으면 그 값 그대로
    * 없으면 면적 비례: zone.sq_ft / total_sq_ft × total_loss
    * override 존의 부하는 비례 배분 총량에서 빼지 않음 (재정규화 없음)
    """
    result: Dict[str, float] = {}
    for zone in zones:
        if zone.heat_loss_override is not None:
            result[zone.id] = zone.heat_loss_override
        elif total_sq_ft > 0:
            result[zone.id] = zone.sq_ft / total_sq_ft * total_loss
        else:
            result[zone.id] = 0.0
    return result


# ──────────────────────────────────────────────
# ? 유량 ↔ 열량 (물, BTU/hr = GPM × 500 × ΔT)
# ──────────────────────────────────────────────
def required_gpm(btu: float, dt: float) -> float:
    """필요 유량 GPM = BTU / (500 × ΔT), ΔT ≤ 0 → 0"""
    if dt <= 0:
        return 0.0
    return btu / (WATER_BTU_FACTOR * dt)


def btu_from_flow(gpm: float, dt: float) -> float:
    """BTU/hr = GPM × 500 × ΔT"""
    return gpm * WATER_BTU_FACTOR * dt
