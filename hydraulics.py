# ! 온수난방 설계 시뮬레이션: 배관 수리계산 (설계 검토용)
# * Hazen-Williams 마찰손실, 이음쇠 등가 길이, 유속 판정
# * 시뮬레이션 엔진은 이 모듈을 사용하지 않음 (설계 시점 주석 전용)

from constants import (
    PIPE_ID_IN, C_FACTOR, FITTING_EQUIV_LENGTH_FT,
    VELOCITY_LOW_FPS, VELOCITY_HIGH_FPS,
)
from hydronic_model import Pipe, PipeFittings

PSI_PER_FT_HEAD = 0.4331   # 물 60°F 기준


# ──────────────────────────────────────────────
# ? 테이블 조회
# ──────────────────────────────────────────────
def inside_diameter(material: str, size: str) -> float:
    """배관 내경 (inch), 테이블에 없으면 0.0"""
    return PIPE_ID_IN.get(material, {}).get(size, 0.0)


def c_factor(material: str) -> float:
    """Hazen-Williams C 계수, 테이블에 없으면 0.0"""
    return C_FACTOR.get(material, 0.0)


# ──────────────────────────────────────────────
# ? 유량 → 유속 변환
# ──────────────────────────────────────────────
def velocity(gpm: float, id_in: float) -> float:
    """
    V = 0.408 × GPM / ID²
    gpm   : 유량 (GPM)
    id_in : 내경 (inch)
    반환  : 유속 (fps)
    """
    if id_in <= 0:
        return 0.0
    return 0.408 * gpm / (id_in * id_in)


# ──────────────────────────────────────────────
# ? Hazen-Williams 마찰손실
# ──────────────────────────────────────────────
def friction_loss_per_100ft(gpm: float, material: str, size: str) -> float:
    """
    ! 100 ft 당 마찰 손실 수두 (ft)

    h = 0.002083 × L × (100/C)^1.852 × GPM^1.852 / ID^4.8655   (L = 100)

    * gpm ≤ 0 또는 내경 ≤ 0 → 0.0
    """
    id_in = inside_diameter(material, size)
    c = c_factor(material)
    if id_in <= 0 or gpm <= 0 or c <= 0:
        return 0.0
    return 0.002083 * 100.0 * (100.0 / c) ** 1.852 * gpm ** 1.852 / id_in ** 4.8655


# ──────────────────────────────────────────────
# ? 등가 길이 / 손실 수두
# ──────────────────────────────────────────────
def fittings_equivalent_length(size: str, fittings: PipeFittings) -> float:
    """이음쇠 등가 길이 합 (ft) = Σ(개수 × 구경별 등가 길이)"""
    eq = FITTING_EQUIV_LENGTH_FT.get(size)
    if eq is None:
        return 0.0
    return (
        fittings.elbows_90 * eq["elbow90"]
        + fittings.elbows_45 * eq["elbow45"]
        + fittings.tees_through * eq["tee_through"]
        + fittings.tees_branch * eq["tee_branch"]
        + fittings.couplings * eq["coupling"]
    )


def total_equivalent_length(length_ft: float, size: str, fittings: PipeFittings) -> float:
    """총 등가 길이 = 직관 길이 + 이음쇠 등가 길이"""
    return length_ft + fittings_equivalent_length(size, fittings)


def pipe_head_loss(
    gpm: float,
    material: str,
    size: str,
    length_ft: float,
    fittings: PipeFittings,
) -> float:
    """배관 구간 손실 수두 (ft) = (등가 길이 / 100) × 100ft 당 손실"""
    eq_len = total_equivalent_length(length_ft, size, fittings)
    return eq_len / 100.0 * friction_loss_per_100ft(gpm, material, size)


# ──────────────────────────────────────────────
# ? 유속 판정 (주거용 1.5 ~ 4 fps)
# ──────────────────────────────────────────────
def velocity_warning(gpm: float, material: str, size: str) -> str:
    """
    "low"  : V < 1.5 fps (공기 정체 우려)
    "high" : V > 4.0 fps (소음/침식 우려)
    "ok"   : 그 외 (경계값 1.5, 4.0 포함)
    """
    v = velocity(gpm, inside_diameter(material, size))
    if v < VELOCITY_LOW_FPS:
        return "low"
    if v > VELOCITY_HIGH_FPS:
        return "high"
    return "ok"


def pipe_design_summary(pipe: Pipe, gpm: float) -> dict:
    """
    배관 1개 설계 요약 (표/툴팁용)

    반환 dict:
        id_in, velocity_fps, velocity_status, equivalent_length_ft,
        friction_per_100ft, head_loss_ft
    """
    id_in = inside_diameter(pipe.material, pipe.size)
    return {
        "id_in": id_in,
        "velocity_fps": velocity(gpm, id_in),
        "velocity_status": velocity_warning(gpm, pipe.material, pipe.size),
        "equivalent_length_ft": total_equivalent_length(pipe.length_ft, pipe.size, pipe.fittings),
        "friction_per_100ft": friction_loss_per_100ft(gpm, pipe.material, pipe.size),
        "head_loss_ft": pipe_head_loss(gpm, pipe.material, pipe.size, pipe.length_ft, pipe.fittings),
    }


# ──────────────────────────────────────────────
# ? 수두 → 압력 변환
# ──────────────────────────────────────────────
def head_to_psi(head_ft: float) -> float:
    """수두(ft) → 압력(psi)"""
    return head_ft * PSI_PER_FT_HEAD
