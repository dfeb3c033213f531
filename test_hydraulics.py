# Piping physics tests - ASCII only
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hydronic_model import Pipe, PipeFittings
from hydraulics import (
    inside_diameter, c_factor, velocity, friction_loss_per_100ft,
    fittings_equivalent_length, total_equivalent_length, pipe_head_loss,
    velocity_warning, pipe_design_summary, head_to_psi,
)


# ── 1. Tables ──

def test_table_lookups():
    assert inside_diameter("copper", "3/4") == 0.785
    assert c_factor("pex") == 150
    assert inside_diameter("unobtainium", "3/4") == 0.0
    assert inside_diameter("copper", "12") == 0.0
    assert c_factor("unobtainium") == 0.0


# ── 2. Velocity ──

def test_velocity_formula():
    assert velocity(2.2, 0.785) == pytest.approx(1.457, abs=1e-3)
    assert velocity(5, 0) == 0.0


def test_velocity_warning_low_boundary():
    assert velocity_warning(2.2, "copper", "3/4") == "low"
    assert velocity_warning(2.4, "copper", "3/4") == "ok"


def test_velocity_warning_high_boundary():
    assert velocity_warning(6, "copper", "3/4") == "ok"
    assert velocity_warning(6.2, "copper", "3/4") == "high"


# ── 3. Hazen-Williams ──

def test_friction_loss_grows_with_flow():
    low = friction_loss_per_100ft(2, "copper", "3/4")
    high = friction_loss_per_100ft(4, "copper", "3/4")
    assert 0 < low < high
    # exponent 1.852
    assert high / low == pytest.approx(2 ** 1.852, rel=1e-9)


def test_friction_loss_smoother_pipe_is_lower():
    assert friction_loss_per_100ft(4, "pex", "1") < friction_loss_per_100ft(4, "black_steel", "1")


def test_friction_loss_guards():
    assert friction_loss_per_100ft(0, "copper", "3/4") == 0.0
    assert friction_loss_per_100ft(-3, "copper", "3/4") == 0.0
    assert friction_loss_per_100ft(4, "unobtainium", "3/4") == 0.0


def test_fittings_equivalent_length():
    f = PipeFittings(elbows_90=2, elbows_45=1, tees_through=1, tees_branch=1, couplings=3)
    # 2x2 + 1 + 1.2 + 4 + 3x0.4
    assert fittings_equivalent_length("3/4", f) == pytest.approx(11.4)
    assert total_equivalent_length(20, "3/4", f) == pytest.approx(31.4)
    assert fittings_equivalent_length("12", f) == 0.0


def test_pipe_head_loss_scales_with_equivalent_length():
    f = PipeFittings()
    per_100 = friction_loss_per_100ft(5, "copper", "1")
    assert pipe_head_loss(5, "copper", "1", 50, f) == pytest.approx(per_100 / 2)


# ── 4. Summary / unit conversion ──

def test_pipe_design_summary_keys():
    pipe = Pipe(id="p1", material="copper", size="3/4", length_ft=30,
                fittings=PipeFittings(elbows_90=2))
    s = pipe_design_summary(pipe, 4.0)
    assert s["id_in"] == 0.785
    assert s["velocity_status"] == "ok"
    assert s["equivalent_length_ft"] == pytest.approx(34)
    assert s["head_loss_ft"] == pytest.approx(0.34 * s["friction_per_100ft"])


def test_head_to_psi():
    assert head_to_psi(10) == pytest.approx(4.331)
    assert head_to_psi(0) == 0
