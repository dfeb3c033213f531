# Outdoor temperature sweep batch tests - ASCII only
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from run_outdoor_sweep import run_outdoor_sweep


def test_sweep_one_row_per_temperature():
    temps = [-20, 0, 20, 40, 70]
    df = run_outdoor_sweep("demo-3-story", temps)
    assert len(df) == len(temps)
    assert list(df.iloc[:, 0]) == [float(t) for t in temps]
    zone_cols = [c for c in df.columns if c.endswith(" GPM")]
    assert len(zone_cols) == 3


def test_sweep_load_and_firing_fall_as_outdoor_warms():
    df = run_outdoor_sweep("demo-3-story", [-20, 0, 20, 40, 60, 70])
    loads = list(df.iloc[:, 1])
    rates = list(df.iloc[:, 2])
    assert all(a >= b for a, b in zip(loads, loads[1:]))
    assert all(a >= b for a, b in zip(rates, rates[1:]))
    assert loads[-1] == 0
    status = list(df.iloc[:, 7])
    assert status[0] == "firing"
    assert status[-1] == "off"


def test_sweep_without_heat_source_has_load_only():
    df = run_outdoor_sweep("empty", [0, 30])
    assert df.shape == (2, 2)


def test_sweep_unknown_template():
    with pytest.raises(KeyError):
        run_outdoor_sweep("nope", [0])
