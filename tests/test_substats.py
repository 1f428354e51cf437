import io
import math

import pytest

from rockstar_halos.records import Halo
from rockstar_halos.substats import (
    calc_angle,
    calc_subhalo_stats,
    cross,
    decompose_v,
    dot,
    subhalo_stats_line,
)


def test_dot_uses_three_components():
    assert dot([1, 2, 3, 100], [4, 5, 6, 100]) == 32


def test_cross_unit_vectors():
    assert cross([1, 0, 0], [0, 1, 0]) == [0, 0, 1]


def test_cross_anticommutes_and_is_orthogonal():
    a, b = [1.5, -2.0, 0.5], [0.3, 4.0, -1.0]
    c = cross(a, b)
    assert cross(b, a) == pytest.approx([-x for x in c])
    assert dot(c, a) == pytest.approx(0.0)
    assert dot(c, b) == pytest.approx(0.0)


def test_calc_angle():
    assert calc_angle([1, 0, 0], [0, 2, 0]) == pytest.approx(math.pi / 2)
    assert calc_angle([1, 1, 1], [2, 2, 2]) == pytest.approx(0.0, abs=1e-6)
    assert calc_angle([0, 0, 0], [1, 0, 0]) == 0.0


def test_decompose_v_zero_position():
    assert decompose_v([0, 0, 0], [0, 0, 1], [1, 2, 3]) == (0.0, 0.0, 0.0)


def test_decompose_v_preserves_speed():
    pos, axis, vel = [1.0, 2.0, -0.5], [0.0, 0.2, 1.0], [3.0, -1.0, 2.0]
    vr, vt, vp = decompose_v(pos, axis, vel)
    assert vr * vr + vt * vt + vp * vp == pytest.approx(dot(vel, vel))


def test_decompose_v_radial():
    vr, vt, vp = decompose_v([2.0, 0, 0], [0, 0, 1], [3.0, 0, 0])
    assert vr == pytest.approx(3.0)
    assert vt == pytest.approx(0.0)
    assert vp == pytest.approx(0.0)


def test_stats_line_requires_host_properties():
    assert subhalo_stats_line(Halo(id=1, m=1.0), Halo(id=2, m=2.0)) is None


def test_stats_line_fields():
    host = Halo(id=7, m=2e12, r=300.0, vmax=250.0, rs=30.0, J=[0, 0, 1],
                pos=[50, 50, 50, 0, 0, 0])
    sub = Halo(id=3, m=1e11, r=30.0, vmax=80.0, pos=[50.1, 50, 50, 0, 10, 0])
    tokens = subhalo_stats_line(sub, host).split()
    assert len(tokens) == 14
    assert tokens[:2] == ["3", "7"]
    assert float(tokens[2]) == pytest.approx(sub.m / host.m, rel=1e-3)
    assert float(tokens[10]) == pytest.approx(math.pi / 2, abs=1e-3)


def _chain():
    top = Halo(id=0, m=1e13, r=500.0, vmax=300.0, rs=50.0, J=[0, 0, 1],
               pos=[50.0, 50.0, 50.0, 0, 0, 0])
    mid = Halo(id=1, m=1e12, r=200.0, vmax=150.0, rs=20.0, J=[0, 1, 0],
               pos=[50.1, 50.0, 50.0, 0, 0, 0])
    small = Halo(id=2, m=1e10, r=20.0, vmax=50.0, rs=2.0,
                 pos=[50.12, 50.0, 50.0, 0, 5, 0])
    return [small, top, mid]


def test_calc_subhalo_stats_direct_parents():
    out = io.StringIO()
    subs = calc_subhalo_stats(_chain(), 100.0, out)
    assert subs == {1: 0, 2: 1}


def test_calc_subhalo_stats_reports_top_host():
    out = io.StringIO()
    calc_subhalo_stats(_chain(), 100.0, out)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("#ID UPID")
    assert [line.split()[:2] for line in lines[1:]] == [["1", "0"], ["2", "0"]]


def test_calc_subhalo_stats_isolated_halos():
    far = [Halo(id=0, m=1.0, r=10.0, vmax=10.0, rs=1.0, pos=[10, 10, 10, 0, 0, 0]),
           Halo(id=1, m=1.0, r=5.0, vmax=5.0, rs=1.0, pos=[60, 60, 60, 0, 0, 0])]
    out = io.StringIO()
    assert calc_subhalo_stats(far, 100.0, out) == {}
    assert len(out.getvalue().splitlines()) == 1