import random

import pytest

from rockstar_halos.constants import Gc
from rockstar_halos.potential import (
    compute_direct_potential,
    compute_kinetic_energy,
    compute_potential,
    distance2,
    inv_distance,
)
from rockstar_halos.records import PotentialPoint


def _cloud(n, seed):
    rng = random.Random(seed)
    return [PotentialPoint(pos=[rng.random(), rng.random(), rng.random(), 0, 0, 0])
            for _ in range(n)]


def test_distance2_ignores_velocity():
    a = [1.0, 2.0, 3.0, 100.0, 100.0, 100.0]
    b = [1.0, 2.0, 3.0, -5.0, 0.0, 7.0]
    assert distance2(a, b) == 0.0


def test_inv_distance_softened():
    assert inv_distance([0, 0, 0], [0.1, 0, 0], 1.0) == pytest.approx(1.0)


def test_direct_two_points():
    points = [PotentialPoint(pos=[0, 0, 0, 0, 0, 0]), PotentialPoint(pos=[2, 0, 0, 0, 0, 0])]
    compute_direct_potential(points, 1.0, 1e-5)
    assert points[0].pe == pytest.approx(0.5)
    assert points[1].pe == pytest.approx(points[0].pe)


def test_direct_adds_to_existing():
    points = [PotentialPoint(pos=[0, 0, 0, 0, 0, 0], pe=1.0),
              PotentialPoint(pos=[0, 0, 4, 0, 0, 0], pe=1.0)]
    compute_direct_potential(points, 4.0, 1e-5)
    fresh = [PotentialPoint(pos=list(p.pos)) for p in points]
    compute_direct_potential(fresh, 4.0, 1e-5)
    assert points[0].pe == pytest.approx(fresh[0].pe + 1.0)


def test_small_set_matches_direct_exactly():
    points = _cloud(8, 1)
    reference = [PotentialPoint(pos=list(p.pos)) for p in points]
    for p in points:
        p.pe = 123.0
    compute_potential(points, 2.0, 1e-4)
    compute_direct_potential(reference, 2.0, 1e-4)
    for got, want in zip(points, reference):
        assert got.pe == pytest.approx(want.pe, rel=1e-10)


def test_tree_approximates_direct():
    points = _cloud(300, 7)
    reference = [PotentialPoint(pos=list(p.pos)) for p in points]
    compute_potential(points, 1.0, 1e-4)
    compute_direct_potential(reference, 1.0, 1e-4)
    errors = [abs(g.pe - w.pe) / w.pe for g, w in zip(points, reference)]
    assert max(errors) < 0.3
    assert sum(errors) / len(errors) < 0.05


def test_empty_and_single():
    compute_potential([], 1.0, 1e-3)
    single = [PotentialPoint(pos=[1, 1, 1, 0, 0, 0], pe=5.0)]
    compute_potential(single, 1.0, 1e-3)
    assert single[0].pe == 0.0


def test_kinetic_energy_without_hubble_flow():
    points = [PotentialPoint(pos=[0, 0, 0, 3, 4, 0])]
    compute_kinetic_energy(points, [0, 0, 0], [0, 0, 0], 1.0, 0.0)
    assert points[0].ke == pytest.approx(25 * 0.5 / Gc)


def test_kinetic_energy_frame_invariance():
    a = [PotentialPoint(pos=[1, 2, 3, 10, 20, 30])]
    b = [PotentialPoint(pos=[1, 2, 3, 15, 25, 35])]
    compute_kinetic_energy(a, [1, 1, 1], [0, 0, 0], 0.5, 70.0)
    compute_kinetic_energy(b, [6, 6, 6], [0, 0, 0], 0.5, 70.0)
    assert a[0].ke == pytest.approx(b[0].ke)


def test_hubble_flow_cancels_peculiar_velocity():
    hubble, scale = 70.0, 0.5
    points = [PotentialPoint(pos=[1, 0, 0, -hubble * scale, 0, 0])]
    compute_kinetic_energy(points, [0, 0, 0], [0, 0, 0], scale, hubble)
    assert points[0].ke == pytest.approx(0.0, abs=1e-9)


def test_negative_kinetic_energy_is_kept():
    points = [PotentialPoint(pos=[0, 0, 0, 5, 5, 5], ke=-1.0)]
    compute_kinetic_energy(points, [0, 0, 0], [0, 0, 0], 1.0, 0.0)
    assert points[0].ke == -1.0