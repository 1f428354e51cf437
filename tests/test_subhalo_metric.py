import pytest

from rockstar_halos.records import Halo, Particle
from rockstar_halos.subhalo_metric import (
    FAR_AWAY,
    NO_DENSITY_LIMIT,
    SubhaloMetric,
    calc_expected_density,
    calc_halo_dist,
    calc_particle_dist,
)


def _halo(x, r=1.0, vrms=1.0, m=1.0, hid=0):
    return Halo(id=hid, pos=[x, 0.0, 0.0, 0.0, 0.0, 0.0], r=r, vrms=vrms, m=m)


def test_particle_dist_zero_at_center():
    h = _halo(2.0)
    assert calc_particle_dist(h, Particle(pos=[2.0, 0, 0, 0, 0, 0])) == 0.0


def test_particle_dist_pythagorean():
    h = _halo(0.0)
    assert calc_particle_dist(h, Particle(pos=[3.0, 4.0, 0, 0, 0, 0])) == pytest.approx(5.0)


def test_particle_dist_invalid_halo():
    h = _halo(0.0, vrms=0.0)
    assert calc_particle_dist(h, Particle()) == FAR_AWAY


def test_halo_dist_requires_smaller_target():
    big = _halo(0.0, r=2.0)
    small = _halo(0.5, r=1.0)
    assert calc_halo_dist(small, big) == FAR_AWAY
    assert calc_halo_dist(big, small) < FAR_AWAY


def test_expected_density_invalid_halo():
    assert calc_expected_density(_halo(0.0, r=0.0), Particle(pos=[1, 0, 0, 0, 0, 0])) == NO_DENSITY_LIMIT


def test_expected_density_falls_with_distance():
    h = _halo(0.0)
    near = calc_expected_density(h, Particle(pos=[0.1, 0, 0, 0, 0, 0]))
    far = calc_expected_density(h, Particle(pos=[1.0, 0, 0, 0, 0, 0]))
    assert near > far


def test_find_best_halo_picks_nearest():
    a, b = _halo(0.0, hid=1), _halo(10.0, hid=2)
    metric = SubhaloMetric([a, b])
    part = Particle(pos=[9.5, 0, 0, 0, 0, 0])
    assert metric.find_best_halo(part, a) is b


def test_find_best_halo_keeps_start_when_better():
    a, b = _halo(0.0, hid=1), _halo(10.0, hid=2)
    start = _halo(20.0, hid=3)
    metric = SubhaloMetric([a, b])
    part = Particle(pos=[20.0, 0, 0, 0, 0, 0])
    assert metric.find_best_halo(part, start) is start


def test_find_best_halo_alt_metric():
    a, b = _halo(0.0, hid=1), _halo(10.0, hid=2)
    metric = SubhaloMetric([a, b])
    part = Particle(pos=[9.8, 0, 0, 0, 0, 0])
    assert metric.find_best_halo(part, a, alt_nfw_metric=True) is b


def test_find_best_parent_of_biggest_is_itself():
    big = _halo(0.0, r=5.0)
    metric = SubhaloMetric([big])
    assert metric.find_best_parent(big, big) is big


def test_find_best_parent_prefers_nearby_larger_halo():
    biggest = _halo(0.0, r=5.0, hid=1)
    medium = _halo(50.0, r=2.0, hid=2)
    small = _halo(50.5, r=0.5, hid=3)
    metric = SubhaloMetric([biggest, medium, small])
    assert metric.find_best_parent(small, biggest) is medium


def test_find_children_filters_size_and_distance():
    host = _halo(0.0, r=2.0, hid=1)
    inside = _halo(0.5, r=0.5, hid=2)
    outside = _halo(5.0, r=0.5, hid=3)
    larger = _halo(0.2, r=3.0, hid=4)
    metric = SubhaloMetric([host, inside, outside, larger])
    assert metric.find_children(host, None, 1.0) == [inside]


def test_find_children_excludes_those_closer_to_parent():
    parent = _halo(1.0, r=3.0, hid=1)
    host = _halo(0.0, r=2.0, hid=2)
    near_parent = _halo(0.9, r=0.5, hid=3)
    metric = SubhaloMetric([parent, host, near_parent])
    assert near_parent in metric.find_children(host, None, 1.5)
    assert metric.find_children(host, parent, 1.5) == []