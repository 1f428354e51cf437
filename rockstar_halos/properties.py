"""Halo property calculations: radii, velocities, shapes and energies."""

from __future__ import annotations

import math
from collections.abc import MutableSequence, Sequence
from dataclasses import dataclass, field

import numpy as np

from .constants import Gc
from .records import Halo, PotentialPoint


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def _used(point: PotentialPoint, bound: bool) -> bool:
    return not (bound and point.pe < point.ke)


@dataclass
class HaloSettings:
    """Simulation and analysis parameters needed by the property calculations.

    ``particle_thresh_dens`` holds the threshold densities (in particles per
    volume) of the main mass definition followed by the four alternates.
    """

    particle_mass: float
    force_res: float
    scale_now: float
    particle_thresh_dens: list[float] = field(default_factory=lambda: [1.0] * 5)
    particle_rvir_dens: float = 1.0
    particle_rvir_dens_z0: float = 1.0
    min_dens_index: int = 0
    shape_iterations: int = 10
    weighted_shapes: bool = False


def max_halo_radius(halo: Halo, settings: HaloSettings) -> float:
    """Largest radius (kpc/h) among the halo's mass definitions."""
    idx = settings.min_dens_index
    thresh_dens = settings.particle_thresh_dens[idx] * settings.particle_mass
    m = halo.alt_m[idx - 1] if idx else halo.m
    return _cbrt((3.0 / (4.0 * math.pi)) * m / thresh_dens) * 1e3


def add_ang_mom(L: MutableSequence[float], c: Sequence[float],
                pos: Sequence[float]) -> MutableSequence[float]:
    """Add ``r x v`` of ``pos`` relative to centre ``c`` to ``L`` and return it."""
    r = [pos[i] - c[i] for i in range(3)]
    v = [pos[i + 3] - c[i + 3] for i in range(3)]
    L[0] += r[1] * v[2] - r[2] * v[1]
    L[1] += r[2] * v[0] - r[0] * v[2]
    L[2] += r[0] * v[1] - r[1] * v[0]
    return L


def estimate_vmax_from_bins(bins: Sequence[int], r_scale: float,
                            settings: HaloSettings) -> float:
    """Maximum circular velocity from radial particle-count bins."""
    total = 0
    vmax = 0.0
    for i, count in enumerate(bins):
        r = max((i + 1.0) / r_scale, settings.force_res)
        total += count
        vcirc = total / r
        if vcirc > vmax:
            vmax = vcirc
    return math.sqrt(Gc * vmax * settings.particle_mass / settings.scale_now)


def calculate_corevel(halo: Halo, points: Sequence[PotentialPoint],
                      settings: HaloSettings) -> None:
    """Set core and bulk velocities from radius-sorted ``points``."""
    total_p = len(points)
    rvir_thresh = settings.particle_rvir_dens * (4.0 * math.pi / 3.0)
    rvir_max = next(
        (j for j in reversed(range(total_p))
         if j * j > (points[j].r2 ** 3) * (rvir_thresh * rvir_thresh)),
        -1)
    if rvir_max < 1:
        return
    edge_r2 = points[rvir_max].r2
    core_max = next(
        (j for j in reversed(range(total_p)) if points[j].r2 * 100.0 < edge_r2),
        -1)
    core_max = max(core_max, 100)

    vel = [0.0, 0.0, 0.0]
    var = [0.0, 0.0, 0.0]
    bestvar = 0.0
    for i, point in enumerate(points[:rvir_max]):
        for j in range(3):
            delta = point.pos[j + 3] - vel[j]
            vel[j] += delta / (i + 1)
            var[j] += delta * (point.pos[j + 3] - vel[j])
        thisvar = sum(var)
        if i < 10 or thisvar < bestvar * (i - 3) * i:
            bestvar = thisvar / ((i - 3) * i) if i > 3 else 0.0
            if i < core_max:
                halo.n_core = i
                halo.min_vel_err = bestvar
                halo.corevel = list(vel)
            halo.bulkvel = list(vel)
            halo.min_bulkvel_err = bestvar

    halo.pos[3:6] = list(halo.corevel)


def calc_shape(halo: Halo, points: Sequence[PotentialPoint], total_p: int,
               bound: bool, settings: HaloSettings) -> None:
    """Iteratively fit the halo's ellipsoidal shape to its inner particles."""
    halo.b_to_a = halo.c_to_a = 0.0
    halo.A = [0.0, 0.0, 0.0]
    if not halo.r > 0:
        return
    min_r = settings.force_res * settings.force_res * 1e6 / (halo.r * halo.r)
    used = [p for p in points[:total_p] if _used(p, bound)]
    if len(used) < 3:
        return
    iterations = min(settings.shape_iterations, len(used))

    d = (np.array([p.pos[:3] for p in used], dtype=np.float64)
         - np.array(halo.pos[:3], dtype=np.float64))
    orth = np.eye(3)
    eig = np.full(3, halo.r * halo.r * 1e-6)
    for _ in range(iterations):
        r = ((d @ orth.T) ** 2 / eig).sum(axis=1)
        r = np.maximum(r, min_r)
        mask = (r > 0) & (r <= 1)
        sel = d[mask]
        tw = 1.0 / r[mask] if settings.weighted_shapes else np.ones(len(sel))
        weight = float(tw.sum())
        if not weight:
            return
        mass_t = (sel * tw[:, None]).T @ sel / weight
        eig, vecs = np.linalg.eigh(mass_t)
        orth = vecs.T

        a, b, c = 0, 1, 2
        if eig[1] > eig[0]:
            b, a = 0, 1
        if eig[2] > eig[b]:
            c, b = b, 2
        if eig[b] > eig[a]:
            a, b = b, a
        if not eig[a] or not eig[b] or not eig[c]:
            return
        b_to_a = math.sqrt(eig[b] / eig[a]) if eig[b] / eig[a] >= 0 else math.nan
        c_to_a = math.sqrt(eig[c] / eig[a]) if eig[c] / eig[a] >= 0 else math.nan
        if (abs(b_to_a - halo.b_to_a) < 0.01 * halo.b_to_a
                and abs(c_to_a - halo.c_to_a) < 0.01 * halo.c_to_a):
            return
        halo.b_to_a = b_to_a if b_to_a > 0 else 0.0
        halo.c_to_a = c_to_a if c_to_a > 0 else 0.0
        radius = math.sqrt(eig[a])
        halo.A = [float(1e3 * radius * orth[a][k]) for k in range(3)]
        eig = eig * ((halo.r * halo.r * 1e-6) / (radius * radius))


def estimate_total_energy(points: Sequence[PotentialPoint], total_p: int,
                          settings: HaloSettings) -> tuple[float, float]:
    """Return (total energy, kinetic-to-potential ratio) of the bound particles."""
    phi = 0.0
    total_phi = 0.0
    ke = 0.0
    pm = settings.particle_mass
    for i in reversed(range(total_p)):
        point = points[i]
        if point.pe > point.ke:
            ke += point.ke
            r = max(math.sqrt(point.r2), settings.force_res)
            total_phi += pm * i / r + phi
            phi += pm / r
    total_phi /= 2.0
    ratio = ke / total_phi if total_phi else 0.0
    return (ke - total_phi) * pm * Gc / settings.scale_now, ratio


def calc_pseudo_evolution_masses(halo: Halo, points: Sequence[PotentialPoint],
                                 total_p: int, bound: bool,
                                 settings: HaloSettings) -> None:
    """Set ``m_pe_b`` and ``m_pe_d`` from radius-sorted ``points``."""
    r_pe_d = max(halo.rs * 4.0, halo.r / 5.0) * 1e-3
    num_part = 0
    num_part_pe_d = 0
    max_pe_b = 0.0
    for point in points[:total_p]:
        if not _used(point, bound):
            continue
        num_part += 1
        r = math.sqrt(point.r2)
        r32 = r ** 1.5
        value = (num_part * num_part) / r32 if r32 else math.inf
        if value > max_pe_b:
            max_pe_b = value
        if r < r_pe_d:
            num_part_pe_d = num_part
    pm = settings.particle_mass
    halo.m_pe_d = num_part_pe_d * pm
    halo.m_pe_b = pm * max_pe_b ** (2.0 / 3.0) / _cbrt(
        4.0 * math.pi * settings.particle_rvir_dens_z0 / 3.0)