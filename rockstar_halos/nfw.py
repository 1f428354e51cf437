"""NFW scale-radius estimation."""

from __future__ import annotations

import math
from collections.abc import Sequence

from .constants import RMAX_TO_RS, RS_CONSTANT, VMAX_CONST
from .records import Halo, PotentialPoint

MAX_SCALE_BINS = 50
MIN_PART_PER_BIN = 15
MIN_SCALE_PART = 100


def c_to_f(c: float) -> float:
    """Map an NFW concentration to the dimensionless ratio used for fitting."""
    cp1 = 1.0 + c
    return c * cp1 / (math.log1p(c) * cp1 - c)


def f_to_c(f: float) -> float:
    """Invert :func:`c_to_f` by Newton iteration."""
    c = f
    tc = c_to_f(c)
    while abs((f - tc) / f) > 1e-7:
        tc2 = c_to_f(c + 0.1)
        slope = (tc2 - tc) / 0.1
        new_c = c + (f - tc) / slope
        if new_c < 0:
            c /= 2
        else:
            c = new_c
        tc = c_to_f(c)
    return c


def estimate_scale_radius(mvir: float, rvir: float, vmax: float,
                          rvmax: float, scale: float) -> float:
    """Klypin-style scale radius from mass, radius and vmax."""
    if not mvir or not rvir or not vmax:
        return rvmax / RMAX_TO_RS
    vm2 = vmax / VMAX_CONST
    vm2 = vm2 * vm2 * scale
    f = (rvir / 1.0e3) * vm2 / (mvir * RS_CONSTANT)
    if f < 4.625:
        return rvmax / RMAX_TO_RS
    c = f_to_c(f)
    if c <= 0:
        return rvmax / RMAX_TO_RS
    return rvir / c


def _nfw_menc(r: float, rs: float) -> float:
    return math.log((rs + r) / rs) - r / (rs + r)


def chi2_scale(rs: float, bin_r: Sequence[float], weights: Sequence[float]) -> float:
    """Chi-squared of equal-mass bins against an NFW profile with scale ``rs``.

    ``bin_r`` holds the bin edges, one more than ``weights``.
    """
    num_bins = len(weights)
    bin_mass = _nfw_menc(bin_r[num_bins], rs) / num_bins
    last_menc = 0.0
    chi2 = 0.0
    for weight, edge in zip(weights, bin_r[1:num_bins + 1]):
        menc = _nfw_menc(edge, rs)
        dx = weight * ((menc - last_menc) - bin_mass) / bin_mass
        chi2 += dx * dx
        last_menc = menc
    return chi2


def calc_scale_from_bins(rs: float, bin_r: Sequence[float],
                         weights: Sequence[float]) -> float:
    """Minimise :func:`chi2_scale` over the scale radius, starting from ``rs``."""
    num_bins = len(weights)
    lo, hi = bin_r[0], bin_r[num_bins]
    if not (rs > lo) or not (rs < hi):
        rs = bin_r[(num_bins + 1) // 2]
    initial_rs = rs
    chi2 = chi2_scale(rs, bin_r, weights)
    drs = rs / 10.0
    iterations = 0
    last_chi2 = 1e30
    if not rs > 0:
        return initial_rs
    while abs(chi2 - last_chi2) > 0.005 * chi2 and iterations < MIN_PART_PER_BIN:
        last_chi2 = chi2
        if rs + drs > hi:
            drs = 0.1 * (hi - rs)
        if rs - drs < lo:
            drs = 0.1 * (rs - lo)
        chi2_right = chi2_scale(rs + drs, bin_r, weights)
        chi2_left = chi2_scale(rs - drs, bin_r, weights)
        dx = 0.5 * (chi2_right - chi2_left) / drs
        dx2 = (chi2_right + chi2_left - 2.0 * chi2) / (drs * drs)
        move = -dx / dx2 if dx2 != 0 else 0.0
        if not move:
            return rs
        if rs + move > 4 * rs:
            move = 3.0 * rs
        if rs + move < 0.25 * rs:
            move = -0.75 * rs
        new_rs = rs + move
        if new_rs > hi:
            new_rs = rs + 0.8 * (hi - rs)
        elif new_rs < lo:
            new_rs = rs + 0.8 * (lo - rs)
        new_chi2 = chi2_scale(new_rs, bin_r, weights)
        if chi2_right < new_chi2:
            new_chi2, new_rs = chi2_right, rs + drs
        if chi2_left < new_chi2:
            new_chi2, new_rs = chi2_left, rs - drs
        if last_chi2 < new_chi2:
            drs *= 0.5
            continue
        drs = abs(rs - new_rs) / 10.0
        rs = new_rs
        chi2 = new_chi2
        iterations += 1
    return rs


def calc_scale_radius(halo: Halo, mvir: float, rvir: float, vmax: float,
                      rvmax: float, scale: float, points: Sequence[PotentialPoint],
                      total_p: int, bound: bool, force_res: float) -> None:
    """Set ``halo.klypin_rs`` and ``halo.rs`` from radius-sorted ``points``."""
    rs = estimate_scale_radius(mvir, rvir, vmax, rvmax, scale)
    halo.klypin_rs = rs

    def used(point: PotentialPoint) -> bool:
        return not (bound and point.pe < point.ke)

    considered = points[:max(total_p - 1, 0)]
    analyze_p = sum(1 for point in considered if used(point))
    if analyze_p < MIN_SCALE_PART:
        halo.rs = rs
        return
    ppbin = math.ceil(analyze_p / MAX_SCALE_BINS)
    if ppbin < MIN_PART_PER_BIN:
        ppbin = analyze_p // (analyze_p // MIN_PART_PER_BIN)

    bin_r = [0.0]
    count = 0
    for i, point in enumerate(considered):
        if not used(point):
            continue
        count += 1
        if count == ppbin:
            bin_r.append(1e3 * 0.5 * (math.sqrt(point.r2) + math.sqrt(points[i + 1].r2)))
            count = 0
    num_bins = len(bin_r) - 1
    weights = [0.1 if bin_r[i] * 1e-3 < 3 * force_res else 1.0
               for i in range(num_bins)]
    halo.rs = calc_scale_from_bins(rs, bin_r, weights)