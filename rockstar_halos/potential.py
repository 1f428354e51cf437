"""Gravitational potential and kinetic energy of halo particles."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .constants import Gc
from .records import PotentialPoint

POTENTIAL_ERR_TOL = 1.0
POINTS_PER_LEAF = 10


def distance2(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Squared distance between the spatial parts of two positions."""
    return sum((a - b) ** 2 for a, b in zip(p1[:3], p2[:3]))


def inv_distance(p1: Sequence[float], p2: Sequence[float], force_res: float) -> float:
    """Inverse distance, softened to at most ``1 / force_res``."""
    r = max(math.sqrt(distance2(p1, p2)), force_res)
    return 1.0 / r


def _positions(points: Sequence[PotentialPoint]) -> np.ndarray:
    return np.array([p.pos[:3] for p in points], dtype=np.float64).reshape(-1, 3)


def _inv_dist_matrix(a: np.ndarray, b: np.ndarray, force_res: float) -> np.ndarray:
    r = np.sqrt(((a[:, None, :] - b[None, :, :]) ** 2).sum(axis=2))
    return 1.0 / np.maximum(r, force_res)


def _direct(pos: np.ndarray, pe: np.ndarray, idx: np.ndarray,
            particle_mass: float, force_res: float) -> None:
    if len(idx) < 2:
        return
    inv = _inv_dist_matrix(pos[idx], pos[idx], force_res)
    np.fill_diagonal(inv, 0.0)
    pe[idx] += particle_mass * inv.sum(axis=1)


def compute_direct_potential(points: Sequence[PotentialPoint], particle_mass: float,
                             force_res: float) -> None:
    """Add the exact pairwise potential of ``points`` to each point's ``pe``."""
    pos = _positions(points)
    pe = np.zeros(len(points))
    _direct(pos, pe, np.arange(len(points)), particle_mass, force_res)
    for point, value in zip(points, pe):
        point.pe += float(value)


@dataclass
class _Node:
    idx: np.ndarray
    lo: np.ndarray
    hi: np.ndarray
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None
    m: float = 0.0
    center: np.ndarray = None
    dmin: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def _build(pos: np.ndarray, idx: np.ndarray) -> _Node:
    sub = pos[idx]
    node = _Node(idx=idx, lo=sub.min(axis=0), hi=sub.max(axis=0))
    extent = node.hi - node.lo
    if len(idx) <= POINTS_PER_LEAF or not extent.max() > 0:
        return node
    dim = int(np.argmax(extent))
    ordered = idx[np.argsort(sub[:, dim], kind="stable")]
    half = len(ordered) // 2
    node.left = _build(pos, ordered[:half])
    node.right = _build(pos, ordered[half:])
    return node


def _compute_dmin(node: _Node, pos: np.ndarray) -> None:
    d2 = ((pos[node.idx] - node.center) ** 2).sum(axis=1)
    bmax = math.sqrt(float(d2.max())) / 2.0
    node.dmin = bmax + math.sqrt(bmax * bmax + float(d2.sum()) / (len(node.idx) * POTENTIAL_ERR_TOL))


def _compute_mass_centers(node: _Node, pos: np.ndarray, particle_mass: float) -> None:
    if node.is_leaf:
        node.m = particle_mass * len(node.idx)
        node.center = pos[node.idx].mean(axis=0)
    else:
        _compute_mass_centers(node.left, pos, particle_mass)
        _compute_mass_centers(node.right, pos, particle_mass)
        node.m = node.left.m + node.right.m
        if node.m:
            node.center = (node.right.center * node.right.m + node.left.center * node.left.m) / node.m
        else:
            node.center = np.zeros(3)
    _compute_dmin(node, pos)


def _leaves(node: _Node):
    if node.is_leaf:
        yield node
    else:
        yield from _leaves(node.left)
        yield from _leaves(node.right)


def _monopole(leaf: _Node, other: _Node, pos: np.ndarray, pe: np.ndarray,
              particle_mass: float, force_res: float) -> None:
    if leaf is other:
        if len(leaf.idx) > 2 * POINTS_PER_LEAF:
            return  # degenerate node of coincident points
        _direct(pos, pe, leaf.idx, particle_mass, force_res)
        return
    inside = bool(np.all(leaf.lo >= other.lo) and np.all(leaf.hi <= other.hi))
    r2 = float(((leaf.center - other.center) ** 2).sum())
    acceptable = r2 > other.dmin * other.dmin
    if inside or not acceptable:
        if other.is_leaf:
            inv = _inv_dist_matrix(pos[leaf.idx], pos[other.idx], force_res)
            pe[leaf.idx] += particle_mass * inv.sum(axis=1)
        else:
            _monopole(leaf, other.left, pos, pe, particle_mass, force_res)
            _monopole(leaf, other.right, pos, pe, particle_mass, force_res)
    else:
        r = np.sqrt(((pos[leaf.idx] - other.center) ** 2).sum(axis=1))
        pe[leaf.idx] += other.m / r


def compute_potential(points: Sequence[PotentialPoint], particle_mass: float,
                      force_res: float) -> None:
    """Set each point's ``pe`` using a Barnes-Hut tree approximation."""
    for point in points:
        point.pe = 0.0
    if not points:
        return
    pos = _positions(points)
    pe = np.zeros(len(points))
    root = _build(pos, np.arange(len(points)))
    _compute_mass_centers(root, pos, particle_mass)
    for leaf in _leaves(root):
        _monopole(leaf, root, pos, pe, particle_mass, force_res)
    for point, value in zip(points, pe):
        point.pe = float(value)


def compute_kinetic_energy(points: Sequence[PotentialPoint], vel_cen: Sequence[float],
                           pos_cen: Sequence[float], scale_now: float,
                           hubble: float) -> None:
    """Set ``ke`` for every point whose ``ke`` is not negative.

    ``hubble`` is the Hubble parameter at ``scale_now`` in km/s/(Mpc/h).
    """
    conv_const = 0.5 * scale_now / Gc
    for point in points:
        if point.ke < 0:
            continue
        ke = 0.0
        for j in range(3):
            dv = (point.pos[j + 3] - vel_cen[j]
                  + hubble * scale_now * (point.pos[j] - pos_cen[j]))
            ke += dv * dv
        point.ke = ke * conv_const