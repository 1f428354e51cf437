"""Assigning parent halos by overlap, and the hlist parent-finding command."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, fields
from typing import Optional, TextIO

import numpy as np
from scipy.spatial import cKDTree

DEFAULT_BOX_SIZE = 250.0


def find_parents(halos: Sequence, radius_of: Callable[[object], float],
                 box_size: float, periodic: bool = True,
                 radius_conversion: float = 1.0e-3) -> list[int]:
    """Return the parent id of each halo, or -1 for none.

    Halos are visited from the largest ``vmax`` down; every smaller halo
    inside a visited halo's radius gets that halo as parent, so the last
    (lowest-vmax) enclosing halo wins.
    """
    n = len(halos)
    if not n:
        return []
    pos = np.array([h.pos[:3] for h in halos], dtype=np.float64)
    radii = np.array([radius_of(h) for h in halos], dtype=np.float64)
    vmax = np.array([h.vmax for h in halos], dtype=np.float64)
    order = np.argsort(-vmax, kind="stable")

    if periodic:
        if not box_size > 0:
            raise ValueError("periodic parent finding needs a positive box size")
        wrapped = np.mod(pos, box_size)
        wrapped[wrapped >= box_size] = 0.0
        tree = cKDTree(wrapped, boxsize=box_size)
        query = wrapped
        max_dist = box_size / 2.01
    else:
        tree = cKDTree(pos)
        query = pos
        max_dist = None

    parents = [-1] * n
    for i in order:
        reach = radii[i] * radius_conversion
        if max_dist is not None and max_dist < reach:
            reach = max_dist
        if reach < 0:
            continue
        for j in tree.query_ball_point(query[i], reach):
            if radii[j] < radii[i]:
                parents[j] = halos[i].id
    return parents


def _v3() -> list[float]:
    return [0.0, 0.0, 0.0]


@dataclass
class HListHalo:
    """One row of a halo list file."""

    id: int = 0
    descid: int = 0
    mvir: float = 0.0
    vmax: float = 0.0
    vrms: float = 0.0
    rvir: float = 0.0
    rs: float = 0.0
    np: int = 0
    pos: list[float] = field(default_factory=_v3)
    vel: list[float] = field(default_factory=_v3)
    J: list[float] = field(default_factory=_v3)
    spin: float = 0.0
    klypin_rs: float = 0.0
    m_all: float = 0.0
    alt_m: list[float] = field(default_factory=lambda: [0.0] * 4)
    xoff: float = 0.0
    voff: float = 0.0
    bullock_spin: float = 0.0
    b_to_a: float = 0.0
    c_to_a: float = 0.0
    A: list[float] = field(default_factory=_v3)
    b_to_a2: float = 0.0
    c_to_a2: float = 0.0
    A2: list[float] = field(default_factory=_v3)
    kin_to_pot: float = 0.0
    m_pe_b: float = 0.0
    m_pe_d: float = 0.0
    halfmass_radius: float = 0.0
    pid: int = -1


def _f32(token: str) -> float:
    return float(np.float32(float(token)))


# (field, element count, parser, output format), in column order.
_COLUMNS = [
    ("id", 1, int, "d"), ("descid", 1, int, "d"), ("mvir", 1, _f32, ".3e"),
    ("vmax", 1, _f32, ".2f"), ("vrms", 1, _f32, ".2f"), ("rvir", 1, _f32, ".3f"),
    ("rs", 1, _f32, ".3f"), ("np", 1, int, "d"), ("pos", 3, _f32, ".5f"),
    ("vel", 3, _f32, ".2f"), ("J", 3, _f32, ".3e"), ("spin", 1, _f32, ".5f"),
    ("klypin_rs", 1, _f32, ".5f"), ("m_all", 1, _f32, ".4e"),
    ("alt_m", 4, _f32, ".4e"), ("xoff", 1, _f32, ".5f"), ("voff", 1, _f32, ".2f"),
    ("bullock_spin", 1, _f32, ".5f"), ("b_to_a", 1, _f32, ".5f"),
    ("c_to_a", 1, _f32, ".5f"), ("A", 3, _f32, ".5f"), ("b_to_a2", 1, _f32, ".5f"),
    ("c_to_a2", 1, _f32, ".5f"), ("A2", 3, _f32, ".5f"),
    ("kin_to_pot", 1, _f32, ".4f"), ("m_pe_b", 1, _f32, ".3e"),
    ("m_pe_d", 1, _f32, ".3e"), ("halfmass_radius", 1, _f32, ".3f"),
]
NUM_INPUTS = sum(count for _, count, _, _ in _COLUMNS)


def parse_hlist_line(line: str) -> Optional[HListHalo]:
    """Parse a data row; return None for comments and incomplete rows."""
    tokens = line.split()
    if len(tokens) < NUM_INPUTS:
        return None
    halo = HListHalo()
    at = 0
    try:
        for name, count, parse, _ in _COLUMNS:
            values = [parse(tok) for tok in tokens[at:at + count]]
            setattr(halo, name, values if count > 1 else values[0])
            at += count
    except ValueError:
        return None
    return halo


def _format_halo(halo: HListHalo) -> str:
    parts = []
    for name, count, _, fmt in _COLUMNS:
        value = getattr(halo, name)
        values = value if count > 1 else [value]
        parts.extend(format(v, fmt) for v in values)
    parts.append(format(halo.pid, "d"))
    return " ".join(parts)


def _outside_with_wrap(halo: HListHalo, box_size: float, bounds: Sequence[float]) -> bool:
    rvir = halo.rvir / 1.0e3
    for i in range(3):
        lo, hi, x = bounds[i], bounds[i + 3], halo.pos[i]
        if ((x + rvir < lo and x - rvir + box_size > hi)
                or (x - rvir > hi and x + rvir - box_size < lo)):
            return True
    return False


def read_hlist(filename, box_size: float = DEFAULT_BOX_SIZE,
               bounds: Optional[Sequence[float]] = None,
               out: Optional[TextIO] = None) -> list[HListHalo]:
    """Read a halo list, find parents, and write it back with a PID column.

    With ``bounds`` (x/y/z minima then maxima), only halos that may touch the
    region are used and only those inside it are written. Returns the halos
    used for parent finding.
    """
    out = sys.stdout if out is None else out
    halos: list[HListHalo] = []
    seen_header = False
    with open(filename, "r") as handle:
        for line in handle:
            if line.startswith("#"):
                if not seen_header:
                    seen_header = True
                    out.write(f"{line.rstrip(chr(10))} PID\n")
                else:
                    out.write(line)
            halo = parse_hlist_line(line)
            if halo is None:
                continue
            if bounds is not None and _outside_with_wrap(halo, box_size, bounds):
                continue
            halos.append(halo)

    for halo, pid in zip(halos, find_parents(halos, lambda h: h.rvir, box_size)):
        halo.pid = pid

    for halo in halos:
        if bounds is not None and any(
                halo.pos[i] < bounds[i] or halo.pos[i] >= bounds[i + 3] for i in range(3)):
            continue
        out.write(_format_halo(halo) + "\n")
    return halos


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: ``out_XYZ.list box_size [x_min y_min z_min x_max y_max z_max]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 1 or 2 < len(args) < 8:
        print("Usage: find_parents out_XYZ.list box_size [x_min y_min z_min x_max y_max z_max]")
        print("Note: all dimensions must be present if selecting halos within a fraction of the box volume.")
        return 1
    box_size = float(args[1]) if len(args) > 1 else DEFAULT_BOX_SIZE
    bounds = [float(v) for v in args[2:8]] if len(args) >= 8 else None
    read_hlist(args[0], box_size, bounds)
    return 0


_ = fields  # dataclass introspection kept available for callers