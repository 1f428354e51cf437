"""Statistics of subhalos relative to their host halos."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Optional, TextIO

from .parents import find_parents
from .records import Halo

HEADER = ("#ID UPID Mass/Pmass Pmass Vmax/Pvmax Pvmax Rvir/Prvir Prvir Pc R/Rvir "
          "Theta Vr/Pvmax Vtheta/Pvmax Vphi/Pvmax\n")


def dot(x1: Sequence[float], x2: Sequence[float]) -> float:
    """Dot product of the first three components."""
    return sum(x1[i] * x2[i] for i in range(3))


def cross(x1: Sequence[float], x2: Sequence[float]) -> list[float]:
    """Cross product of the first three components."""
    return [x1[1] * x2[2] - x1[2] * x2[1],
            x1[2] * x2[0] - x1[0] * x2[2],
            x1[0] * x2[1] - x1[1] * x2[0]]


def calc_angle(pos1: Sequence[float], pos2: Sequence[float]) -> float:
    """Angle between two vectors, or 0 if either is zero."""
    norm = math.sqrt(dot(pos1, pos1) * dot(pos2, pos2))
    if not norm:
        return 0.0
    return math.acos(max(-1.0, min(1.0, dot(pos1, pos2) / norm)))


def decompose_v(pos: Sequence[float], axis: Sequence[float],
                vel: Sequence[float]) -> tuple[float, float, float]:
    """Split ``vel`` into radial, theta and phi parts about ``axis``."""
    r = math.sqrt(dot(pos, pos))
    if not r:
        return 0.0, 0.0, 0.0
    vr = dot(vel, pos) / r
    theta = cross(axis, pos)
    tnorm = math.sqrt(dot(theta, theta))
    if not tnorm:
        return vr, 0.0, 0.0
    vtheta = dot(vel, theta) / tnorm
    phi = cross(pos, theta)
    pnorm = math.sqrt(dot(phi, phi))
    return vr, vtheta, dot(vel, phi) / pnorm


def subhalo_stats_line(halo: Halo, parent: Halo) -> Optional[str]:
    """Format one output row for ``halo`` in host ``parent``.

    Returns None when the host lacks a mass, radius, vmax or scale radius.
    """
    if not parent.m or not parent.r or not parent.vmax or not parent.rs:
        return None
    pos = [halo.pos[k] - parent.pos[k] for k in range(6)]
    r = math.sqrt(dot(pos, pos))
    theta = calc_angle(pos, parent.J)
    vr, vtheta, vphi = decompose_v(pos, parent.J, pos[3:])
    return (f"{halo.id:d} {parent.id:d} {halo.m / parent.m:.3e} {parent.m:.3e} "
            f"{halo.vmax / parent.vmax:.3f} {parent.vmax:.3f} {halo.r / parent.r:.3f} "
            f"{parent.r / 1e3:.3f} {parent.r / parent.rs:.1f} {r * 1e3 / parent.r:.3f} "
            f"{theta:.3f} {vr / parent.vmax:.3f} {vtheta / parent.vmax:.3f} "
            f"{vphi / parent.vmax:.3f}")


def calc_subhalo_stats(halos: Sequence[Halo], box_size: float,
                       out: TextIO) -> dict[int, int]:
    """Find hosts, write one row per subhalo to ``out``, ordered by id.

    Returns a mapping from each subhalo id to its direct parent id.
    """
    parent_ids = find_parents(halos, lambda h: h.r, box_size)
    direct = {h.id: pid for h, pid in zip(halos, parent_ids)}
    by_id = {h.id: h for h in halos}
    out.write(HEADER)
    subs: dict[int, int] = {}
    for halo in sorted(halos, key=lambda h: h.id):
        pid = direct[halo.id]
        if pid < 0:
            continue
        subs[halo.id] = pid
        host = by_id[pid]
        while direct[host.id] >= 0:
            host = by_id[direct[host.id]]
        line = subhalo_stats_line(halo, host)
        if line is not None:
            out.write(line + "\n")
    return subs