"""Phase-space distance metric between particles and halos."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Optional

from .records import Halo

INV_RADIUS_WEIGHTING = -0.2
FAR_AWAY = 1e20
NO_DENSITY_LIMIT = 1e9


def calc_particle_dist(halo: Halo, particle) -> float:
    """Phase-space distance from ``halo`` to anything with a 6-element ``pos``."""
    if halo.vrms <= 0 or halo.r <= 0:
        return FAR_AWAY
    r2 = sum((halo.pos[i] - particle.pos[i]) ** 2 for i in range(3))
    v2 = sum((halo.bulkvel[i] - particle.pos[i + 3]) ** 2 for i in range(3))
    return math.sqrt(r2 / (halo.r * halo.r) + v2 / (halo.vrms * halo.vrms))


def _calc_halo_dist(h1: Halo, h2: Halo) -> float:
    return calc_particle_dist(h1, h2)


def calc_halo_dist(h1: Halo, h2: Halo) -> float:
    """Distance from ``h1`` to ``h2``; infinite-like unless ``h2`` is smaller."""
    if h2.r > h1.r * 0.99999:
        return FAR_AWAY
    return _calc_halo_dist(h1, h2)


def calc_expected_density(halo: Halo, particle) -> float:
    """Phase-space density ``halo`` would have at ``particle``."""
    if halo.vrms <= 0 or halo.r <= 0:
        return NO_DENSITY_LIMIT
    r2 = sum((halo.pos[i] - particle.pos[i]) ** 2 for i in range(3))
    v2 = sum((halo.pos[i] - particle.pos[i]) ** 2 for i in range(3, 6))
    r = math.sqrt(r2)
    prof = 1.0 + 10.0 * r / halo.r
    vrms2 = halo.vrms * halo.vrms
    return (math.exp(-0.5 * (v2 / vrms2)) / (vrms2 * halo.vrms)
            * halo.m / (halo.r * halo.r * r * (prof * prof)))


class SubhaloMetric:
    """Searches a fixed set of candidate halos by phase-space distance."""

    def __init__(self, subs: Sequence[Halo]) -> None:
        self.subs = list(subs)
        self._snapshot = [(h, tuple(h.pos[:3]), h.r / INV_RADIUS_WEIGHTING)
                          for h in self.subs]

    def find_best_halo(self, particle, best_halo: Halo,
                       alt_nfw_metric: bool = False) -> Halo:
        """Return the candidate closest to ``particle``, or ``best_halo``."""
        if alt_nfw_metric:
            best_density = calc_expected_density(best_halo, particle)
            for sub in self.subs:
                density = calc_expected_density(sub, particle)
                if density > best_density:
                    best_density, best_halo = density, sub
            return best_halo
        best_metric = calc_particle_dist(best_halo, particle)
        for sub in self.subs:
            metric = calc_particle_dist(sub, particle)
            if metric < best_metric:
                best_metric, best_halo = metric, sub
        return best_halo

    def find_best_parent(self, halo: Halo, biggest_halo: Halo) -> Halo:
        """Return the closest larger candidate to ``halo``."""
        if halo is biggest_halo:
            return halo
        best_metric = calc_halo_dist(biggest_halo, halo)
        best = biggest_halo
        for sub in self.subs:
            metric = calc_halo_dist(sub, halo)
            if metric < best_metric:
                best_metric, best = metric, sub
        return best

    def find_children(self, halo: Halo, parent: Optional[Halo],
                      r: float) -> list[Halo]:
        """Smaller candidates within spatial radius ``r`` of ``halo``.

        With a ``parent`` given, candidates closer to the parent are left out.
        """
        weighted_r = halo.r / INV_RADIUS_WEIGHTING
        search_r2 = r * r * (1.0 + 1.0 / (INV_RADIUS_WEIGHTING * INV_RADIUS_WEIGHTING))
        children = []
        for sub, pos, sub_weighted_r in self._snapshot:
            ds = sum((p - q) ** 2 for p, q in zip(pos, halo.pos[:3]))
            dr = sub_weighted_r - weighted_r
            if ds + dr * dr > search_r2:
                continue
            if sub.r >= halo.r or ds >= r * r:
                continue
            if parent is not None and calc_halo_dist(halo, sub) > calc_halo_dist(parent, sub):
                continue
            children.append(sub)
        return children