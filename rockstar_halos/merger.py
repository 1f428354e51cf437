"""Descendant assignment between halo catalogues of consecutive snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import groupby
from typing import Optional

from .records import Halo


class MergerTree:
    """Links halos of an earlier snapshot to their most likely descendants.

    ``part1`` and ``part2`` hold particle identifiers; each halo's particles
    are ``part[p_start : p_start + num_p]``.
    """

    def __init__(self, halos1: Sequence[Halo], halos2: Optional[Sequence[Halo]],
                 part1: Iterable[int], part2: Iterable[int]) -> None:
        self.halos1 = list(halos1)
        self.halos2 = list(halos2) if halos2 is not None else []
        self.part1 = list(part1)
        self.part2 = list(part2)
        self.particle_halos: Optional[dict[int, int]] = None

    def init_descendants(self) -> None:
        """Mark every earlier halo as having no descendant."""
        for halo in self.halos1:
            halo.desc = -1

    def connect_particle_ids_to_halo_ids(self) -> None:
        """Map each later-snapshot particle id to the id of the halo holding it."""
        mapping: dict[int, int] = {}
        self.particle_halos = mapping
        if not self.part2 or not self.halos2:
            return
        for halo in self.halos2:
            for pid in self.part2[halo.p_start:halo.p_start + halo.num_p]:
                mapping[pid] = halo.id
        self.part2 = []

    def calculate_descendants(self) -> None:
        """Give each earlier halo the later halo that holds most of its particles.

        Ties go to the smallest descendant id. Halos none of whose particles
        are found keep their current descendant.
        """
        if not self.halos2:
            return
        if self.particle_halos is None:
            self.connect_particle_ids_to_halo_ids()
        mapping = self.particle_halos
        for halo in self.halos1:
            found = sorted(
                mapping[pid]
                for pid in self.part1[halo.p_start:halo.p_start + halo.num_p]
                if pid in mapping
            )
            if not found:
                continue
            best_id, best_count = -1, -1
            for desc_id, run in groupby(found):
                count = sum(1 for _ in run)
                if count > best_count:
                    best_id, best_count = desc_id, count
            halo.desc = best_id