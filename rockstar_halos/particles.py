"""Particle preparation steps that precede friends-of-friends linking."""

from __future__ import annotations

import logging
import struct
from collections.abc import Sequence

from .records import Particle

logger = logging.getLogger(__name__)

_NUM_COUNT_BINS = 100
_DUPLICATE_WARNING_FRACTION = 0.0001


def _pos_key(pos: Sequence[float]) -> bytes:
    # Duplicates are detected by exact bitwise equality of all six coordinates.
    return struct.pack("<6d", *pos[:6])


def remove_duplicate_particles(particles: Sequence[Particle],
                               ignore_ids: bool = False) -> tuple[list[Particle], int]:
    """Drop particles that duplicate their neighbour in the list.

    The list is scanned from the end; a particle whose position and velocity,
    or whose id, equal those of the last kept particle is replaced by the
    current last particle of the list, which shrinks by one. With
    ``ignore_ids`` every particle's id is first set to its index.

    Returns the remaining particles and the number removed.
    """
    kept = list(particles)
    if ignore_ids:
        for index, particle in enumerate(kept):
            particle.id = index
    if len(kept) < 2:
        return kept, 0

    count = len(kept)
    last = kept[-1]
    last_key = _pos_key(last.pos)
    last_id = last.id
    removed = 0
    for i in range(count - 2, -1, -1):
        current = kept[i]
        if _pos_key(current.pos) == last_key or current.id == last_id:
            count -= 1
            kept[i] = kept[count]
            removed += 1
            continue
        last_key = _pos_key(current.pos)
        last_id = current.id
    del kept[count:]

    if removed and removed > _DUPLICATE_WARNING_FRACTION * count:
        logger.warning("%d duplicate particles removed.", removed)
    return kept, removed


def align_particles(particles: Sequence[Particle], box_size: float,
                    link_length: float) -> list[int]:
    """Unwrap a group that straddles the periodic box edge, in place.

    For every axis along which the group touches both faces of the box, the
    first empty slab is found and all particles beyond it are shifted down by
    one box length. Returns the axes that were unwrapped.
    """
    if not box_size or len(particles) < 2:
        return []
    if not link_length > 0:
        raise ValueError("link length must be positive")

    wrapped_axes = []
    for axis in range(3):
        coords = [particle.pos[axis] for particle in particles]
        low, high = min(coords), max(coords)
        if not (low <= link_length and high >= box_size - link_length):
            continue
        max_counts = float(int(box_size / link_length))
        if max_counts > _NUM_COUNT_BINS:
            max_counts = float(_NUM_COUNT_BINS)
        multiple = max_counts / box_size
        counts = [0] * _NUM_COUNT_BINS
        for x in coords:
            index = min(max(int(x * multiple), 0), _NUM_COUNT_BINS - 1)
            counts[index] += 1
        empty = next((i for i in range(int(max_counts)) if not counts[i]),
                     int(max_counts))
        wrap_position = (empty + 0.5) * box_size / max_counts
        for particle in particles:
            if particle.pos[axis] > wrap_position:
                particle.pos[axis] -= box_size
        wrapped_axes.append(axis)
    return wrapped_axes


def fof_sort_order(sizes: Sequence[int]) -> list[int]:
    """Indices of the groups ordered by ascending particle count."""
    return sorted(range(len(sizes)), key=lambda i: sizes[i])