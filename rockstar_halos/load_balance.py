"""Dividing the simulation box between writer processes."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Optional

logger = logging.getLogger(__name__)


class LoadBalanceError(Exception):
    """Raised when a box division cannot be accepted."""


def _ceil_cbrt(n: int) -> int:
    """Smallest non-negative integer whose cube is at least ``n``."""
    i = max(int(round(n ** (1.0 / 3.0))), 0)
    while i ** 3 < n:
        i += 1
    while i > 0 and (i - 1) ** 3 >= n:
        i -= 1
    return i


def _ceil_sqrt(n: int) -> int:
    """Smallest non-negative integer whose square is at least ``n``."""
    return 0 if n <= 0 else math.isqrt(n - 1) + 1


def factor_3(n: int) -> list[int]:
    """Split ``n`` into three integer factors, as close to a cube as practical."""
    if n < 1:
        raise ValueError("can only factor positive integers")
    factors: list[int] = []
    remaining = n
    i = _ceil_cbrt(n)
    while i > 0 and len(factors) < 2:
        if remaining % i == 0:
            remaining //= i
            factors.append(i)
            i = _ceil_sqrt(remaining) + 1
        i -= 1
    factors.append(remaining)
    return factors


def divide_projection(data: Sequence[int], pieces: int, box_size: float) -> list[float]:
    """Place ``pieces`` division starts along a 1-D particle-count projection.

    Returns the lower edge of each piece, starting with 0; the upper edge of
    the last piece is ``box_size``. Falls back to equal-volume divisions for
    any pieces the projection cannot place.
    """
    if pieces <= 0:
        raise ValueError("pieces must be positive")
    size = len(data)
    per_piece = (sum(data) + pieces - 1) // pieces
    places = [0.0]
    cumulative = 0
    for i, count in enumerate(data):
        if len(places) >= pieces:
            break
        cumulative += count
        n = len(places)
        if cumulative > n * per_piece:
            before = cumulative - count
            f = (n * per_piece - before) / (cumulative - before) if cumulative > before else 0.0
            places.append(box_size * ((i + f) / size))
    if len(places) < pieces:
        logger.warning("Projection failed; reverting to equal volume divisions.")
        while len(places) < pieces:
            n = len(places)
            places.append(places[-1] + (box_size - places[-1]) / (pieces - n + 1))
    return places


def sort_chunks(chunks: Sequence[int]) -> list[int]:
    """Return the three chunk counts in ascending order."""
    if len(chunks) != 3:
        raise ValueError("expected exactly three chunk counts")
    return sorted(chunks)


def populate_bounds(pos: int, oldbounds: Optional[Sequence[float]], new_min: float,
                    new_max: float, box_size: float) -> list[float]:
    """Bounds that keep axes before ``pos``, split axis ``pos``, and span later axes."""
    bounds = []
    for i in range(6):
        axis = i % 3
        if axis < pos:
            if oldbounds is None:
                raise ValueError("old bounds are needed for axes before the split axis")
            bounds.append(oldbounds[i])
        elif axis == pos:
            bounds.append(new_min if i < 3 else new_max)
        else:
            bounds.append(0.0 if i < 3 else box_size)
    return bounds


def volume_balance_bounds(chunks: Sequence[int], num_writers: int,
                          box_size: float) -> list[list[float]]:
    """Equal-volume bounds for each writer on a ``chunks`` grid."""
    if len(chunks) != 3 or any(c < 1 for c in chunks):
        raise ValueError("chunks must be three positive counts")
    chunk_size = [box_size / c for c in chunks]
    result = []
    for n in range(num_writers):
        idx = (n % chunks[0], (n // chunks[0]) % chunks[1], n // (chunks[0] * chunks[1]))
        lows = [idx[i] * chunk_size[i] for i in range(3)]
        highs = [box_size if idx[i] + 1 == chunks[i] else lows[i] + chunk_size[i]
                 for i in range(3)]
        result.append(lows + highs)
    return result


def check_num_writers(num_writers: int) -> list[int]:
    """Check that periodic runs can split the box at least in two along every axis."""
    factors = factor_3(num_writers)
    if any(f < 2 for f in factors):
        raise LoadBalanceError(
            "NUM_WRITERS should be the product of at least three factors larger than 1 "
            "for periodic boundary conditions to be enabled! "
            f"(Currently, NUM_WRITERS = {num_writers} = "
            f"{factors[0]} x {factors[1]} x {factors[2]}) "
            "Please adjust NUM_WRITERS or set PERIODIC=0 in the config file.")
    return factors


def parse_script_bounds(line: str, expected_id: int, expected_port: int,
                        box_size: float) -> list[float]:
    """Parse ``ID address port min_x min_y min_z max_x max_y max_z`` from a balance script."""
    tokens = line.split()
    try:
        if len(tokens) < 9:
            raise ValueError
        writer_id = int(tokens[0])
        port = int(tokens[2])
        bounds = [float(tok) for tok in tokens[3:9]]
    except ValueError:
        raise LoadBalanceError(
            f"Received invalid format from load balance script! Offending line: {line!r}"
        ) from None
    if writer_id != expected_id or port != expected_port:
        raise LoadBalanceError(
            f"Received invalid format from load balance script! Offending line: {line!r}; "
            f"expected: {expected_id} <address> {expected_port} "
            "min_x min_y min_z max_x max_y max_z")
    if any(b < 0 or b > box_size for b in bounds):
        raise LoadBalanceError(
            f"Received invalid format from load balance script! Offending line: {line!r}; "
            f"bounds must be within the range 0 to {box_size:f}")
    return bounds