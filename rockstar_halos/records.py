"""Plain records for halos, particles and potential-calculation points."""

from __future__ import annotations

from dataclasses import dataclass, field


def _zeros(n: int):
    return lambda: [0.0] * n


@dataclass
class Halo:
    """A halo and all the properties computed for it."""

    id: int = 0
    pos: list[float] = field(default_factory=_zeros(6))
    corevel: list[float] = field(default_factory=_zeros(3))
    bulkvel: list[float] = field(default_factory=_zeros(3))
    m: float = 0.0
    r: float = 0.0
    child_r: float = 0.0
    vmax_r: float = 0.0
    mgrav: float = 0.0
    vmax: float = 0.0
    rvmax: float = 0.0
    rs: float = 0.0
    klypin_rs: float = 0.0
    vrms: float = 0.0
    J: list[float] = field(default_factory=_zeros(3))
    energy: float = 0.0
    spin: float = 0.0
    alt_m: list[float] = field(default_factory=_zeros(4))
    xoff: float = 0.0
    voff: float = 0.0
    b_to_a: float = 0.0
    c_to_a: float = 0.0
    A: list[float] = field(default_factory=_zeros(3))
    b_to_a2: float = 0.0
    c_to_a2: float = 0.0
    A2: list[float] = field(default_factory=_zeros(3))
    bullock_spin: float = 0.0
    kin_to_pot: float = 0.0
    m_pe_b: float = 0.0
    m_pe_d: float = 0.0
    halfmass_radius: float = 0.0
    num_p: int = 0
    num_child_particles: int = 0
    p_start: int = 0
    desc: int = 0
    flags: int = 0
    n_core: int = 0
    min_pos_err: float = 0.0
    min_vel_err: float = 0.0
    min_bulkvel_err: float = 0.0


@dataclass
class ExtraHaloInfo:
    """Hierarchy links of a halo; -1 means no link."""

    child: int = -1
    next_cochild: int = -1
    prev_cochild: int = -1
    sub_of: int = -1
    ph: int = -1
    max_metric: float = 0.0


@dataclass
class Particle:
    """A particle: identifier plus position (3) and velocity (3)."""

    id: int = 0
    pos: list[float] = field(default_factory=_zeros(6))


@dataclass
class PotentialPoint:
    """A particle as seen by the potential and kinetic energy calculations."""

    pos: list[float] = field(default_factory=_zeros(6))
    r2: float = 0.0
    pe: float = 0.0
    ke: float = 0.0
    flags: int = 0