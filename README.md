# rockstar-halos

Building blocks for analysing dark matter halos in cosmological N-body
simulations: halo properties, NFW scale radii, gravitational potentials,
substructure assignment, merger links, cosmic time and the division of a
simulation box between worker processes.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

`rockstar-find-parents` reads an ASCII halo list, assigns each halo a parent
(the smallest-Vmax larger halo whose virial radius encloses it, with periodic
boundaries) and prints the list to standard output with an extra `PID`
column (`-1` for host halos). The first comment line gets ` PID` appended;
other comment lines are copied unchanged.

```
rockstar-find-parents out_0.list 250
```

The second argument is the box size (default 250). To work on part of the
box, give all six bounds (x/y/z minima, then maxima). Halos that may reach
into the region are used for parent finding, and only those inside it are
printed:

```
rockstar-find-parents out_0.list 250 0 0 0 125 125 125
```

Wrong arguments print a usage message and exit with status 1.

## Modules

- `rockstar_halos.records`: dataclasses `Halo`, `ExtraHaloInfo`, `Particle`
  and `PotentialPoint`.
- `rockstar_halos.constants`: physical constants (`Gc`, `VMAX_CONST`,
  `RMAX_TO_RS`, `RS_CONSTANT`, `CRITICAL_DENSITY`,
  `HUBBLE_TIME_CONVERSION`) and `ROCKSTAR_VERSION`.
- `rockstar_halos.bits`: `BitArray`, a fixed-size bit set with `set`,
  `clear`, `test` and `clear_all`; out-of-range indices raise `IndexError`.
- `rockstar_halos.nfw`: `c_to_f` / `f_to_c` conversions between
  concentration and the fitting ratio, `estimate_scale_radius` (from mass,
  radius and vmax), the binned χ² `chi2_scale`, its minimiser
  `calc_scale_from_bins`, and `calc_scale_radius`, which sets `rs` and
  `klypin_rs` on a `Halo` from radius-sorted points.
- `rockstar_halos.potential`: `distance2`, softened `inv_distance`,
  `compute_direct_potential` (exact pairwise), `compute_potential`
  (Barnes-Hut tree approximation) and `compute_kinetic_energy` relative to a
  centre, including the Hubble flow.
- `rockstar_halos.properties`: `HaloSettings` holds particle mass, force
  resolution, scale factor and density thresholds; with it
  `max_halo_radius`, `add_ang_mom`, `estimate_vmax_from_bins`,
  `calculate_corevel`, `calc_shape` (iterative ellipsoid fit),
  `estimate_total_energy` and `calc_pseudo_evolution_masses` compute halo
  properties.
- `rockstar_halos.subhalo_metric`: phase-space distances
  `calc_particle_dist`, `calc_halo_dist` and `calc_expected_density`, and
  `SubhaloMetric` with `find_best_halo`, `find_best_parent` and
  `find_children` over a fixed set of candidate halos.
- `rockstar_halos.parents`: `find_parents` (parent ids by radius and Vmax
  order, periodic or not), `HListHalo`, `parse_hlist_line`, `read_hlist`
  and the `main` behind the command above.
- `rockstar_halos.substats`: vector helpers `dot`, `cross`, `calc_angle`,
  `decompose_v`, plus `subhalo_stats_line` and `calc_subhalo_stats`, which
  writes one row per subhalo relative to its top-level host.
- `rockstar_halos.merger`: `MergerTree` gives each halo of an earlier
  snapshot the later halo that holds most of its particles (ties go to the
  smallest id).
- `rockstar_halos.universe_time`: `CosmicTime` converts scale factor to time
  (units of 1/H0, relative to a = 1) and years for a given Hubble scaling;
  `exact_time_to_scale` inverts it analytically for flat ΛCDM.
- `rockstar_halos.load_balance`: `factor_3`, `divide_projection`,
  `sort_chunks`, `populate_bounds`, `volume_balance_bounds`,
  `check_num_writers` and `parse_script_bounds`; invalid divisions raise
  `LoadBalanceError`.
- `rockstar_halos.particles`: `remove_duplicate_particles`,
  `align_particles` (unwrapping groups across the periodic boundary) and
  `fof_sort_order`.

## Python use

```python
from rockstar_halos.bits import BitArray
from rockstar_halos.load_balance import factor_3
from rockstar_halos.nfw import c_to_f, f_to_c

flags = BitArray(100)
flags.set(42)
assert flags.test(42)

f = c_to_f(10.0)
c = f_to_c(f)          # recovers a concentration close to 10

print(factor_3(8))     # [2, 2, 2]
```

## What this package does not do

It is a library of analysis steps, not a complete halo finder. It does not
read simulation snapshots, does not perform friends-of-friends or
phase-space group finding, has no configuration-file handling, writes no
binary or BGC2 halo catalogues, and has no networked server/client mode for
running across many processes. `load_balance` only computes and checks box
divisions; it does not talk to worker processes. The only command is
`rockstar-find-parents`.