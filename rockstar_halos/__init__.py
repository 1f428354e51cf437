"""Dark matter halo analysis: properties, NFW fits, potentials, substructure, merger links and box decomposition."""

__version__ = "0.99.9rc3"