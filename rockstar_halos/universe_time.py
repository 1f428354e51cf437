"""Conversion between cosmic scale factor and time."""

from __future__ import annotations

import math
import warnings
from collections.abc import Callable

from scipy.integrate import IntegrationWarning, quad

from .constants import HUBBLE_TIME_CONVERSION

STEPS = 4096
MAXA = 5.0
MIN_SCALE = 1e-30


def exact_time_to_scale(t: float, omega_m: float, w0: float = -1.0,
                        wa: float = 0.0) -> float:
    """Scale factor at time ``t`` after the big bang (units of 1/H0), flat LCDM only."""
    if w0 != -1 or wa != 0:
        raise ValueError("analytic time-to-scale conversion requires w0 = -1 and wa = 0")
    m = math.sinh(1.5 * t * math.sqrt(1.0 - omega_m))
    return (omega_m * m * m / (1.0 - omega_m)) ** (1.0 / 3.0)


class CosmicTime:
    """Times relative to today (a = 1), in units of 1/H0, with a lookup table.

    ``hubble_scaling(z)`` gives H(z) / H0.
    """

    def __init__(self, hubble_scaling: Callable[[float], float], h0: float) -> None:
        self.hubble_scaling = hubble_scaling
        self.h0 = h0
        self.h_conv = HUBBLE_TIME_CONVERSION / h0
        self.times = self._build_table()

    def _integrand(self, a: float) -> float:
        return 1.0 / (a * self.hubble_scaling(1.0 / a - 1.0))

    def _integrate(self, lo: float, hi: float, tol: float) -> float:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", IntegrationWarning)
            value, _ = quad(self._integrand, lo, hi, epsabs=tol, epsrel=1e-12, limit=200)
        return value

    @staticmethod
    def _grid(i: int) -> float:
        return max(MAXA * i / STEPS, MIN_SCALE)

    def _build_table(self) -> list[float]:
        times = [0.0] * (STEPS + 1)
        k = int(STEPS / MAXA)
        times[k] = self.exact_scale_to_time(self._grid(k))
        for i in range(k - 1, -1, -1):
            times[i] = times[i + 1] + self._integrate(self._grid(i + 1), self._grid(i), 1e-13)
        for i in range(k + 1, STEPS + 1):
            times[i] = times[i - 1] + self._integrate(self._grid(i - 1), self._grid(i), 1e-13)
        return times

    def exact_scale_to_time(self, scale: float) -> float:
        """Time from today to ``scale`` by direct integration."""
        if scale == 1.0:
            return 0.0
        scale = max(scale, MIN_SCALE)
        tol = min(abs(scale - 1.0) * 1e-7, 1e-7)
        return self._integrate(1.0, scale, tol)

    def scale_to_time(self, scale: float) -> float:
        """Time from today to ``scale``, interpolated from the table."""
        if scale > MAXA:
            return self.exact_scale_to_time(scale)
        if scale < 0:
            return self.times[0]
        x = scale / MAXA * STEPS
        low = int(x)
        if low >= STEPS:
            return self.times[STEPS]
        f = x - low
        return self.times[low] + f * (self.times[low + 1] - self.times[low])

    def scale_to_years(self, scale: float) -> float:
        """Time from today to ``scale`` in years."""
        return self.scale_to_time(scale) * self.h_conv