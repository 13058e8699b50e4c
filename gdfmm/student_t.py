"""Location-scale Student t density."""

from __future__ import annotations

import math

from scipy import stats


def dnct(x: float, n0: float, mu0: float, gamma0: float) -> float:
    """Density of a Student t with ``n0`` degrees of freedom, location ``mu0`` and scale ``gamma0``."""
    return float(stats.t.pdf((x - mu0) / gamma0, n0) / gamma0)


def log_dnct(x: float, n0: float, mu0: float, gamma0: float) -> float:
    """Log of :func:`dnct`."""
    if n0 <= 0:
        raise ValueError("the degree of freedom must be strictly positive")
    if gamma0 <= 0:
        raise ValueError("the scale must be strictly positive")
    z2 = (x - mu0) ** 2 / (gamma0 * gamma0)
    return (
        math.lgamma((n0 + 1.0) / 2.0)
        - math.lgamma(n0 / 2.0)
        - 0.5 * math.log(math.pi * gamma0 * gamma0 * n0)
        - 0.5 * (n0 + 1.0) * math.log(1.0 + z2 / n0)
    )