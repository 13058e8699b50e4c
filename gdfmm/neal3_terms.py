"""Closed-form terms used by the collapsed (Neal 3) partition update."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from gdfmm.state import Individual

_TWO_PI = 2.0 * math.pi
_TOLERANCE = 1e-8


class ClusterSummaries(NamedTuple):
    """Sufficient statistics of the individuals placed in one cluster.

    ``w`` is the weighted mean sum(p_i * Xbar_i) / sum(p_i).
    ``data_var_term`` is sum((p_i - 1) * V_i).
    ``sum_pix2`` is sum(p_i * Xbar_i ** 2).
    ``sum_pi`` is sum(p_i).
    Here p_i is the number of observations of individual i.
    """

    w: float
    data_var_term: float
    sum_pix2: float
    sum_pi: int


class PosteriorParameters(NamedTuple):
    """Normal-inverse-gamma parameters after seeing a cluster's data."""

    nu0: float
    k0: float
    mu0: float
    sigma0: float


def log_i(
    n_ji: int,
    ybar_star_ji: float,
    vstar_ji: float,
    mu1: float,
    k1: float,
    nu1: float,
    sigma1: float,
) -> float:
    """Log marginal likelihood term of one individual under a normal-inverse-gamma law.

    The individual is summarised by its number of observations, mean and
    sample variance; the result is defined up to a factor that does not
    depend on the cluster.
    """
    if n_ji < 0:
        raise ValueError("N_ji can not be negative")
    n = float(n_ji)
    nu1_sigma1 = nu1 * sigma1
    coef1 = (k1 * n) / (k1 + n)
    term2 = (n - 1.0) * vstar_ji
    return (
        0.5 * math.log(k1)
        - 0.5 * n * math.log(_TWO_PI)
        + 0.5 * nu1 * math.log(0.5 * nu1_sigma1)
        + math.lgamma(0.5 * (nu1 + n))
        - math.lgamma(0.5 * nu1)
        - 0.5
        * (nu1 + n)
        * math.log(0.5 * (nu1_sigma1 + coef1 * (mu1 - ybar_star_ji) ** 2 + term2))
    )


def compute_cluster_summaries(
    indices: Iterable[tuple[int, int]],
    data: Sequence[Sequence[Individual]],
) -> ClusterSummaries:
    """Summarise the individuals ``data[j][i]`` for every ``(j, i)`` in ``indices``."""
    members = [data[j][i] for j, i in indices]
    sum_pi = sum(int(ind.n_ji) for ind in members)
    weighted = math.fsum(ind.n_ji * ind.ybar_star_ji for ind in members)
    data_var_term = math.fsum((ind.n_ji - 1) * ind.vstar_ji for ind in members)
    sum_pix2 = math.fsum(ind.n_ji * ind.ybar_star_ji ** 2 for ind in members)
    w = weighted / sum_pi if sum_pi > 0 else 0.0
    return ClusterSummaries(w, data_var_term, sum_pix2, sum_pi)


def posterior_parameters(
    w: float,
    data_var_term: float,
    sum_pix2: float,
    sum_pi: int,
    nu0: float,
    sigma0: float,
    mu0: float,
    k0: float,
) -> PosteriorParameters:
    """Update the prior (nu0, sigma0, mu0, k0) with a cluster's summaries."""
    if data_var_term < 0:
        raise ValueError("data_var_term can not be negative")
    spread = sum_pix2 - sum_pi * w * w
    if spread < -_TOLERANCE:
        raise ValueError("sum_pix2 - sum_pi * w * w can not be negative")
    nu_post = nu0 + sum_pi
    k_post = k0 + sum_pi
    mu_post = (k0 * mu0 + sum_pi * w) / k_post
    sigma_post = (
        nu0 * sigma0
        + data_var_term
        + spread
        + (k0 * sum_pi * (mu0 - w) ** 2) / k_post
    ) / nu_post
    return PosteriorParameters(nu_post, k_post, mu_post, sigma_post)