"""Closed-form terms used by the marginal partition update."""

from __future__ import annotations

import math
from typing import NamedTuple


class PredictiveParameters(NamedTuple):
    """Student t posterior predictive parameters of one cluster."""

    dof: float
    location: float
    scale: float


def log_const_new_cluster(log_sum: float, lam: float, k: int) -> float:
    """Log of the constant in the probability of opening a new cluster when there are ``k``."""
    lam_psi = lam * math.exp(-log_sum)
    return -log_sum + math.log(k + 1.0 + lam_psi) - math.log(k + lam_psi)


def posterior_predictive_params(
    n_k: int,
    sum_elements: float,
    var_in_cluster: float,
    nu0: float,
    sigma0: float,
    mu0: float,
    k0: float,
) -> PredictiveParameters:
    """Student t predictive parameters for a cluster holding ``n_k`` observations."""
    if n_k < 1:
        raise ValueError("a cluster must hold at least one observation")
    dof = nu0 + n_k
    k_post = k0 + n_k
    location = (k0 * mu0 + sum_elements) / k_post
    mean = sum_elements / n_k
    sigma_post = (
        (n_k - 1) * var_in_cluster
        + nu0 * sigma0
        + (k0 * n_k * (mu0 - mean) ** 2) / k_post
    ) / dof
    scale = math.sqrt(sigma_post) * math.sqrt((k_post + 1.0) / k_post)
    return PredictiveParameters(dof, location, scale)