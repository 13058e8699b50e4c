"""Full conditional for the partition given the component parameters."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from gdfmm.state import FullConditional, GibbsState, Individual, sample_index

_TWO_PI = 2.0 * math.pi


class PartitionConditional(FullConditional):
    """Assigns every observation to one of the M components.

    The draw uses the weights S and, if the state uses data, the Gaussian
    likelihood of each individual. Labels are then renumbered so that the
    allocated components come first, and mu and sigma are reordered to match.
    """

    def __init__(
        self,
        name: str = "Partition",
        d: int = 1,
        n_j=(),
        fix_partition: bool = False,
    ) -> None:
        super().__init__(name, fix_partition)
        self.partition_fixed = fix_partition
        self.labels: list[list[int]] = [[1] * int(n) for n in n_j]
        self.clust_out: list[int] = []
        if len(self.labels) != d:
            raise ValueError("n_j must have one entry for each level")

    def _component_weights(self, state: GibbsState, j: int, i: int) -> np.ndarray:
        m = state.m
        with np.errstate(divide="ignore"):
            log_w = np.log(np.asarray(state.s[j, :m], dtype=float))
        if state.use_data:
            individual = state.mv_data[j][i]
            log_w = log_w + np.array(
                [self.log_dmvnorm(individual, state.mu[c], state.sigma[c]) for c in range(m)]
            )
        with np.errstate(invalid="ignore"):
            weights = np.exp(log_w - log_w.max())
        if np.any(np.isnan(weights)):
            raise RuntimeError("got a nan in the allocation probabilities")
        return weights

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        if self.partition_fixed:
            return
        m_total = state.m
        self.labels = [
            [sample_index(rng, self._component_weights(state, j, i)) for i in range(n)]
            for j, n in enumerate(state.n_j)
        ]
        self.clust_out = sorted({c for row in self.labels for c in row})
        k = len(self.clust_out)
        state.update_cluster_structures(self.labels, self.clust_out)
        state.k = k
        state.mstar = m_total - k

        used = set(self.clust_out)
        order = self.clust_out + [c for c in range(m_total) if c not in used]
        state.mu = [state.mu[c] for c in order]
        state.sigma = [state.sigma[c] for c in order]

    def log_dmvnorm(self, individual: Individual, mu: float, var: float) -> float:
        """Log density of N(mu * 1, var * I) at the individual's data, via its summaries."""
        n = individual.n_ji
        return -0.5 * n * math.log(_TWO_PI * var) - (0.5 / var) * (
            (n - 1) * individual.vstar_ji + n * (individual.ybar_star_ji - mu) ** 2
        )

    def log_dmvnorm2(
        self,
        individual: Individual,
        mu: float,
        var: float,
        cov_term: Optional[np.ndarray] = None,
    ) -> float:
        """Log density of N(mu * 1 + cov_term, var * I) at the individual's observations."""
        n = individual.n_ji
        resid = np.asarray(individual.obs_ji[:n], dtype=float) - mu
        if cov_term is not None:
            resid = resid - np.asarray(cov_term, dtype=float).reshape(-1)
        return -0.5 * n * math.log(_TWO_PI * var) - (0.5 / var) * float(resid @ resid)