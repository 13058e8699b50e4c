"""Partition update with the component parameters and the weights integrated out."""

from __future__ import annotations

import math

import numpy as np

from gdfmm.marginal_terms import log_const_new_cluster, posterior_predictive_params
from gdfmm.partition import PartitionConditional
from gdfmm.state import GibbsState, sample_index
from gdfmm.student_t import log_dnct


class MarginalPartitionConditional(PartitionConditional):
    """Chinese-restaurant-franchise reallocation of univariate observations.

    Each observation is removed from its cluster and reassigned either to an
    existing cluster, weighted by its local count plus gamma_j and by the
    Student t posterior predictive of that cluster, or to a new cluster,
    weighted by the new-cluster constant, gamma_j * Lambda and the prior
    marginal of the observation stored in the state. Clusters stay numbered
    0..K-1; when one empties, the last cluster takes its label.
    """

    def __init__(
        self,
        name: str = "Partition",
        d: int = 1,
        n_j=(),
        fix_partition: bool = False,
        nu0: float = 1.0,
        sigma0: float = 1.0,
        mu0: float = 0.0,
        k0: float = 1.0,
    ) -> None:
        super().__init__(name, d, n_j, fix_partition)
        self.nu0 = nu0
        self.sigma0 = sigma0
        self.mu0 = mu0
        self.k0 = k0

    def _remove(self, state: GibbsState, j: int, i: int) -> None:
        """Take observation (j, i) out of its cluster, dropping the cluster if it empties."""
        x = state.data[j][i]
        c = state.labels[j][i]
        state.cluster_sizes[c] -= 1
        state.counts[j, c] -= 1
        state.sum_cluster_elements[c] -= x
        state.squared_sum_cluster_elements[c] -= x * x

        if state.cluster_sizes[c] != 0:
            return
        last = state.k - 1
        state.cluster_sizes[c] = state.cluster_sizes[last]
        state.cluster_sizes.pop()
        state.counts[:, c] = state.counts[:, last]
        state.counts = state.counts[:, :last].copy()
        state.sum_cluster_elements[c] = state.sum_cluster_elements[last]
        state.squared_sum_cluster_elements[c] = state.squared_sum_cluster_elements[last]
        state.sum_cluster_elements.pop()
        state.squared_sum_cluster_elements.pop()
        for row in state.labels:
            for pos, label in enumerate(row):
                if label == last:
                    row[pos] = c
        state.labels[j][i] = last
        state.k -= 1

    def _log_weights(self, state: GibbsState, lam: float, j: int, i: int) -> np.ndarray:
        x = state.data[j][i]
        k = state.k
        gamma_j = state.gamma[j]
        log_w = np.empty(k + 1)
        for cluster in range(k):
            pred = posterior_predictive_params(
                state.cluster_sizes[cluster],
                state.sum_cluster_elements[cluster],
                state.compute_var_in_cluster(cluster),
                self.nu0,
                self.sigma0,
                self.mu0,
                self.k0,
            )
            log_w[cluster] = math.log(float(state.counts[j, cluster]) + gamma_j) + log_dnct(
                x, pred.dof, pred.location, pred.scale
            )
        if k == 0 and lam == 0:
            raise RuntimeError("got a nan in the allocation probabilities")
        prior_new = gamma_j * lam
        log_prior_new = math.log(prior_new) if prior_new > 0 else -math.inf
        log_w[k] = (
            log_const_new_cluster(state.log_sum, lam, k)
            + log_prior_new
            + state.log_prob_marginal_data[j][i]
        )
        return log_w

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        if self.partition_fixed:
            return
        # Lambda takes part in this update through its integer part only.
        lam = float(int(state.lam))
        for j, n in enumerate(state.n_j):
            for i in range(n):
                self._remove(state, j, i)

                log_w = self._log_weights(state, lam, j, i)
                with np.errstate(invalid="ignore"):
                    weights = np.exp(log_w - log_w.max())
                if np.any(np.isnan(weights)):
                    raise RuntimeError("got a nan in the allocation probabilities")
                new_c = sample_index(rng, weights)

                if new_c == state.k:
                    state.cluster_sizes.append(0)
                    state.counts = np.hstack(
                        [state.counts, np.zeros((state.d, 1), dtype=state.counts.dtype)]
                    )
                    state.sum_cluster_elements.append(0.0)
                    state.squared_sum_cluster_elements.append(0.0)
                    state.k += 1

                x = state.data[j][i]
                state.labels[j][i] = new_c
                state.cluster_sizes[new_c] += 1
                state.counts[j, new_c] += 1
                state.sum_cluster_elements[new_c] += x
                state.squared_sum_cluster_elements[new_c] += x * x

        state.m = state.k
        if state.k == 0:
            raise RuntimeError("K is 0, this should be impossible")