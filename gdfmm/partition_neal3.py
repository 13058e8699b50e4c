"""Collapsed partition update in which the component parameters are integrated out."""

from __future__ import annotations

import math

import numpy as np

from gdfmm.neal3_terms import compute_cluster_summaries, log_i, posterior_parameters
from gdfmm.partition import PartitionConditional
from gdfmm.state import GibbsState, sample_index


class Neal3PartitionConditional(PartitionConditional):
    """Reallocates each observation in turn with mu and sigma integrated out.

    Each individual is removed from its cluster and offered every one of the
    M components. An allocated component is weighted by S and by the
    marginal likelihood of the individual given the cluster's other members
    under a normal-inverse-gamma prior (nu0, sigma0, mu0, k0). Choosing a
    non-allocated component opens a new cluster, which always takes the
    label K so that the allocated clusters stay numbered 0..K-1.
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
        c = state.labels[j][i]
        state.cluster_sizes[c] -= 1
        state.counts[j, c] -= 1
        try:
            state.cluster_indices[c].remove((j, i))
        except KeyError:
            raise RuntimeError(
                f"element {(j, i)} is not in the index set of its cluster {c}"
            ) from None

        if state.cluster_sizes[c] != 0:
            return
        last = state.k - 1
        state.cluster_sizes[c] = state.cluster_sizes[last]
        state.cluster_sizes.pop()
        state.counts[:, c] = state.counts[:, last]
        state.counts = state.counts[:, :last].copy()
        state.cluster_indices[c] = state.cluster_indices[last]
        state.cluster_indices.pop()
        for row in state.labels:
            for pos, label in enumerate(row):
                if label == last:
                    row[pos] = c
        state.k -= 1
        state.mstar += 1

    def _log_weights(self, state: GibbsState, j: int, i: int) -> np.ndarray:
        individual = state.mv_data[j][i] if state.use_data else None
        log_w = np.empty(state.m)
        for comp in range(state.m):
            members = set(state.cluster_indices[comp]) if comp < state.k else set()
            members.add((j, i))
            if state.use_data:
                summaries = compute_cluster_summaries(members, state.mv_data)
            else:
                summaries = (0.0, 0.0, 0.0, 0)
            post = posterior_parameters(
                *summaries, self.nu0, self.sigma0, self.mu0, self.k0
            )
            with np.errstate(divide="ignore"):
                value = float(np.log(state.s[j, comp]))
            if individual is not None:
                value += log_i(
                    individual.n_ji,
                    individual.ybar_star_ji,
                    individual.vstar_ji,
                    post.mu0,
                    post.k0,
                    post.nu0,
                    post.sigma0,
                )
            log_w[comp] = value
        return log_w

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        if self.partition_fixed:
            return
        for j, n in enumerate(state.n_j):
            for i in range(n):
                self._remove(state, j, i)

                log_w = self._log_weights(state, j, i)
                with np.errstate(invalid="ignore"):
                    weights = np.exp(log_w - log_w.max())
                if np.any(np.isnan(weights)):
                    raise RuntimeError("got a nan in the allocation probabilities")
                new_c = sample_index(rng, weights)

                if new_c >= state.k:
                    state.cluster_sizes.append(0)
                    state.counts = np.hstack(
                        [state.counts, np.zeros((state.d, 1), dtype=state.counts.dtype)]
                    )
                    state.cluster_indices.append(set())
                    new_c = state.k
                    state.k += 1
                    state.mstar -= 1

                state.labels[j][i] = new_c
                state.cluster_sizes[new_c] += 1
                state.counts[j, new_c] += 1
                state.cluster_indices[new_c].add((j, i))

        if state.k == 0:
            raise RuntimeError("K is 0, this should be impossible")
        if math.isnan(float(state.k)):
            raise RuntimeError("invalid number of clusters")