"""Shared state of the Gibbs sampler and helpers used by the full conditionals."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class Individual:
    """Observations of one individual within one level."""

    id: str
    n_ji: int
    mean_ji: float
    var_ji: float
    obs_ji: list[float]
    x_ji: Optional[np.ndarray] = None
    ybar_star_ji: Optional[float] = None
    vstar_ji: Optional[float] = None

    def __post_init__(self) -> None:
        if self.ybar_star_ji is None:
            self.ybar_star_ji = self.mean_ji
        if self.vstar_ji is None:
            self.vstar_ji = self.var_ji


@dataclass
class GibbsState:
    """Values updated during the Gibbs sampler.

    ``k`` is the number of allocated clusters, ``mstar`` the number of
    non-allocated components and ``m`` the total number of components.
    ``s`` is the d x m matrix of unnormalised weights and ``counts`` the
    d x k matrix of observations per level and cluster.
    """

    d: int
    n_j: list[int]
    k: int = 1
    mstar: int = 0
    m: int = 1
    lam: float = 1.0
    gamma: list[float] = field(default_factory=list)
    u: list[float] = field(default_factory=list)
    log_sum: float = 0.0
    s: Optional[np.ndarray] = None
    counts: Optional[np.ndarray] = None
    cluster_sizes: list[int] = field(default_factory=list)
    labels: list[list[int]] = field(default_factory=list)
    cluster_indices: list[set[tuple[int, int]]] = field(default_factory=list)
    mu: list[float] = field(default_factory=list)
    sigma: list[float] = field(default_factory=list)
    mv_data: list[list[Individual]] = field(default_factory=list)
    r: int = 0
    beta: Optional[np.ndarray] = None
    use_data: bool = True
    iterations: int = 0
    data: list[list[float]] = field(default_factory=list)
    log_prob_marginal_data: list[list[float]] = field(default_factory=list)
    sum_cluster_elements: list[float] = field(default_factory=list)
    squared_sum_cluster_elements: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.n_j) != self.d:
            raise ValueError("n_j must have one entry for each level")
        if self.s is None:
            self.allocate_s(self.m)
        if self.counts is None:
            self.allocate_n(self.k)

    def update_log_sum(self) -> None:
        """Set log_sum = sum_j gamma_j * log(1 + U_j)."""
        self.log_sum = math.fsum(g * math.log1p(u) for g, u in zip(self.gamma, self.u))

    def allocate_s(self, m: int) -> None:
        """Reset the weight matrix to d x m zeros."""
        self.s = np.zeros((self.d, m))

    def allocate_n(self, k: int) -> None:
        """Reset the count matrix to d x k zeros."""
        self.counts = np.zeros((self.d, k), dtype=np.int64)

    def compute_var_in_cluster(self, m: int) -> float:
        """Sample variance of the data in cluster ``m`` from its running sums."""
        size = self.cluster_sizes[m]
        if size < 2:
            return 0.0
        total = self.sum_cluster_elements[m]
        squares = self.squared_sum_cluster_elements[m]
        return (squares - total * total / size) / (size - 1)

    def update_cluster_structures(
        self, labels: list[list[int]], cluster_order: list[int]
    ) -> None:
        """Relabel raw component labels to 0..k-1 following ``cluster_order``.

        Rebuilds the labels, the count matrix, the cluster sizes and the
        index sets of every cluster.
        """
        new_label = {old: new for new, old in enumerate(cluster_order)}
        k = len(cluster_order)
        self.k = k
        self.labels = [[new_label[c] for c in row] for row in labels]
        self.allocate_n(k)
        self.cluster_indices = [set() for _ in range(k)]
        for j, row in enumerate(self.labels):
            for i, c in enumerate(row):
                self.counts[j, c] += 1
                self.cluster_indices[c].add((j, i))
        self.cluster_sizes = [int(v) for v in self.counts.sum(axis=0)]


class FullConditional(ABC):
    """One block of the Gibbs sampler."""

    def __init__(self, name: str = "", keep_fixed: bool = False) -> None:
        self.name = name
        self.keep_fixed = keep_fixed

    @abstractmethod
    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        """Draw new values for this block and store them in ``state``."""


def binary_decision(p: float, rng: np.random.Generator) -> bool:
    """Return True with probability ``p``."""
    return bool(rng.random() < p)


def sample_index(rng: np.random.Generator, weights) -> int:
    """Draw an index with probability proportional to ``weights``."""
    w = np.asarray(weights, dtype=float)
    total = w.sum()
    if w.size == 0 or not np.isfinite(total) or total <= 0 or np.any(w < 0):
        raise ValueError("weights must be non-negative with a positive finite sum")
    return int(rng.choice(w.size, p=w / total))


def log_raising_factorial(n: int, a: float) -> float:
    """Log of the rising factorial a (a+1) ... (a+n-1)."""
    if n == 0:
        return 0.0
    if n < 0:
        raise ValueError("n can not be negative")
    if a <= 0:
        raise ValueError("a must be strictly positive")
    return math.lgamma(a + n) - math.lgamma(a)