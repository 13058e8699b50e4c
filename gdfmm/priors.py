"""Prior distributions on the number of mixture components."""

from __future__ import annotations

import copy
import math
from abc import ABC, abstractmethod

from scipy import stats


def _check_count(k: int) -> None:
    if k < 0:
        raise ValueError("the number of components can not be negative")


class ComponentPrior(ABC):
    """A prior distribution on the number of components, supported on 1, 2, ..."""

    def __init__(self, name: str = "") -> None:
        self.name = name

    def show_me(self) -> str:
        """Return the name of the prior."""
        return self.name

    def clone(self) -> ComponentPrior:
        """Return an independent copy of this prior."""
        return copy.deepcopy(self)

    @abstractmethod
    def get_mode(self) -> int:
        """Return the mode of the distribution."""

    @abstractmethod
    def eval_prob(self, k: int) -> float:
        """Return the probability of ``k`` components."""

    @abstractmethod
    def log_eval_prob(self, k: int) -> float:
        """Return the log probability of ``k`` components."""


class Poisson1(ComponentPrior):
    """Poisson distribution with rate ``lam`` shifted by one."""

    def __init__(self, name: str, lam: float) -> None:
        super().__init__(name)
        if lam <= 0:
            raise ValueError(
                "Lambda parameter in Poisson distribution must be strictly positive"
            )
        self.lam = float(lam)

    def get_mode(self) -> int:
        return math.floor(self.lam) + 1

    def eval_prob(self, k: int) -> float:
        _check_count(k)
        if k == 0:
            return 0.0
        return float(stats.poisson.pmf(k - 1, self.lam))

    def log_eval_prob(self, k: int) -> float:
        _check_count(k)
        if k == 0:
            return -math.inf
        return -self.lam + (k - 1) * math.log(self.lam) - math.lgamma(k)


class NegativeBinomial1(ComponentPrior):
    """Negative binomial distribution shifted by one.

    Before the shift, the variable counts the failures occurring before ``n``
    successes in independent trials with success probability ``p``.
    """

    def __init__(self, name: str, p: float, n: int) -> None:
        super().__init__(name)
        if n <= 0 or p < 0 or p > 1:
            raise ValueError(
                "n parameter has to be strictly positive and integer and p has to be in [0,1]"
            )
        self.p = float(p)
        self.n = int(n)

    def get_mode(self) -> int:
        if self.n <= 1:
            return 1
        if self.p == 1:
            raise ValueError("the mode is not defined when p is equal to 1")
        return math.floor(self.p * (self.n - 1) / (1 - self.p)) + 1

    def eval_prob(self, k: int) -> float:
        _check_count(k)
        if k == 0:
            return 0.0
        if self.p == 0:
            return 0.0
        if self.p == 1:
            return 1.0 if k == 1 else 0.0
        return float(stats.nbinom.pmf(k - 1, self.n, self.p))

    def log_eval_prob(self, k: int) -> float:
        _check_count(k)
        if k == 0:
            return -math.inf
        if self.p in (0.0, 1.0):
            raise ValueError(
                "It is not possible to compute the log probability if p is equal to 1 or 0"
            )
        log_choose = math.lgamma(k + self.n - 1) - math.lgamma(k) - math.lgamma(self.n)
        return log_choose + self.n * math.log(self.p) + (k - 1) * math.log(1 - self.p)