"""Full conditional for the number of non-allocated components."""

from __future__ import annotations

import math

import numpy as np

from gdfmm.state import FullConditional, GibbsState, binary_decision, log_raising_factorial


def _to_signed(n: int) -> int:
    """Map 0, 1, 2, 3, ... to 0, -1, 1, -2, ..."""
    return n // 2 if n % 2 == 0 else -((n + 1) // 2)


def _to_unsigned(z: int) -> int:
    """Inverse of the mapping from naturals to signed integers."""
    return 2 * abs(z) - 1 if z < 0 else 2 * abs(z)


def _level_totals(n) -> np.ndarray:
    return np.asarray(n).sum(axis=1)


class MstarConditional(FullConditional):
    """Updates Mstar, by a direct draw when d is 0 and by Metropolis-Hastings otherwise."""

    def __init__(
        self,
        name: str = "Mstar",
        proposal: int = 1,
        partition_fixed: bool = False,
        keep_fixed: bool = False,
    ) -> None:
        super().__init__(name, keep_fixed)
        if proposal < 1:
            raise ValueError("the proposal width must be at least 1")
        self.proposal = proposal
        self.partition_fixed = partition_fixed
        self.support_proposal = [i for i in range(-proposal, proposal + 1) if i != 0]

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        k = state.k
        lam = state.lam
        if state.d == 0:
            p0 = lam / (lam + k * math.exp(state.log_sum))
            rate = lam * math.exp(-state.log_sum)
            draw = int(rng.poisson(rate))
            state.mstar = draw + 1 if binary_decision(p0, rng) else draw
        else:
            z = _to_signed(state.mstar)
            step = self.support_proposal[int(rng.integers(2 * self.proposal))]
            z_new = step + z if binary_decision(0.5, rng) else step - z
            m_new = _to_unsigned(z_new)
            log_alpha = self.log_prob_mh(state.mstar, m_new, k, lam, state.gamma, state.counts)
            if rng.random() < math.exp(min(0.0, log_alpha)):
                state.mstar = m_new
        state.m = k + state.mstar

    def log_full_cond_mstar(self, m: int, k: int, lam: float, gamma, n) -> float:
        """Log full conditional of Mstar, not conditioning on U."""
        total = m + k
        log_prod = -math.fsum(
            log_raising_factorial(int(n_j), g * total)
            for n_j, g in zip(_level_totals(n), gamma)
        )
        return math.log(total) + m * math.log(lam) - math.lgamma(m + 1) + log_prod

    def log_prob_mh(self, m: int, m_new: int, k: int, lam: float, gamma, n) -> float:
        """Log acceptance ratio for moving Mstar from ``m`` to ``m_new``."""
        q = m_new - m
        res = math.log(m_new + k) - math.log(m + k)
        res += q * math.log(lam)
        for n_j, g in zip(_level_totals(n), gamma):
            n_j = int(n_j)
            res += log_raising_factorial(n_j, g * (m + k)) - log_raising_factorial(
                n_j, g * (m_new + k)
            )
        if q > 0:
            res -= log_raising_factorial(q, m + 1)
        else:
            res += log_raising_factorial(-q, m + 1 + q)
        return res