"""Full conditionals for the weights S, the latent U and Lambda."""

from __future__ import annotations

import math

import numpy as np

from gdfmm.state import FullConditional, GibbsState, binary_decision


class SConditional(FullConditional):
    """Draws the unnormalised weights of allocated and non-allocated components."""

    def __init__(self, name: str = "S", keep_fixed: bool = False) -> None:
        super().__init__(name, keep_fixed)

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        k = state.k
        state.allocate_s(state.m)
        for j in range(state.d):
            scale = 1.0 / (state.u[j] + 1.0)
            for c in range(k):
                shape = state.gamma[j] + float(state.counts[j, c])
                state.s[j, c] = rng.gamma(shape, scale)
            for extra in range(state.mstar):
                state.s[j, k + extra] = rng.gamma(state.gamma[j], scale)


class UConditional(FullConditional):
    """Draws the latent variables U_j given the weights."""

    def __init__(self, name: str = "U", keep_fixed: bool = False) -> None:
        super().__init__(name, keep_fixed)

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        totals = state.s.sum(axis=1)
        state.u = [
            float(rng.gamma(n, 1.0 / t)) for n, t in zip(state.n_j, totals)
        ]
        state.update_log_sum()


class LambdaConditional(FullConditional):
    """Draws Lambda from its two-component gamma mixture full conditional.

    Lambda ~ gamma(a2, b2) and gamma_j | Lambda ~ gamma(a_gamma, b_gamma * Lambda).
    """

    def __init__(
        self,
        name: str = "Lambda",
        a2: float = 1.0,
        b2: float = 1.0,
        a_gamma: float = 0.0,
        b_gamma: float = 0.0,
        keep_fixed: bool = False,
    ) -> None:
        super().__init__(name, keep_fixed)
        self.a2 = a2
        self.b2 = b2
        self.a_gamma = a_gamma
        self.b_gamma = b_gamma

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        k = state.k
        a_lambda = self.a2 + state.d * self.a_gamma
        b_lambda = self.b2 + self.b_gamma * math.fsum(state.gamma)
        a2_star = (k - 1) + a_lambda
        p0 = a2_star / ((a2_star - 1.0) + k * (b_lambda + 1.0) * math.exp(state.log_sum))
        rate = b_lambda + 1.0 - math.exp(-state.log_sum)
        shape = a2_star + 1.0 if binary_decision(p0, rng) else a2_star
        state.lam = float(rng.gamma(shape, 1.0 / rate))