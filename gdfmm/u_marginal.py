"""Full conditional for the latent U variables with the weights integrated out."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from gdfmm.simple import UConditional
from gdfmm.state import GibbsState


def _level_totals(n) -> list[float]:
    return [float(v) for v in np.asarray(n).sum(axis=1)]


class UMarginalConditional(UConditional):
    """Updates (U_1, ..., U_d) jointly with a MALA move on the log scale.

    The target is
    pi(U | rest) ∝ prod_j U_j^(n_j - 1) (1 + U_j)^-(n_j + K gamma_j)
    * exp(Lambda prod_j psi_j(U_j)) * (K + Lambda prod_j psi_j(U_j)),
    with psi_j(u) = (1 + u)^-gamma_j. The proposal uses the identity matrix
    scaled by ``s_p``.
    """

    def __init__(
        self,
        name: str = "U",
        keep_fixed: bool = False,
        h1: float = 0.234,
        h2: float = 0.7,
        power: float = 10,
        d: int = 1,
        adapt_var0: float = 1.0,
        s_p: float = 0.01,
    ) -> None:
        super().__init__(name, keep_fixed)
        if s_p <= 0:
            raise ValueError("the MALA step size must be strictly positive")
        self.hyp1 = h1
        self.hyp2 = h2
        self.power = power
        self.s_p = s_p
        self.adapt_var_proposal = [float(adapt_var0)] * d

    def _mala_mean(self, log_x: Sequence[float], x: Sequence[float], grad: Sequence[float]) -> list[float]:
        return [
            lx + 0.5 * self.s_p * (g * xi + 1.0) for lx, xi, g in zip(log_x, x, grad)
        ]

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        u = [float(v) for v in state.u]
        lam = state.lam
        k = state.k
        gamma = state.gamma
        counts = state.counts

        log_u = [math.log(v) for v in u]
        mala_mean = self._mala_mean(
            log_u, u, self.grad_log_fcu_marginal(u, lam, k, gamma, counts)
        )
        log_u_new = [
            float(v) for v in rng.normal(mala_mean, math.sqrt(self.s_p), size=len(u))
        ]
        u_new = [math.exp(v) for v in log_u_new]

        inverse_mean = self._mala_mean(
            log_u_new, u_new, self.grad_log_fcu_marginal(u_new, lam, k, gamma, counts)
        )

        scale = 1.0 / (2.0 * self.s_p)
        ln_acp = (
            self.log_fcu_marginal(u_new, lam, k, gamma, counts)
            - self.log_fcu_marginal(u, lam, k, gamma, counts)
            + math.fsum(log_u_new)
            - math.fsum(log_u)
            - scale * math.fsum((a - b) ** 2 for a, b in zip(log_u, inverse_mean))
            + scale * math.fsum((a - b) ** 2 for a, b in zip(log_u_new, mala_mean))
        )

        if math.log(rng.random()) < ln_acp:
            state.u = u_new
        state.update_log_sum()

    def log_fcu_marginal(self, x, lam: float, k: int, gamma, n) -> float:
        """Log of the unnormalised full conditional of U evaluated at ``x``."""
        res = 0.0
        sum_log = 0.0
        for x_j, g_j, n_j in zip(x, gamma, _level_totals(n)):
            log_one_plus = math.log(x_j + 1.0)
            sum_log += log_one_plus * g_j
            res += (n_j - 1.0) * math.log(x_j) - (n_j + k * g_j) * log_one_plus
        lambda_prod_psi = lam * math.exp(-sum_log)
        return res + lambda_prod_psi + math.log(k + lambda_prod_psi)

    def grad_log_fcu_marginal(self, x, lam: float, k: int, gamma, n) -> list[float]:
        """Gradient of :meth:`log_fcu_marginal` with respect to ``x``."""
        sum_log = math.fsum(math.log(x_j + 1.0) * g_j for x_j, g_j in zip(x, gamma))
        lambda_prod_psi = lam * math.exp(-sum_log)
        factor = 1.0 + 1.0 / (k + lambda_prod_psi)
        return [
            (n_j - 1.0) / x_j
            - (n_j + k * g_j) / (1.0 + x_j)
            - (lambda_prod_psi * g_j / (1.0 + x_j)) * factor
            for x_j, g_j, n_j in zip(x, gamma, _level_totals(n))
        ]