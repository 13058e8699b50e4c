"""Marginal full conditional for Lambda, integrating out the weights."""

from __future__ import annotations

import math

import numpy as np

from gdfmm.simple import LambdaConditional
from gdfmm.state import GibbsState


class LambdaMarginalConditional(LambdaConditional):
    """Adaptive Metropolis-Hastings full conditional for Lambda.

    The update is known to target the wrong distribution and refuses to run;
    the log full conditional remains available for evaluation.
    """

    def __init__(
        self,
        name: str = "Lambda",
        a2: float = 1.0,
        b2: float = 1.0,
        a_gamma: float = 0.0,
        b_gamma: float = 0.0,
        keep_fixed: bool = False,
        h1: float = 0.234,
        h2: float = 0.7,
        power: float = 10,
        adapt_var0: float = 1.0,
    ) -> None:
        super().__init__(name, a2, b2, a_gamma, b_gamma, keep_fixed)
        self.hyp1 = h1
        self.hyp2 = h2
        self.power = power
        self.adapt_var_proposal = float(adapt_var0)

    def update(self, state: GibbsState, rng: np.random.Generator) -> None:
        raise RuntimeError("this update of Lambda is wrong and must not be used")

    def log_fclambda_marginal(
        self, x: float, u, gamma, k: int, a_lambda: float, b_lambda: float
    ) -> float:
        """Log of the unnormalised marginal full conditional of Lambda at ``x``."""
        d = len(u)
        sum_psi = 0.0
        sum_log = 0.0
        for u_j, g_j in zip(u, gamma):
            psi = 1.0 / (1.0 + u_j) ** g_j
            sum_psi += psi
            sum_log += math.log(k + x * psi)
        return (
            math.log(x) * (a_lambda + d * (k - 1.0) - 1.0)
            - x * (b_lambda + d - sum_psi)
            + sum_log
        )