import math

import numpy as np
import pytest

from gdfmm.state import GibbsState
from gdfmm.u_marginal import UMarginalConditional


def _state():
    return GibbsState(
        d=2,
        n_j=[3, 2],
        k=2,
        m=2,
        lam=1.5,
        gamma=[1.0, 2.0],
        u=[0.5, 1.2],
        counts=np.array([[2, 1], [1, 1]]),
    )


def _fc():
    return UMarginalConditional("U", False, 0.234, 0.7, 10, 2, 1.0, 0.01)


def test_log_fcu_hand_value():
    fc = _fc()
    value = fc.log_fcu_marginal([math.e - 1.0], 0.0, 1, [1.0], np.array([[1]]))
    assert value == pytest.approx(-2.0)


@pytest.mark.parametrize("x", [[0.5, 1.2], [2.0, 0.3], [0.1, 4.0]])
def test_gradient_matches_finite_differences(x):
    fc = _fc()
    counts = np.array([[2, 1], [1, 1]])
    gamma = [1.0, 2.0]
    grad = fc.grad_log_fcu_marginal(x, 1.5, 2, gamma, counts)
    h = 1e-6
    for j in range(len(x)):
        up = list(x)
        down = list(x)
        up[j] += h
        down[j] -= h
        numeric = (
            fc.log_fcu_marginal(up, 1.5, 2, gamma, counts)
            - fc.log_fcu_marginal(down, 1.5, 2, gamma, counts)
        ) / (2 * h)
        assert grad[j] == pytest.approx(numeric, rel=1e-5, abs=1e-7)


def test_log_fcu_rejects_non_positive_values():
    with pytest.raises(ValueError):
        _fc().log_fcu_marginal([0.0, 1.0], 1.0, 2, [1.0, 1.0], np.array([[1, 1], [1, 1]]))


def test_constructor_sets_adaptive_variances():
    fc = UMarginalConditional("U", True, 0.3, 0.5, 5, 3, 0.25, 0.02)
    assert fc.adapt_var_proposal == [0.25, 0.25, 0.25]
    assert fc.keep_fixed is True
    assert fc.name == "U"


def test_constructor_rejects_bad_step():
    with pytest.raises(ValueError):
        UMarginalConditional("U", False, 0.234, 0.7, 10, 2, 1.0, 0.0)


def test_update_moves_all_or_nothing_and_refreshes_log_sum():
    fc = _fc()
    rng = np.random.default_rng(3)
    for _ in range(30):
        state = _state()
        old = list(state.u)
        fc.update(state, rng)
        same = [a == b for a, b in zip(old, state.u)]
        assert all(same) or not any(same)
        assert all(v > 0 for v in state.u)
        expected = sum(g * math.log1p(v) for g, v in zip(state.gamma, state.u))
        assert state.log_sum == pytest.approx(expected)


def test_update_accepts_some_moves():
    fc = _fc()
    rng = np.random.default_rng(11)
    state = _state()
    seen = {tuple(state.u)}
    for _ in range(50):
        fc.update(state, rng)
        seen.add(tuple(state.u))
    assert len(seen) > 1


def test_update_is_reproducible():
    fc = _fc()
    first = _state()
    second = _state()
    fc.update(first, np.random.default_rng(7))
    fc.update(second, np.random.default_rng(7))
    assert first.u == second.u