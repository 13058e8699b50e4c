import math
import statistics

import numpy as np
import pytest

from gdfmm.state import (
    FullConditional,
    GibbsState,
    Individual,
    binary_decision,
    log_raising_factorial,
    sample_index,
)


def test_state_rejects_wrong_n_j_length():
    with pytest.raises(ValueError):
        GibbsState(d=2, n_j=[3])


def test_update_log_sum_zero_when_u_zero():
    state = GibbsState(d=2, n_j=[1, 1], gamma=[1.0, 2.0], u=[0.0, 0.0], log_sum=5.0)
    state.update_log_sum()
    assert state.log_sum == 0.0


def test_update_log_sum_scales_with_gamma():
    state = GibbsState(d=1, n_j=[1], gamma=[1.0], u=[0.7])
    state.update_log_sum()
    single = state.log_sum
    state.gamma = [3.0]
    state.update_log_sum()
    assert state.log_sum == pytest.approx(3 * single)


def test_allocate_s_and_n_shapes():
    state = GibbsState(d=3, n_j=[1, 2, 3])
    state.allocate_s(5)
    state.allocate_n(4)
    assert state.s.shape == (3, 5)
    assert state.counts.shape == (3, 4)
    assert not state.s.any()
    assert not state.counts.any()


def test_compute_var_in_cluster_matches_sample_variance():
    values = [1.0, 2.0, 4.5, -0.5]
    state = GibbsState(
        d=1,
        n_j=[4],
        cluster_sizes=[len(values)],
        sum_cluster_elements=[sum(values)],
        squared_sum_cluster_elements=[sum(v * v for v in values)],
    )
    assert state.compute_var_in_cluster(0) == pytest.approx(statistics.variance(values))


def test_update_cluster_structures_invariants():
    raw = [[3, 7, 7], [9, 3]]
    order = [3, 7, 9]
    state = GibbsState(d=2, n_j=[3, 2])
    state.update_cluster_structures(raw, order)
    assert state.k == len(order)
    assert [[order[c] for c in row] for row in state.labels] == raw
    assert state.counts.sum() == 5
    assert state.cluster_sizes == [int(v) for v in state.counts.sum(axis=0)]
    for c, indices in enumerate(state.cluster_indices):
        assert len(indices) == state.cluster_sizes[c]
        assert all(state.labels[j][i] == c for j, i in indices)


def test_individual_defaults_star_values():
    ind = Individual("id0", 2, 1.5, 0.25, [1.0, 2.0])
    assert ind.ybar_star_ji == ind.mean_ji
    assert ind.vstar_ji == ind.var_ji


def test_full_conditional_is_abstract():
    with pytest.raises(TypeError):
        FullConditional("x", False)


def test_binary_decision_extremes():
    rng = np.random.default_rng(1)
    assert all(binary_decision(1.0, rng) for _ in range(100))
    assert not any(binary_decision(0.0, rng) for _ in range(100))


def test_sample_index_single_positive_weight():
    rng = np.random.default_rng(2)
    assert {sample_index(rng, [0.0, 0.0, 5.0, 0.0]) for _ in range(50)} == {2}


def test_sample_index_frequencies():
    rng = np.random.default_rng(3)
    draws = [sample_index(rng, [1.0, 3.0]) for _ in range(4000)]
    assert sum(draws) / len(draws) == pytest.approx(0.75, abs=0.05)


def test_sample_index_rejects_zero_weights():
    with pytest.raises(ValueError):
        sample_index(np.random.default_rng(0), [0.0, 0.0])


def test_log_raising_factorial_zero_length():
    assert log_raising_factorial(0, 2.5) == 0.0


@pytest.mark.parametrize("n", [1, 4, 9])
def test_log_raising_factorial_of_one_is_log_factorial(n):
    assert log_raising_factorial(n, 1.0) == pytest.approx(math.lgamma(n + 1))


def test_log_raising_factorial_recurrence():
    a = 0.7
    assert log_raising_factorial(5, a) == pytest.approx(
        log_raising_factorial(4, a) + math.log(a + 4)
    )


def test_log_raising_factorial_rejects_non_positive_base():
    with pytest.raises(ValueError):
        log_raising_factorial(3, 0.0)