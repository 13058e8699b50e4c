import numpy as np
import pytest

from gdfmm.partition_neal3 import Neal3PartitionConditional
from gdfmm.state import GibbsState, Individual


def _make_state(labels, m, s, use_data=False, data=None):
    n_j = [len(row) for row in labels]
    d = len(labels)
    k = max(c for row in labels for c in row) + 1
    counts = np.zeros((d, k), dtype=np.int64)
    indices = [set() for _ in range(k)]
    for j, row in enumerate(labels):
        for i, c in enumerate(row):
            counts[j, c] += 1
            indices[c].add((j, i))
    if data is None:
        data = [
            [Individual(f"id{j}{i}", 3, 0.0, 1.0, [0.0, 0.0, 0.0]) for i in range(n)]
            for j, n in enumerate(n_j)
        ]
    return GibbsState(
        d=d,
        n_j=n_j,
        k=k,
        mstar=m - k,
        m=m,
        s=np.asarray(s, dtype=float),
        counts=counts,
        cluster_sizes=[int(v) for v in counts.sum(axis=0)],
        labels=[list(row) for row in labels],
        cluster_indices=indices,
        mv_data=data,
        use_data=use_data,
    )


def _check_consistent(state):
    assert state.k + state.mstar == state.m
    assert state.counts.shape == (state.d, state.k)
    assert list(state.counts.sum(axis=0)) == state.cluster_sizes
    assert sum(state.cluster_sizes) == sum(state.n_j)
    assert all(size > 0 for size in state.cluster_sizes)
    for j, row in enumerate(state.labels):
        for i, c in enumerate(row):
            assert 0 <= c < state.k
            assert (j, i) in state.cluster_indices[c]
    assert sum(len(s) for s in state.cluster_indices) == sum(state.n_j)


def _conditional(state, fixed=False):
    return Neal3PartitionConditional(
        "Partition", state.d, state.n_j, fixed, 2.0, 1.0, 0.0, 1.0
    )


def test_all_weight_on_first_component_merges_everything():
    state = _make_state([[0, 1], [2]], 3, [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    _conditional(state).update(state, np.random.default_rng(0))
    assert state.labels == [[0, 0], [0]]
    assert state.k == 1
    assert state.mstar == 2
    assert state.counts.tolist() == [[2], [1]]
    _check_consistent(state)


def test_weight_on_inactive_component_opens_new_clusters():
    state = _make_state([[0, 0], [0]], 3, [[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])
    _conditional(state).update(state, np.random.default_rng(1))
    assert state.labels == [[1, 0], [2]]
    assert state.k == 3
    assert state.mstar == 0
    _check_consistent(state)


def test_fixed_partition_is_untouched():
    state = _make_state([[0, 1], [1]], 3, np.ones((2, 3)))
    _conditional(state, fixed=True).update(state, np.random.default_rng(2))
    assert state.labels == [[0, 1], [1]]
    assert state.k == 2
    assert state.mstar == 1


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_random_updates_keep_structures_consistent(seed):
    state = _make_state([[0, 1, 0], [1, 2]], 4, np.ones((2, 4)))
    cond = _conditional(state)
    rng = np.random.default_rng(seed)
    for _ in range(5):
        cond.update(state, rng)
        _check_consistent(state)


def test_separated_data_is_not_mixed():
    def ind(name, value):
        return Individual(name, 5, value, 0.01, [value] * 5)

    data = [[ind("a", 0.0), ind("b", 0.1)], [ind("c", 100.0)]]
    state = _make_state([[0, 0], [0]], 3, np.ones((2, 3)), use_data=True, data=data)
    cond = _conditional(state)
    rng = np.random.default_rng(5)
    for _ in range(3):
        cond.update(state, rng)
        _check_consistent(state)
    assert state.labels[1][0] not in state.labels[0]


def test_missing_index_raises():
    state = _make_state([[0, 0], [0]], 2, np.ones((2, 2)))
    state.cluster_indices[0].discard((0, 0))
    with pytest.raises(RuntimeError):
        _conditional(state).update(state, np.random.default_rng(0))


def test_zero_weights_raise():
    state = _make_state([[0, 0], [0]], 2, np.zeros((2, 2)))
    with pytest.raises(RuntimeError):
        _conditional(state).update(state, np.random.default_rng(0))