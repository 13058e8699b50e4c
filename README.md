# gdfmm

gdfmm provides the building blocks of a Gibbs sampler for group-dependent
finite mixture models. In these models, observations come in `d` groups
(levels). Each group has its own mixture weights over a shared set of
components.

Each full-conditional update changes a shared `GibbsState` in place. Every
update draws its random numbers from a `numpy.random.Generator`.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Contents

### `gdfmm.priors`

Priors on the number of components:

- `Poisson1(name, lam)`
- `NegativeBinomial1(name, p, n)`

Both are shifted by one, so `k = 0` has probability zero. Each prior offers:

- `get_mode()`
- `eval_prob(k)`
- `log_eval_prob(k)`
- `clone()`
- `show_me()`

Invalid parameters raise `ValueError`. `NegativeBinomial1.log_eval_prob` also
raises `ValueError` when `p` is 0 or 1.

### `gdfmm.state`

- `Individual`: the observations of one individual, with their count, mean
  and variance.
- `GibbsState`: the shared sampler state. It holds:
  - the cluster and component counts `k`, `mstar` and `m`;
  - `lam`, `gamma`, `u` and `log_sum`;
  - the weight matrix `s` and the count matrix `counts`;
  - the labels, cluster sizes and cluster index sets;
  - `mu` and `sigma`;
  - the data.
- `FullConditional`: the abstract base class of every update.
- Helper functions:
  - `binary_decision(p, rng)`
  - `sample_index(rng, weights)`
  - `log_raising_factorial(n, a)`

### `gdfmm.simple`

- `SConditional` draws the unnormalised weights of the allocated and the
  non-allocated components.
- `UConditional` draws the latent variables `U_j`. It then recomputes
  `log_sum`.
- `LambdaConditional` draws `Lambda` from a two-component gamma mixture.

### `gdfmm.mstar`

`MstarConditional` updates the number of non-allocated components:

- When `d == 0`, it draws that number directly.
- Otherwise, it makes a Metropolis–Hastings move on the integers.

It also exposes `log_full_cond_mstar` and `log_prob_mh`.

### `gdfmm.u_marginal`

`UMarginalConditional` updates `(U_1, ..., U_d)` jointly, with the weights
integrated out. It uses a Metropolis-adjusted Langevin (MALA) move on the log
scale. The step size is `s_p`.

### `gdfmm.lambda_marginal`

`LambdaMarginalConditional.update` always raises `RuntimeError`, because that
update is known to target the wrong distribution. The log full conditional,
`log_fclambda_marginal`, can still be evaluated.

### Partition updates

- `gdfmm.partition.PartitionConditional` allocates each observation given the
  weights and the Gaussian component parameters. It then renumbers the labels
  so that the allocated components come first, and reorders `mu` and `sigma`
  to match.
- `gdfmm.partition_neal3.Neal3PartitionConditional` reallocates each
  observation in turn, with `mu` and `sigma` integrated out under a
  normal-inverse-gamma prior.
- `gdfmm.partition_marginal.MarginalPartitionConditional` is a
  Chinese-restaurant-franchise style reallocation of univariate observations.
  It uses Student t posterior predictives. Only the integer part of `Lambda`
  enters this update.

A partition update built with `fix_partition=True` leaves the state
unchanged.

### Supporting terms

These modules hold the densities and closed-form quantities that the
partition updates use:

- `gdfmm.student_t`: `dnct` and `log_dnct`.
- `gdfmm.neal3_terms`: `log_i`, `compute_cluster_summaries` and
  `posterior_parameters`.
- `gdfmm.marginal_terms`: `log_const_new_cluster` and
  `posterior_predictive_params`.

## Example

```python
from gdfmm.priors import Poisson1

prior = Poisson1("components", 3.0)
prior.get_mode()       # 4
prior.eval_prob(0)     # 0.0
prior.log_eval_prob(2)
```

Every full conditional has the same interface:

```python
conditional.update(state, rng)
```

Here `state` is a `GibbsState` and `rng` is a `numpy.random.Generator`.

Each conditional stores a `keep_fixed` flag. Only the partition updates act
on it: there, the flag comes from `fix_partition`. The other updates ignore
it, and it is up to the caller to skip them.

## What the package does not do

The package has no sampler loop. It has no function that builds a
`GibbsState` from raw data or from hyperparameter settings. It does not store
draws across iterations. It has no command-line interface.

The caller creates the state, chooses the order of the full conditionals,
calls their `update` methods, and records whatever output it needs.

## Tests

```
pytest
```