# abnscore

Node scores for additive Bayesian network models, computed with Laplace
approximations to the log marginal likelihood of a node given its parents.

What the package covers:

- **Poisson nodes** (log link, independent normal priors on the
  coefficients): the log marginal likelihood of a node, and the posterior
  marginal density of one coefficient at a given value.
- **Gaussian nodes with a group-level random intercept**: building the
  design matrix and response split by group, ready for a grouped model.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Networks and data

`abnscore.design.Network` holds the adjacency matrix of the DAG
(`dag[i, j] == 1` means node `j` is a parent of node `i`), the maximum
number of parents per node, and a `modes` table with `num_nodes + 3`
columns per node. Entries that are not model parameters are NaN.
`Network.parents_of(node_id)` lists a node's parents in column order, at
most `max_parents` of them, and `Network.mark_modes` flags which entries
of a node's row are parameters.

`abnscore.design.Dataset` holds the observations, one row per observation
and one column per node, plus optional 1-based `group_ids`.

## Poisson nodes

```python
import math
import numpy as np
from abnscore.design import Network, Dataset
from abnscore.poisson_node import score_poisson_node, poisson_marginal_density

# Node 1 has node 0 as its parent.
network = Network(dag=np.array([[0, 0], [1, 0]]), max_parents=1)
data = Dataset(values=np.array([
    [0.0, 1.0], [1.0, 2.0], [0.5, 1.0], [1.5, 4.0], [2.0, 6.0], [0.2, 0.0],
]))

result = score_poisson_node(
    network, data, node_id=1,
    prior_mean=0.0, prior_sd=math.sqrt(1000.0),
    max_iters=100, eps_abs=1e-8, store_modes=True,
)
print(result.score, result.error_code, result.modes)

density = poisson_marginal_density(
    network, data, node_id=1,
    prior_mean=0.0, prior_sd=math.sqrt(1000.0),
    max_iters=100, eps_abs=1e-8,
    denom_modes=result.modes, param_id=0, beta_fixed=0.5, mlik=result.score,
)
```

`score_poisson_node` returns a `NodeScore` with the log score, an error
code (`OK`, `ROOT_NOT_FOUND` when the mode search did not converge,
`SCORE_IS_NAN` when the score is NaN) and the modes found. With
`store_modes=True` the modes are also written into `network.modes`.

`poisson_marginal_density` integrates out every coefficient except
`param_id`, which is held at `beta_fixed`, starting the mode search from
`denom_modes`, and returns `exp(log_score - mlik)`.

The building blocks are available on their own:

- `abnscore.design.build_design_pois` builds a `DesignMatrix` (an
  intercept column followed by the parents, the response and the priors).
- `abnscore.poisson_laplace`: `g_value`, `g_gradient` and `g_hessian`
  give `-(1/n) log(likelihood × prior)` and its derivatives;
  `initial_estimates` gives least-squares starting values on
  `log(y + 0.1)` (zeros when `X'X` is singular); `marginal_g_value`,
  `marginal_g_gradient` and `marginal_g_hessian` hold one coefficient
  fixed, using `expand_beta`, `drop_index` and `drop_row_col`.
- `abnscore.poisson_node.laplace_log_score` combines a value of `g` and
  its Hessian at the mode into the Laplace estimate.

## Gaussian nodes with a random intercept

`abnscore.grouped_design.build_design_gaus_rv` takes a `Dataset` with
`group_ids` and returns a `GroupedDesign`: the full response, the design
without the random-effect column (`X_no_rv`), and per-group design
matrices (intercept, parents and a trailing column of ones) with their
responses. Groups run from 1 to the largest id, and each must hold at
least one observation. With `store_modes=True` the node's row in
`network.modes` is marked with two trailing precision terms.

## What the package does not do

For Gaussian random-intercept nodes the package stops at the grouped
design: it does not compute their initial estimates, the per-group
Laplace integrals over the random effect, the objective with its gamma
priors on the precisions, or a node score. It has no command-line
interface and does not search over network structures.