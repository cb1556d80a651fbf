"""Design matrices split by group for a Gaussian node with a random intercept."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .design import Dataset, Network


@dataclass
class GroupedDesign:
    """Design data for a Gaussian node with one random effect per group.

    Each matrix in ``group_designs`` has an intercept column, one column per
    parent and a trailing column of ones for the group's random effect.
    ``X_no_rv`` is the full design without that last column and is used only
    for initial estimates.  The Gaussian priors cover the mean coefficients;
    the same gamma prior is used for the group and residual precisions.
    """

    y: np.ndarray
    X_no_rv: np.ndarray
    group_designs: list[np.ndarray]
    group_y: list[np.ndarray]
    prior_mean: np.ndarray
    prior_sd: np.ndarray
    prior_gamma_shape: float
    prior_gamma_scale: float

    @property
    def num_params(self) -> int:
        """Number of mean coefficients, intercept included, precisions excluded."""
        return self.X_no_rv.shape[1]

    @property
    def num_obs(self) -> int:
        return self.X_no_rv.shape[0]

    @property
    def num_groups(self) -> int:
        return len(self.group_designs)


def build_design_gaus_rv(
    network: Network,
    data: Dataset,
    node_id: int,
    prior_mean: float,
    prior_sd: float,
    prior_gamma_shape: float,
    prior_gamma_scale: float,
    store_modes: bool,
) -> GroupedDesign:
    """Build the per-group designs for a Gaussian random-intercept node.

    Groups are numbered from 1 up to the largest id in ``data.group_ids``;
    every group in that range must hold at least one observation.
    """
    if data.num_nodes != network.num_nodes:
        raise ValueError("data and network disagree on the number of nodes")
    if data.group_ids is None:
        raise ValueError("a random-effect node needs group ids")

    parents = network.parents_of(node_id)
    if store_modes:
        network.mark_modes(node_id, parents, 2)

    ones = np.ones(data.num_obs)
    X_no_rv = np.column_stack([ones, data.values[:, parents]])
    X_full = np.column_stack([X_no_rv, ones])
    y = data.values[:, node_id].copy()

    num_groups = int(data.group_ids.max()) if data.num_obs else 0
    group_designs: list[np.ndarray] = []
    group_y: list[np.ndarray] = []
    for group in range(1, num_groups + 1):
        members = data.group_ids == group
        if not members.any():
            raise ValueError(f"group {group} has no observations")
        group_designs.append(X_full[members].copy())
        group_y.append(y[members].copy())

    num_params = len(parents) + 1
    return GroupedDesign(
        y=y,
        X_no_rv=X_no_rv,
        group_designs=group_designs,
        group_y=group_y,
        prior_mean=np.full(num_params, float(prior_mean)),
        prior_sd=np.full(num_params, float(prior_sd)),
        prior_gamma_shape=float(prior_gamma_shape),
        prior_gamma_scale=float(prior_gamma_scale),
    )