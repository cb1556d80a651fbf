"""Networks, observed data and the design matrix for a Poisson node."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

# Marker for entries of a modes row that are not model parameters.
NOT_ESTIMATED = np.nan


@dataclass
class Network:
    """A directed acyclic graph of nodes plus a table of parameter modes.

    ``dag[i, j] == 1`` means node ``j`` is a parent of node ``i``.  Each row of
    ``modes`` has ``num_nodes + 3`` columns: the intercept, one column per
    potential parent, and up to two trailing precision terms.
    """

    dag: np.ndarray
    max_parents: int
    modes: np.ndarray = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        self.dag = np.asarray(self.dag, dtype=int)
        if self.dag.ndim != 2 or self.dag.shape[0] != self.dag.shape[1]:
            raise ValueError("dag must be a square matrix")
        if self.max_parents < 0:
            raise ValueError("max_parents must not be negative")
        shape = (self.num_nodes, self.num_nodes + 3)
        if self.modes is None:
            self.modes = np.full(shape, NOT_ESTIMATED, dtype=float)
        else:
            self.modes = np.asarray(self.modes, dtype=float)
            if self.modes.shape != shape:
                raise ValueError(f"modes must have shape {shape}")

    @property
    def num_nodes(self) -> int:
        return self.dag.shape[0]

    def _check_node(self, node_id: int) -> None:
        if not 0 <= node_id < self.num_nodes:
            raise ValueError(f"node id {node_id} out of range")

    def parents_of(self, node_id: int) -> list[int]:
        """Indexes of the parents of a node, in order, at most ``max_parents``."""
        self._check_node(node_id)
        parents = np.flatnonzero(self.dag[node_id] == 1)
        return [int(p) for p in parents[: self.max_parents]]

    def mark_modes(self, node_id: int, parents: Sequence[int], extra_terms: int) -> None:
        """Flag the modes entries of a node that are parameters to be estimated.

        The row is reset to ``NOT_ESTIMATED``; the intercept, each parent's
        column and ``extra_terms`` trailing precision columns are set to 1.
        """
        self._check_node(node_id)
        if not 0 <= extra_terms <= 2:
            raise ValueError("extra_terms must be between 0 and 2")
        row = self.modes[node_id]
        row[:] = NOT_ESTIMATED
        row[0] = 1.0
        for parent in parents:
            row[parent + 1] = 1.0
        for offset in range(1, extra_terms + 1):
            row[self.num_nodes + offset] = 1.0


@dataclass
class Dataset:
    """Observed data: one row per observation, one column per node.

    ``group_ids`` holds 1-based group labels used by random-effect models.
    """

    values: np.ndarray
    group_ids: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.values = np.asarray(self.values, dtype=float)
        if self.values.ndim != 2:
            raise ValueError("values must be a two-dimensional array")
        if self.group_ids is not None:
            self.group_ids = np.asarray(self.group_ids, dtype=int)
            if self.group_ids.shape != (self.num_obs,):
                raise ValueError("group_ids must have one entry per observation")
            if self.num_obs and self.group_ids.min() < 1:
                raise ValueError("group ids must start at 1")

    @property
    def num_obs(self) -> int:
        return self.values.shape[0]

    @property
    def num_nodes(self) -> int:
        return self.values.shape[1]


@dataclass
class DesignMatrix:
    """Design matrix, response and independent Gaussian priors for a node."""

    X: np.ndarray
    y: np.ndarray
    prior_mean: np.ndarray
    prior_sd: np.ndarray

    @property
    def num_params(self) -> int:
        return self.X.shape[1]

    @property
    def num_obs(self) -> int:
        return self.X.shape[0]


def build_design_pois(
    network: Network,
    data: Dataset,
    node_id: int,
    prior_mean: float,
    prior_sd: float,
    store_modes: bool,
) -> DesignMatrix:
    """Build the design for a Poisson node: an intercept column then its parents."""
    if data.num_nodes != network.num_nodes:
        raise ValueError("data and network disagree on the number of nodes")
    parents = network.parents_of(node_id)
    if store_modes:
        network.mark_modes(node_id, parents, 0)
    X = np.column_stack([np.ones(data.num_obs), data.values[:, parents]])
    y = data.values[:, node_id].copy()
    num_params = len(parents) + 1
    return DesignMatrix(
        X=X,
        y=y,
        prior_mean=np.full(num_params, float(prior_mean)),
        prior_sd=np.full(num_params, float(prior_sd)),
    )