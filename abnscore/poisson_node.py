"""Laplace-approximate marginal likelihood and parameter marginals for a Poisson node."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

import numpy as np
from scipy.optimize import root

from .design import Dataset, DesignMatrix, Network, build_design_pois
from .poisson_laplace import (
    g_gradient,
    g_hessian,
    g_value,
    initial_estimates,
    marginal_g_gradient,
    marginal_g_hessian,
    marginal_g_value,
)

logger = logging.getLogger(__name__)

# Error codes recorded for a node score.
OK = 0
ROOT_NOT_FOUND = 1
SCORE_IS_NAN = 2


@dataclass(frozen=True)
class NodeScore:
    """Log marginal likelihood of a node, its error code and the parameter modes."""

    score: float
    error_code: int
    modes: np.ndarray


def laplace_log_score(gvalue: float, hessian, n: int) -> float:
    """Laplace approximation of ``log int exp(-n g(b)) db`` at the mode.

    ``gvalue`` and ``hessian`` are ``g`` and its Hessian at the mode; the
    dimension of the integral is the size of the Hessian.
    """
    if n <= 0:
        raise ValueError("number of observations must be positive")
    hess = np.asarray(hessian, dtype=float)
    if hess.ndim != 2 or hess.shape[0] != hess.shape[1]:
        raise ValueError("hessian must be a square matrix")
    m = hess.shape[0]
    _, log_det = np.linalg.slogdet(hess)
    return -n * gvalue - 0.5 * float(log_det) + (m / 2.0) * math.log(2.0 * math.pi / n)


def _check_settings(max_iters: int, eps_abs: float) -> None:
    if max_iters < 1:
        raise ValueError("max_iters must be at least 1")
    if not eps_abs > 0:
        raise ValueError("eps_abs must be positive")


def _find_root(
    fun: Callable[[np.ndarray], np.ndarray],
    jac: Callable[[np.ndarray], np.ndarray],
    x0: np.ndarray,
    max_iters: int,
    eps_abs: float,
    scalings: tuple[bool, ...],
) -> tuple[np.ndarray, bool]:
    """Solve ``fun(x) = 0`` with Powell's hybrid method.

    Each entry of ``scalings`` is one attempt, unscaled (False) or with
    internal variable scaling (True), all starting from ``x0``.  Success
    means the sum of absolute residuals is below ``eps_abs``.
    """
    x = np.asarray(x0, dtype=float)
    max_fev = max_iters * (x.size + 1)
    for scaled in scalings:
        options: dict = {"maxfev": max_fev}
        if not scaled:
            options["diag"] = np.ones(x.size)
        with np.errstate(over="ignore", invalid="ignore"):
            result = root(fun, np.asarray(x0, dtype=float), jac=jac, method="hybr", options=options)
            x = np.asarray(result.x, dtype=float)
            residual = fun(x)
        if np.all(np.isfinite(residual)) and float(np.sum(np.abs(residual))) < eps_abs:
            return x, True
    return x, False


def _store_modes(network: Network, node_id: int, beta: np.ndarray) -> None:
    row = network.modes[node_id]
    columns = [i for i in range(network.num_nodes + 1) if not np.isnan(row[i])]
    row[columns] = beta[: len(columns)]


def score_poisson_node(
    network: Network,
    data: Dataset,
    node_id: int,
    prior_mean: float,
    prior_sd: float,
    max_iters: int,
    eps_abs: float,
    store_modes: bool,
) -> NodeScore:
    """Log marginal likelihood of a Poisson regression node given its parents."""
    _check_settings(max_iters, eps_abs)
    design = build_design_pois(network, data, node_id, prior_mean, prior_sd, store_modes)

    beta, converged = _find_root(
        lambda b: g_gradient(b, design),
        lambda b: g_hessian(b, design),
        initial_estimates(design),
        max_iters,
        eps_abs,
        scalings=(False, False, True, True),
    )
    error_code = OK if converged else ROOT_NOT_FOUND

    if store_modes:
        _store_modes(network, node_id, beta)

    with np.errstate(over="ignore", invalid="ignore"):
        score = laplace_log_score(g_value(beta, design), g_hessian(beta, design), design.num_obs)
    if math.isnan(score):
        error_code = SCORE_IS_NAN
    return NodeScore(score=score, error_code=error_code, modes=beta)


def _check_marginal_args(design: DesignMatrix, denom_modes, param_id: int) -> np.ndarray:
    if not 0 <= param_id < design.num_params:
        raise ValueError(f"parameter index {param_id} out of range")
    modes = np.asarray(denom_modes, dtype=float)
    if modes.shape != (design.num_params,):
        raise ValueError(f"denom_modes must have {design.num_params} entries")
    return modes


def poisson_marginal_density(
    network: Network,
    data: Dataset,
    node_id: int,
    prior_mean: float,
    prior_sd: float,
    max_iters: int,
    eps_abs: float,
    denom_modes,
    param_id: int,
    beta_fixed: float,
    mlik: float,
) -> float:
    """Posterior density of coefficient ``param_id`` at ``beta_fixed``.

    The remaining coefficients are integrated out by a Laplace approximation
    and the result is normalised by the node's log marginal likelihood ``mlik``.
    """
    _check_settings(max_iters, eps_abs)
    design = build_design_pois(network, data, node_id, prior_mean, prior_sd, False)
    modes = _check_marginal_args(design, denom_modes, param_id)
    n = design.num_obs

    if design.num_params == 1:
        log_score = -n * g_value(np.array([float(beta_fixed)]), design)
        return math.exp(log_score - mlik)

    start = np.delete(modes, param_id)
    beta_short, converged = _find_root(
        lambda b: marginal_g_gradient(b, design, param_id, beta_fixed),
        lambda b: marginal_g_hessian(b, design, param_id, beta_fixed),
        start,
        max_iters,
        eps_abs,
        scalings=(False,),
    )
    if not converged:
        logger.info("zero finding failed at x=%f", beta_fixed)

    with np.errstate(over="ignore", invalid="ignore"):
        gvalue = marginal_g_value(beta_short, design, param_id, beta_fixed)
        hessian = marginal_g_hessian(beta_short, design, param_id, beta_fixed)
        log_score = laplace_log_score(gvalue, hessian, n)
        return math.exp(log_score - mlik)