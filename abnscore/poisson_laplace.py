"""Objective, gradient and Hessian for the Laplace approximation of a Poisson node.

The Laplace method approximates ``int exp(-n g(b)) db`` where
``g(b) = -(1/n) log(f(D | b) f(b))``, the likelihood being a Poisson
regression with a log link and the prior independent Gaussians on each
coefficient.  The ``marginal_*`` variants hold one coefficient fixed and work
on the vector of the remaining ones.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy.special import gammaln

from .design import DesignMatrix

logger = logging.getLogger(__name__)

# Offset added to counts before taking logs for the least-squares start.
INIT_OFFSET = 0.1


def _as_vector(beta, size: int) -> np.ndarray:
    vector = np.asarray(beta, dtype=float)
    if vector.shape != (size,):
        raise ValueError(f"expected a vector of length {size}, got shape {vector.shape}")
    return vector


def _log_factorials(y: np.ndarray) -> np.ndarray:
    if np.any(y < 0):
        raise ValueError("Poisson responses must not be negative")
    return gammaln(np.trunc(y) + 1.0)


def g_value(beta, design: DesignMatrix) -> float:
    """Return ``-(1/n) log(likelihood * prior)`` at ``beta``."""
    beta = _as_vector(beta, design.num_params)
    y = design.y
    n = design.num_obs
    eta = design.X @ beta
    loglik = float(y @ eta) - float(np.sum(_log_factorials(y) + np.exp(eta)))
    log_norm = -float(np.sum(np.log(math.sqrt(2.0 * math.pi) * design.prior_sd)))
    log_kernel = -0.5 * float(np.sum((beta - design.prior_mean) ** 2 / design.prior_sd**2))
    return (-1.0 / n) * (loglik + log_norm + log_kernel)


def g_gradient(beta, design: DesignMatrix) -> np.ndarray:
    """Return the vector of partial derivatives of :func:`g_value`."""
    beta = _as_vector(beta, design.num_params)
    X = design.X
    n = design.num_obs
    prior_term = -(beta - design.prior_mean) / design.prior_sd**2
    rate_term = X.T @ (-np.exp(X @ beta))
    data_term = X.T @ design.y
    return (-1.0 / n) * (prior_term + rate_term + data_term)


def g_hessian(beta, design: DesignMatrix) -> np.ndarray:
    """Return the matrix of second derivatives of :func:`g_value`."""
    beta = _as_vector(beta, design.num_params)
    X = design.X
    n = design.num_obs
    weights = np.exp(X @ beta) / n
    hessian = X.T @ (X * weights[:, None])
    hessian[np.diag_indices_from(hessian)] += 1.0 / (n * design.prior_sd**2)
    return hessian


def initial_estimates(design: DesignMatrix) -> np.ndarray:
    """Least-squares start on ``log(y + 0.1)``; zeros when ``X'X`` is singular."""
    X = design.X
    try:
        inverse = np.linalg.inv(X.T @ X)
    except np.linalg.LinAlgError:
        logger.warning("singular matrix in initial guess estimates")
        return np.zeros(design.num_params)
    return inverse @ (X.T @ np.log(design.y + INIT_OFFSET))


def expand_beta(beta_short, fixed_index: int, fixed_value: float) -> np.ndarray:
    """Insert ``fixed_value`` at ``fixed_index`` into a shortened parameter vector."""
    short = np.asarray(beta_short, dtype=float)
    if short.ndim != 1:
        raise ValueError("beta_short must be a vector")
    if not 0 <= fixed_index <= short.size:
        raise ValueError(f"fixed index {fixed_index} out of range")
    return np.insert(short, fixed_index, float(fixed_value))


def drop_index(vector, index: int) -> np.ndarray:
    """Return ``vector`` without the entry at ``index``."""
    full = np.asarray(vector, dtype=float)
    if full.ndim != 1:
        raise ValueError("expected a vector")
    if not 0 <= index < full.size:
        raise ValueError(f"index {index} out of range")
    return np.delete(full, index)


def drop_row_col(matrix, index: int) -> np.ndarray:
    """Return a square ``matrix`` without row ``index`` and column ``index``."""
    full = np.asarray(matrix, dtype=float)
    if full.ndim != 2 or full.shape[0] != full.shape[1]:
        raise ValueError("expected a square matrix")
    if not 0 <= index < full.shape[0]:
        raise ValueError(f"index {index} out of range")
    return np.delete(np.delete(full, index, axis=0), index, axis=1)


def _expand_for(design: DesignMatrix, beta_short, fixed_index: int, fixed_value: float) -> np.ndarray:
    beta = expand_beta(beta_short, fixed_index, fixed_value)
    if beta.size != design.num_params:
        raise ValueError(
            f"expected {design.num_params - 1} free parameters, got {beta.size - 1}"
        )
    return beta


def marginal_g_value(beta_short, design: DesignMatrix, fixed_index: int, fixed_value: float) -> float:
    """:func:`g_value` with coefficient ``fixed_index`` held at ``fixed_value``."""
    return g_value(_expand_for(design, beta_short, fixed_index, fixed_value), design)


def marginal_g_gradient(
    beta_short, design: DesignMatrix, fixed_index: int, fixed_value: float
) -> np.ndarray:
    """Gradient over the free coefficients with one coefficient held fixed."""
    beta = _expand_for(design, beta_short, fixed_index, fixed_value)
    return drop_index(g_gradient(beta, design), fixed_index)


def marginal_g_hessian(
    beta_short, design: DesignMatrix, fixed_index: int, fixed_value: float
) -> np.ndarray:
    """Hessian over the free coefficients with one coefficient held fixed."""
    beta = _expand_for(design, beta_short, fixed_index, fixed_value)
    return drop_row_col(g_hessian(beta, design), fixed_index)