"""Laplace-approximated Poisson node scores and grouped designs for additive Bayesian networks."""

__version__ = "0.1.0"