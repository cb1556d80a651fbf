[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "abnscore"
version = "0.1.0"
description = "Laplace-approximated marginal likelihoods for Poisson nodes of additive Bayesian networks, with grouped designs for random-intercept Gaussian nodes"
requires-python = ">=3.10"
keywords = ["bayesian networks", "laplace approximation", "marginal likelihood", "poisson regression", "design matrix"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Scientific/Engineering :: Information Analysis",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["abnscore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
