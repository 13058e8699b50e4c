[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gdfmm"
version = "0.1.0"
description = "Full-conditional updates for Gibbs sampling of group-dependent finite mixture models"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "scipy",
]
keywords = ["bayesian", "mixture model", "gibbs sampler", "mcmc", "clustering"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gdfmm"]

[tool.pytest.ini_options]
addopts = "-ra"
