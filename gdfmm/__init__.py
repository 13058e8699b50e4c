"""Full-conditional updates, priors and helper densities for Gibbs sampling of group-dependent finite mixture models."""

__version__ = "0.1.0"