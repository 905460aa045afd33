"""
Carbonstandards: Bayesian carbon-content analysis for reference standards.

This package loads pre- and post-digestion percent-carbon measurements,
fits Student-t models per standard via MCMC, and renders a report
summarizing the posterior distributions.
"""

from importlib.metadata import version

__version__ = version("carbonstandards")

__all__ = ["__version__"]
