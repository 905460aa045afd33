"""
Posterior draw summaries: mean, median, mode and credible interval.
"""

from dataclasses import dataclass

import arviz as az
import numpy as np
from scipy.stats import gaussian_kde

from carbonstandards.config.settings import IntervalKind

KDE_GRID_SIZE = 512


@dataclass(frozen=True)
class ParameterSummary:
    """
    Summary of the posterior draws of one parameter.

    Attributes:
        mean: Posterior mean.
        median: Posterior median.
        mode: Mode of a Gaussian KDE of the draws.
        lower: Lower credible interval bound.
        upper: Upper credible interval bound.
        credible_mass: Probability mass inside [lower, upper].
        use_mode: Whether the mode is the reported point estimate
            (skewed parameters such as nu or variance ratios).
    """

    mean: float
    median: float
    mode: float
    lower: float
    upper: float
    credible_mass: float
    use_mode: bool = False

    @property
    def point(self) -> float:
        """Reported point estimate."""
        return self.mode if self.use_mode else self.mean

    def contains(self, value: float) -> bool:
        """Whether value lies inside the credible interval."""
        return self.lower <= value <= self.upper

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "mean": self.mean,
            "median": self.median,
            "mode": self.mode,
            "lower": self.lower,
            "upper": self.upper,
            "credible_mass": self.credible_mass,
        }

    def __str__(self) -> str:
        """String representation."""
        pct = f"{self.credible_mass:.0%}"
        return f"{self.point:.4g} [{pct}: {self.lower:.4g}, {self.upper:.4g}]"


def posterior_mode(draws: np.ndarray) -> float:
    """Mode of a Gaussian kernel density estimate of the draws."""
    draws = np.asarray(draws, dtype=float).ravel()
    if draws.size == 1 or np.ptp(draws) == 0:
        return float(draws[0])
    kde = gaussian_kde(draws)
    grid = np.linspace(draws.min(), draws.max(), KDE_GRID_SIZE)
    return float(grid[np.argmax(kde(grid))])


def credible_interval(
    draws: np.ndarray,
    credible_mass: float = 0.95,
    interval: IntervalKind = IntervalKind.HDI,
) -> tuple[float, float]:
    """
    Credible interval of the draws.

    HDI is the narrowest interval holding credible_mass; quantile is the
    equal-tailed interval.
    """
    draws = np.asarray(draws, dtype=float).ravel()
    if interval == IntervalKind.HDI:
        lower, upper = az.hdi(draws, hdi_prob=credible_mass)
    else:
        tail = (1.0 - credible_mass) / 2.0
        lower, upper = np.quantile(draws, [tail, 1.0 - tail])
    return float(lower), float(upper)


def summarize_draws(
    draws: np.ndarray,
    credible_mass: float = 0.95,
    interval: IntervalKind = IntervalKind.HDI,
    *,
    use_mode: bool = False,
) -> ParameterSummary:
    """
    Summarize posterior draws of one parameter.

    Args:
        draws: Posterior draws (any shape; chains are pooled).
        credible_mass: Interval probability mass, in (0, 1).
        interval: Interval kind.
        use_mode: Report the mode as the point estimate.

    Returns:
        ParameterSummary of the finite draws.

    Raises:
        ValueError: If there are no finite draws or credible_mass is
            outside (0, 1).
    """
    if not 0.0 < credible_mass < 1.0:
        msg = f"credible_mass must be in (0, 1), got {credible_mass}"
        raise ValueError(msg)

    values = np.asarray(draws, dtype=float).ravel()
    values = values[np.isfinite(values)]
    if values.size == 0:
        msg = "Cannot summarize an empty set of draws"
        raise ValueError(msg)

    lower, upper = credible_interval(values, credible_mass, interval)
    return ParameterSummary(
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        mode=posterior_mode(values),
        lower=lower,
        upper=upper,
        credible_mass=credible_mass,
        use_mode=use_mode,
    )
