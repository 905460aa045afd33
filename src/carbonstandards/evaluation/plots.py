"""
Report figures.

Every generator returns a base64 encoded PNG so the HTML report is a
single self-contained file.
"""

import base64
from io import BytesIO

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from scipy import stats

from carbonstandards.modeling.fitting import FitResult

STAGE_COLORS = {"pre": "steelblue", "post": "darkorange"}

# Posterior draws averaged into the predictive density overlay
N_PREDICTIVE_DRAWS = 100


def _fig_to_base64(fig: Figure) -> str:
    """Convert matplotlib figure to base64 PNG string."""
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=150, bbox_inches="tight")
    buf.seek(0)
    return base64.b64encode(buf.read()).decode("utf-8")


def predictive_density(fit: FitResult, grid: np.ndarray, seed: int = 0) -> np.ndarray:
    """
    Posterior predictive density of a t-model fit on grid.

    Averages the Student-t pdf over a random subset of posterior draws.
    """
    mu = fit.draws("mu")
    sigma = fit.draws("sigma")
    nu = fit.draws("nu")
    rng = np.random.default_rng(seed)
    idx = rng.choice(mu.size, size=min(N_PREDICTIVE_DRAWS, mu.size), replace=False)
    dens = stats.t.pdf(
        grid[None, :],
        df=nu[idx, None],
        loc=mu[idx, None],
        scale=sigma[idx, None],
    )
    return dens.mean(axis=0)


def generate_histogram(
    standard: str,
    samples: dict[str, np.ndarray],
    fits: dict[str, FitResult],
) -> str:
    """
    Histogram of one standard's measurements with fitted densities.

    Args:
        standard: Standard label.
        samples: Stage -> measurements.
        fits: Stage -> t-model fit (stages without a fit get no overlay).

    Returns:
        Base64 encoded PNG image.
    """
    fig, ax = plt.subplots(figsize=(8, 5))

    all_values = np.concatenate([np.asarray(v, dtype=float) for v in samples.values()])
    spread = np.ptp(all_values) or 1.0
    grid = np.linspace(all_values.min() - 0.25 * spread, all_values.max() + 0.25 * spread, 300)

    for stage, values in samples.items():
        color = STAGE_COLORS.get(stage, "gray")
        ax.hist(
            values,
            bins="auto",
            density=True,
            alpha=0.4,
            color=color,
            edgecolor="white",
            label=f"{stage} (n={len(values)})",
        )
        fit = fits.get(stage)
        if fit is not None and fit.idata is not None:
            ax.plot(
                grid,
                predictive_density(fit, grid),
                color=color,
                linewidth=2,
                label=f"{stage} posterior predictive",
            )

    ax.set_xlabel("Carbon (%)", fontsize=11)
    ax.set_ylabel("Density", fontsize=11)
    ax.set_title(f"{standard}: Measured Carbon", fontsize=12)
    ax.legend(loc="upper right", fontsize=9)
    ax.grid(True, alpha=0.3)

    result = _fig_to_base64(fig)
    plt.close(fig)
    return result


def generate_forest_plot(
    estimates: pd.DataFrame,
    title: str,
    xlabel: str,
    *,
    reference: float | None = None,
    log_scale: bool = False,
) -> str:
    """
    Forest plot of point estimates with credible intervals.

    Args:
        estimates: Output of estimates_table(): standard, stage, point,
            lower, upper. Multiple stages per standard are offset vertically.
        title: Plot title.
        xlabel: X axis label.
        reference: Optional vertical reference line (e.g. 1 for ratios).
        log_scale: Use a logarithmic x axis.

    Returns:
        Base64 encoded PNG image.
    """
    standards = list(dict.fromkeys(estimates["standard"]))
    stages = list(dict.fromkeys(estimates["stage"]))
    n = len(standards)

    fig, ax = plt.subplots(figsize=(9, max(3, n * 0.5 + 1.5)))

    offsets = np.linspace(-0.15, 0.15, len(stages)) if len(stages) > 1 else [0.0]
    positions = {label: i for i, label in enumerate(standards)}

    for offset, stage in zip(offsets, stages):
        rows = estimates[estimates["stage"] == stage]
        y = np.array([positions[s] for s in rows["standard"]]) + offset
        color = STAGE_COLORS.get(stage, "black")
        # A mode estimate can fall just outside a narrow HDI
        xerr = np.clip(
            [rows["point"] - rows["lower"], rows["upper"] - rows["point"]], 0, None
        )
        ax.errorbar(
            rows["point"],
            y,
            xerr=xerr,
            fmt="o",
            color=color,
            ecolor=color,
            capsize=3,
            label=stage,
        )

    if reference is not None:
        ax.axvline(reference, color="red", linestyle="--", alpha=0.8, linewidth=1.5)

    if log_scale:
        ax.set_xscale("log")

    ax.set_yticks(range(n))
    ax.set_yticklabels(standards, fontsize=10)
    ax.invert_yaxis()
    ax.set_xlabel(xlabel, fontsize=11)
    ax.set_title(title, fontsize=12)
    if len(stages) > 1:
        ax.legend(loc="lower right")
    ax.grid(axis="x", alpha=0.3)

    plt.tight_layout()

    result = _fig_to_base64(fig)
    plt.close(fig)
    return result
