"""
Grouped descriptive statistics.
"""

import numpy as np
import pandas as pd

from carbonstandards.schemas.output import GroupSummarySchema

SUMMARY_COLUMNS = ["stage", "standard", "n", "mean", "sd", "median", "min", "max", "cv_percent"]


def summarize_groups(df: pd.DataFrame) -> pd.DataFrame:
    """
    Compute descriptive statistics per (stage, standard).

    Args:
        df: Cleaned measurement table(s) with stage, standard and
            percent_carbon columns.

    Returns:
        One row per group with n, mean, sd (sample), median, min, max and
        the coefficient of variation in percent.
    """
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    grouped = df.groupby(["stage", "standard"], observed=True)["percent_carbon"]
    summary = grouped.agg(
        n="size",
        mean="mean",
        sd="std",
        median="median",
        min="min",
        max="max",
    ).reset_index()

    with np.errstate(divide="ignore", invalid="ignore"):
        cv = summary["sd"] / summary["mean"] * 100.0
    summary["cv_percent"] = cv.replace([np.inf, -np.inf], np.nan)
    summary["standard"] = summary["standard"].astype(str)

    return GroupSummarySchema.validate(summary[SUMMARY_COLUMNS])


def compare_stages(summary: pd.DataFrame) -> pd.DataFrame:
    """
    Naive (moment-based) pre/post comparison for shared standards.

    Args:
        summary: Output of summarize_groups() covering both stages.

    Returns:
        One row per shared standard with pre/post means and sds, the
        recovery (post mean / pre mean) and the variance ratio
        (post variance / pre variance).
    """
    pre = summary[summary["stage"] == "pre"].set_index("standard")
    post = summary[summary["stage"] == "post"].set_index("standard")
    shared = pre.index.intersection(post.index).sort_values()

    comparison = pd.DataFrame(
        {
            "standard": shared,
            "n_pre": pre.loc[shared, "n"].to_numpy(),
            "n_post": post.loc[shared, "n"].to_numpy(),
            "mean_pre": pre.loc[shared, "mean"].to_numpy(),
            "mean_post": post.loc[shared, "mean"].to_numpy(),
            "sd_pre": pre.loc[shared, "sd"].to_numpy(),
            "sd_post": post.loc[shared, "sd"].to_numpy(),
        }
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        comparison["recovery"] = comparison["mean_post"] / comparison["mean_pre"]
        comparison["variance_ratio"] = comparison["sd_post"] ** 2 / comparison["sd_pre"] ** 2
    return comparison.replace([np.inf, -np.inf], np.nan)
