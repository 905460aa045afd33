"""
Tabulation of summaries and posterior estimates.

Every table is available as a DataFrame (for CSV export and the HTML
report) and can be printed to a rich console.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd
from rich.console import Console
from rich.table import Table

from carbonstandards.modeling.fitting import FitResult
from carbonstandards.schemas.output import PosteriorSummarySchema
from carbonstandards.utils.logging import get_logger

if TYPE_CHECKING:
    from carbonstandards.pipeline import AnalysisResult

log = get_logger(__name__)

POSTERIOR_COLUMNS = [
    "standard",
    "stage",
    "model",
    "parameter",
    "mean",
    "median",
    "mode",
    "lower",
    "upper",
    "credible_mass",
    "r_hat",
    "ess_bulk",
]


def posterior_table(fits: Iterable[FitResult]) -> pd.DataFrame:
    """
    Flatten fit results into one row per (fit, parameter).

    Args:
        fits: Fit results, in display order.

    Returns:
        Long-format DataFrame validated against PosteriorSummarySchema.
    """
    rows = []
    for fit in fits:
        for name, summary in fit.parameters.items():
            diag = fit.diagnostics.get(name)
            rows.append(
                {
                    "standard": fit.standard,
                    "stage": fit.stage,
                    "model": fit.kind.value,
                    "parameter": name,
                    **summary.to_dict(),
                    "r_hat": diag.r_hat if diag is not None else float("nan"),
                    "ess_bulk": diag.ess_bulk if diag is not None else float("nan"),
                }
            )

    if not rows:
        return pd.DataFrame(columns=POSTERIOR_COLUMNS)

    return PosteriorSummarySchema.validate(pd.DataFrame(rows, columns=POSTERIOR_COLUMNS))


def estimates_table(
    posterior: pd.DataFrame,
    model: str,
    parameter: str,
    mode_parameters: Iterable[str] = (),
) -> pd.DataFrame:
    """
    One row per standard for a single (model, parameter) pair.

    The point column holds the mode for parameters in mode_parameters
    and the mean otherwise.
    """
    subset = posterior[
        (posterior["model"] == model) & (posterior["parameter"] == parameter)
    ].copy()
    point_col = "mode" if parameter in set(mode_parameters) else "mean"
    subset["point"] = subset[point_col]
    return subset[
        ["standard", "stage", "point", "median", "lower", "upper", "r_hat", "ess_bulk"]
    ].reset_index(drop=True)


def print_group_summary(summary: pd.DataFrame, console: Console | None = None) -> None:
    """Print descriptive statistics per stage and standard."""
    if console is None:
        return

    table = Table(title="Percent Carbon by Standard")
    table.add_column("Stage", style="dim")
    table.add_column("Standard", style="cyan")
    table.add_column("n", justify="right")
    table.add_column("Mean", style="green", justify="right")
    table.add_column("SD", style="yellow", justify="right")
    table.add_column("Median", style="green", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("CV %", style="magenta", justify="right")

    for row in summary.itertuples(index=False):
        table.add_row(
            str(row.stage),
            str(row.standard),
            str(row.n),
            f"{row.mean:.3f}",
            f"{row.sd:.3f}",
            f"{row.median:.3f}",
            f"{row.min:.3f}",
            f"{row.max:.3f}",
            f"{row.cv_percent:.2f}",
        )

    console.print(table)


def print_stage_comparison(comparison: pd.DataFrame, console: Console | None = None) -> None:
    """Print the moment-based pre/post comparison."""
    if console is None or comparison.empty:
        return

    table = Table(title="Pre vs Post Digestion (sample moments)")
    table.add_column("Standard", style="cyan")
    table.add_column("n pre/post", style="dim", justify="right")
    table.add_column("Mean pre", justify="right")
    table.add_column("Mean post", justify="right")
    table.add_column("Recovery", style="green", justify="right")
    table.add_column("Variance ratio", style="yellow", justify="right")

    for row in comparison.itertuples(index=False):
        table.add_row(
            str(row.standard),
            f"{row.n_pre}/{row.n_post}",
            f"{row.mean_pre:.3f}",
            f"{row.mean_post:.3f}",
            f"{row.recovery:.4f}",
            f"{row.variance_ratio:.3f}",
        )

    console.print(table)


def print_posterior_table(
    posterior: pd.DataFrame,
    console: Console | None = None,
    mode_parameters: Iterable[str] = (),
    rhat_threshold: float = 1.01,
) -> None:
    """
    Print the posterior summary, one table per model kind.

    R-hat values above rhat_threshold are highlighted.
    """
    if console is None or posterior.empty:
        return

    mode_set = set(mode_parameters)
    for model, group in posterior.groupby("model", sort=False):
        mass = group["credible_mass"].iloc[0]
        table = Table(title=f"Posterior Estimates: {model} model")
        table.add_column("Standard", style="cyan")
        table.add_column("Stage", style="dim")
        table.add_column("Parameter")
        table.add_column("Estimate", style="green", justify="right")
        table.add_column(f"{mass:.0%} lower", justify="right")
        table.add_column(f"{mass:.0%} upper", justify="right")
        table.add_column("R-hat", style="magenta", justify="right")
        table.add_column("ESS", style="dim", justify="right")

        for row in group.itertuples(index=False):
            point = row.mode if row.parameter in mode_set else row.mean
            rhat_style = _rhat_style(row.r_hat, rhat_threshold)
            table.add_row(
                str(row.standard),
                str(row.stage),
                str(row.parameter),
                f"{point:.4f}",
                f"{row.lower:.4f}",
                f"{row.upper:.4f}",
                f"[{rhat_style}]{row.r_hat:.3f}[/{rhat_style}]",
                f"{row.ess_bulk:.0f}",
            )

        console.print(table)


def _rhat_style(r_hat: float, threshold: float) -> str:
    return "red" if r_hat > threshold else "magenta"


def save_tables(result: "AnalysisResult", output_dir: Path) -> dict[str, Path]:
    """
    Write the analysis tables as CSV files.

    Returns:
        Table name -> written path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    tables = {
        "group_summary": result.summary,
        "stage_comparison": result.comparison,
        "posterior_summary": result.posterior,
        "skipped": result.skipped_table(),
    }

    paths = {}
    for name, df in tables.items():
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        paths[name] = path

    log.info("Saved tables", output_dir=str(output_dir), tables=list(paths))
    return paths
