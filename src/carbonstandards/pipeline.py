"""
End-to-end analysis run.

load -> clean -> summarize -> fit per group -> tabulate -> report
"""

from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd
from rich.console import Console

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.ingestion.measurements import load_measurements
from carbonstandards.modeling.errors import InsufficientDataError
from carbonstandards.modeling.fitting import (
    FitResult,
    fit_recovery_rate,
    fit_t_distribution,
    fit_variance_ratio,
)
from carbonstandards.modeling.models import ModelKind
from carbonstandards.processing.cleaning import clean_measurements, shared_standards
from carbonstandards.processing.labels import apply_order, order_standards
from carbonstandards.processing.summary import compare_stages, summarize_groups
from carbonstandards.schemas.measurement import Stage
from carbonstandards.utils.logging import get_logger, log_context

log = get_logger(__name__)


@dataclass(frozen=True)
class SkippedFit:
    """A model that could not be fitted for one standard."""

    kind: ModelKind
    standard: str
    stage: str
    reason: str


@dataclass
class AnalysisResult:
    """
    Everything produced by one analysis run.

    Attributes:
        pre: Cleaned pre-digestion measurements.
        post: Cleaned post-digestion measurements.
        order: Display order of standards.
        summary: Descriptive statistics per (stage, standard).
        comparison: Moment-based pre/post comparison of shared standards.
        fits: Successful model fits.
        skipped: Models that could not be fitted.
        posterior: Long-format posterior summary table.
        table_paths: Written CSV tables.
        report_path: Written HTML report, if any.
    """

    pre: pd.DataFrame
    post: pd.DataFrame
    order: list[str]
    summary: pd.DataFrame
    comparison: pd.DataFrame
    fits: list[FitResult] = field(default_factory=list)
    skipped: list[SkippedFit] = field(default_factory=list)
    posterior: pd.DataFrame = field(default_factory=pd.DataFrame)
    table_paths: dict[str, Path] = field(default_factory=dict)
    report_path: Path | None = None

    @property
    def shared(self) -> list[str]:
        """Standards measured at both stages, in display order."""
        both = set(shared_standards(self.pre, self.post))
        return [label for label in self.order if label in both]

    def fits_of(self, kind: ModelKind) -> list[FitResult]:
        """Fits of one model kind, in fitting order."""
        return [fit for fit in self.fits if fit.kind == kind]

    def t_fits(self, standard: str) -> dict[str, FitResult]:
        """Stage -> t-model fit for one standard."""
        return {
            fit.stage: fit
            for fit in self.fits
            if fit.kind == ModelKind.T and fit.standard == standard
        }

    def samples(self, standard: str) -> dict[str, pd.Series]:
        """Stage -> measurements for one standard (stages without data omitted)."""
        out = {}
        for stage, df in ((Stage.PRE.value, self.pre), (Stage.POST.value, self.post)):
            values = df.loc[df["standard"] == standard, "percent_carbon"]
            if not values.empty:
                out[stage] = values
        return out

    def skipped_table(self) -> pd.DataFrame:
        """Skipped fits as a DataFrame."""
        return pd.DataFrame(
            [
                {
                    "model": s.kind.value,
                    "standard": s.standard,
                    "stage": s.stage,
                    "reason": s.reason,
                }
                for s in self.skipped
            ],
            columns=["model", "standard", "stage", "reason"],
        )


def prepare_data(config: AnalysisConfig) -> AnalysisResult:
    """
    Load, clean, order and summarize both measurement tables.

    Returns:
        AnalysisResult without any model fits.
    """
    pre_raw, post_raw = load_measurements(config)

    with log_context(stage=Stage.PRE.value):
        pre = clean_measurements(pre_raw, config.filters)
    with log_context(stage=Stage.POST.value):
        post = clean_measurements(post_raw, config.filters)

    summary = summarize_groups(pd.concat([pre, post], ignore_index=True))
    order = order_standards(
        list(pre["standard"]) + list(post["standard"]),
        summary=summary,
        explicit=config.filters.standard_order,
    )

    pre = apply_order(pre, order)
    post = apply_order(post, order)
    summary = apply_order(summary, order).sort_values(["stage", "standard"], ascending=[False, True])
    summary["standard"] = summary["standard"].astype(str)
    comparison = compare_stages(summary)
    comparison = comparison.set_index("standard").loc[
        [s for s in order if s in set(comparison["standard"])]
    ].reset_index()

    n_shared = len(shared_standards(pre, post))
    log.info(
        "Prepared data",
        n_pre=len(pre),
        n_post=len(post),
        n_standards=len(order),
        n_shared=n_shared,
    )
    if n_shared == 0:
        log.warning("No standard appears in both tables; pre/post models will be skipped")

    return AnalysisResult(
        pre=pre,
        post=post,
        order=order,
        summary=summary.reset_index(drop=True),
        comparison=comparison,
    )


def fit_all(result: AnalysisResult, config: AnalysisConfig) -> AnalysisResult:
    """
    Fit every model for every eligible group.

    One t-model per (stage, standard), then a recovery-rate and a
    variance-ratio model per shared standard. Groups that cannot be fitted
    are recorded in result.skipped; any other error aborts the run.
    """
    for stage in (Stage.PRE.value, Stage.POST.value):
        for standard in result.order:
            values = result.samples(standard).get(stage)
            if values is None:
                continue
            with log_context(standard=standard, stage=stage):
                try:
                    fit = fit_t_distribution(values, config, standard=standard, stage=stage)
                except InsufficientDataError as e:
                    _skip(result, ModelKind.T, standard, stage, e)
                    continue
            result.fits.append(fit)

    two_sample = (
        (ModelKind.RECOVERY, fit_recovery_rate),
        (ModelKind.VARIANCE_RATIO, fit_variance_ratio),
    )
    for standard in result.shared:
        samples = result.samples(standard)
        for kind, fitter in two_sample:
            with log_context(standard=standard, model=kind.value):
                try:
                    fit = fitter(
                        samples[Stage.PRE.value],
                        samples[Stage.POST.value],
                        config,
                        standard=standard,
                    )
                except InsufficientDataError as e:
                    _skip(result, kind, standard, "both", e)
                    continue
            result.fits.append(fit)

    n_unconverged = sum(not fit.converged for fit in result.fits)
    log.info(
        "Model fitting complete",
        n_fits=len(result.fits),
        n_skipped=len(result.skipped),
        n_unconverged=n_unconverged,
    )
    return result


def _skip(
    result: AnalysisResult,
    kind: ModelKind,
    standard: str,
    stage: str,
    error: InsufficientDataError,
) -> None:
    log.warning("Skipping model", model=kind.value, reason=str(error))
    result.skipped.append(
        SkippedFit(kind=kind, standard=standard, stage=stage, reason=str(error))
    )


def run_analysis(
    config: AnalysisConfig,
    *,
    fit_models: bool = True,
    write_report: bool = True,
    console: Console | None = None,
) -> AnalysisResult:
    """
    Run the complete analysis.

    Args:
        config: Analysis configuration.
        fit_models: Run the MCMC fits. If False, only descriptive
            statistics are produced.
        write_report: Write CSV tables and the HTML report.
        console: Optional rich console for printing tables.

    Returns:
        AnalysisResult with all tables and output paths.
    """
    from carbonstandards.evaluation.report import generate_html_report
    from carbonstandards.evaluation.tables import (
        posterior_table,
        print_group_summary,
        print_posterior_table,
        print_stage_comparison,
        save_tables,
    )

    with log_context(project=config.project):
        result = prepare_data(config)
        print_group_summary(result.summary, console)
        print_stage_comparison(result.comparison, console)

        if fit_models:
            fit_all(result, config)
        result.posterior = posterior_table(result.fits)
        print_posterior_table(
            result.posterior,
            console,
            config.summary.mode_parameters,
            rhat_threshold=config.sampler.rhat_threshold,
        )

        if write_report:
            result.table_paths = save_tables(result, config.tables_dir)
            result.report_path = generate_html_report(result, config, config.report_path)

    return result
