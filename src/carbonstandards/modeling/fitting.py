"""
Model fitting: build a model, sample it, summarize the posterior.

Each fitter returns a FitResult holding per-parameter summaries and
convergence diagnostics for one standard.
"""

import time
from dataclasses import dataclass, field

import arviz as az
import numpy as np
import pymc as pm

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.modeling.models import (
    MODEL_PARAMETERS,
    ModelKind,
    as_sample,
    build_recovery_model,
    build_t_model,
    build_variance_ratio_model,
)
from carbonstandards.modeling.posterior import ParameterSummary, summarize_draws
from carbonstandards.modeling.sampling import (
    ConvergenceDiagnostic,
    check_convergence,
    sample_posterior,
)
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)

# Stage label for models fitted to both stages at once
BOTH_STAGES = "both"


@dataclass
class FitResult:
    """
    Result of fitting one model to one standard.

    Attributes:
        kind: Model kind.
        standard: Standard label.
        stage: "pre", "post", or "both" for two-sample models.
        parameters: Parameter name -> posterior summary.
        diagnostics: Parameter name -> convergence diagnostic.
        sample_sizes: Stage -> number of measurements used.
        elapsed_s: Wall time spent building and sampling.
        idata: Posterior draws, kept for plotting.
    """

    kind: ModelKind
    standard: str
    stage: str
    parameters: dict[str, ParameterSummary]
    diagnostics: dict[str, ConvergenceDiagnostic]
    sample_sizes: dict[str, int]
    elapsed_s: float = 0.0
    idata: az.InferenceData | None = field(default=None, repr=False)

    @property
    def converged(self) -> bool:
        """Whether every reported parameter passed the convergence checks."""
        return all(d.converged for d in self.diagnostics.values())

    def draws(self, parameter: str) -> np.ndarray:
        """Pooled posterior draws of a parameter."""
        if self.idata is None:
            msg = f"No posterior draws kept for {self.kind.value} fit of {self.standard}"
            raise ValueError(msg)
        return np.asarray(self.idata.posterior[parameter]).ravel()


def _fit(
    kind: ModelKind,
    model: pm.Model,
    config: AnalysisConfig,
    *,
    standard: str,
    stage: str,
    sample_sizes: dict[str, int],
) -> FitResult:
    """Sample a built model and summarize its reported parameters."""
    start = time.perf_counter()
    idata = sample_posterior(model, config.sampler)
    elapsed = time.perf_counter() - start

    var_names = MODEL_PARAMETERS[kind]
    diagnostics = check_convergence(idata, var_names, config.sampler)

    summary_cfg = config.summary
    parameters = {
        name: summarize_draws(
            idata.posterior[name].to_numpy(),
            summary_cfg.credible_mass,
            summary_cfg.interval,
            use_mode=name in summary_cfg.mode_parameters,
        )
        for name in var_names
    }

    result = FitResult(
        kind=kind,
        standard=standard,
        stage=stage,
        parameters=parameters,
        diagnostics=diagnostics,
        sample_sizes=sample_sizes,
        elapsed_s=elapsed,
        idata=idata,
    )
    log.info(
        "Fitted model",
        model=kind.value,
        standard=standard,
        stage=stage,
        converged=result.converged,
        elapsed_s=round(elapsed, 2),
        parameter=var_names[0],
        estimate=round(parameters[var_names[0]].point, 4),
    )
    return result


def fit_t_distribution(
    sample: object,
    config: AnalysisConfig,
    *,
    standard: str,
    stage: str,
) -> FitResult:
    """
    Fit a location-scale Student-t model to one standard at one stage.

    Args:
        sample: Percent-carbon measurements.
        config: Analysis configuration (priors, sampler, summary).
        standard: Standard label, for reporting.
        stage: "pre" or "post".

    Returns:
        FitResult with mu, sigma and nu.

    Raises:
        InsufficientDataError: If the sample has fewer than two values or
            zero spread.
    """
    y = as_sample(sample, f"{standard} ({stage})")
    model = build_t_model(y, config.priors)
    return _fit(
        ModelKind.T,
        model,
        config,
        standard=standard,
        stage=stage,
        sample_sizes={stage: int(y.size)},
    )


def fit_recovery_rate(
    pre: object,
    post: object,
    config: AnalysisConfig,
    *,
    standard: str,
) -> FitResult:
    """
    Fit linked pre/post t-models sharing a multiplicative recovery rate.

    Returns:
        FitResult with recovery_rate, both locations and scales, and nu.
    """
    pre_y = as_sample(pre, f"{standard} (pre)")
    post_y = as_sample(post, f"{standard} (post)")
    model = build_recovery_model(pre_y, post_y, config.priors)
    return _fit(
        ModelKind.RECOVERY,
        model,
        config,
        standard=standard,
        stage=BOTH_STAGES,
        sample_sizes={"pre": int(pre_y.size), "post": int(post_y.size)},
    )


def fit_variance_ratio(
    pre: object,
    post: object,
    config: AnalysisConfig,
    *,
    standard: str,
) -> FitResult:
    """
    Fit linked pre/post t-models whose scales differ by a ratio.

    Returns:
        FitResult with variance_ratio, sd_ratio, both locations and
        scales, and nu.
    """
    pre_y = as_sample(pre, f"{standard} (pre)")
    post_y = as_sample(post, f"{standard} (post)")
    model = build_variance_ratio_model(pre_y, post_y, config.priors)
    return _fit(
        ModelKind.VARIANCE_RATIO,
        model,
        config,
        standard=standard,
        stage=BOTH_STAGES,
        sample_sizes={"pre": int(pre_y.size), "post": int(post_y.size)},
    )
