"""
MCMC sampling and convergence diagnostics.

The sampler itself is PyMC's; this module only maps configuration onto
it and checks the resulting chains with ArviZ.
"""

import math
from dataclasses import dataclass

import arviz as az
import pymc as pm

from carbonstandards.config.settings import SamplerConfig, StepMethod
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ConvergenceDiagnostic:
    """R-hat and bulk effective sample size for one parameter."""

    parameter: str
    r_hat: float
    ess_bulk: float
    converged: bool


def _make_step(sampler: SamplerConfig) -> "pm.step_methods.compound.BlockedStep":
    """Create the step method. Must be called inside a model context."""
    if sampler.step == StepMethod.NUTS:
        return pm.NUTS(target_accept=sampler.target_accept)
    if sampler.step == StepMethod.METROPOLIS:
        return pm.Metropolis()
    return pm.Slice()


def sample_posterior(model: pm.Model, sampler: SamplerConfig) -> az.InferenceData:
    """
    Draw posterior samples for a model.

    Args:
        model: PyMC model to sample.
        sampler: Sampler settings.

    Returns:
        InferenceData with a posterior group.
    """
    log.debug(
        "Starting MCMC sampling",
        step=sampler.step.value,
        chains=sampler.chains,
        draws=sampler.draws,
        tune=sampler.tune,
    )
    with model:
        step = _make_step(sampler)
        idata = pm.sample(
            draws=sampler.draws,
            tune=sampler.tune,
            chains=sampler.chains,
            cores=sampler.cores,
            step=step,
            random_seed=sampler.random_seed,
            progressbar=sampler.progressbar,
            compute_convergence_checks=False,
            return_inferencedata=True,
        )
    return idata


def check_convergence(
    idata: az.InferenceData,
    var_names: list[str],
    sampler: SamplerConfig,
) -> dict[str, ConvergenceDiagnostic]:
    """
    Compute R-hat and bulk ESS per parameter and log any problems.

    Non-convergence is reported, not raised: the report shows the
    diagnostics next to the estimates.
    """
    rhat = az.rhat(idata, var_names=var_names)
    ess = az.ess(idata, var_names=var_names, method="bulk")

    diagnostics: dict[str, ConvergenceDiagnostic] = {}
    for name in var_names:
        r_hat = float(rhat[name].max())
        ess_bulk = float(ess[name].min())
        converged = (
            math.isfinite(r_hat)
            and r_hat <= sampler.rhat_threshold
            and ess_bulk >= sampler.min_ess
        )
        diagnostics[name] = ConvergenceDiagnostic(
            parameter=name,
            r_hat=r_hat,
            ess_bulk=ess_bulk,
            converged=converged,
        )
        if not converged:
            log.warning(
                "Parameter may not have converged",
                parameter=name,
                r_hat=round(r_hat, 4),
                ess_bulk=round(ess_bulk, 1),
                rhat_threshold=sampler.rhat_threshold,
                min_ess=sampler.min_ess,
            )

    return diagnostics
