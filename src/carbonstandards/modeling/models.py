"""
Probabilistic model definitions.

All models are location-scale Student-t likelihoods with the vague,
data-scaled priors of Kruschke's BEST (Bayesian Estimation Supersedes
the t Test, 2013):

    mu      ~ Normal(mean(y), sd(y) * mu_sd_multiplier)
    sigma   ~ Uniform(sd(y) / sigma_low_divisor, sd(y) * sigma_high_multiplier)
    nu - 1  ~ Exponential(1 / nu_mean)
    y       ~ StudentT(nu, mu, sigma)

The two-sample models share nu between stages and link the stages either
through the location (recovery rate) or through the scale (variance ratio).
"""

from enum import Enum

import numpy as np
import pymc as pm

from carbonstandards.config.settings import PriorConfig
from carbonstandards.modeling.errors import InsufficientDataError


class ModelKind(str, Enum):
    """Kind of fitted model."""

    T = "t"
    RECOVERY = "recovery"
    VARIANCE_RATIO = "variance_ratio"


# Parameters reported for each model kind, in display order
MODEL_PARAMETERS: dict[ModelKind, list[str]] = {
    ModelKind.T: ["mu", "sigma", "nu"],
    ModelKind.RECOVERY: [
        "recovery_rate",
        "mu_pre",
        "mu_post",
        "sigma_pre",
        "sigma_post",
        "nu",
    ],
    ModelKind.VARIANCE_RATIO: [
        "variance_ratio",
        "sd_ratio",
        "mu_pre",
        "mu_post",
        "sigma_pre",
        "sigma_post",
        "nu",
    ],
}


def as_sample(values: object, name: str = "sample") -> np.ndarray:
    """
    Convert values to a 1-D float array of finite measurements.

    Raises:
        InsufficientDataError: If fewer than two finite values remain or
            all values are identical.
    """
    y = np.asarray(values, dtype=float).ravel()
    y = y[np.isfinite(y)]
    if y.size < 2:
        msg = f"{name} needs at least 2 finite values, got {y.size}"
        raise InsufficientDataError(msg)
    if np.std(y, ddof=1) == 0:
        msg = f"{name} has zero spread (all values equal {y[0]:g})"
        raise InsufficientDataError(msg)
    return y


def _nu_prior(priors: PriorConfig) -> pm.Deterministic:
    nu_minus_one = pm.Exponential("nu_minus_one", lam=1.0 / priors.nu_mean)
    return pm.Deterministic("nu", nu_minus_one + 1.0)


def _location_prior(name: str, y: np.ndarray, priors: PriorConfig) -> pm.Normal:
    return pm.Normal(
        name, mu=float(np.mean(y)), sigma=float(np.std(y, ddof=1)) * priors.mu_sd_multiplier
    )


def _scale_prior(name: str, y: np.ndarray, priors: PriorConfig) -> pm.Uniform:
    sd = float(np.std(y, ddof=1))
    return pm.Uniform(
        name,
        lower=sd / priors.sigma_low_divisor,
        upper=sd * priors.sigma_high_multiplier,
    )


def build_t_model(y: object, priors: PriorConfig) -> pm.Model:
    """
    Build a single-sample location-scale Student-t model.

    Args:
        y: Measurements of one standard at one stage.
        priors: Prior hyperparameters.

    Returns:
        Unsampled PyMC model with free parameters mu, sigma and nu.
    """
    sample = as_sample(y)

    with pm.Model() as model:
        mu = _location_prior("mu", sample, priors)
        sigma = _scale_prior("sigma", sample, priors)
        nu = _nu_prior(priors)
        pm.StudentT("y", nu=nu, mu=mu, sigma=sigma, observed=sample)

    return model


def build_recovery_model(pre: object, post: object, priors: PriorConfig) -> pm.Model:
    """
    Build two t-models whose locations are linked by a recovery rate.

    mu_post = recovery_rate * mu_pre, with recovery_rate uniform on
    [0, recovery_rate_upper]. Each stage keeps its own scale.

    Raises:
        InsufficientDataError: If either sample cannot be fitted or the
            pre-digestion mean is not positive.
    """
    pre_sample = as_sample(pre, "pre-digestion sample")
    post_sample = as_sample(post, "post-digestion sample")
    if np.mean(pre_sample) <= 0:
        msg = "Recovery rate is undefined for a non-positive pre-digestion mean"
        raise InsufficientDataError(msg)

    with pm.Model() as model:
        mu_pre = _location_prior("mu_pre", pre_sample, priors)
        rate = pm.Uniform("recovery_rate", lower=0.0, upper=priors.recovery_rate_upper)
        mu_post = pm.Deterministic("mu_post", rate * mu_pre)
        sigma_pre = _scale_prior("sigma_pre", pre_sample, priors)
        sigma_post = _scale_prior("sigma_post", post_sample, priors)
        nu = _nu_prior(priors)
        pm.StudentT("y_pre", nu=nu, mu=mu_pre, sigma=sigma_pre, observed=pre_sample)
        pm.StudentT("y_post", nu=nu, mu=mu_post, sigma=sigma_post, observed=post_sample)

    return model


def build_variance_ratio_model(
    pre: object, post: object, priors: PriorConfig
) -> pm.Model:
    """
    Build two t-models whose scales are linked by a ratio.

    sigma_post = sigma_pre * exp(log_sd_ratio); variance_ratio is the
    deterministic exp(2 * log_sd_ratio), i.e. post variance over pre
    variance. Each stage keeps its own location.
    """
    pre_sample = as_sample(pre, "pre-digestion sample")
    post_sample = as_sample(post, "post-digestion sample")

    with pm.Model() as model:
        mu_pre = _location_prior("mu_pre", pre_sample, priors)
        mu_post = _location_prior("mu_post", post_sample, priors)
        sigma_pre = _scale_prior("sigma_pre", pre_sample, priors)
        log_sd_ratio = pm.Normal("log_sd_ratio", mu=0.0, sigma=priors.log_sd_ratio_sd)
        sd_ratio = pm.Deterministic("sd_ratio", pm.math.exp(log_sd_ratio))
        sigma_post = pm.Deterministic("sigma_post", sigma_pre * sd_ratio)
        pm.Deterministic("variance_ratio", pm.math.exp(2.0 * log_sd_ratio))
        nu = _nu_prior(priors)
        pm.StudentT("y_pre", nu=nu, mu=mu_pre, sigma=sigma_pre, observed=pre_sample)
        pm.StudentT("y_post", nu=nu, mu=mu_post, sigma=sigma_post, observed=post_sample)

    return model
