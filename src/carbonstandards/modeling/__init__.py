"""
Bayesian model fitting for percent-carbon measurements.

Models are specified with PyMC, sampled by MCMC and summarized with ArviZ.
"""

from carbonstandards.modeling.errors import InsufficientDataError
from carbonstandards.modeling.fitting import (
    BOTH_STAGES,
    FitResult,
    fit_recovery_rate,
    fit_t_distribution,
    fit_variance_ratio,
)
from carbonstandards.modeling.models import (
    MODEL_PARAMETERS,
    ModelKind,
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

__all__ = [
    "BOTH_STAGES",
    "MODEL_PARAMETERS",
    "ConvergenceDiagnostic",
    "FitResult",
    "InsufficientDataError",
    "ModelKind",
    "ParameterSummary",
    "build_recovery_model",
    "build_t_model",
    "build_variance_ratio_model",
    "check_convergence",
    "fit_recovery_rate",
    "fit_t_distribution",
    "fit_variance_ratio",
    "sample_posterior",
    "summarize_draws",
]
