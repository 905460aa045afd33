"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import pytest

from carbonstandards.config import AnalysisConfig, config_from_dict
from carbonstandards.modeling import (
    ConvergenceDiagnostic,
    FitResult,
    ModelKind,
    ParameterSummary,
)

# Small sampler settings: enough draws for loose statistical checks
FAST_SAMPLER: dict[str, Any] = {
    "draws": 300,
    "tune": 300,
    "chains": 2,
    "cores": 1,
    "random_seed": 42,
    "progressbar": False,
}


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(20240501)


@pytest.fixture
def pre_digestion_df(rng: np.random.Generator) -> pd.DataFrame:
    """Synthetic pre-digestion measurements for three standards."""
    return pd.DataFrame(
        {
            "standard": ["ACET"] * 12 + ["UREA"] * 10 + ["SOIL-B"] * 8,
            "percent_carbon": np.concatenate(
                [
                    rng.normal(71.1, 0.4, 12),
                    rng.normal(20.0, 0.2, 10),
                    rng.normal(2.5, 0.05, 8),
                ]
            ),
        }
    )


@pytest.fixture
def post_digestion_df(rng: np.random.Generator) -> pd.DataFrame:
    """Synthetic post-digestion measurements; SOIL-B was not digested."""
    return pd.DataFrame(
        {
            "standard": ["ACET"] * 10 + ["UREA"] * 9,
            "percent_carbon": np.concatenate(
                [
                    rng.normal(68.0, 0.8, 10),
                    rng.normal(19.4, 0.3, 9),
                ]
            ),
        }
    )


@pytest.fixture
def config_dict(
    tmp_path: Path,
    pre_digestion_df: pd.DataFrame,
    post_digestion_df: pd.DataFrame,
) -> dict[str, Any]:
    """Config mapping pointing at CSV copies of the synthetic data."""
    data_root = tmp_path / "data"
    data_root.mkdir()
    pre_digestion_df.to_csv(data_root / "pre.csv", index=False)
    post_digestion_df.to_csv(data_root / "post.csv", index=False)
    return {
        "project": "test-project",
        "data": {
            "root": str(data_root),
            "pre_digestion": "pre.csv",
            "post_digestion": "post.csv",
        },
        "sampler": dict(FAST_SAMPLER),
        "output": {"root": str(tmp_path / "output")},
    }


@pytest.fixture
def analysis_config(config_dict: dict[str, Any]) -> AnalysisConfig:
    """Validated config for the synthetic data."""
    return config_from_dict(config_dict)


@pytest.fixture
def fast_config(tmp_path: Path) -> AnalysisConfig:
    """Config for fitting tests that never touch the data files."""
    return config_from_dict(
        {
            "project": "fit-tests",
            "data": {"pre_digestion": "pre.csv", "post_digestion": "post.csv"},
            "sampler": dict(FAST_SAMPLER),
            "output": {"root": str(tmp_path / "output")},
        }
    )


def make_summary(point: float, half_width: float = 0.1, *, use_mode: bool = False) -> ParameterSummary:
    """Posterior summary centred on point."""
    return ParameterSummary(
        mean=point,
        median=point,
        mode=point,
        lower=point - half_width,
        upper=point + half_width,
        credible_mass=0.95,
        use_mode=use_mode,
    )


def make_fit(
    kind: ModelKind,
    standard: str,
    stage: str,
    points: dict[str, float],
    *,
    converged: bool = True,
) -> FitResult:
    """FitResult without posterior draws, for table and report tests."""
    return FitResult(
        kind=kind,
        standard=standard,
        stage=stage,
        parameters={name: make_summary(value) for name, value in points.items()},
        diagnostics={
            name: ConvergenceDiagnostic(
                parameter=name,
                r_hat=1.0 if converged else 1.2,
                ess_bulk=800.0 if converged else 40.0,
                converged=converged,
            )
            for name in points
        },
        sample_sizes={"pre": 10, "post": 10} if stage == "both" else {stage: 10},
    )


@pytest.fixture
def fake_fits() -> list[FitResult]:
    """A plausible set of fits for ACET and UREA."""
    return [
        make_fit(ModelKind.T, "ACET", "pre", {"mu": 71.1, "sigma": 0.4, "nu": 30.0}),
        make_fit(ModelKind.T, "ACET", "post", {"mu": 68.0, "sigma": 0.8, "nu": 25.0}),
        make_fit(ModelKind.T, "UREA", "pre", {"mu": 20.0, "sigma": 0.2, "nu": 28.0}),
        make_fit(
            ModelKind.RECOVERY,
            "ACET",
            "both",
            {
                "recovery_rate": 0.956,
                "mu_pre": 71.1,
                "mu_post": 68.0,
                "sigma_pre": 0.4,
                "sigma_post": 0.8,
                "nu": 30.0,
            },
        ),
        make_fit(
            ModelKind.VARIANCE_RATIO,
            "ACET",
            "both",
            {
                "variance_ratio": 4.0,
                "sd_ratio": 2.0,
                "mu_pre": 71.1,
                "mu_post": 68.0,
                "sigma_pre": 0.4,
                "sigma_post": 0.8,
                "nu": 30.0,
            },
            converged=False,
        ),
    ]
