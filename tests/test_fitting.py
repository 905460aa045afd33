"""
Statistical tolerance tests for the MCMC fitters.

Synthetic data with known parameters; short chains, loose tolerances.
"""

import numpy as np
import pytest

from carbonstandards.config import AnalysisConfig
from carbonstandards.modeling import (
    InsufficientDataError,
    ModelKind,
    fit_recovery_rate,
    fit_t_distribution,
    fit_variance_ratio,
)

pytestmark = pytest.mark.mcmc


@pytest.fixture
def data_rng() -> np.random.Generator:
    return np.random.default_rng(99)


class TestFitTDistribution:
    """Tests for the single-sample t fit."""

    def test_recovers_location_and_scale(
        self, fast_config: AnalysisConfig, data_rng: np.random.Generator
    ) -> None:
        """Test posterior location and scale on normal data."""
        y = data_rng.normal(12.0, 0.3, size=60)

        fit = fit_t_distribution(y, fast_config, standard="ACET", stage="pre")

        assert fit.kind == ModelKind.T
        assert fit.standard == "ACET"
        assert fit.stage == "pre"
        assert fit.sample_sizes == {"pre": 60}
        assert set(fit.parameters) == {"mu", "sigma", "nu"}

        mu = fit.parameters["mu"]
        assert mu.mean == pytest.approx(12.0, abs=0.2)
        assert mu.contains(float(np.mean(y)))
        assert fit.parameters["sigma"].mean == pytest.approx(0.3, rel=0.35)
        # nu is reported by its mode and has support above 1
        assert fit.parameters["nu"].use_mode
        assert fit.parameters["nu"].lower >= 1.0

    def test_diagnostics_and_draws(
        self, fast_config: AnalysisConfig, data_rng: np.random.Generator
    ) -> None:
        """Test that diagnostics and pooled draws are kept."""
        y = data_rng.normal(5.0, 0.1, size=30)

        fit = fit_t_distribution(y, fast_config, standard="UREA", stage="post")

        assert set(fit.diagnostics) == {"mu", "sigma", "nu"}
        assert fit.diagnostics["mu"].r_hat < 1.1
        assert fit.draws("mu").shape == (
            fast_config.sampler.chains * fast_config.sampler.draws,
        )
        assert fit.elapsed_s > 0

    def test_insufficient_data(self, fast_config: AnalysisConfig) -> None:
        """Test that degenerate samples are rejected before sampling."""
        with pytest.raises(InsufficientDataError):
            fit_t_distribution([7.0, 7.0, 7.0], fast_config, standard="FLAT", stage="pre")


class TestTwoSampleFits:
    """Tests for the linked pre/post fits."""

    def test_recovery_rate(
        self, fast_config: AnalysisConfig, data_rng: np.random.Generator
    ) -> None:
        """Test that the recovery rate matches the ratio of means."""
        pre = data_rng.normal(10.0, 0.2, size=60)
        post = data_rng.normal(9.5, 0.2, size=60)

        fit = fit_recovery_rate(pre, post, fast_config, standard="ACET")

        assert fit.kind == ModelKind.RECOVERY
        assert fit.stage == "both"
        assert fit.sample_sizes == {"pre": 60, "post": 60}
        rate = fit.parameters["recovery_rate"]
        assert rate.mean == pytest.approx(0.95, abs=0.03)
        assert not rate.contains(1.0)
        mu_post = fit.parameters["mu_post"]
        assert mu_post.mean == pytest.approx(9.5, abs=0.15)

    def test_variance_ratio(
        self, fast_config: AnalysisConfig, data_rng: np.random.Generator
    ) -> None:
        """Test that a doubled sd gives a variance ratio near four."""
        pre = data_rng.normal(20.0, 0.2, size=60)
        post = data_rng.normal(20.0, 0.4, size=60)

        fit = fit_variance_ratio(pre, post, fast_config, standard="UREA")

        assert fit.kind == ModelKind.VARIANCE_RATIO
        ratio = fit.parameters["variance_ratio"]
        assert ratio.use_mode
        assert 2.0 < ratio.mean < 8.0
        assert ratio.lower > 1.0
        sd_ratio = fit.parameters["sd_ratio"]
        assert sd_ratio.mean == pytest.approx(np.sqrt(ratio.median), rel=0.2)
