"""Tests for figures and the HTML report."""

import base64
from pathlib import Path

import numpy as np

from carbonstandards.config import AnalysisConfig
from carbonstandards.evaluation.plots import generate_forest_plot, generate_histogram
from carbonstandards.evaluation.report import generate_html_report
from carbonstandards.evaluation.tables import estimates_table, posterior_table
from carbonstandards.modeling import FitResult, ModelKind
from carbonstandards.pipeline import SkippedFit, prepare_data

PNG_MAGIC = b"\x89PNG"


def _is_png(b64: str) -> bool:
    return base64.b64decode(b64).startswith(PNG_MAGIC)


class TestPlots:
    """Tests for figure generators."""

    def test_histogram_without_fits(self) -> None:
        """Test that a histogram renders without posterior overlays."""
        rng = np.random.default_rng(1)
        samples = {"pre": rng.normal(10, 0.2, 20), "post": rng.normal(9.8, 0.3, 15)}
        assert _is_png(generate_histogram("ACET", samples, {}))

    def test_histogram_constant_values(self) -> None:
        """Test that a zero-spread sample still renders."""
        assert _is_png(generate_histogram("FLAT", {"pre": np.full(5, 3.0)}, {}))

    def test_forest_plot(self, fake_fits: list[FitResult]) -> None:
        """Test forest plots on linear and log axes."""
        posterior = posterior_table(fake_fits)
        mu = estimates_table(posterior, "t", "mu")
        ratio = estimates_table(posterior, "variance_ratio", "variance_ratio", ["variance_ratio"])

        assert _is_png(generate_forest_plot(mu, "mu", "Carbon (%)"))
        assert _is_png(
            generate_forest_plot(ratio, "ratio", "Variance ratio", reference=1.0, log_scale=True)
        )


class TestHtmlReport:
    """Tests for generate_html_report."""

    def test_report_contents(
        self,
        analysis_config: AnalysisConfig,
        fake_fits: list[FitResult],
        tmp_path: Path,
    ) -> None:
        """Test that the report holds every section."""
        result = prepare_data(analysis_config)
        result.fits = fake_fits
        result.posterior = posterior_table(fake_fits)

        path = generate_html_report(result, analysis_config, tmp_path / "report.html")

        assert path.exists()
        content = path.read_text(encoding="utf-8")
        assert content.startswith("<!DOCTYPE html>")
        assert "<title>Carbon Standards Report</title>" in content
        assert "Descriptive Statistics" in content
        assert "Pre vs Post Digestion" in content
        assert "Posterior Estimates" in content
        assert "Recovery rate (post mean / pre mean)" in content
        assert "Convergence warnings" in content
        assert "ACET (variance_ratio, both)" in content
        assert "Skipped Models" not in content
        # one histogram per standard plus three forest plots
        assert content.count("data:image/png;base64,") == len(result.order) + 3

    def test_report_without_fits(
        self, analysis_config: AnalysisConfig, tmp_path: Path
    ) -> None:
        """Test a descriptive-only report with a skipped model."""
        result = prepare_data(analysis_config)
        result.skipped.append(
            SkippedFit(
                kind=ModelKind.RECOVERY,
                standard="UREA",
                stage="both",
                reason="pre-digestion sample has zero spread",
            )
        )

        path = generate_html_report(result, analysis_config, tmp_path / "nested" / "report.html")

        content = path.read_text(encoding="utf-8")
        assert "No models were fitted." in content
        assert "Skipped Models" in content
        assert "zero spread" in content
        assert content.count("data:image/png;base64,") == len(result.order)

    def test_title_is_escaped(
        self, config_dict: dict, tmp_path: Path
    ) -> None:
        """Test that the configured title is HTML-escaped."""
        from carbonstandards.config import config_from_dict

        config_dict["title"] = "C <&> N"
        config = config_from_dict(config_dict)

        path = generate_html_report(prepare_data(config), config, tmp_path / "report.html")

        assert "C &lt;&amp;&gt; N" in path.read_text(encoding="utf-8")
