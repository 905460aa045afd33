"""
HTML report generation.

Renders descriptive tables, posterior estimates and figures into one
self-contained HTML document for review by laboratory staff.
"""

import html
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.evaluation.plots import generate_forest_plot, generate_histogram
from carbonstandards.evaluation.tables import estimates_table
from carbonstandards.modeling.models import ModelKind
from carbonstandards.utils.logging import get_logger

if TYPE_CHECKING:
    from carbonstandards.pipeline import AnalysisResult

log = get_logger(__name__)

_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, sans-serif;
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f5f5f5;
        }
        h1 {
            color: #333;
            border-bottom: 2px solid #4a90a4;
            padding-bottom: 10px;
        }
        h2 {
            color: #4a90a4;
            margin-top: 30px;
        }
        .section {
            background: white;
            border-radius: 8px;
            padding: 20px;
            margin-bottom: 20px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        .metadata {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
            gap: 15px;
        }
        .metadata-item {
            background: #f8f9fa;
            padding: 10px 15px;
            border-radius: 4px;
        }
        .metadata-item strong {
            display: block;
            color: #666;
            font-size: 0.85em;
            margin-bottom: 5px;
        }
        table {
            width: 100%;
            border-collapse: collapse;
            margin: 15px 0;
        }
        th, td {
            padding: 8px 10px;
            text-align: left;
            border-bottom: 1px solid #ddd;
        }
        th {
            background-color: #4a90a4;
            color: white;
            font-weight: 600;
        }
        tr:hover {
            background-color: #f5f5f5;
        }
        .plot-container {
            text-align: center;
            margin: 20px 0;
        }
        .plot-container img, .standard-plot img {
            max-width: 100%;
            height: auto;
        }
        .standard-plots {
            display: flex;
            flex-direction: column;
            gap: 20px;
        }
        .standard-plot {
            background: #f8f9fa;
            padding: 15px;
            border-radius: 8px;
            text-align: center;
        }
        .warning {
            color: #a94442;
        }
        .timestamp {
            color: #999;
            font-size: 0.9em;
            text-align: right;
        }
"""


def _table_html(df: pd.DataFrame, css_class: str, digits: int = 4) -> str:
    if df.empty:
        return "<p><em>No rows.</em></p>"
    return df.to_html(
        index=False,
        float_format=lambda x: f"{x:.{digits}f}",
        classes=css_class,
        na_rep="-",
    )


def _metadata_html(items: dict[str, object]) -> str:
    cells = "".join(
        f"""
            <div class="metadata-item">
                <strong>{html.escape(label)}</strong>
                {html.escape(str(value))}
            </div>"""
        for label, value in items.items()
    )
    return f'<div class="metadata">{cells}\n        </div>'


def _plot_html(b64: str, alt: str) -> str:
    return (
        '<div class="plot-container">'
        f'<img src="data:image/png;base64,{b64}" alt="{html.escape(alt)}">'
        "</div>"
    )


def _posterior_section(
    result: "AnalysisResult", config: AnalysisConfig
) -> str:
    posterior = result.posterior
    if posterior.empty:
        return """
    <div class="section">
        <h2>Posterior Estimates</h2>
        <p><em>No models were fitted.</em></p>
    </div>
"""

    mode_params = config.summary.mode_parameters
    mass = config.summary.credible_mass
    interval = config.summary.interval.value.upper()
    parts = [
        f"""
    <div class="section">
        <h2>Posterior Estimates</h2>
        <p>Point estimates are posterior means, except for {html.escape(", ".join(mode_params))}
        which are reported by their posterior mode. Intervals are {mass:.0%} {interval} credible intervals.</p>
"""
    ]

    headings = {
        ModelKind.T.value: "Student-t fit per stage",
        ModelKind.RECOVERY.value: "Recovery rate (post mean / pre mean)",
        ModelKind.VARIANCE_RATIO.value: "Variance ratio (post variance / pre variance)",
    }
    for model, group in posterior.groupby("model", sort=False):
        parts.append(f"<h3>{html.escape(headings.get(str(model), str(model)))}</h3>")
        parts.append(_table_html(group.drop(columns=["model", "credible_mass"]), "posterior-table"))

    mu = estimates_table(posterior, ModelKind.T.value, "mu", mode_params)
    if not mu.empty:
        parts.append(
            _plot_html(
                generate_forest_plot(mu, "Location (mu) by Standard", "Carbon (%)"),
                "Location forest plot",
            )
        )

    recovery = estimates_table(posterior, ModelKind.RECOVERY.value, "recovery_rate", mode_params)
    if not recovery.empty:
        parts.append(
            _plot_html(
                generate_forest_plot(
                    recovery, "Recovery Rate by Standard", "Recovery rate", reference=1.0
                ),
                "Recovery rate forest plot",
            )
        )

    ratio = estimates_table(posterior, ModelKind.VARIANCE_RATIO.value, "variance_ratio", mode_params)
    if not ratio.empty:
        parts.append(
            _plot_html(
                generate_forest_plot(
                    ratio,
                    "Variance Ratio by Standard",
                    "Variance ratio (log scale)",
                    reference=1.0,
                    log_scale=True,
                ),
                "Variance ratio forest plot",
            )
        )

    unconverged = sorted(
        {f"{fit.standard} ({fit.kind.value}, {fit.stage})" for fit in result.fits if not fit.converged}
    )
    if unconverged:
        parts.append(
            '<p class="warning"><strong>Convergence warnings:</strong> '
            + html.escape("; ".join(unconverged))
            + "</p>"
        )

    parts.append("    </div>\n")
    return "".join(parts)


def _histogram_section(result: "AnalysisResult") -> str:
    parts = [
        """
    <div class="section">
        <h2>Distributions by Standard</h2>
        <p>Histograms of measured carbon with the posterior predictive Student-t density of each stage.</p>
        <div class="standard-plots">
"""
    ]
    for standard in result.order:
        samples = {stage: values.to_numpy() for stage, values in result.samples(standard).items()}
        if not samples:
            continue
        b64 = generate_histogram(standard, samples, result.t_fits(standard))
        parts.append(
            f"""
            <div class="standard-plot">
                <h3>{html.escape(standard)}</h3>
                <img src="data:image/png;base64,{b64}" alt="{html.escape(standard)} histogram">
            </div>
"""
        )
    parts.append("        </div>\n    </div>\n")
    return "".join(parts)


def generate_html_report(
    result: "AnalysisResult",
    config: AnalysisConfig,
    output_path: Path,
) -> Path:
    """
    Generate the complete HTML analysis report.

    Args:
        result: Analysis result with tables and fits.
        config: Analysis configuration (title, summary settings).
        output_path: Path to save the HTML report.

    Returns:
        Path to the generated report.
    """
    log.info("Generating report", output=str(output_path))

    sampler = config.sampler
    overview = _metadata_html(
        {
            "Project": config.project,
            "Pre-digestion records": len(result.pre),
            "Post-digestion records": len(result.post),
            "Standards": len(result.order),
            "Shared standards": len(result.shared),
            "Models fitted": len(result.fits),
            "Models skipped": len(result.skipped),
            "Sampler": f"{sampler.step.value}, {sampler.chains} x {sampler.draws} draws",
        }
    )

    skipped = result.skipped_table()
    skipped_html = ""
    if not skipped.empty:
        skipped_html = f"""
    <div class="section">
        <h2>Skipped Models</h2>
        {_table_html(skipped, "skipped-table")}
    </div>
"""

    title = html.escape(config.title)
    html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>{_STYLE}    </style>
</head>
<body>
    <h1>{title}</h1>
    <p class="timestamp">Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}</p>

    <div class="section">
        <h2>Dataset Overview</h2>
        {overview}
    </div>

    <div class="section">
        <h2>Descriptive Statistics</h2>
        <p>Percent carbon per standard before and after digestion, after filtering.</p>
        {_table_html(result.summary, "summary-table", digits=3)}
    </div>

    <div class="section">
        <h2>Pre vs Post Digestion</h2>
        <p>Sample-moment recovery (post mean / pre mean) and variance ratio for standards measured at both stages.</p>
        {_table_html(result.comparison, "comparison-table")}
    </div>
{_posterior_section(result, config)}{skipped_html}{_histogram_section(result)}
    <div class="section">
        <h2>Notes</h2>
        <ul>
            <li><strong>mu, sigma, nu</strong>: location, scale and degrees of freedom of the Student-t fit</li>
            <li><strong>recovery_rate</strong>: post-digestion location divided by pre-digestion location (1 = full recovery)</li>
            <li><strong>variance_ratio</strong>: post-digestion variance divided by pre-digestion variance (1 = unchanged precision)</li>
            <li><strong>R-hat</strong>: Gelman-Rubin statistic; values above {sampler.rhat_threshold} indicate non-convergence</li>
            <li><strong>ESS</strong>: bulk effective sample size; values below {sampler.min_ess:.0f} are flagged</li>
        </ul>
    </div>
</body>
</html>
"""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html_content, encoding="utf-8")

    log.info("Report generated", path=str(output_path))
    return output_path
