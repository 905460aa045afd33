"""Command-line interface for the carbon standards analysis."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from carbonstandards.config.settings import AnalysisConfig

app = typer.Typer(
    name="carbonstandards",
    help="Bayesian percent-carbon analysis of reference standards before and after digestion.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]

LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    ),
]


def _load(config: Path, log_level: str, json_logs: bool = False) -> "AnalysisConfig":
    from carbonstandards.config.loader import load_config
    from carbonstandards.utils.logging import configure_logging

    configure_logging(level=log_level, json_output=json_logs)

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def analyze(
    config: ConfigOption,
    no_report: Annotated[
        bool,
        typer.Option(
            "--no-report",
            help="Skip writing CSV tables and the HTML report.",
        ),
    ] = False,
    log_level: LogLevelOption = "WARNING",
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON lines."),
    ] = False,
) -> None:
    """Run the full analysis: summaries, MCMC fits, tables and report."""
    from pandera.errors import SchemaError, SchemaErrors

    from carbonstandards.pipeline import run_analysis

    analysis_config = _load(config, log_level, json_logs)
    sampler = analysis_config.sampler
    console.print(f"[blue]Running analysis for project {analysis_config.project}[/blue]")
    console.print(
        f"[dim]Sampler: {sampler.step.value}, {sampler.chains} chains x "
        f"{sampler.draws} draws ({sampler.tune} tuning)[/dim]"
    )

    try:
        result = run_analysis(
            analysis_config,
            fit_models=True,
            write_report=not no_report,
            console=console,
        )
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except (SchemaError, SchemaErrors) as e:
        console.print("[red]Input data failed schema validation:[/red]")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print()
    table = Table(title="Analysis Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Pre-digestion records", str(len(result.pre)))
    table.add_row("Post-digestion records", str(len(result.post)))
    table.add_row("Standards", str(len(result.order)))
    table.add_row("Shared standards", str(len(result.shared)))
    table.add_row("Models fitted", str(len(result.fits)))
    table.add_row("Models skipped", str(len(result.skipped)))
    table.add_row(
        "Converged",
        f"{sum(fit.converged for fit in result.fits)}/{len(result.fits)}",
    )
    console.print(table)

    for skipped in result.skipped:
        console.print(
            f"[yellow]⚠ Skipped {skipped.kind.value} model for {skipped.standard} "
            f"({skipped.stage}): {skipped.reason}[/yellow]"
        )

    if result.report_path is not None:
        console.print(f"\n[green]Report: {result.report_path}[/green]")
        for name, path in result.table_paths.items():
            console.print(f"[dim]  {name}: {path}[/dim]")


@app.command()
def summarize(
    config: ConfigOption,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print descriptive statistics only (no MCMC sampling)."""
    from carbonstandards.pipeline import run_analysis

    analysis_config = _load(config, log_level)

    try:
        run_analysis(
            analysis_config,
            fit_models=False,
            write_report=False,
            console=console,
        )
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(f"[red]Summary failed: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def validate(
    config: ConfigOption,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Validate both measurement files against the schema."""
    from carbonstandards.validation import ConsoleReporter, ValidationRunner

    analysis_config = _load(config, log_level)
    console.print("[blue]Running schema validation...[/blue]")

    results = ValidationRunner(analysis_config).run()
    ConsoleReporter(console).print_results(results)

    if any(r.schema_valid is not True for r in results):
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    from carbonstandards import __version__

    console.print(f"carbonstandards version {__version__}")


if __name__ == "__main__":
    app()
