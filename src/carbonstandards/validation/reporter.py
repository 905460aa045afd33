"""Rich console output for validation results."""

from rich.console import Console
from rich.table import Table

from carbonstandards.validation.core import ValidationResult

_STATUS = {
    True: "[green]Pass[/green]",
    False: "[red]Fail[/red]",
    None: "[yellow]Missing[/yellow]",
}


class ConsoleReporter:
    """Print validation results as a table followed by details."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def print_results(self, results: list[ValidationResult]) -> None:
        """
        Print the status table, label coverage across files and any errors.

        Args:
            results: One result per measurement file.
        """
        table = Table(title="Schema Validation Results")
        table.add_column("Dataset", style="cyan", no_wrap=True)
        table.add_column("Schema", style="blue")
        table.add_column("Status", justify="center")
        table.add_column("Rows", justify="right")
        table.add_column("Standards", justify="right")
        table.add_column("File", style="dim")

        for result in results:
            table.add_row(
                result.dataset_name,
                result.schema_name,
                _STATUS[result.schema_valid],
                _count(result.row_count),
                _count(result.n_standards),
                str(result.file_path),
            )

        self.console.print(table)
        self._print_coverage(results)
        self._print_errors(results)

    def _print_coverage(self, results: list[ValidationResult]) -> None:
        valid = [r for r in results if r.schema_valid]
        if len(valid) < 2:
            return

        label_sets = {r.dataset_name: set(r.standards) for r in valid}
        shared = set.intersection(*label_sets.values())
        self.console.print(f"\nStandards in every file: [bold]{len(shared)}[/bold]")
        for name, labels in label_sets.items():
            only = sorted(labels - shared)
            if only:
                self.console.print(
                    f"[yellow]Only in {name}:[/yellow] {', '.join(only)}", highlight=False
                )

    def _print_errors(self, results: list[ValidationResult]) -> None:
        failed = [r for r in results if r.schema_valid is False]
        if not failed:
            return

        self.console.print("\n[bold red]Validation Errors:[/bold red]")
        for result in failed:
            self.console.print(f"\n[bold]{result.dataset_name}[/bold] ({result.file_path}):")
            for line in (result.error_message or "").splitlines():
                self.console.print(f"  {line}", markup=False)


def _count(value: int | None) -> str:
    return "-" if value is None else str(value)
