"""
Pre-flight checks of the measurement files.

Each configured input is read and validated against
CarbonMeasurementSchema without cleaning or fitting anything, so bad
files are caught before a long sampling run.
"""

from dataclasses import dataclass, field
from pathlib import Path

import pandera.pandas as pa

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.ingestion.measurements import MeasurementLoader
from carbonstandards.processing.labels import normalize_label
from carbonstandards.schemas.measurement import CarbonMeasurementSchema, Stage
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)

# Maximum number of error lines kept per dataset
MAX_ERROR_LINES = 12


@dataclass
class ValidationResult:
    """
    Outcome of checking one measurement file.

    schema_valid is None when the file is missing and validation never ran.
    """

    dataset_name: str
    file_path: Path
    exists: bool
    schema_valid: bool | None
    schema_name: str = CarbonMeasurementSchema.__name__
    row_count: int | None = None
    standards: tuple[str, ...] = field(default_factory=tuple)
    error_message: str | None = None

    @property
    def n_standards(self) -> int | None:
        """Distinct standard labels, or None if the file did not validate."""
        return len(self.standards) if self.schema_valid else None


def _truncate(message: str) -> str:
    lines = message.strip().splitlines()
    if len(lines) > MAX_ERROR_LINES:
        hidden = len(lines) - MAX_ERROR_LINES
        lines = [*lines[:MAX_ERROR_LINES], f"... ({hidden} more lines)"]
    return "\n".join(lines)


class ValidationRunner:
    """Validate both measurement files against the measurement schema."""

    def __init__(self, config: AnalysisConfig) -> None:
        self.config = config

    def run(self) -> list[ValidationResult]:
        """Check the pre- and post-digestion files, in that order."""
        return [self.check(stage) for stage in (Stage.PRE, Stage.POST)]

    def check(self, stage: Stage) -> ValidationResult:
        """
        Check one stage's file.

        Read errors and schema failures are reported in the result, not
        raised.
        """
        loader = MeasurementLoader(self.config, stage)
        name = f"{stage.value}_digestion"
        path = loader.path

        if not path.exists():
            log.warning("Data file not found", dataset=name, path=str(path))
            return ValidationResult(
                dataset_name=name,
                file_path=path,
                exists=False,
                schema_valid=None,
                error_message="File not found",
            )

        try:
            raw = loader.load(validate=False)
        except (OSError, ValueError) as e:
            error = f"{type(e).__name__}: {e!s}"
            log.error("Could not read data file", dataset=name, error=error)
            return ValidationResult(
                dataset_name=name,
                file_path=path,
                exists=True,
                schema_valid=False,
                error_message=error,
            )

        try:
            df = CarbonMeasurementSchema.validate(raw, lazy=True)
        except (pa.errors.SchemaError, pa.errors.SchemaErrors) as e:
            error = _truncate(str(e))
            log.error("Schema validation failed", dataset=name, rows=len(raw))
            return ValidationResult(
                dataset_name=name,
                file_path=path,
                exists=True,
                schema_valid=False,
                row_count=len(raw),
                error_message=error,
            )

        standards = tuple(sorted({normalize_label(s) for s in df["standard"]} - {""}))
        log.info("Validation passed", dataset=name, rows=len(df), standards=len(standards))
        return ValidationResult(
            dataset_name=name,
            file_path=path,
            exists=True,
            schema_valid=True,
            row_count=len(df),
            standards=standards,
        )
