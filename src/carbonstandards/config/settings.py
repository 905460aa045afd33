"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Processing code never hardcodes file names, filter bounds or sampler settings.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StepMethod(str, Enum):
    """MCMC step method handed to the sampler."""

    NUTS = "nuts"
    METROPOLIS = "metropolis"
    SLICE = "slice"


class IntervalKind(str, Enum):
    """How credible intervals are computed from posterior draws."""

    HDI = "hdi"  # highest density interval
    QUANTILE = "quantile"  # equal-tailed interval


class DataPathsConfig(BaseModel):
    """Input data paths.

    Paths are relative to data_root. Use resolve() to get full paths.
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Root directory for all data files"
    )
    pre_digestion: Path = Field(description="Pre-digestion measurements file")
    post_digestion: Path = Field(description="Post-digestion measurements file")
    columns: dict[str, str] = Field(
        default_factory=dict,
        description="Raw column name -> canonical name (standard, percent_carbon)",
    )

    def resolve(self, path_attr: str) -> Path:
        """Resolve a relative path against data_root."""
        rel_path = getattr(self, path_attr)
        if rel_path is None:
            msg = f"Path '{path_attr}' is not configured"
            raise ValueError(msg)
        return self.data_root / rel_path


class FilterConfig(BaseModel):
    """Record filtering applied before any summary or model fit."""

    model_config = ConfigDict(frozen=True)

    include_standards: list[str] | None = Field(
        default=None, description="Only keep these standards (None keeps all)"
    )
    exclude_standards: list[str] = Field(
        default_factory=list, description="Standards to drop"
    )
    min_percent_carbon: float = Field(default=0.0, ge=0.0, le=100.0)
    max_percent_carbon: float = Field(default=100.0, ge=0.0, le=100.0)
    min_samples_per_standard: int = Field(
        default=3, ge=2, description="Standards with fewer records are dropped"
    )
    standard_order: list[str] | None = Field(
        default=None, description="Explicit display order of standards"
    )

    @field_validator("max_percent_carbon")
    @classmethod
    def validate_carbon_range(cls, v: float, info: Any) -> float:
        """Ensure max_percent_carbon is above min_percent_carbon."""
        if "min_percent_carbon" in info.data and v <= info.data["min_percent_carbon"]:
            msg = "max_percent_carbon must be greater than min_percent_carbon"
            raise ValueError(msg)
        return v


class PriorConfig(BaseModel):
    """
    Prior hyperparameters.

    The single-sample priors are scaled by the sample's own mean and
    standard deviation so they are vague on every standard's scale
    (Kruschke, 2013).
    """

    model_config = ConfigDict(frozen=True)

    mu_sd_multiplier: float = Field(default=100.0, gt=0)
    sigma_low_divisor: float = Field(default=1000.0, gt=1)
    sigma_high_multiplier: float = Field(default=1000.0, gt=1)
    nu_mean: float = Field(
        default=29.0, gt=0, description="Mean of the exponential prior on nu - 1"
    )
    recovery_rate_upper: float = Field(
        default=2.0, gt=0, description="Upper bound of the uniform recovery rate prior"
    )
    log_sd_ratio_sd: float = Field(
        default=2.0, gt=0, description="Prior sd of the log scale ratio"
    )


class SamplerConfig(BaseModel):
    """MCMC sampler settings."""

    model_config = ConfigDict(frozen=True)

    draws: int = Field(default=2000, ge=10)
    tune: int = Field(default=1000, ge=0)
    chains: int = Field(default=4, ge=2, description="R-hat needs at least two chains")
    cores: int = Field(default=1, ge=1)
    random_seed: int | None = Field(default=1337)
    target_accept: float = Field(default=0.9, gt=0.0, lt=1.0)
    step: StepMethod = Field(default=StepMethod.NUTS)
    progressbar: bool = Field(default=False)
    rhat_threshold: float = Field(default=1.01, gt=1.0)
    min_ess: float = Field(default=400.0, ge=0)


class SummaryConfig(BaseModel):
    """Posterior summary settings."""

    model_config = ConfigDict(frozen=True)

    credible_mass: float = Field(default=0.95, gt=0.0, lt=1.0)
    interval: IntervalKind = Field(default=IntervalKind.HDI)
    mode_parameters: list[str] = Field(
        default_factory=lambda: ["nu", "variance_ratio"],
        description="Skewed parameters whose point estimate is the mode",
    )


class OutputConfig(BaseModel):
    """Output paths configuration.

    Structure: {output_root}/{project}/tables, {output_root}/{project}/report.html
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class AnalysisConfig(BaseModel):
    """Complete analysis configuration.

    The project name drives the output directory: ./output/{project}/
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'digestion-2024')")
    title: str = Field(default="Carbon Standards Report")

    data_paths: DataPathsConfig
    filters: FilterConfig = Field(default_factory=FilterConfig)
    priors: PriorConfig = Field(default_factory=PriorConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def project_dir(self) -> Path:
        """Path to the project's output directory."""
        return self.output.output_root / self.project

    @property
    def tables_dir(self) -> Path:
        """Path to CSV tables output directory."""
        return self.project_dir / "tables"

    @property
    def report_path(self) -> Path:
        """Path of the rendered HTML report."""
        return self.project_dir / "report.html"
