"""
Configuration management with typed Pydantic models.

Provides YAML loading with environment interpolation and base-file inheritance.
"""

from carbonstandards.config.loader import config_from_dict, load_config
from carbonstandards.config.settings import (
    AnalysisConfig,
    DataPathsConfig,
    FilterConfig,
    IntervalKind,
    OutputConfig,
    PriorConfig,
    SamplerConfig,
    StepMethod,
    SummaryConfig,
)

__all__ = [
    "AnalysisConfig",
    "DataPathsConfig",
    "FilterConfig",
    "IntervalKind",
    "OutputConfig",
    "PriorConfig",
    "SamplerConfig",
    "StepMethod",
    "SummaryConfig",
    "config_from_dict",
    "load_config",
]
