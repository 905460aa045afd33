"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, data.pre_digestion, data.post_digestion
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from carbonstandards.config.settings import (
    AnalysisConfig,
    DataPathsConfig,
    FilterConfig,
    OutputConfig,
    PriorConfig,
    SamplerConfig,
    SummaryConfig,
)

# ${VAR} or ${VAR:default}
_ENV_PATTERN = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def _expand_env(value: str) -> str:
    """
    Substitute environment variables in a string.

    Raises:
        ValueError: If a variable without default is not set.
    """

    def substitute(match: re.Match[str]) -> str:
        name, default = match.group("name"), match.group("default")
        if name in os.environ:
            return os.environ[name]
        if default is None:
            msg = f"Environment variable '{name}' is not set and has no default"
            raise ValueError(msg)
        return default

    return _ENV_PATTERN.sub(substitute, value)


def _expand_tree(node: Any) -> Any:
    if isinstance(node, str):
        return _expand_env(node)
    if isinstance(node, dict):
        return {key: _expand_tree(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_expand_tree(item) for item in node]
    return node


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base; nested sections merge, everything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def load_yaml(path: Path) -> dict[str, Any]:
    """
    Read a YAML mapping and expand environment variables.

    An empty file yields an empty mapping.
    """
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping at the top level, got {type(data).__name__}"
        raise ValueError(msg)
    return _expand_tree(data)


def config_from_dict(merged: dict[str, Any]) -> AnalysisConfig:
    """
    Build a validated AnalysisConfig from a plain mapping.

    Args:
        merged: Configuration mapping (already merged and interpolated).

    Returns:
        Fully validated AnalysisConfig instance.
    """
    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    data_data = merged.get("data", {})
    for key in ("pre_digestion", "post_digestion"):
        if not data_data.get(key):
            msg = f"Config must specify 'data.{key}'"
            raise ValueError(msg)

    data_paths = DataPathsConfig(
        data_root=Path(data_data.get("root", "./data")),
        pre_digestion=Path(data_data["pre_digestion"]),
        post_digestion=Path(data_data["post_digestion"]),
        columns=data_data.get("columns", {}),
    )

    output_data = merged.get("output", {})
    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
    )

    config_kwargs: dict[str, Any] = {
        "project": project,
        "data_paths": data_paths,
        "filters": FilterConfig(**merged.get("filters", {})),
        "priors": PriorConfig(**merged.get("priors", {})),
        "sampler": SamplerConfig(**merged.get("sampler", {})),
        "summary": SummaryConfig(**merged.get("summary", {})),
        "output": output,
    }
    if merged.get("title"):
        config_kwargs["title"] = merged["title"]

    return AnalysisConfig(**config_kwargs)


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file(s).

    Minimal config requires only:
        - project: str
        - data.pre_digestion: path
        - data.post_digestion: path

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated AnalysisConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base.resolve() != config_path.resolve():
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)

    return config_from_dict(_deep_merge(base_data, main_data))
