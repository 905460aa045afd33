"""Basic package tests to verify installation."""


def test_package_imports() -> None:
    """Verify the main package can be imported."""
    import carbonstandards

    assert carbonstandards.__version__


def test_config_module_imports() -> None:
    """Verify config module structure is correct."""
    from carbonstandards.config import (
        AnalysisConfig,
        DataPathsConfig,
        FilterConfig,
        PriorConfig,
        SamplerConfig,
        SummaryConfig,
        load_config,
    )

    assert AnalysisConfig is not None
    assert DataPathsConfig is not None
    assert FilterConfig is not None
    assert PriorConfig is not None
    assert SamplerConfig is not None
    assert SummaryConfig is not None
    assert load_config is not None


def test_modeling_module_imports() -> None:
    """Verify modeling module structure is correct."""
    from carbonstandards.modeling import (
        FitResult,
        InsufficientDataError,
        fit_recovery_rate,
        fit_t_distribution,
        fit_variance_ratio,
    )

    assert issubclass(InsufficientDataError, ValueError)
    assert FitResult is not None
    assert fit_t_distribution is not None
    assert fit_recovery_rate is not None
    assert fit_variance_ratio is not None
