"""Tests for logging helpers."""

import pandas as pd
import structlog
from structlog.testing import capture_logs

from carbonstandards.config import FilterConfig
from carbonstandards.processing import clean_measurements
from carbonstandards.utils.logging import _round_floats, log_context


def test_round_floats() -> None:
    """Test that floats are rounded and other values untouched."""
    event = _round_floats(
        None, "info", {"event": "Fitted", "estimate": 0.123456789, "n": 3, "ok": True}
    )
    assert event["estimate"] == 0.123457
    assert event["n"] == 3
    assert event["ok"] is True


def test_log_context_binds_and_clears() -> None:
    """Test that context is bound only inside the block."""
    with log_context(standard="ACET", stage="pre"):
        assert structlog.contextvars.get_contextvars() == {"standard": "ACET", "stage": "pre"}
    assert "standard" not in structlog.contextvars.get_contextvars()


def test_cleaning_warns_about_small_groups() -> None:
    """Test that dropping a small standard is logged as a warning."""
    df = pd.DataFrame(
        {
            "standard": ["ACET"] * 4 + ["RARE"],
            "percent_carbon": [71.0, 71.2, 70.9, 71.1, 5.0],
        }
    )

    with capture_logs() as logs:
        clean_measurements(df, FilterConfig())

    warnings = [e for e in logs if e["log_level"] == "warning"]
    assert len(warnings) == 1
    assert warnings[0]["standards"] == ["RARE"]
