"""
Record filtering applied before summaries and model fits.
"""

import pandas as pd

from carbonstandards.config.settings import FilterConfig
from carbonstandards.processing.labels import normalize_label, normalize_labels
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)


def clean_measurements(df: pd.DataFrame, filters: FilterConfig) -> pd.DataFrame:
    """
    Filter a measurement table.

    Steps, in order:
        1. Normalize labels and drop records whose label is empty.
        2. Drop records without a carbon value.
        3. Drop values outside [min_percent_carbon, max_percent_carbon].
        4. Apply the include and exclude lists (normalized the same way).
        5. Drop standards with fewer than min_samples_per_standard records.

    Args:
        df: Validated measurement table.
        filters: Filter configuration.

    Returns:
        Filtered copy with a fresh index.
    """
    n_start = len(df)
    out = normalize_labels(df)
    out = out[out["standard"] != ""]
    n_unlabelled = n_start - len(out)

    before = len(out)
    out = out[out["percent_carbon"].notna()]
    n_missing = before - len(out)

    before = len(out)
    in_range = out["percent_carbon"].between(
        filters.min_percent_carbon, filters.max_percent_carbon
    )
    out = out[in_range]
    n_out_of_range = before - len(out)

    before = len(out)
    if filters.include_standards is not None:
        include = {normalize_label(label) for label in filters.include_standards}
        out = out[out["standard"].isin(include)]
    if filters.exclude_standards:
        exclude = {normalize_label(label) for label in filters.exclude_standards}
        out = out[~out["standard"].isin(exclude)]
    n_label_filtered = before - len(out)

    before = len(out)
    counts = out.groupby("standard")["percent_carbon"].transform("size")
    small = sorted(out.loc[counts < filters.min_samples_per_standard, "standard"].unique())
    out = out[counts >= filters.min_samples_per_standard]
    n_too_few = before - len(out)

    if small:
        log.warning(
            "Dropped standards with too few samples",
            standards=small,
            min_samples=filters.min_samples_per_standard,
        )

    log.info(
        "Cleaned measurements",
        rows_in=n_start,
        rows_out=len(out),
        unlabelled=n_unlabelled,
        missing=n_missing,
        out_of_range=n_out_of_range,
        label_filtered=n_label_filtered,
        too_few=n_too_few,
    )

    return out.reset_index(drop=True)


def shared_standards(pre: pd.DataFrame, post: pd.DataFrame) -> list[str]:
    """Labels present in both tables, sorted alphabetically."""
    shared = set(pre["standard"]).intersection(post["standard"])
    return sorted(str(label) for label in shared)
