"""
Standard label normalization and factor ordering.

Labels are the only join key between the pre- and post-digestion tables,
so both tables must spell every standard identically.
"""

import re
from collections.abc import Iterable

import pandas as pd

_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: object) -> str:
    """Strip a label and collapse internal runs of whitespace to one space."""
    return _WHITESPACE.sub(" ", str(label)).strip()


def normalize_labels(df: pd.DataFrame, column: str = "standard") -> pd.DataFrame:
    """Return a copy of df with every label in column normalized."""
    out = df.copy()
    out[column] = out[column].map(normalize_label)
    return out


def order_standards(
    labels: Iterable[str],
    summary: pd.DataFrame | None = None,
    explicit: list[str] | None = None,
) -> list[str]:
    """
    Decide the display order of standards.

    Explicitly ordered labels come first, in the given order. The rest are
    sorted by median carbon (pre-digestion medians when available), with
    ties and labels lacking a median broken alphabetically.

    Args:
        labels: Labels to order. Duplicates are ignored.
        summary: Optional output of summarize_groups().
        explicit: Optional preferred order, normalized like the data labels.
            Unknown labels are skipped.

    Returns:
        Ordered list of unique labels.
    """
    unique = set(labels)
    preferred = dict.fromkeys(normalize_label(label) for label in explicit or [])
    ordered = [label for label in preferred if label in unique]
    remaining = unique.difference(ordered)

    medians: dict[str, float] = {}
    if summary is not None and not summary.empty:
        pre = summary[summary["stage"] == "pre"]
        source = pre if not pre.empty else summary
        medians = source.groupby("standard")["median"].first().to_dict()

    def sort_key(label: str) -> tuple[int, float, str]:
        if label in medians:
            return (0, float(medians[label]), label)
        return (1, 0.0, label)

    return ordered + sorted(remaining, key=sort_key)


def apply_order(
    df: pd.DataFrame, order: list[str], column: str = "standard"
) -> pd.DataFrame:
    """Convert column into an ordered categorical following order."""
    out = df.copy()
    out[column] = pd.Categorical(out[column], categories=order, ordered=True)
    return out
