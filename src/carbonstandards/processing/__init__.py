"""
Cleaning, labelling and descriptive summaries of measurement tables.
"""

from carbonstandards.processing.cleaning import clean_measurements, shared_standards
from carbonstandards.processing.labels import (
    apply_order,
    normalize_label,
    normalize_labels,
    order_standards,
)
from carbonstandards.processing.summary import compare_stages, summarize_groups

__all__ = [
    "apply_order",
    "clean_measurements",
    "compare_stages",
    "normalize_label",
    "normalize_labels",
    "order_standards",
    "shared_standards",
    "summarize_groups",
]
