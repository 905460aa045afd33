"""
Data ingestion layer for loading raw measurements with schema validation.

All raw data loading happens through this module to ensure
consistent validation at system boundaries.
"""

from carbonstandards.ingestion.base import SUPPORTED_SUFFIXES, DataLoader, read_table
from carbonstandards.ingestion.measurements import MeasurementLoader, load_measurements

__all__ = [
    "SUPPORTED_SUFFIXES",
    "DataLoader",
    "MeasurementLoader",
    "load_measurements",
    "read_table",
]
