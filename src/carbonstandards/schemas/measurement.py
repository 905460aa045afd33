"""
Pandera schemas for percent-carbon measurement data.

Both the pre-digestion and post-digestion tables share one contract:
a standard label and a percent-carbon measurement per record.
"""

from enum import Enum

import pandera.pandas as pa
from pandera.typing import Series


class Stage(str, Enum):
    """Digestion stage a measurement was taken at."""

    PRE = "pre"
    POST = "post"


class CarbonMeasurementSchema(pa.DataFrameModel):
    """
    Schema for a measurement table.

    Null carbon values are allowed at load time and removed during cleaning.
    """

    standard: Series[str] = pa.Field(
        description="Reference standard label",
        str_length={"min_value": 1},
    )
    percent_carbon: Series[float] = pa.Field(
        ge=0.0,
        le=100.0,
        nullable=True,
        description="Measured carbon content in percent by mass",
    )

    class Config:
        """Schema configuration."""

        name = "CarbonMeasurementSchema"
        strict = False  # Allow extra columns (run ids, dates, analyst, ...)
        coerce = True
