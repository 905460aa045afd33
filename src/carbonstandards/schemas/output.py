"""
Pandera schemas for tabulated analysis output.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series


class GroupSummarySchema(pa.DataFrameModel):
    """Descriptive statistics per (stage, standard)."""

    stage: Series[str] = pa.Field(isin=["pre", "post"])
    standard: Series[str]
    n: Series[int] = pa.Field(ge=1)
    mean: Series[float]
    sd: Series[float] = pa.Field(ge=0, nullable=True)
    median: Series[float]
    min: Series[float]
    max: Series[float]
    cv_percent: Series[float] = pa.Field(nullable=True)

    class Config:
        """Schema configuration."""

        name = "GroupSummarySchema"
        strict = False
        coerce = True


class PosteriorSummarySchema(pa.DataFrameModel):
    """
    Long-format posterior summary: one row per fitted parameter.

    Recovery and variance-ratio fits span both stages and use stage "both".
    """

    standard: Series[str]
    stage: Series[str] = pa.Field(isin=["pre", "post", "both"])
    model: Series[str] = pa.Field(isin=["t", "recovery", "variance_ratio"])
    parameter: Series[str]
    mean: Series[float]
    median: Series[float]
    mode: Series[float]
    lower: Series[float]
    upper: Series[float]
    credible_mass: Series[float] = pa.Field(gt=0, lt=1)
    r_hat: Series[float] = pa.Field(nullable=True)
    ess_bulk: Series[float] = pa.Field(nullable=True)

    @pa.dataframe_check
    def interval_ordered(cls, df: pd.DataFrame) -> pd.Series:
        """Lower bound never exceeds upper bound."""
        return df["lower"] <= df["upper"]

    class Config:
        """Schema configuration."""

        name = "PosteriorSummarySchema"
        strict = False
        coerce = True
