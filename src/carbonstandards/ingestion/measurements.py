"""
Loaders for the pre- and post-digestion measurement tables.

The tables may be serialized as CSV, Parquet, Feather or pandas pickle;
the reader is chosen by file suffix.
"""

from pathlib import Path

import pandas as pd

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.ingestion.base import DataLoader
from carbonstandards.schemas.measurement import CarbonMeasurementSchema, Stage
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)

_STAGE_PATHS = {
    Stage.PRE: "pre_digestion",
    Stage.POST: "post_digestion",
}


class MeasurementLoader(DataLoader[CarbonMeasurementSchema]):
    """Load one stage's measurement table and tag it with the stage."""

    text_columns = ("standard",)

    def __init__(self, config: AnalysisConfig, stage: Stage) -> None:
        super().__init__(config, CarbonMeasurementSchema)
        self.stage = stage

    @property
    def path(self) -> Path:
        """Resolved path of this stage's data file."""
        return self.config.data_paths.resolve(_STAGE_PATHS[self.stage])

    def load(self, *, validate: bool = True) -> pd.DataFrame:
        """Read the table and add a stage column."""
        df = super().load(validate=validate)
        df = df.assign(stage=self.stage.value)
        log.info("Loaded measurements", stage=self.stage.value, path=str(self.path))
        return df


def load_measurements(config: AnalysisConfig) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load and validate both measurement tables.

    Returns:
        Tuple of (pre_digestion, post_digestion) DataFrames.
    """
    pre = MeasurementLoader(config, Stage.PRE).load()
    post = MeasurementLoader(config, Stage.POST).load()
    return pre, post
