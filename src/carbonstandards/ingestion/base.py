"""
File-backed loaders with schema validation at the boundary.

A loader names its source file; reading by suffix, column renaming and
validation against a pandera model are shared.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Generic, TypeVar

import pandas as pd
import pandera.pandas as pa

from carbonstandards.config.settings import AnalysisConfig
from carbonstandards.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T", bound=pa.DataFrameModel)

_READERS: dict[str, Callable[[Path], pd.DataFrame]] = {
    ".csv": pd.read_csv,
    ".parquet": pd.read_parquet,
    ".feather": pd.read_feather,
    ".pkl": pd.read_pickle,
    ".pickle": pd.read_pickle,
}

SUPPORTED_SUFFIXES = tuple(_READERS)


def read_table(path: Path, text_columns: Iterable[str] = ()) -> pd.DataFrame:
    """
    Read a serialized table, choosing the reader by suffix.

    CSV columns named in text_columns are read as strings, so labels such
    as "0042" keep their leading zeros. Typed formats keep their stored
    dtypes.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is unsupported or the file holds no table.
    """
    if not path.exists():
        msg = f"Measurement file not found: {path}"
        raise FileNotFoundError(msg)

    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        msg = (
            f"Unsupported file format '{path.suffix}' for {path}. "
            f"Expected one of: {', '.join(SUPPORTED_SUFFIXES)}"
        )
        raise ValueError(msg)

    if reader is pd.read_csv:
        header = pd.read_csv(path, nrows=0).columns
        dtype = {column: str for column in text_columns if column in header}
        df = pd.read_csv(path, dtype=dtype or None)
    else:
        df = reader(path)
    # pickles can hold anything
    if not isinstance(df, pd.DataFrame):
        msg = f"{path} does not contain a table (got {type(df).__name__})"
        raise ValueError(msg)
    return df


class DataLoader(ABC, Generic[T]):
    """Read one file, map its columns to canonical names and validate it."""

    # Canonical columns holding labels; never type-inferred from CSV
    text_columns: tuple[str, ...] = ()

    def __init__(self, config: AnalysisConfig, schema: type[T]) -> None:
        self.config = config
        self.schema = schema

    @property
    @abstractmethod
    def path(self) -> Path:
        """Resolved path of the source file."""

    def load(self, *, validate: bool = True) -> pd.DataFrame:
        """
        Read the source file.

        Args:
            validate: Validate against the schema (coercing dtypes).

        Returns:
            DataFrame with canonical column names.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file cannot be read as a table.
            pandera.errors.SchemaError: If validation fails.
        """
        df = self.rename_columns(read_table(self.path, self._raw_text_columns()))
        log.debug(
            "Read table",
            loader=type(self).__name__,
            path=str(self.path),
            rows=len(df),
            columns=list(df.columns),
        )
        if validate:
            df = self.schema.validate(df)
        return df

    def _raw_text_columns(self) -> list[str]:
        """Raw names of the text columns, before renaming."""
        raw = [
            name
            for name, canonical in self.config.data_paths.columns.items()
            if canonical in self.text_columns
        ]
        return [*raw, *self.text_columns]

    def rename_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the configured raw -> canonical column mapping."""
        mapping = {
            raw: canonical
            for raw, canonical in self.config.data_paths.columns.items()
            if raw in df.columns
        }
        if not mapping:
            return df
        log.debug("Renaming columns", mapping=mapping)
        return df.rename(columns=mapping)
