"""Tests for measurement loading."""

from pathlib import Path
from typing import Any

import pandas as pd
import pandera.pandas as pa
import pytest

from carbonstandards.config import AnalysisConfig, config_from_dict
from carbonstandards.ingestion import (
    SUPPORTED_SUFFIXES,
    MeasurementLoader,
    load_measurements,
    read_table,
)
from carbonstandards.schemas import Stage


class TestReadTable:
    """Tests for format dispatch by suffix."""

    @pytest.fixture
    def frame(self) -> pd.DataFrame:
        return pd.DataFrame({"standard": ["ACET", "UREA"], "percent_carbon": [71.0, 20.0]})

    @pytest.mark.parametrize("suffix", SUPPORTED_SUFFIXES)
    def test_every_supported_format(
        self, tmp_path: Path, frame: pd.DataFrame, suffix: str
    ) -> None:
        """Test that each supported suffix round-trips the table."""
        path = tmp_path / f"data{suffix}"
        if suffix == ".csv":
            frame.to_csv(path, index=False)
        elif suffix == ".parquet":
            frame.to_parquet(path)
        elif suffix == ".feather":
            frame.to_feather(path)
        else:
            frame.to_pickle(path)

        pd.testing.assert_frame_equal(read_table(path), frame)

    def test_csv_text_columns_keep_leading_zeros(self, tmp_path: Path) -> None:
        """Test that label columns are read as strings, not numbers."""
        path = tmp_path / "data.csv"
        path.write_text("standard,percent_carbon\n0042,1.1\n42,50.1\n", encoding="utf-8")

        df = read_table(path, text_columns=["standard", "not_present"])

        assert df["standard"].tolist() == ["0042", "42"]
        assert df["percent_carbon"].tolist() == [1.1, 50.1]

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        """Test that unknown formats raise ValueError."""
        path = tmp_path / "data.xlsx"
        path.write_bytes(b"")
        with pytest.raises(ValueError, match="Unsupported file format"):
            read_table(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "absent.csv")

    def test_pickle_without_table(self, tmp_path: Path) -> None:
        """Test that a pickle holding a non-DataFrame is rejected."""
        path = tmp_path / "data.pkl"
        pd.Series([1.0, 2.0]).to_pickle(path)
        with pytest.raises(ValueError, match="does not contain a table"):
            read_table(path)


class TestMeasurementLoader:
    """Tests for stage loaders."""

    def test_load_tags_stage(self, analysis_config: AnalysisConfig) -> None:
        """Test that loaded rows carry their stage."""
        df = MeasurementLoader(analysis_config, Stage.POST).load()
        assert set(df["stage"]) == {"post"}
        assert set(df["standard"]) == {"ACET", "UREA"}

    def test_load_measurements(self, analysis_config: AnalysisConfig) -> None:
        """Test loading both tables."""
        pre, post = load_measurements(analysis_config)
        assert len(pre) == 30
        assert len(post) == 19
        assert set(pre["stage"]) == {"pre"}

    def test_column_renames(self, tmp_path: Path) -> None:
        """Test mapping of raw column names to canonical names."""
        raw = pd.DataFrame({"Std": ["ACET", "ACET"], "PctC": [71.0, 71.3]})
        raw.to_csv(tmp_path / "pre.csv", index=False)
        raw.to_csv(tmp_path / "post.csv", index=False)
        config = config_from_dict(
            {
                "project": "rename",
                "data": {
                    "root": str(tmp_path),
                    "pre_digestion": "pre.csv",
                    "post_digestion": "post.csv",
                    "columns": {"Std": "standard", "PctC": "percent_carbon"},
                },
            }
        )

        df = MeasurementLoader(config, Stage.PRE).load()

        assert {"standard", "percent_carbon", "stage"} <= set(df.columns)
        assert df["percent_carbon"].tolist() == [71.0, 71.3]

    def test_invalid_data_raises(self, config_dict: dict[str, Any]) -> None:
        """Test that malformed input aborts loading."""
        data_root = Path(config_dict["data"]["root"])
        pd.DataFrame({"standard": ["ACET"], "percent_carbon": [250.0]}).to_csv(
            data_root / "pre.csv", index=False
        )
        config = config_from_dict(config_dict)

        with pytest.raises(pa.errors.SchemaError):
            MeasurementLoader(config, Stage.PRE).load()

    def test_skip_validation(self, config_dict: dict[str, Any]) -> None:
        """Test that validate=False returns raw rows untouched."""
        data_root = Path(config_dict["data"]["root"])
        pd.DataFrame({"standard": ["ACET"], "percent_carbon": [250.0]}).to_csv(
            data_root / "pre.csv", index=False
        )
        config = config_from_dict(config_dict)

        df = MeasurementLoader(config, Stage.PRE).load(validate=False)
        assert df["percent_carbon"].iloc[0] == 250.0

    def test_numeric_looking_labels_stay_distinct(self, tmp_path: Path) -> None:
        """Test that "0042" and "42" load as two standards, also under a renamed column."""
        raw = "Std,PctC\n0042,1.1\n0042,1.2\n42,50.1\n42,50.0\n"
        (tmp_path / "pre.csv").write_text(raw, encoding="utf-8")
        (tmp_path / "post.csv").write_text(raw, encoding="utf-8")
        config = config_from_dict(
            {
                "project": "labels",
                "data": {
                    "root": str(tmp_path),
                    "pre_digestion": "pre.csv",
                    "post_digestion": "post.csv",
                    "columns": {"Std": "standard", "PctC": "percent_carbon"},
                },
            }
        )

        df = MeasurementLoader(config, Stage.PRE).load()

        assert df["standard"].tolist() == ["0042", "0042", "42", "42"]
