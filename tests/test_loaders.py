"""Tests for file loading utilities."""

import json
from io import BytesIO
from pathlib import Path

import pandas as pd
import polars as pl
import pytest

from hospital_markets.config import Settings
from hospital_markets.ingest.loaders import (
    DatasetLoadError,
    detect_file_type,
    load_csv_to_polars,
    load_excel_to_polars,
    load_geojson,
    load_sources,
    load_table,
)


class TestDetectFileType:
    """Tests for file type detection."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("counties.xlsx", "excel"),
            ("counties.XLS", "excel"),
            ("counties_2023.csv", "csv"),
            ("path/to/hospitals.CSV", "csv"),
        ],
    )
    def test_detects_supported_types(self, filename: str, expected: str) -> None:
        """Should correctly detect Excel and CSV file types."""
        assert detect_file_type(filename) == expected

    @pytest.mark.parametrize("filename", ["data.txt", "data.json", "noextension"])
    def test_raises_for_unsupported_types(self, filename: str) -> None:
        """Should raise DatasetLoadError for unsupported file types."""
        with pytest.raises(DatasetLoadError, match="Unsupported file type"):
            detect_file_type(filename)


class TestLoadCsvToPolars:
    """Tests for CSV file loading."""

    def test_preserves_leading_zeros(self, tmp_path: Path) -> None:
        """Identifier columns must be read as text."""
        csv_path = tmp_path / "counties.csv"
        csv_path.write_text("fips,state,spend\n06037,CA,13000\n26081,MI,\n")

        result = load_csv_to_polars(csv_path)

        assert result["fips"].to_list() == ["06037", "26081"]
        assert result["spend"].dtype == pl.String
        assert result["spend"].to_list() == ["13000", None]

    def test_loads_from_string_path(self, tmp_path: Path) -> None:
        """Should accept a path string."""
        csv_path = tmp_path / "h.csv"
        csv_path.write_text("provider_id\n050373\n")

        result = load_csv_to_polars(str(csv_path))

        assert result["provider_id"].to_list() == ["050373"]

    def test_loads_from_file_like(self) -> None:
        """Should accept a file-like object."""
        result = load_csv_to_polars(BytesIO(b"provider_id,rank\n000123,1\n"))

        assert result.height == 1
        assert result["provider_id"].to_list() == ["000123"]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing file should be a load failure."""
        with pytest.raises(DatasetLoadError, match="Cannot parse CSV"):
            load_csv_to_polars(tmp_path / "missing.csv")


class TestLoadExcelToPolars:
    """Tests for Excel file loading."""

    def test_loads_excel_as_text(self, tmp_path: Path) -> None:
        """Excel cells should come back as strings."""
        excel_path = tmp_path / "counties.xlsx"
        pd.DataFrame({"fips": ["06037"], "spend": ["13000"]}).to_excel(
            excel_path, index=False
        )

        result = load_excel_to_polars(excel_path)

        assert result["fips"].to_list() == ["06037"]
        assert result["spend"].to_list() == ["13000"]

    def test_invalid_excel_raises(self, tmp_path: Path) -> None:
        """A non-Excel file with an Excel name should be a load failure."""
        bad_path = tmp_path / "bad.xlsx"
        bad_path.write_text("not a workbook")

        with pytest.raises(DatasetLoadError, match="Cannot parse Excel"):
            load_excel_to_polars(bad_path)


class TestLoadGeojson:
    """Tests for geography loading."""

    def test_loads_feature_collection(self, tmp_path: Path) -> None:
        """A feature collection should load as a dict."""
        path = tmp_path / "geo.json"
        path.write_text(json.dumps({"type": "FeatureCollection", "features": []}))

        doc = load_geojson(path)

        assert doc["features"] == []

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        """Malformed JSON should be a load failure."""
        path = tmp_path / "geo.json"
        path.write_text("{not json")

        with pytest.raises(DatasetLoadError, match="Cannot parse GeoJSON"):
            load_geojson(path)

    def test_missing_features_raises(self, tmp_path: Path) -> None:
        """A JSON document without features should be a load failure."""
        path = tmp_path / "geo.json"
        path.write_text(json.dumps({"type": "Topology"}))

        with pytest.raises(DatasetLoadError, match="no feature list"):
            load_geojson(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing geography file should be a load failure."""
        with pytest.raises(DatasetLoadError):
            load_geojson(tmp_path / "absent.json")


class TestLoadSources:
    """Tests for loading the full set of inputs."""

    def _write_sources(self, data_dir: Path) -> None:
        (data_dir / "counties_2023.csv").write_text(
            "fips,state,county_name,spend\n26081,MI,Kent,10500\n"
        )
        (data_dir / "hospitals_2025.csv").write_text(
            "provider_id,name,state,fips\n230038,Butterworth,MI,26081\n"
        )
        (data_dir / "hospital_drg_top5.csv").write_text(
            "provider_id,rank,drg_code,drg_desc,share\n230038,1,871,Sepsis,0.18\n"
        )
        (data_dir / "counties_geo_region.json").write_text(
            json.dumps({"type": "FeatureCollection", "features": []})
        )

    def test_load_sources(self, tmp_path: Path) -> None:
        """All four inputs should be read from the data directory."""
        self._write_sources(tmp_path)
        settings = Settings(log_level="INFO", data_dir=tmp_path)

        sources = load_sources(settings)

        assert sources.counties.height == 1
        assert sources.hospitals["provider_id"].to_list() == ["230038"]
        assert sources.procedures.height == 1
        assert sources.geography["features"] == []

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        """One missing input should fail the whole load."""
        self._write_sources(tmp_path)
        (tmp_path / "hospitals_2025.csv").unlink()
        settings = Settings(log_level="INFO", data_dir=tmp_path)

        with pytest.raises(DatasetLoadError, match="not found"):
            load_sources(settings)

    def test_load_table_dispatches_on_extension(self, tmp_path: Path) -> None:
        """load_table should pick the CSV loader for .csv files."""
        path = tmp_path / "t.csv"
        path.write_text("a\n1\n")

        assert load_table(path)["a"].to_list() == ["1"]
