"""File loading utilities for the dashboard data sources."""

import json
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd
import polars as pl

from hospital_markets.config import Settings

logger = logging.getLogger(__name__)


class DatasetLoadError(ValueError):
    """A required dataset could not be read, parsed or validated."""


@dataclass
class RawSources:
    """Raw inputs as read from disk, before normalization.

    Attributes:
        counties: County metrics table (all columns as strings).
        hospitals: Hospital table (all columns as strings).
        procedures: Top procedure shares table (all columns as strings).
        geography: Parsed GeoJSON feature collection.
    """

    counties: pl.DataFrame
    hospitals: pl.DataFrame
    procedures: pl.DataFrame
    geography: dict[str, Any]


def load_csv_to_polars(
    file: BinaryIO | Path | str,
    encoding: str = "utf8-lossy",
) -> pl.DataFrame:
    """Load CSV file into Polars DataFrame.

    Every column is read as a string so identifier columns keep their
    leading zeros; numeric coercion happens during normalization.

    Args:
        file: File path, path string, or file-like object.
        encoding: Character encoding passed to Polars.

    Returns:
        Polars DataFrame with loaded data.

    Raises:
        DatasetLoadError: If the file cannot be parsed as CSV.
    """
    logger.info(f"Loading CSV file: {file}")

    try:
        if isinstance(file, str):
            file = Path(file)

        if not isinstance(file, Path):
            content = file.read()
            if isinstance(content, str):
                content = content.encode("utf-8")
            file = BytesIO(content)

        df = pl.read_csv(
            file,
            encoding=encoding,
            infer_schema_length=0,
            truncate_ragged_lines=True,
        )

        logger.info(f"Loaded {df.height} rows, {df.width} columns")
        return df

    except Exception as e:
        logger.error(f"Failed to load CSV file: {e}")
        raise DatasetLoadError(f"Cannot parse CSV file: {e}") from e


def load_excel_to_polars(
    file: BinaryIO | Path | str,
    sheet_name: str | int = 0,
) -> pl.DataFrame:
    """Load Excel file into Polars DataFrame.

    Uses pandas (openpyxl backend) for parsing with every column read as
    text, then converts to Polars.

    Args:
        file: File path, path string, or file-like object.
        sheet_name: Sheet name or index to load. Defaults to first sheet.

    Returns:
        Polars DataFrame with loaded data.

    Raises:
        DatasetLoadError: If the file cannot be parsed as Excel.
    """
    logger.info(f"Loading Excel file, sheet: {sheet_name}")

    try:
        if isinstance(file, str):
            file = Path(file)

        pdf = pd.read_excel(file, sheet_name=sheet_name, engine="openpyxl", dtype=str)
        df = pl.from_pandas(pdf)

        logger.info(f"Loaded {df.height} rows, {df.width} columns")
        return df

    except Exception as e:
        logger.error(f"Failed to load Excel file: {e}")
        raise DatasetLoadError(f"Cannot parse Excel file: {e}") from e


def load_geojson(file: Path | str) -> dict[str, Any]:
    """Load the county geography document.

    Args:
        file: Path to a GeoJSON feature collection.

    Returns:
        Parsed GeoJSON document.

    Raises:
        DatasetLoadError: If the file is missing or is not a feature collection.
    """
    path = Path(file)
    logger.info(f"Loading GeoJSON file: {path}")

    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load GeoJSON file: {e}")
        raise DatasetLoadError(f"Cannot parse GeoJSON file: {e}") from e

    if not isinstance(doc, dict) or not isinstance(doc.get("features"), list):
        raise DatasetLoadError(f"GeoJSON file has no feature list: {path}")

    logger.info(f"Loaded {len(doc['features'])} geo features")
    return doc


def detect_file_type(filename: str) -> str:
    """Detect file type from filename extension.

    Args:
        filename: Name of the file (with extension).

    Returns:
        File type string: "excel" or "csv".

    Raises:
        DatasetLoadError: If file type is not supported.
    """
    lower_name = filename.lower()

    if lower_name.endswith((".xlsx", ".xls")):
        return "excel"
    elif lower_name.endswith(".csv"):
        return "csv"
    else:
        raise DatasetLoadError(
            f"Unsupported file type: {filename}. Supported types: .xlsx, .xls, .csv"
        )


def load_table(file: Path | str) -> pl.DataFrame:
    """Auto-detect table type and load appropriately.

    Args:
        file: File path or path string.

    Returns:
        Polars DataFrame with all columns as strings.

    Raises:
        DatasetLoadError: If the file is missing, of unknown type or unreadable.
    """
    path = Path(file)
    file_type = detect_file_type(path.name)

    if not path.exists():
        raise DatasetLoadError(f"Data file not found: {path}")

    if file_type == "excel":
        return load_excel_to_polars(path)
    return load_csv_to_polars(path)


def load_sources(settings: Settings) -> RawSources:
    """Read all four dashboard inputs from the configured data directory.

    Args:
        settings: Application settings with data directory and file names.

    Returns:
        RawSources with the three tables and the geography document.

    Raises:
        DatasetLoadError: If any input cannot be loaded. No partial result
            is returned.
    """
    paths = settings.source_paths()
    logger.info(f"Loading dashboard sources from {settings.data_dir}")

    return RawSources(
        counties=load_table(paths["counties"]),
        hospitals=load_table(paths["hospitals"]),
        procedures=load_table(paths["procedures"]),
        geography=load_geojson(paths["geography"]),
    )
