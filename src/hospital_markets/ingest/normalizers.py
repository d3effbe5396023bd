"""Data normalization for the dashboard sources.

This module handles:
- County (5-digit) and provider (6-digit) key normalization
- Column mapping from source names to record field names
- Numeric coercion (blank or unparseable values become missing)
- Conversion of normalized frames into typed records
- Extraction of county features from the geography document
"""

import logging
import re
from collections.abc import Callable
from typing import Any

import polars as pl

from hospital_markets.ingest.loaders import DatasetLoadError
from hospital_markets.ingest.validators import (
    ValidationResult,
    validate_counties_schema,
    validate_geography,
    validate_hospitals_schema,
    validate_procedures_schema,
)
from hospital_markets.models import (
    CountyRecord,
    GeoFeature,
    HospitalRecord,
    ProcedureShareRecord,
)

logger = logging.getLogger(__name__)

COUNTY_KEY_WIDTH = 5
PROVIDER_KEY_WIDTH = 6

# Maps raw column names to record field names; unlisted columns keep their name
COUNTY_COLUMN_MAP = {
    "fips": "key",
    "state": "region_group",
    "county_name": "name",
    "quality_bedweighted": "quality",
}

HOSPITAL_COLUMN_MAP = {
    "provider_id": "provider_key",
    "fips": "county_key",
    "state": "region_group",
}

PROCEDURE_COLUMN_MAP = {
    "provider_id": "provider_key",
    "drg_code": "procedure_code",
    "drg_desc": "procedure_description",
    "avg_medicare_payment": "avg_payment",
}

COUNTY_TEXT_FIELDS = ["region_group", "name"]
COUNTY_NUMERIC_FIELDS = [
    "spend",
    "quality",
    "z_spend",
    "z_quality",
    "beds_sum",
    "discharges_sum",
]

HOSPITAL_TEXT_FIELDS = ["name", "region_group", "ownership"]
HOSPITAL_NUMERIC_FIELDS = [
    "stars",
    "beds",
    "hhi",
    "wavg_payment",
    "med_share",
    "surg_share",
]

PROCEDURE_TEXT_FIELDS = ["procedure_code", "procedure_description"]
PROCEDURE_NUMERIC_FIELDS = ["share", "avg_payment"]


def normalize_county_key(value: object) -> str:
    """Normalize a county FIPS code to 5 digits.

    Left-pads with zeros without stripping or truncating, so an already
    normalized code is returned unchanged:
    - 123 -> 00123
    - "26081" -> 26081

    Args:
        value: Raw FIPS value (string, number or None).

    Returns:
        Zero-padded county key ("00000" for missing input).
    """
    text = "" if value is None else str(value)
    return text.rjust(COUNTY_KEY_WIDTH, "0")


def normalize_provider_key(value: object) -> str:
    """Normalize a CMS provider number to 6 digits.

    Removes every non-digit character first, then left-pads:
    - "AB-4" -> 000004
    - "23-0046" -> 230046

    Args:
        value: Raw provider identifier.

    Returns:
        Zero-padded provider key ("000000" for missing input).
    """
    text = "" if value is None else str(value)
    cleaned = re.sub(r"\D", "", text)
    return cleaned.rjust(PROVIDER_KEY_WIDTH, "0")


def normalize_key_column(
    df: pl.DataFrame,
    column: str,
    normalizer: Callable[[object], str],
) -> pl.DataFrame:
    """Apply a key normalizer to a DataFrame column in place.

    Args:
        df: DataFrame with the key column.
        column: Name of the key column.
        normalizer: Scalar normalization function.

    Returns:
        DataFrame with the column replaced by normalized keys.
    """
    return df.with_columns(
        pl.col(column)
        .cast(pl.String)
        .fill_null("")
        .map_elements(normalizer, return_dtype=pl.String)
        .alias(column)
    )


def coerce_numeric_columns(df: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Parse columns as floats, turning blank or invalid values into nulls.

    Non-finite results (NaN, inf) are treated as missing as well.

    Args:
        df: DataFrame with the columns to coerce.
        columns: Column names to coerce.

    Returns:
        DataFrame with Float64 columns.
    """
    exprs = []
    for column in columns:
        value = (
            pl.col(column)
            .cast(pl.String)
            .str.strip_chars()
            .cast(pl.Float64, strict=False)
        )
        exprs.append(pl.when(value.is_finite()).then(value).otherwise(None).alias(column))
    return df.with_columns(exprs)


def clean_text_columns(df: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Strip text columns and turn empty strings into nulls."""
    exprs = []
    for column in columns:
        text = pl.col(column).cast(pl.String).str.strip_chars()
        exprs.append(pl.when(text == "").then(None).otherwise(text).alias(column))
    return df.with_columns(exprs)


def apply_column_mapping(
    df: pl.DataFrame,
    column_map: dict[str, str],
) -> pl.DataFrame:
    """Rename columns according to a mapping.

    Only renames columns that exist in the DataFrame.

    Args:
        df: DataFrame to rename columns in.
        column_map: Mapping of old names to new names.

    Returns:
        DataFrame with renamed columns.
    """
    renames = {}
    for old_name, new_name in column_map.items():
        if old_name in df.columns:
            renames[old_name] = new_name
            logger.debug(f"Mapping column: '{old_name}' -> '{new_name}'")

    if renames:
        df = df.rename(renames)

    return df


def ensure_columns(df: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Add absent columns as all-null strings so downstream selects succeed."""
    absent = [c for c in columns if c not in df.columns]
    if absent:
        logger.info(f"Adding empty columns: {absent}")
        df = df.with_columns([pl.lit(None, dtype=pl.String).alias(c) for c in absent])
    return df


def _require_valid(result: ValidationResult) -> None:
    if not result.is_valid:
        logger.error(result.message)
        raise DatasetLoadError(result.message)
    for warning in result.warnings:
        logger.warning(warning)


def normalize_counties(df: pl.DataFrame) -> pl.DataFrame:
    """Normalize the county metrics table to record field names and types.

    Args:
        df: Raw county DataFrame.

    Returns:
        DataFrame with one column per CountyRecord field.

    Raises:
        DatasetLoadError: If required columns are missing.
    """
    _require_valid(validate_counties_schema(df))
    logger.info(f"Normalizing counties with {df.height} rows")

    df = apply_column_mapping(df, COUNTY_COLUMN_MAP)
    df = ensure_columns(df, COUNTY_TEXT_FIELDS + COUNTY_NUMERIC_FIELDS)
    df = normalize_key_column(df, "key", normalize_county_key)
    df = clean_text_columns(df, COUNTY_TEXT_FIELDS)
    df = coerce_numeric_columns(df, COUNTY_NUMERIC_FIELDS)

    return df.select(["key", *COUNTY_TEXT_FIELDS, *COUNTY_NUMERIC_FIELDS])


def normalize_hospitals(df: pl.DataFrame) -> pl.DataFrame:
    """Normalize the hospital table to record field names and types.

    Args:
        df: Raw hospital DataFrame.

    Returns:
        DataFrame with one column per HospitalRecord field.

    Raises:
        DatasetLoadError: If required columns are missing.
    """
    _require_valid(validate_hospitals_schema(df))
    logger.info(f"Normalizing hospitals with {df.height} rows")

    df = apply_column_mapping(df, HOSPITAL_COLUMN_MAP)
    df = ensure_columns(df, HOSPITAL_TEXT_FIELDS + HOSPITAL_NUMERIC_FIELDS)
    df = normalize_key_column(df, "provider_key", normalize_provider_key)
    df = normalize_key_column(df, "county_key", normalize_county_key)
    df = clean_text_columns(df, HOSPITAL_TEXT_FIELDS)
    df = coerce_numeric_columns(df, HOSPITAL_NUMERIC_FIELDS)

    return df.select(
        ["provider_key", "county_key", *HOSPITAL_TEXT_FIELDS, *HOSPITAL_NUMERIC_FIELDS]
    )


def normalize_procedure_shares(df: pl.DataFrame) -> pl.DataFrame:
    """Normalize the top procedure share table to record field names and types.

    Args:
        df: Raw procedure share DataFrame.

    Returns:
        DataFrame with one column per ProcedureShareRecord field.

    Raises:
        DatasetLoadError: If required columns are missing.
    """
    _require_valid(validate_procedures_schema(df))
    logger.info(f"Normalizing procedure shares with {df.height} rows")

    df = apply_column_mapping(df, PROCEDURE_COLUMN_MAP)
    df = ensure_columns(df, PROCEDURE_TEXT_FIELDS + PROCEDURE_NUMERIC_FIELDS)
    df = normalize_key_column(df, "provider_key", normalize_provider_key)
    df = clean_text_columns(df, PROCEDURE_TEXT_FIELDS)
    df = coerce_numeric_columns(df, ["rank", *PROCEDURE_NUMERIC_FIELDS])
    df = df.with_columns(pl.col("rank").cast(pl.Int64, strict=False))

    return df.select(
        ["provider_key", "rank", *PROCEDURE_TEXT_FIELDS, *PROCEDURE_NUMERIC_FIELDS]
    )


def build_county_records(df: pl.DataFrame) -> list[CountyRecord]:
    """Normalize the raw county table and convert it to records."""
    normalized = normalize_counties(df)
    return [CountyRecord(**row) for row in normalized.iter_rows(named=True)]


def build_hospital_records(df: pl.DataFrame) -> list[HospitalRecord]:
    """Normalize the raw hospital table and convert it to records."""
    normalized = normalize_hospitals(df)
    return [HospitalRecord(**row) for row in normalized.iter_rows(named=True)]


def build_procedure_share_records(df: pl.DataFrame) -> list[ProcedureShareRecord]:
    """Normalize the raw procedure share table and convert it to records."""
    normalized = normalize_procedure_shares(df)
    return [ProcedureShareRecord(**row) for row in normalized.iter_rows(named=True)]


def extract_geo_features(doc: dict[str, Any]) -> list[GeoFeature]:
    """Extract county features from a GeoJSON feature collection.

    Feature keys are normalized like county keys so they join against
    CountyRecord.key.

    Args:
        doc: Parsed GeoJSON document.

    Returns:
        One GeoFeature per feature, in document order.

    Raises:
        DatasetLoadError: If the document is not a feature collection.
    """
    _require_valid(validate_geography(doc))

    features = []
    for feature in doc["features"]:
        props = feature.get("properties") or {}
        features.append(
            GeoFeature(
                key=normalize_county_key(props.get("fips")),
                county_name=props.get("county_name"),
                region_group=props.get("state"),
                geometry=feature.get("geometry"),
            )
        )

    logger.info(f"Extracted {len(features)} geo features")
    return features
