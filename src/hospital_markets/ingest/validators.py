"""Schema and referential integrity checks for the dashboard sources."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import polars as pl

from hospital_markets.models import HospitalRecord, ProcedureShareRecord

logger = logging.getLogger(__name__)


# Required columns for each data source (raw column names)
COUNTIES_REQUIRED_COLUMNS = {"fips", "state"}
COUNTIES_OPTIONAL_COLUMNS = {
    "county_name",
    "spend",
    "quality_bedweighted",
    "beds_sum",
    "discharges_sum",
}

HOSPITALS_REQUIRED_COLUMNS = {"provider_id", "fips"}
HOSPITALS_OPTIONAL_COLUMNS = {"name", "state", "stars", "beds", "ownership"}

PROCEDURES_REQUIRED_COLUMNS = {"provider_id", "rank"}
PROCEDURES_OPTIONAL_COLUMNS = {"drg_code", "drg_desc", "share"}


@dataclass
class ValidationResult:
    """Result of a schema validation check.

    Attributes:
        is_valid: Whether the validation passed.
        message: Human-readable description of the result.
        missing_columns: List of required columns that are missing.
        row_count: Number of rows in the validated source.
        warnings: List of non-fatal issues detected.
    """

    is_valid: bool
    message: str
    missing_columns: list[str] = field(default_factory=list)
    row_count: int = 0
    warnings: list[str] = field(default_factory=list)


def _validate_columns(
    df: pl.DataFrame,
    source: str,
    required: set[str],
    optional: set[str],
) -> ValidationResult:
    columns = set(df.columns)
    missing = required - columns

    if missing:
        return ValidationResult(
            is_valid=False,
            message=f"{source} missing required columns: {sorted(missing)}",
            missing_columns=sorted(missing),
            row_count=df.height,
        )

    warnings = []
    missing_optional = optional - columns
    if missing_optional:
        warnings.append(
            f"{source} missing recommended columns: {sorted(missing_optional)}"
        )

    if df.height == 0:
        warnings.append(f"{source} has no rows")

    return ValidationResult(
        is_valid=True,
        message=f"{source} schema valid ({df.height:,} rows)",
        row_count=df.height,
        warnings=warnings,
    )


def validate_counties_schema(df: pl.DataFrame) -> ValidationResult:
    """Validate county metrics schema.

    Must contain `fips` and `state`; metric columns are recommended.
    `z_spend` / `z_quality` are optional and derived when absent.

    Args:
        df: DataFrame to validate.

    Returns:
        ValidationResult with status and details.
    """
    return _validate_columns(
        df, "Counties", COUNTIES_REQUIRED_COLUMNS, COUNTIES_OPTIONAL_COLUMNS
    )


def validate_hospitals_schema(df: pl.DataFrame) -> ValidationResult:
    """Validate hospital table schema.

    Args:
        df: DataFrame to validate.

    Returns:
        ValidationResult with status and details.
    """
    return _validate_columns(
        df, "Hospitals", HOSPITALS_REQUIRED_COLUMNS, HOSPITALS_OPTIONAL_COLUMNS
    )


def validate_procedures_schema(df: pl.DataFrame) -> ValidationResult:
    """Validate procedure share table schema.

    Args:
        df: DataFrame to validate.

    Returns:
        ValidationResult with status and details.
    """
    return _validate_columns(
        df, "Procedures", PROCEDURES_REQUIRED_COLUMNS, PROCEDURES_OPTIONAL_COLUMNS
    )


def validate_geography(doc: Any) -> ValidationResult:
    """Validate that the geography document is a GeoJSON feature collection.

    Args:
        doc: Parsed JSON document.

    Returns:
        ValidationResult with status and details.
    """
    if not isinstance(doc, dict) or not isinstance(doc.get("features"), list):
        return ValidationResult(
            is_valid=False,
            message="Geography is not a feature collection (no 'features' list)",
            missing_columns=["features"],
        )

    features = doc["features"]
    malformed = sum(
        1
        for f in features
        if not isinstance(f, dict)
        or not isinstance(f.get("properties") or {}, dict)
    )
    if malformed:
        return ValidationResult(
            is_valid=False,
            message=f"Geography has {malformed:,} malformed features "
            "(feature or its properties is not an object)",
            row_count=len(features),
        )

    warnings = []
    without_fips = sum(
        1 for f in features if not (f.get("properties") or {}).get("fips")
    )
    if without_fips:
        warnings.append(f"{without_fips:,} features have no 'fips' property")

    return ValidationResult(
        is_valid=True,
        message=f"Geography valid ({len(features):,} features)",
        row_count=len(features),
        warnings=warnings,
    )


def validate_hospital_county_integrity(
    hospitals: Sequence[HospitalRecord],
    county_keys: Iterable[str],
) -> ValidationResult:
    """Report hospitals whose county is not in the loaded county set.

    Dangling county references are expected (the county file covers the
    region only), so the result is always valid.

    Args:
        hospitals: Normalized hospital records.
        county_keys: Keys of the loaded counties.

    Returns:
        ValidationResult with the dangling count as a warning.
    """
    known = set(county_keys)
    dangling = [h.provider_key for h in hospitals if h.county_key not in known]
    total = len(hospitals)
    matched = total - len(dangling)
    match_rate = (matched / total * 100) if total > 0 else 0

    logger.info(f"Hospital-county join: {matched:,}/{total:,} matched ({match_rate:.1f}%)")

    warnings = []
    if dangling:
        logger.warning(f"{len(dangling):,} hospitals reference unknown counties")
        warnings.append(f"{len(dangling):,} hospitals reference counties not loaded")

    return ValidationResult(
        is_valid=True,
        message=f"Hospital-county join: {matched:,}/{total:,} matched",
        row_count=total,
        warnings=warnings,
    )


def validate_procedure_provider_integrity(
    shares: Sequence[ProcedureShareRecord],
    provider_keys: Iterable[str],
) -> ValidationResult:
    """Report procedure share rows whose provider is not a loaded hospital.

    Args:
        shares: Normalized procedure share records.
        provider_keys: Keys of the loaded hospitals.

    Returns:
        ValidationResult, always valid, with the orphan count as a warning.
    """
    known = set(provider_keys)
    orphans = sum(1 for s in shares if s.provider_key not in known)
    total = len(shares)

    warnings = []
    if orphans:
        logger.warning(f"{orphans:,} procedure rows reference unknown providers")
        warnings.append(f"{orphans:,} procedure rows reference hospitals not loaded")

    return ValidationResult(
        is_valid=True,
        message=f"Procedure-provider join: {total - orphans:,}/{total:,} matched",
        row_count=total,
        warnings=warnings,
    )
