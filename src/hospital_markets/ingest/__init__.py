"""Data ingestion module for the Hospital Markets dashboard.

This module handles:
- Loading raw tables and the geography document
- Validating schemas and join integrity
- Normalizing keys and numerics into typed records
"""

from hospital_markets.ingest.loaders import (
    DatasetLoadError,
    RawSources,
    detect_file_type,
    load_csv_to_polars,
    load_excel_to_polars,
    load_geojson,
    load_sources,
    load_table,
)
from hospital_markets.ingest.normalizers import (
    build_county_records,
    build_hospital_records,
    build_procedure_share_records,
    coerce_numeric_columns,
    extract_geo_features,
    normalize_counties,
    normalize_county_key,
    normalize_hospitals,
    normalize_procedure_shares,
    normalize_provider_key,
)
from hospital_markets.ingest.validators import (
    ValidationResult,
    validate_counties_schema,
    validate_geography,
    validate_hospital_county_integrity,
    validate_hospitals_schema,
    validate_procedure_provider_integrity,
    validate_procedures_schema,
)

__all__ = [
    # Loaders
    "DatasetLoadError",
    "RawSources",
    "detect_file_type",
    "load_csv_to_polars",
    "load_excel_to_polars",
    "load_geojson",
    "load_sources",
    "load_table",
    # Validators
    "ValidationResult",
    "validate_counties_schema",
    "validate_hospitals_schema",
    "validate_procedures_schema",
    "validate_geography",
    "validate_hospital_county_integrity",
    "validate_procedure_provider_integrity",
    # Normalizers
    "normalize_county_key",
    "normalize_provider_key",
    "coerce_numeric_columns",
    "normalize_counties",
    "normalize_hospitals",
    "normalize_procedure_shares",
    "build_county_records",
    "build_hospital_records",
    "build_procedure_share_records",
    "extract_geo_features",
]
