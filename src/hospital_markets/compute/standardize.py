"""Standardization of county metrics into z-scores.

A z-score column is derived only when the source left it entirely empty.
Detection is column-level: a single precomputed value anywhere in the
column means the provider already standardized it, and nothing is
recomputed or overwritten.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

import polars as pl

from hospital_markets.models import CountyRecord

logger = logging.getLogger(__name__)

# (raw metric field, standardized field)
STANDARDIZED_METRICS = [
    ("spend", "z_spend"),
    ("quality", "z_quality"),
]


def _is_present(value: float | None) -> bool:
    return value is not None and not math.isnan(value)


def zscore(values: Sequence[float | None]) -> list[float | None]:
    """Standardize values against the mean and standard deviation of the present ones.

    Uses the sample standard deviation (ddof=1). Missing inputs stay
    missing, and every output is missing when the deviation is undefined
    (fewer than two present values) or zero (all values equal).

    Args:
        values: Metric values, with None or NaN for missing.

    Returns:
        Z-scores aligned with the input.
    """
    present = pl.Series([v for v in values if _is_present(v)], dtype=pl.Float64)
    mean = present.mean()
    std = present.std(ddof=1)

    if mean is None or std is None or not math.isfinite(std) or std == 0:
        logger.debug(f"Standard deviation undefined or zero over {present.len()} values")
        return [None] * len(values)

    return [(v - mean) / std if _is_present(v) else None for v in values]


def standardize_metric(
    records: Sequence[CountyRecord],
    value_field: str,
    z_field: str,
) -> list[CountyRecord]:
    """Derive a z-score field when it is absent across every record.

    Args:
        records: County records.
        value_field: Raw metric field (e.g. "spend").
        z_field: Standardized field to fill (e.g. "z_spend").

    Returns:
        New list of records; unchanged copies when any record already
        carries a value for z_field.
    """
    if any(getattr(r, z_field) is not None for r in records):
        logger.info(f"Keeping source-provided '{z_field}' values")
        return list(records)

    scores = zscore([getattr(r, value_field) for r in records])
    derived = sum(1 for s in scores if s is not None)
    logger.info(f"Derived '{z_field}' from '{value_field}' for {derived}/{len(records)} counties")

    return [replace(r, **{z_field: s}) for r, s in zip(records, scores)]


def standardize_counties(counties: Sequence[CountyRecord]) -> list[CountyRecord]:
    """Fill z_spend and z_quality where the source omitted them.

    Args:
        counties: Normalized county records.

    Returns:
        County records with standardized metrics.
    """
    result = list(counties)
    for value_field, z_field in STANDARDIZED_METRICS:
        result = standardize_metric(result, value_field, z_field)
    return result
