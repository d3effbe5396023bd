"""Lookup indices over the loaded dataset."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from hospital_markets.models import (
    CountyRecord,
    GeoFeature,
    HospitalRecord,
    ProcedureShareRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardDataset:
    """Immutable, indexed dataset shared read-only by every view.

    Attributes:
        counties: County records in source order.
        hospitals: Hospital records in source order.
        procedure_shares: Procedure share records in source order.
        geo_features: County features in document order.
        county_by_key: County key -> county record.
        shares_by_provider: Provider key -> that provider's shares, grouped
            in source order (not sorted).
        hospital_by_provider: Provider key -> first hospital with that key.
        ownership_categories: Sorted distinct non-empty ownership categories.
    """

    counties: tuple[CountyRecord, ...]
    hospitals: tuple[HospitalRecord, ...]
    procedure_shares: tuple[ProcedureShareRecord, ...]
    geo_features: tuple[GeoFeature, ...]
    county_by_key: Mapping[str, CountyRecord]
    shares_by_provider: Mapping[str, tuple[ProcedureShareRecord, ...]]
    hospital_by_provider: Mapping[str, HospitalRecord]
    ownership_categories: tuple[str, ...]


def index_counties(counties: Sequence[CountyRecord]) -> dict[str, CountyRecord]:
    """Map county key to record; a repeated key keeps the last record."""
    county_by_key: dict[str, CountyRecord] = {}
    for county in counties:
        if county.key in county_by_key:
            logger.warning(f"Duplicate county key {county.key}, keeping last record")
        county_by_key[county.key] = county
    return county_by_key


def group_shares_by_provider(
    shares: Sequence[ProcedureShareRecord],
) -> dict[str, tuple[ProcedureShareRecord, ...]]:
    """Group procedure shares by provider, preserving source order."""
    grouped: dict[str, list[ProcedureShareRecord]] = {}
    for share in shares:
        grouped.setdefault(share.provider_key, []).append(share)
    return {key: tuple(rows) for key, rows in grouped.items()}


def distinct_ownership_categories(hospitals: Sequence[HospitalRecord]) -> tuple[str, ...]:
    """Return the sorted set of non-empty ownership categories."""
    return tuple(sorted({h.ownership for h in hospitals if h.ownership}))


def build_dataset_index(
    counties: Sequence[CountyRecord],
    hospitals: Sequence[HospitalRecord],
    shares: Sequence[ProcedureShareRecord],
    geo_features: Sequence[GeoFeature] = (),
) -> DashboardDataset:
    """Build the indexed dataset.

    Args:
        counties: Standardized county records.
        hospitals: Hospital records.
        shares: Procedure share records.
        geo_features: County geography features.

    Returns:
        DashboardDataset with read-only lookup mappings.
    """
    hospital_by_provider: dict[str, HospitalRecord] = {}
    for hospital in hospitals:
        hospital_by_provider.setdefault(hospital.provider_key, hospital)

    shares_by_provider = group_shares_by_provider(shares)
    ownership_categories = distinct_ownership_categories(hospitals)

    logger.info(
        f"Indexed {len(counties):,} counties, {len(hospitals):,} hospitals, "
        f"{len(shares_by_provider):,} providers with procedure shares, "
        f"{len(ownership_categories)} ownership categories"
    )

    return DashboardDataset(
        counties=tuple(counties),
        hospitals=tuple(hospitals),
        procedure_shares=tuple(shares),
        geo_features=tuple(geo_features),
        county_by_key=MappingProxyType(index_counties(counties)),
        shares_by_provider=MappingProxyType(shares_by_provider),
        hospital_by_provider=MappingProxyType(hospital_by_provider),
        ownership_categories=ownership_categories,
    )
