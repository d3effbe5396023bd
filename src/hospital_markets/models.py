"""Data models for the Hospital Markets dashboard."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ViewStatus(str, Enum):
    """Render state of a single view-model."""

    POPULATED = "POPULATED"
    EMPTY = "EMPTY"
    NO_SELECTION = "NO_SELECTION"
    NO_DATA = "NO_DATA"


@dataclass(frozen=True)
class CountyRecord:
    """County-level market metrics.

    Attributes:
        key: 5-digit zero-padded county FIPS code (primary key).
        region_group: Two-letter state abbreviation.
        name: County display name.
        spend: Per-beneficiary spend.
        quality: Bed-weighted hospital quality score.
        z_spend: Standardized spend (derived when the source omits it).
        z_quality: Standardized quality (derived when the source omits it).
        beds_sum: Total staffed beds across the county's hospitals.
        discharges_sum: Total discharges across the county's hospitals.
    """

    key: str
    region_group: str | None
    name: str | None
    spend: float | None = None
    quality: float | None = None
    z_spend: float | None = None
    z_quality: float | None = None
    beds_sum: float | None = None
    discharges_sum: float | None = None


@dataclass(frozen=True)
class HospitalRecord:
    """Hospital entity joined to its county market.

    Attributes:
        provider_key: 6-digit zero-padded CMS provider number (primary key).
        name: Hospital name.
        region_group: Two-letter state abbreviation.
        county_key: County FIPS code; may reference a county that was not loaded.
        stars: CMS overall star rating (0-5).
        beds: Staffed bed count.
        ownership: Ownership category (e.g. "Voluntary non-profit - Private").
        hhi: Market concentration (Herfindahl-Hirschman index).
        wavg_payment: Discharge-weighted average Medicare payment.
        med_share: Share of medical discharges.
        surg_share: Share of surgical discharges.
    """

    provider_key: str
    name: str | None
    region_group: str | None
    county_key: str
    stars: float | None = None
    beds: float | None = None
    ownership: str | None = None
    hhi: float | None = None
    wavg_payment: float | None = None
    med_share: float | None = None
    surg_share: float | None = None


@dataclass(frozen=True)
class ProcedureShareRecord:
    """One of a hospital's top procedures (DRGs) by discharge share."""

    provider_key: str
    rank: int | None
    procedure_code: str | None
    procedure_description: str | None
    share: float | None = None
    avg_payment: float | None = None


@dataclass(frozen=True)
class GeoFeature:
    """County polygon from the geography document, keyed like CountyRecord."""

    key: str
    county_name: str | None
    region_group: str | None
    geometry: Mapping[str, Any] | None = field(default=None, compare=False)


@dataclass(frozen=True)
class SelectionState:
    """Current drill-down target.

    The provider is not required to belong to the selected county.
    """

    county_key: str | None = None
    provider_key: str | None = None


@dataclass(frozen=True)
class FilterState:
    """Cross-view filters.

    Attributes:
        top_n: Counties kept per state, in [1, 50].
        ownership_filter: Ownership categories to keep (empty keeps all).
        search_text: Case-folded hospital name fragment (empty keeps all).
    """

    top_n: int = 10
    ownership_filter: frozenset[str] = frozenset()
    search_text: str = ""


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of the shared selection and filters."""

    selection: SelectionState = field(default_factory=SelectionState)
    filters: FilterState = field(default_factory=FilterState)
