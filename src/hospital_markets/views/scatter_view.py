"""Hospital quality-vs-market scatter view-model.

Hospitals are restricted to top-N counties, then narrowed by the selected
county, the ownership filter and the name search. Positions along x are the
county's standardized spend; any jitter belongs to the renderer.
"""

import logging
from collections.abc import Set
from dataclasses import dataclass, field

from plotly.colors import qualitative  # type: ignore[import-untyped]
from thefuzz import fuzz  # type: ignore[import-untyped]

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.models import DashboardState, HospitalRecord, ViewStatus

logger = logging.getLogger(__name__)

OWNERSHIP_PALETTE = tuple(qualitative.T10)
UNKNOWN_OWNERSHIP_COLOR = "#BAB0AC"
X_HALF_WIDTH = 1.5
EMPTY_MESSAGE = (
    "No hospitals match the current filters. Try clearing Ownership or Search, "
    "or click a different county on the map."
)


@dataclass(frozen=True)
class ScatterPoint:
    provider_key: str
    name: str | None
    county_key: str
    ownership: str | None
    stars: float | None
    beds: float | None
    color: str


@dataclass(frozen=True)
class ScatterViewModel:
    """Scatter plot contents.

    Attributes:
        status: POPULATED, or EMPTY when no hospital survives the filters.
        title: Selected county ("Name, ST") or the region description.
        points: Hospitals to plot; empty for the EMPTY variant.
        x_center: Selected county's z_spend, else 0.
        x_domain: x_center +/- 1.5.
        ownership_colors: Ownership category -> color, in category order.
        message: Placeholder text for the EMPTY variant.
    """

    status: ViewStatus
    title: str
    points: tuple[ScatterPoint, ...] = ()
    x_center: float = 0.0
    x_domain: tuple[float, float] = (-X_HALF_WIDTH, X_HALF_WIDTH)
    ownership_colors: dict[str, str] = field(default_factory=dict)
    message: str | None = None


def ownership_color_map(categories: tuple[str, ...]) -> dict[str, str]:
    """Assign palette colors to categories in order, cycling past ten."""
    return {
        category: OWNERSHIP_PALETTE[i % len(OWNERSHIP_PALETTE)]
        for i, category in enumerate(categories)
    }


def filter_hospitals(
    dataset: DashboardDataset,
    state: DashboardState,
    top_keys: Set[str],
) -> list[HospitalRecord]:
    """Apply top-N, county, ownership and search filters in that order."""
    county_key = state.selection.county_key
    ownership = state.filters.ownership_filter
    text = state.filters.search_text.casefold()

    return [
        h
        for h in dataset.hospitals
        if h.county_key in top_keys
        and (not county_key or h.county_key == county_key)
        and (not ownership or h.ownership in ownership)
        and (not text or text in (h.name or "").casefold())
    ]


def build_scatter_view(
    dataset: DashboardDataset,
    state: DashboardState,
    top_keys: Set[str],
    region_groups: tuple[str, ...] = (),
) -> ScatterViewModel:
    """Build the hospital scatter view-model.

    Args:
        dataset: Indexed dataset.
        state: Current selection and filters.
        top_keys: Current top-N county keys.
        region_groups: Allowed states, used in the default title.

    Returns:
        ScatterViewModel; the EMPTY variant when nothing matches.
    """
    county_key = state.selection.county_key
    county = dataset.county_by_key.get(county_key) if county_key else None

    if county is not None:
        title = f"{county.name or county.key}, {county.region_group}"
    else:
        title = f"Top-N counties ({len(region_groups)}-state region)"

    hospitals = filter_hospitals(dataset, state, top_keys)
    colors = ownership_color_map(dataset.ownership_categories)

    if not hospitals:
        logger.debug(f"Scatter empty for selection {state.selection}")
        return ScatterViewModel(
            status=ViewStatus.EMPTY,
            title=title,
            ownership_colors=colors,
            message=EMPTY_MESSAGE,
        )

    x_center = county.z_spend if county is not None and county.z_spend is not None else 0.0
    points = tuple(
        ScatterPoint(
            provider_key=h.provider_key,
            name=h.name,
            county_key=h.county_key,
            ownership=h.ownership,
            stars=h.stars,
            beds=h.beds,
            color=colors.get(h.ownership or "", UNKNOWN_OWNERSHIP_COLOR),
        )
        for h in hospitals
    )

    return ScatterViewModel(
        status=ViewStatus.POPULATED,
        title=title,
        points=points,
        x_center=x_center,
        x_domain=(x_center - X_HALF_WIDTH, x_center + X_HALF_WIDTH),
        ownership_colors=colors,
    )


def suggest_hospital_names(
    dataset: DashboardDataset,
    query: str,
    limit: int = 3,
    threshold: int = 70,
) -> list[str]:
    """Suggest hospital names close to a search that matched nothing.

    Uses partial ratio, which tolerates typos and word fragments
    (e.g. "mercy hosp" vs "MERCY HEALTH HOSPITAL").

    Args:
        dataset: Indexed dataset.
        query: Search text as typed.
        limit: Maximum suggestions.
        threshold: Minimum similarity score (0-100).

    Returns:
        Best-scoring distinct names, highest first.
    """
    query = query.strip().upper()
    if not query:
        return []

    scored: dict[str, int] = {}
    for hospital in dataset.hospitals:
        if not hospital.name:
            continue
        score = fuzz.partial_ratio(query, hospital.name.upper())
        if score >= threshold and score > scored.get(hospital.name, -1):
            scored[hospital.name] = score

    ranked = sorted(scored.items(), key=lambda item: item[1], reverse=True)
    suggestions = [name for name, _ in ranked[:limit]]
    if suggestions:
        logger.debug(f"Suggestions for '{query}': {suggestions}")
    return suggestions
