"""Choropleth map view-model."""

import logging
from collections.abc import Set
from dataclasses import dataclass
from enum import Enum

from shapely.errors import ShapelyError
from shapely.geometry import shape

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.compute.topn import METRIC_LABELS
from hospital_markets.config import DEFAULT_RANKING_METRIC
from hospital_markets.models import DashboardState, GeoFeature

logger = logging.getLogger(__name__)

# Fixed color scale for standardized spend
Z_SPEND_DOMAIN = (-2.0, 2.0)


class MapCellStatus(str, Enum):
    """How a county polygon is filled."""

    NO_DATA = "NO_DATA"
    OUTSIDE_TOP_N = "OUTSIDE_TOP_N"
    IN_TOP_N = "IN_TOP_N"


@dataclass(frozen=True)
class MapCell:
    """One county polygon.

    Attributes:
        key: County key shared by the feature and the county record.
        county_name: Record name, falling back to the feature's name.
        region_group: Record state, falling back to the feature's state.
        status: Fill classification.
        color_value: z_spend for top-N counties; None otherwise or when missing.
        z_spend: Standardized spend for the tooltip.
        z_quality: Standardized quality for the tooltip.
    """

    key: str
    county_name: str | None
    region_group: str | None
    status: MapCellStatus
    color_value: float | None = None
    z_spend: float | None = None
    z_quality: float | None = None


@dataclass(frozen=True)
class RegionLabel:
    """State label placed at the mean of its county centroids."""

    region_group: str
    lon: float
    lat: float


@dataclass(frozen=True)
class MapViewModel:
    title: str
    cells: tuple[MapCell, ...]
    selected_key: str | None
    labels: tuple[RegionLabel, ...]
    color_domain: tuple[float, float] = Z_SPEND_DOMAIN


def feature_centroid(feature: GeoFeature) -> tuple[float, float] | None:
    """Planar (lon, lat) centroid of a feature, or None for unusable geometry."""
    if not feature.geometry:
        return None
    try:
        geom = shape(feature.geometry)
    except (ShapelyError, ValueError, TypeError, KeyError) as e:
        logger.debug(f"Skipping centroid for {feature.key}: {e}")
        return None
    if geom.is_empty:
        return None
    point = geom.centroid
    return point.x, point.y


def region_labels(features: tuple[GeoFeature, ...]) -> tuple[RegionLabel, ...]:
    """Average feature centroids per state, in first-seen order."""
    sums: dict[str, list[float]] = {}
    for feature in features:
        if not feature.region_group:
            continue
        centroid = feature_centroid(feature)
        if centroid is None:
            continue
        acc = sums.setdefault(feature.region_group, [0.0, 0.0, 0])
        acc[0] += centroid[0]
        acc[1] += centroid[1]
        acc[2] += 1

    return tuple(
        RegionLabel(region_group=group, lon=x / n, lat=y / n)
        for group, (x, y, n) in sums.items()
    )


def build_map_view(
    dataset: DashboardDataset,
    state: DashboardState,
    top_keys: Set[str],
    metric: str = DEFAULT_RANKING_METRIC,
) -> MapViewModel:
    """Classify every county polygon against the current top-N set.

    Args:
        dataset: Indexed dataset.
        state: Current selection and filters.
        top_keys: Current top-N county keys.
        metric: Metric the top-N set was ranked by (used in the title).

    Returns:
        MapViewModel for the choropleth.
    """
    cells = []
    for feature in dataset.geo_features:
        county = dataset.county_by_key.get(feature.key)
        if county is None:
            cells.append(
                MapCell(
                    key=feature.key,
                    county_name=feature.county_name,
                    region_group=feature.region_group,
                    status=MapCellStatus.NO_DATA,
                )
            )
            continue

        in_top = county.key in top_keys
        cells.append(
            MapCell(
                key=county.key,
                county_name=county.name or feature.county_name,
                region_group=county.region_group or feature.region_group,
                status=MapCellStatus.IN_TOP_N if in_top else MapCellStatus.OUTSIDE_TOP_N,
                color_value=county.z_spend if in_top else None,
                z_spend=county.z_spend,
                z_quality=county.z_quality,
            )
        )

    selected = state.selection.county_key
    feature_keys = {f.key for f in dataset.geo_features}
    selected_key = selected if selected in feature_keys else None

    label = METRIC_LABELS.get(metric, metric)
    return MapViewModel(
        title=f"Top {state.filters.top_n} counties per state by {label}",
        cells=tuple(cells),
        selected_key=selected_key,
        labels=region_labels(dataset.geo_features),
    )
