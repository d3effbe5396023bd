"""Per-state top-N county selection.

Counties are ranked within their state by a county metric and the top N
keys of every allowed state are kept. Missing metric values rank as 0;
stored records are never modified. Ties keep their source order.
"""

import logging
import math
from collections.abc import Iterable, Sequence

from hospital_markets.models import CountyRecord

logger = logging.getLogger(__name__)

METRIC_LABELS = {
    "spend": "spend",
    "quality": "quality",
    "z_spend": "standardized spend",
    "z_quality": "standardized quality",
    "beds_sum": "total beds",
    "discharges_sum": "total discharges",
}

RANKING_METRICS = frozenset(METRIC_LABELS)


def ranking_value(county: CountyRecord, metric: str) -> float:
    """Metric value used for ranking, with missing treated as 0."""
    value = getattr(county, metric)
    if value is None or math.isnan(value):
        return 0.0
    return value


def group_by_region(
    counties: Iterable[CountyRecord],
    region_groups: Iterable[str],
) -> dict[str, list[CountyRecord]]:
    """Partition allowed counties by state, preserving source order."""
    allowed = set(region_groups)
    grouped: dict[str, list[CountyRecord]] = {}
    for county in counties:
        if county.region_group in allowed:
            grouped.setdefault(county.region_group, []).append(county)
    return grouped


def top_n_keys(
    counties: Sequence[CountyRecord],
    metric: str,
    n: int,
    region_groups: Iterable[str],
) -> frozenset[str]:
    """Select the top N county keys per state.

    Args:
        counties: County records in source order.
        metric: County field to rank by (one of RANKING_METRICS).
        n: Counties to keep per state; assumed already validated.
        region_groups: States eligible for selection.

    Returns:
        Union of each state's top N keys (fewer for smaller states).

    Raises:
        ValueError: If metric is not a rankable county field.
    """
    if metric not in RANKING_METRICS:
        raise ValueError(
            f"Unknown ranking metric: {metric}. Expected one of {sorted(RANKING_METRICS)}"
        )

    keep: set[str] = set()
    for members in group_by_region(counties, region_groups).values():
        # sorted() is stable, also with reverse=True
        ranked = sorted(members, key=lambda c: ranking_value(c, metric), reverse=True)
        keep.update(c.key for c in ranked[:n])

    logger.debug(f"Top {n} by {metric}: {len(keep)} counties selected")
    return frozenset(keep)
