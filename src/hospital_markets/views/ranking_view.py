"""State ranking view-model: mean county z_spend per state."""

from dataclasses import dataclass

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.compute.topn import group_by_region


@dataclass(frozen=True)
class RankingRow:
    region_group: str
    mean_z_spend: float
    highlighted: bool = False


@dataclass(frozen=True)
class RankingViewModel:
    title: str
    rows: tuple[RankingRow, ...]
    highlight_group: str | None


def build_ranking_view(
    dataset: DashboardDataset,
    region_groups: tuple[str, ...],
    highlight_group: str | None = None,
) -> RankingViewModel:
    """Rank allowed states by the mean z_spend of their counties.

    Counties with missing z_spend are left out of the mean; a state with
    no values at all is left out of the ranking. Equal means keep
    first-seen order.

    Args:
        dataset: Indexed dataset.
        region_groups: States to rank.
        highlight_group: State flagged for distinct styling.

    Returns:
        RankingViewModel with rows sorted descending.
    """
    means = []
    for group, counties in group_by_region(dataset.counties, region_groups).items():
        values = [c.z_spend for c in counties if c.z_spend is not None]
        if values:
            means.append((group, sum(values) / len(values)))

    means.sort(key=lambda item: item[1], reverse=True)

    title = "State ranking by z_spend"
    if highlight_group:
        title += f" ({highlight_group} highlighted)"

    return RankingViewModel(
        title=title,
        rows=tuple(
            RankingRow(region_group=g, mean_z_spend=m, highlighted=g == highlight_group)
            for g, m in means
        ),
        highlight_group=highlight_group,
    )
