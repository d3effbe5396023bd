"""Computation module for the Hospital Markets dashboard.

This module handles:
- Z-score standardization of county metrics
- Lookup indices over the loaded dataset
- Per-state top-N county selection
"""

from hospital_markets.compute.indexer import (
    DashboardDataset,
    build_dataset_index,
    distinct_ownership_categories,
    group_shares_by_provider,
)
from hospital_markets.compute.standardize import (
    STANDARDIZED_METRICS,
    standardize_counties,
    standardize_metric,
    zscore,
)
from hospital_markets.compute.topn import RANKING_METRICS, top_n_keys

__all__ = [
    # Standardization
    "STANDARDIZED_METRICS",
    "zscore",
    "standardize_metric",
    "standardize_counties",
    # Indexing
    "DashboardDataset",
    "build_dataset_index",
    "group_shares_by_provider",
    "distinct_ownership_categories",
    # Top-N
    "RANKING_METRICS",
    "top_n_keys",
]
