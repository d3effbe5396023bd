"""Shared selection and filter state."""

from hospital_markets.state.store import (
    FILTER_FIELDS,
    SELECTION_FIELDS,
    DashboardStore,
    StateListener,
    clamp_top_n,
)

__all__ = [
    "DashboardStore",
    "StateListener",
    "SELECTION_FIELDS",
    "FILTER_FIELDS",
    "clamp_top_n",
]
