"""Reusable UI components for the Hospital Markets dashboard."""

from hospital_markets.ui.components.charts import (
    geojson_for,
    map_figure,
    procedure_figure,
    ranking_figure,
    scatter_figure,
)
from hospital_markets.ui.components.controls import (
    render_county_picker,
    render_filter_controls,
    render_hospital_picker,
)

__all__ = [
    "geojson_for",
    "map_figure",
    "procedure_figure",
    "ranking_figure",
    "scatter_figure",
    "render_county_picker",
    "render_filter_controls",
    "render_hospital_picker",
]
