"""Plotly figures for the four dashboard views.

Figures are built only from view-models. The scatter jitter is applied here
and never feeds back into filtering or selection.
"""

from __future__ import annotations

import math
import random
from typing import Any

import plotly.graph_objects as go  # type: ignore[import-untyped]

from hospital_markets.models import GeoFeature
from hospital_markets.views.map_view import MapCellStatus, MapViewModel
from hospital_markets.views.procedure_view import ProcedureViewModel
from hospital_markets.views.ranking_view import RankingViewModel
from hospital_markets.views.scatter_view import UNKNOWN_OWNERSHIP_COLOR, ScatterViewModel

NO_DATA_FILL = "#eeeeee"
OUTSIDE_TOP_N_FILL = "#f0f0f0"
HIGHLIGHT_BAR = "#ffb703"
DEFAULT_BAR = "#8ecae6"
JITTER_WIDTH = 0.15
CHART_HEIGHT = 360


def geojson_for(features: tuple[GeoFeature, ...]) -> dict[str, Any]:
    """Feature collection with normalized county keys as feature ids."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": f.key,
                "properties": {"county_name": f.county_name, "state": f.region_group},
                "geometry": f.geometry,
            }
            for f in features
            if f.geometry
        ],
    }


def _format_z(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.2f}"


def map_figure(vm: MapViewModel, geojson: dict[str, Any]) -> go.Figure:
    """Choropleth of z_spend for top-N counties, with state labels."""
    fig = go.Figure()

    colored = [c for c in vm.cells if c.color_value is not None]
    greyed = [c for c in vm.cells if c.color_value is None]

    def hover(cell: Any) -> str:
        name = f"{cell.county_name}, {cell.region_group}"
        if cell.status is MapCellStatus.NO_DATA:
            return f"{name}<br>(no data)"
        return (
            f"{name}<br>Spend z: {_format_z(cell.z_spend)}  "
            f"Quality z: {_format_z(cell.z_quality)}"
        )

    if greyed:
        fig.add_trace(go.Choropleth(
            geojson=geojson,
            locations=[c.key for c in greyed],
            z=[0 if c.status is MapCellStatus.OUTSIDE_TOP_N else 1 for c in greyed],
            colorscale=[[0, OUTSIDE_TOP_N_FILL], [1, NO_DATA_FILL]],
            zmin=0,
            zmax=1,
            showscale=False,
            text=[hover(c) for c in greyed],
            hoverinfo="text",
            marker={"line": {"color": "#ffffff", "width": 0.75}},
            name="Other counties",
        ))

    if colored:
        fig.add_trace(go.Choropleth(
            geojson=geojson,
            locations=[c.key for c in colored],
            z=[c.color_value for c in colored],
            colorscale="YlOrRd",
            zmin=vm.color_domain[0],
            zmax=vm.color_domain[1],
            colorbar={"title": "County z_spend", "len": 0.5, "thickness": 10},
            text=[hover(c) for c in colored],
            hoverinfo="text",
            marker={"line": {"color": "#ffffff", "width": 0.75}},
            name="Top-N counties",
        ))

    if vm.selected_key:
        fig.add_trace(go.Choropleth(
            geojson=geojson,
            locations=[vm.selected_key],
            z=[0],
            colorscale=[[0, "rgba(0,0,0,0)"], [1, "rgba(0,0,0,0)"]],
            showscale=False,
            hoverinfo="skip",
            marker={"line": {"color": "#111111", "width": 2}},
            name="Selected",
        ))

    if vm.labels:
        fig.add_trace(go.Scattergeo(
            lon=[label.lon for label in vm.labels],
            lat=[label.lat for label in vm.labels],
            text=[label.region_group for label in vm.labels],
            mode="text",
            textfont={"size": 11, "color": "#333333"},
            hoverinfo="skip",
            showlegend=False,
        ))

    fig.update_geos(fitbounds="locations", visible=False)
    fig.update_layout(
        title=vm.title,
        height=CHART_HEIGHT,
        margin={"l": 10, "r": 10, "t": 40, "b": 10},
        showlegend=False,
    )
    return fig


def _bubble_sizes(beds: list[float]) -> list[float]:
    """Square-root scale of beds onto marker diameters of 4-20 px."""
    lo, hi = min(beds), max(beds)
    if hi == lo:
        return [12.0] * len(beds)
    span = math.sqrt(hi) - math.sqrt(lo)
    return [2 * (2 + 8 * (math.sqrt(b) - math.sqrt(lo)) / span) for b in beds]


def scatter_figure(vm: ScatterViewModel, rng: random.Random | None = None) -> go.Figure:
    """Hospital stars against county z_spend, colored by ownership."""
    rng = rng or random.Random()
    fig = go.Figure()

    beds = [p.beds or 1.0 for p in vm.points]
    sizes = dict(zip((p.provider_key for p in vm.points), _bubble_sizes(beds)))

    groups: dict[str, list[Any]] = {}
    for point in vm.points:
        groups.setdefault(point.ownership or "Unknown", []).append(point)

    for ownership, points in groups.items():
        fig.add_trace(go.Scatter(
            x=[
                vm.x_center + (rng.random() - 0.5) * JITTER_WIDTH
                for _ in points
            ],
            y=[p.stars if p.stars is not None else 0 for p in points],
            mode="markers",
            name=ownership,
            customdata=[p.provider_key for p in points],
            text=[
                f"{p.name}<br>Stars: {p.stars if p.stars is not None else '-'}  "
                f"Beds: {p.beds if p.beds is not None else '-'}<br>"
                f"Ownership: {p.ownership or '-'}"
                for p in points
            ],
            hoverinfo="text",
            marker={
                "color": vm.ownership_colors.get(ownership, UNKNOWN_OWNERSHIP_COLOR),
                "size": [sizes[p.provider_key] for p in points],
                "opacity": 0.85,
            },
        ))

    fig.add_vline(x=vm.x_center, line_dash="dash", line_color="#bbbbbb")
    fig.update_layout(
        title=f"Hospital Quality vs Market: {vm.title}",
        xaxis={"title": "Market z_spend (county)", "range": list(vm.x_domain)},
        yaxis={"title": "Hospital stars", "range": [0, 5.2]},
        legend={"title": "Ownership"},
        height=CHART_HEIGHT,
        margin={"l": 60, "r": 10, "t": 48, "b": 40},
    )
    return fig


def procedure_figure(vm: ProcedureViewModel) -> go.Figure:
    """Horizontal bars of the selected hospital's top procedures."""
    fig = go.Figure(go.Bar(
        x=[b.share or 0 for b in vm.bars],
        y=[b.description or b.procedure_code or "" for b in vm.bars],
        orientation="h",
        text=[f"{(b.share or 0):.1%}" for b in vm.bars],
        textposition="outside",
        marker={"color": "steelblue"},
        hovertext=[
            f"DRG {b.procedure_code}: avg Medicare payment "
            + ("n/a" if b.avg_payment is None else f"${b.avg_payment:,.0f}")
            for b in vm.bars
        ],
        hoverinfo="text",
    ))

    fig.update_layout(
        title=f"{vm.title}<br><sup>Top DRGs by discharge share</sup>",
        xaxis={"tickformat": ".0%", "range": [0, (vm.max_share or 0.01) * 1.15]},
        yaxis={"autorange": "reversed", "tickfont": {"size": 9}},
        height=CHART_HEIGHT,
        margin={"l": 10, "r": 40, "t": 60, "b": 40},
    )
    return fig


def ranking_figure(vm: RankingViewModel) -> go.Figure:
    """Horizontal bars of mean county z_spend per state."""
    fig = go.Figure(go.Bar(
        x=[r.mean_z_spend for r in vm.rows],
        y=[r.region_group for r in vm.rows],
        orientation="h",
        marker={"color": [HIGHLIGHT_BAR if r.highlighted else DEFAULT_BAR for r in vm.rows]},
        hovertemplate="%{y}: %{x:.2f}<extra></extra>",
    ))

    fig.update_layout(
        title=vm.title,
        xaxis={"title": "Average county z_spend", "zeroline": True},
        yaxis={"autorange": "reversed"},
        height=CHART_HEIGHT,
        margin={"l": 60, "r": 40, "t": 30, "b": 40},
    )
    return fig
