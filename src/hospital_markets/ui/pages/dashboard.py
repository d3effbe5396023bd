"""Dashboard page: controls plus the four coordinated views."""

import logging
from collections.abc import Mapping
from typing import Any

import streamlit as st

from hospital_markets.models import ViewStatus
from hospital_markets.session import DashboardSession, DashboardViewModels
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
from hospital_markets.views.scatter_view import suggest_hospital_names

logger = logging.getLogger(__name__)

MAP_CHART_KEY = "region_map"
SCATTER_CHART_KEY = "hospital_scatter"


def render_dashboard_page(session: DashboardSession) -> None:
    """Render the cross-filtered dashboard.

    Args:
        session: Loaded dashboard session.
    """
    st.title("Regional Hospital Markets")

    render_filter_controls(session)
    view_models = session.build_view_models()

    st.markdown("---")

    top_left, top_right = st.columns(2)
    with top_left:
        _render_map(session, view_models)
    with top_right:
        _render_scatter(session, view_models)

    bottom_left, bottom_right = st.columns(2)
    with bottom_left:
        _render_procedures(view_models)
    with bottom_right:
        st.plotly_chart(ranking_figure(view_models.ranking), width="stretch")


def _render_map(session: DashboardSession, view_models: DashboardViewModels) -> None:
    geojson = _cached_geojson(session)
    st.plotly_chart(
        map_figure(view_models.map, geojson),
        width="stretch",
        key=MAP_CHART_KEY,
        on_select=lambda: _on_map_select(session),
        selection_mode="points",
    )
    render_county_picker(session, view_models.top_keys)


def _render_scatter(session: DashboardSession, view_models: DashboardViewModels) -> None:
    scatter = view_models.scatter

    if scatter.status is ViewStatus.EMPTY:
        st.info(scatter.message)
        search_text = view_models.state.filters.search_text
        if search_text:
            suggestions = suggest_hospital_names(session.dataset, search_text)
            if suggestions:
                st.caption("Did you mean: " + ", ".join(suggestions))
        return

    st.plotly_chart(
        scatter_figure(scatter),
        width="stretch",
        key=SCATTER_CHART_KEY,
        on_select=lambda: _on_scatter_select(session),
        selection_mode="points",
    )
    render_hospital_picker(session, scatter)


def _render_procedures(view_models: DashboardViewModels) -> None:
    procedures = view_models.procedures
    if procedures.status is not ViewStatus.POPULATED:
        if procedures.title:
            st.markdown(f"**{procedures.title}**")
        st.info(procedures.message)
        return
    st.plotly_chart(procedure_figure(procedures), width="stretch")


def _cached_geojson(session: DashboardSession) -> dict[str, Any]:
    if "geojson" not in st.session_state:
        st.session_state.geojson = geojson_for(session.dataset.geo_features)
    return st.session_state.geojson


def _selected_points(key: str) -> list[Mapping[str, Any]]:
    """Points from a chart's selection event stored in session state."""
    event = st.session_state.get(key) or {}
    selection = event.get("selection") or {}
    return list(selection.get("points") or [])


def _on_map_select(session: DashboardSession) -> None:
    points = _selected_points(MAP_CHART_KEY)
    locations = [p.get("location") for p in points if p.get("location")]
    if locations:
        logger.debug(f"Map click on {locations[0]}")
        session.store.select_county(locations[0])


def _on_scatter_select(session: DashboardSession) -> None:
    for point in _selected_points(SCATTER_CHART_KEY):
        customdata = point.get("customdata")
        provider_key = customdata[0] if isinstance(customdata, list) else customdata
        hospital = session.dataset.hospital_by_provider.get(str(provider_key))
        if hospital is not None:
            logger.debug(f"Scatter click on {hospital.provider_key}")
            session.store.select_hospital(hospital)
            return
