"""Filter and selection widgets wired to the dashboard store."""

import streamlit as st

from hospital_markets.config import TOP_N_MAX, TOP_N_MIN
from hospital_markets.session import DashboardSession
from hospital_markets.views.scatter_view import ScatterViewModel

TOP_N_KEY = "top_n_input"
OWNERSHIP_KEY = "ownership_input"
SEARCH_KEY = "search_input"
COUNTY_PICKER_KEY = "county_picker"
HOSPITAL_PICKER_KEY = "hospital_picker"


def render_filter_controls(session: DashboardSession) -> None:
    """Render top-N, ownership and search inputs in one row.

    Each widget writes to the store through `update` in its on_change
    callback; the rerun that follows rebuilds every view.

    Args:
        session: Loaded dashboard session.
    """
    store = session.store
    filters = store.filters

    col1, col2, col3 = st.columns([1, 2, 2])

    with col1:
        st.number_input(
            "Top counties per state",
            min_value=TOP_N_MIN,
            max_value=TOP_N_MAX,
            value=filters.top_n,
            step=1,
            key=TOP_N_KEY,
            on_change=lambda: store.update(top_n=st.session_state[TOP_N_KEY]),
        )

    with col2:
        st.multiselect(
            "Ownership",
            options=list(session.dataset.ownership_categories),
            default=sorted(filters.ownership_filter),
            key=OWNERSHIP_KEY,
            on_change=lambda: store.update(
                ownership_filter=st.session_state[OWNERSHIP_KEY]
            ),
        )

    with col3:
        st.text_input(
            "Search hospital (optional)",
            placeholder="type to filter scatter...",
            key=SEARCH_KEY,
            on_change=lambda: store.update(search_text=st.session_state[SEARCH_KEY]),
        )


def render_county_picker(session: DashboardSession, top_keys: frozenset[str]) -> None:
    """Select a county without clicking the map (clears the hospital)."""
    store = session.store
    county_by_key = session.dataset.county_by_key
    options = [None, *sorted(top_keys, key=lambda k: _county_label(session, k))]

    selected = store.selection.county_key
    st.session_state[COUNTY_PICKER_KEY] = selected if selected in options else None

    st.selectbox(
        "County",
        options=options,
        format_func=lambda k: "All top-N counties" if k is None else _county_label(session, k),
        key=COUNTY_PICKER_KEY,
        on_change=lambda: store.select_county(st.session_state[COUNTY_PICKER_KEY]),
        disabled=not county_by_key,
    )


def render_hospital_picker(session: DashboardSession, scatter: ScatterViewModel) -> None:
    """Select one of the plotted hospitals (sets county and hospital)."""
    store = session.store
    names = {p.provider_key: p.name or p.provider_key for p in scatter.points}
    options = [None, *sorted(names, key=lambda k: names[k])]

    selected = store.selection.provider_key
    st.session_state[HOSPITAL_PICKER_KEY] = selected if selected in options else None

    def _on_pick() -> None:
        provider_key = st.session_state[HOSPITAL_PICKER_KEY]
        hospital = session.dataset.hospital_by_provider.get(provider_key or "")
        if hospital is None:
            store.update(provider_key=None)
        else:
            store.select_hospital(hospital)

    st.selectbox(
        "Hospital",
        options=options,
        format_func=lambda k: "Select a hospital..." if k is None else names.get(k, k),
        key=HOSPITAL_PICKER_KEY,
        on_change=_on_pick,
    )


def _county_label(session: DashboardSession, key: str) -> str:
    county = session.dataset.county_by_key.get(key)
    if county is None:
        return key
    return f"{county.name}, {county.region_group}"
