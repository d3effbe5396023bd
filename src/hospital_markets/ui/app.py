"""Main Streamlit application for the Hospital Markets dashboard.

Run with: streamlit run src/hospital_markets/ui/app.py
"""

from __future__ import annotations

import logging

import streamlit as st

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.config import Settings
from hospital_markets.ingest.loaders import DatasetLoadError, load_sources
from hospital_markets.session import DashboardSession, LoadStatus, build_dataset

logger = logging.getLogger(__name__)


@st.cache_resource(show_spinner="Loading hospital market data...")
def _load_dataset(data_dir: str, _settings: Settings) -> DashboardDataset:
    """Load and index the static dataset once per data directory."""
    logger.info(f"Loading dataset from {data_dir}")
    return build_dataset(load_sources(_settings))


def main() -> None:
    """Main entry point for Streamlit application."""
    from hospital_markets.ui.pages.dashboard import render_dashboard_page

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Page configuration - must be first Streamlit command
    st.set_page_config(
        page_title="Hospital Markets",
        page_icon="\U0001f3e5",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    st.sidebar.title("\U0001f3e5 Hospital Markets")
    st.sidebar.caption("County spend, hospital quality and DRG mix")
    st.sidebar.markdown("---")

    try:
        dataset = _load_dataset(str(settings.data_dir), settings)
    except DatasetLoadError as e:
        logger.error(f"Dashboard data failed to load: {e}")
        st.error(
            f"Dashboard data could not be loaded from `{settings.data_dir}`: {e}"
        )
        st.stop()

    if "dashboard_session" not in st.session_state:
        st.session_state.dashboard_session = DashboardSession(settings)
    session: DashboardSession = st.session_state.dashboard_session
    if session.status is LoadStatus.NOT_LOADED:
        session.attach(dataset)

    st.sidebar.markdown("### Data Status")
    _render_data_status(session)

    st.sidebar.markdown("---")
    if st.sidebar.button("Clear selection"):
        session.store.clear_selection()

    render_dashboard_page(session)


def _render_data_status(session: DashboardSession) -> None:
    """Render row counts and join integrity in the sidebar."""
    dataset = session.dataset
    st.sidebar.markdown(f"✅ Counties: {len(dataset.counties):,} rows")
    st.sidebar.markdown(f"✅ Hospitals: {len(dataset.hospitals):,} rows")
    st.sidebar.markdown(f"✅ DRG shares: {len(dataset.procedure_shares):,} rows")
    st.sidebar.markdown(f"✅ Geography: {len(dataset.geo_features):,} features")

    with st.sidebar.expander("Join integrity"):
        for result in session.integrity_report():
            st.markdown(result.message)
            for warning in result.warnings:
                st.caption(f"⚠️ {warning}")


if __name__ == "__main__":
    main()
