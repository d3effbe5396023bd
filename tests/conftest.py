"""Shared pytest fixtures for Hospital Markets tests."""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import polars as pl
import pytest

from hospital_markets.compute.indexer import DashboardDataset
from hospital_markets.config import Settings
from hospital_markets.ingest.loaders import RawSources
from hospital_markets.session import DashboardSession, build_dataset


def _square(x: float, y: float) -> dict[str, Any]:
    """Unit square polygon with its lower-left corner at (x, y)."""
    return {
        "type": "Polygon",
        "coordinates": [[[x, y], [x + 1, y], [x + 1, y + 1], [x, y + 1], [x, y]]],
    }


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Set up mock environment variables for testing.

    Yields:
        Dictionary of mock environment variables.
    """
    env_vars = {
        "LOG_LEVEL": "DEBUG",
        "DATA_DIR": "/tmp/test_data",
        "REGION_STATES": "mi, oh",
        "HIGHLIGHT_STATE": "oh",
        "DEFAULT_TOP_N": "5",
        "RANKING_METRIC": "beds_sum",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings for the default five-state region, pointing at tmp_path."""
    return Settings(log_level="DEBUG", data_dir=tmp_path)


@pytest.fixture
def raw_counties_df() -> pl.DataFrame:
    """County table as read from CSV (all strings, z-scores left blank).

    Michigan discharges are 100 / 50 / 80 so the top two are Kent and Ingham.
    """
    return pl.DataFrame(
        {
            "fips": ["26081", "26163", "26065", "39035", "39049", "6037"],
            "state": ["MI", "MI", "MI", "OH", "OH", "CA"],
            "county_name": ["Kent", "Wayne", "Ingham", "Cuyahoga", "Franklin", "Los Angeles"],
            "spend": ["10500", "12500", "9800", "11800", "n/a", "13000"],
            "quality_bedweighted": ["3.8", "3.1", "", "3.5", "3.9", "3.0"],
            "z_spend": ["", "", "", "", "", ""],
            "z_quality": ["", "", "", "", "", ""],
            "beds_sum": ["2500", "9000", "1200", "7000", "6500", "20000"],
            "discharges_sum": ["100", "50", "80", "120", "90", "500"],
        }
    )


@pytest.fixture
def raw_hospitals_df() -> pl.DataFrame:
    """Hospital table including a dangling county and a blank ownership."""
    return pl.DataFrame(
        {
            "provider_id": ["23-0038", "230017", "230053", "360180", "360085", "50373", "999999"],
            "name": [
                "Spectrum Health Butterworth",
                "Mercy Health Saint Mary's",
                "Detroit Receiving",
                "Cleveland Clinic",
                "Ohio State Wexner",
                "LAC+USC Medical Center",
                "Orphan Community Hospital",
            ],
            "state": ["MI", "MI", "MI", "OH", "OH", "CA", "MI"],
            "fips": ["26081", "26081", "26163", "39035", "39049", "6037", "26999"],
            "stars": ["4", "3", "2", "5", "", "3", "1"],
            "beds": ["1000", "300", "", "1200", "900", "600", "50"],
            "ownership": [
                "Voluntary non-profit - Private",
                "Voluntary non-profit - Church",
                "Proprietary",
                "Voluntary non-profit - Private",
                "Government - State",
                "Government - Local",
                "",
            ],
            "hhi": ["0.31", "0.31", "0.18", "0.22", "0.27", "0.05", ""],
            "wavg_payment": ["14200", "12900", "13100", "16800", "15400", "14900", ""],
            "med_share": ["0.61", "0.66", "0.70", "0.52", "0.58", "0.64", ""],
            "surg_share": ["0.39", "0.34", "0.30", "0.48", "0.42", "0.36", ""],
        }
    )


@pytest.fixture
def raw_procedures_df() -> pl.DataFrame:
    """Procedure shares, deliberately out of rank order for one provider."""
    return pl.DataFrame(
        {
            "provider_id": ["230038", "230038", "230038", "360180", "123456"],
            "rank": ["2", "1", "3", "1", "1"],
            "drg_code": ["470", "871", "291", "246", "683"],
            "drg_desc": [
                "Major joint replacement w/o MCC",
                "Septicemia w/o MV >96 hours w MCC",
                "Heart failure & shock w MCC",
                "Perc cardiovasc proc w drug-eluting stent w MCC",
                "Renal failure w CC",
            ],
            "share": ["0.12", "0.18", "0.08", "0.20", "0.10"],
            "avg_medicare_payment": ["14000", "13000", "9000", "", "7000"],
        }
    )


@pytest.fixture
def geo_doc() -> dict[str, Any]:
    """County features; 26001 has no county record."""
    features = [
        ("26081", "Kent", "MI", 0, 0),
        ("26163", "Wayne", "MI", 2, 0),
        ("26065", "Ingham", "MI", 4, 0),
        ("26001", "Alcona", "MI", 6, 0),
        ("39035", "Cuyahoga", "OH", 0, -4),
        ("39049", "Franklin", "OH", 2, -4),
    ]
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"fips": fips, "county_name": name, "state": state},
                "geometry": _square(x, y),
            }
            for fips, name, state, x, y in features
        ],
    }


@pytest.fixture
def raw_sources(
    raw_counties_df: pl.DataFrame,
    raw_hospitals_df: pl.DataFrame,
    raw_procedures_df: pl.DataFrame,
    geo_doc: dict[str, Any],
) -> RawSources:
    """All four raw inputs bundled together."""
    return RawSources(
        counties=raw_counties_df,
        hospitals=raw_hospitals_df,
        procedures=raw_procedures_df,
        geography=geo_doc,
    )


@pytest.fixture
def dataset(raw_sources: RawSources) -> DashboardDataset:
    """Normalized, standardized and indexed sample dataset."""
    return build_dataset(raw_sources)


@pytest.fixture
def session(test_settings: Settings, raw_sources: RawSources) -> DashboardSession:
    """Loaded session with the default region and top-N of 10."""
    dashboard = DashboardSession(test_settings)
    dashboard.load(raw_sources)
    return dashboard
