"""Configuration management for the Hospital Markets dashboard."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_REGION_GROUPS = ("MI", "OH", "IN", "IL", "WI")
DEFAULT_HIGHLIGHT_GROUP = "MI"
DEFAULT_TOP_N = 10
TOP_N_MIN = 1
TOP_N_MAX = 50
DEFAULT_RANKING_METRIC = "discharges_sum"


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        log_level: Logging verbosity level.
        data_dir: Directory holding the input datasets.
        region_groups: States included in top-N ranking and state ranking.
        highlight_group: State drawn with distinct styling in the ranking view.
        default_top_n: Initial counties-per-state value for the top-N filter.
        ranking_metric: County field used to rank counties within a state.
        counties_file: County metrics table file name.
        hospitals_file: Hospital table file name.
        procedures_file: Per-hospital top procedure shares file name.
        geography_file: County GeoJSON file name.
    """

    log_level: str
    data_dir: Path
    region_groups: tuple[str, ...] = DEFAULT_REGION_GROUPS
    highlight_group: str = DEFAULT_HIGHLIGHT_GROUP
    default_top_n: int = DEFAULT_TOP_N
    ranking_metric: str = DEFAULT_RANKING_METRIC
    counties_file: str = "counties_2023.csv"
    hospitals_file: str = "hospitals_2025.csv"
    procedures_file: str = "hospital_drg_top5.csv"
    geography_file: str = "counties_geo_region.json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with loaded configuration.
        """
        load_dotenv()

        log_level = os.getenv("LOG_LEVEL", "INFO")
        data_dir = Path(os.getenv("DATA_DIR", "./data"))
        region_groups = _parse_region_groups(os.getenv("REGION_STATES", ""))
        highlight_group = os.getenv("HIGHLIGHT_STATE", DEFAULT_HIGHLIGHT_GROUP).upper()
        default_top_n = int(os.getenv("DEFAULT_TOP_N", str(DEFAULT_TOP_N)))
        default_top_n = max(TOP_N_MIN, min(TOP_N_MAX, default_top_n))
        ranking_metric = os.getenv("RANKING_METRIC", DEFAULT_RANKING_METRIC)

        logger.debug(
            f"Loaded settings: log_level={log_level}, data_dir={data_dir}, "
            f"region_groups={region_groups}, default_top_n={default_top_n}"
        )

        return cls(
            log_level=log_level,
            data_dir=data_dir,
            region_groups=region_groups,
            highlight_group=highlight_group,
            default_top_n=default_top_n,
            ranking_metric=ranking_metric,
            counties_file=os.getenv("COUNTIES_FILE", "counties_2023.csv"),
            hospitals_file=os.getenv("HOSPITALS_FILE", "hospitals_2025.csv"),
            procedures_file=os.getenv("PROCEDURES_FILE", "hospital_drg_top5.csv"),
            geography_file=os.getenv("GEOGRAPHY_FILE", "counties_geo_region.json"),
        )

    def source_paths(self) -> dict[str, Path]:
        """Resolve the four input files against the data directory.

        Returns:
            Mapping of source name to file path.
        """
        return {
            "counties": self.data_dir / self.counties_file,
            "hospitals": self.data_dir / self.hospitals_file,
            "procedures": self.data_dir / self.procedures_file,
            "geography": self.data_dir / self.geography_file,
        }


def _parse_region_groups(raw: str) -> tuple[str, ...]:
    """Parse a comma-separated state list, falling back to the default region."""
    groups = tuple(part.strip().upper() for part in raw.split(",") if part.strip())
    return groups or DEFAULT_REGION_GROUPS
