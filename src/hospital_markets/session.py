"""Dashboard session: loads the dataset once and keeps the views in sync.

The session owns the indexed dataset and the store. Every store update
reruns all four view-model builders against the new state and hands the
result to the session's listeners (the rendering layer).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from hospital_markets.compute.indexer import DashboardDataset, build_dataset_index
from hospital_markets.compute.standardize import standardize_counties
from hospital_markets.compute.topn import top_n_keys
from hospital_markets.config import Settings
from hospital_markets.ingest.loaders import RawSources, load_sources
from hospital_markets.ingest.normalizers import (
    build_county_records,
    build_hospital_records,
    build_procedure_share_records,
    extract_geo_features,
)
from hospital_markets.ingest.validators import (
    ValidationResult,
    validate_hospital_county_integrity,
    validate_procedure_provider_integrity,
)
from hospital_markets.models import DashboardState, FilterState
from hospital_markets.state.store import DashboardStore
from hospital_markets.views.map_view import MapViewModel, build_map_view
from hospital_markets.views.procedure_view import (
    ProcedureViewModel,
    build_procedure_view,
)
from hospital_markets.views.ranking_view import RankingViewModel, build_ranking_view
from hospital_markets.views.scatter_view import ScatterViewModel, build_scatter_view

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    NOT_LOADED = "NOT_LOADED"
    READY = "READY"


class DatasetNotLoadedError(RuntimeError):
    """View-models were requested before the dataset finished loading."""


@dataclass(frozen=True)
class DashboardViewModels:
    """Everything the renderer needs for one pass over the four views."""

    state: DashboardState
    top_keys: frozenset[str]
    map: MapViewModel
    scatter: ScatterViewModel
    procedures: ProcedureViewModel
    ranking: RankingViewModel


ViewModelListener = Callable[[DashboardViewModels], None]


def build_dataset(sources: RawSources) -> DashboardDataset:
    """Normalize, standardize and index the raw sources.

    Args:
        sources: Raw tables and geography document.

    Returns:
        Indexed dataset.

    Raises:
        DatasetLoadError: If any source fails schema validation.
    """
    logger.info("Building dashboard dataset...")

    counties = standardize_counties(build_county_records(sources.counties))
    hospitals = build_hospital_records(sources.hospitals)
    shares = build_procedure_share_records(sources.procedures)
    features = extract_geo_features(sources.geography)

    return build_dataset_index(counties, hospitals, shares, features)


class DashboardSession:
    """One user's dashboard: dataset, shared state and derived views."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.store = DashboardStore(
            DashboardState(filters=FilterState(top_n=settings.default_top_n))
        )
        self._dataset: DashboardDataset | None = None
        self._top_n_cache: tuple[str, int, frozenset[str]] | None = None
        self._listeners: list[ViewModelListener] = []
        self._unsubscribe_store: Callable[[], None] | None = None

    @property
    def status(self) -> LoadStatus:
        return LoadStatus.READY if self._dataset is not None else LoadStatus.NOT_LOADED

    @property
    def dataset(self) -> DashboardDataset:
        """Loaded dataset.

        Raises:
            DatasetNotLoadedError: If load() has not completed.
        """
        if self._dataset is None:
            raise DatasetNotLoadedError("Dashboard data has not been loaded yet")
        return self._dataset

    def load(self, sources: RawSources) -> DashboardDataset:
        """Build the dataset from raw sources and start tracking state changes.

        Args:
            sources: Raw tables and geography document.

        Returns:
            Indexed dataset.

        Raises:
            DatasetLoadError: If any source is invalid; the session stays
                NOT_LOADED.
        """
        return self.attach(build_dataset(sources))

    def load_from_settings(self) -> DashboardDataset:
        """Read the configured files and load them.

        Raises:
            DatasetLoadError: If any file cannot be loaded.
        """
        return self.load(load_sources(self.settings))

    def attach(self, dataset: DashboardDataset) -> DashboardDataset:
        """Use an already built dataset (e.g. one shared across sessions)."""
        self._dataset = dataset
        self._top_n_cache = None
        if self._unsubscribe_store is None:
            self._unsubscribe_store = self.store.subscribe(self._on_state_change)
        logger.info(f"Session ready with {len(dataset.counties):,} counties")
        return dataset

    def subscribe(self, listener: ViewModelListener) -> Callable[[], None]:
        """Receive fresh view-models after every state update.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def top_n_keys(self) -> frozenset[str]:
        """Current top-N county keys, recomputed only when N or the metric changes."""
        metric = self.settings.ranking_metric
        n = self.store.filters.top_n
        cached = self._top_n_cache
        if cached is not None and cached[0] == metric and cached[1] == n:
            return cached[2]

        keys = top_n_keys(self.dataset.counties, metric, n, self.settings.region_groups)
        self._top_n_cache = (metric, n, keys)
        return keys

    def build_view_models(self) -> DashboardViewModels:
        """Recompute all four view-models from the current state.

        Raises:
            DatasetNotLoadedError: If the dataset is not loaded.
        """
        dataset = self.dataset
        state = self.store.state
        top_keys = self.top_n_keys()

        return DashboardViewModels(
            state=state,
            top_keys=top_keys,
            map=build_map_view(dataset, state, top_keys, self.settings.ranking_metric),
            scatter=build_scatter_view(
                dataset, state, top_keys, self.settings.region_groups
            ),
            procedures=build_procedure_view(dataset, state),
            ranking=build_ranking_view(
                dataset, self.settings.region_groups, self.settings.highlight_group
            ),
        )

    def integrity_report(self) -> list[ValidationResult]:
        """Join integrity between hospitals, counties and procedure shares."""
        dataset = self.dataset
        return [
            validate_hospital_county_integrity(dataset.hospitals, dataset.county_by_key),
            validate_procedure_provider_integrity(
                dataset.procedure_shares, dataset.hospital_by_provider
            ),
        ]

    def _on_state_change(self, state: DashboardState) -> None:
        view_models = self.build_view_models()
        for listener in list(self._listeners):
            listener(view_models)
