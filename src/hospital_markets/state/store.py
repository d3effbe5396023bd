"""Shared selection and filter state for the coordinated views.

The store is the only writer of DashboardState. Every interaction goes
through `update`, which merges a patch into a new immutable snapshot and
then synchronously notifies subscribers. Nothing is applied when a patch
is rejected.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from hospital_markets.config import TOP_N_MAX, TOP_N_MIN
from hospital_markets.models import (
    DashboardState,
    FilterState,
    HospitalRecord,
    SelectionState,
)

logger = logging.getLogger(__name__)

SELECTION_FIELDS = frozenset({"county_key", "provider_key"})
FILTER_FIELDS = frozenset({"top_n", "ownership_filter", "search_text"})

StateListener = Callable[[DashboardState], None]


def clamp_top_n(value: object) -> int:
    """Coerce a top-N request into [TOP_N_MIN, TOP_N_MAX].

    Args:
        value: Requested counties per state.

    Returns:
        Clamped integer.

    Raises:
        ValueError: If the value is not an integer.
    """
    if isinstance(value, bool):
        raise ValueError(f"top_n must be an integer, got {value!r}")
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ValueError(f"top_n must be an integer, got {value!r}") from e
    if isinstance(value, float) and value != number:
        raise ValueError(f"top_n must be an integer, got {value!r}")

    clamped = max(TOP_N_MIN, min(TOP_N_MAX, number))
    if clamped != number:
        logger.info(f"Clamped top_n {number} to {clamped}")
    return clamped


def normalize_search_text(text: str | None) -> str:
    """Strip and case-fold free-text search input."""
    return (text or "").strip().casefold()


def normalize_ownership_filter(categories: Iterable[str] | None) -> frozenset[str]:
    """Turn a multiselect value into a frozenset, dropping empty entries.

    A single category given as a string is kept whole.
    """
    if isinstance(categories, str):
        categories = [categories]
    return frozenset(c for c in (categories or ()) if c)


class DashboardStore:
    """Holder of the single live DashboardState."""

    def __init__(self, initial: DashboardState | None = None) -> None:
        self._state = initial if initial is not None else DashboardState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> DashboardState:
        """Current snapshot."""
        return self._state

    @property
    def selection(self) -> SelectionState:
        return self._state.selection

    @property
    def filters(self) -> FilterState:
        return self._state.filters

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener.

        Args:
            listener: Called with the new state after every update.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **patch: object) -> DashboardState:
        """Shallow-merge a patch into the state and notify listeners.

        Accepted fields: county_key, provider_key, top_n, ownership_filter,
        search_text. Fields not named in the patch keep their value.

        Args:
            **patch: Fields to change.

        Returns:
            The new state.

        Raises:
            ValueError: On unknown fields or a non-integer top_n.
        """
        unknown = set(patch) - SELECTION_FIELDS - FILTER_FIELDS
        if unknown:
            raise ValueError(f"Unknown state fields: {sorted(unknown)}")

        selection_patch = {k: v for k, v in patch.items() if k in SELECTION_FIELDS}
        filter_patch = {k: v for k, v in patch.items() if k in FILTER_FIELDS}

        if "top_n" in filter_patch:
            filter_patch["top_n"] = clamp_top_n(filter_patch["top_n"])
        if "search_text" in filter_patch:
            filter_patch["search_text"] = normalize_search_text(
                filter_patch["search_text"]  # type: ignore[arg-type]
            )
        if "ownership_filter" in filter_patch:
            filter_patch["ownership_filter"] = normalize_ownership_filter(
                filter_patch["ownership_filter"]  # type: ignore[arg-type]
            )

        self._state = DashboardState(
            selection=replace(self._state.selection, **selection_patch),
            filters=replace(self._state.filters, **filter_patch),
        )
        logger.debug(f"State updated with {sorted(patch)}: {self._state}")

        for listener in list(self._listeners):
            listener(self._state)

        return self._state

    def select_county(self, county_key: str | None) -> DashboardState:
        """Map click: select a county and clear the hospital."""
        return self.update(county_key=county_key, provider_key=None)

    def select_hospital(self, hospital: HospitalRecord) -> DashboardState:
        """Scatter click: select a hospital together with its county."""
        return self.update(
            county_key=hospital.county_key,
            provider_key=hospital.provider_key,
        )

    def clear_selection(self) -> DashboardState:
        return self.update(county_key=None, provider_key=None)
