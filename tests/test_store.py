"""Tests for the shared dashboard state store."""

import pytest

from hospital_markets.models import DashboardState, HospitalRecord
from hospital_markets.state.store import (
    DashboardStore,
    clamp_top_n,
    normalize_ownership_filter,
    normalize_search_text,
)


@pytest.fixture
def store() -> DashboardStore:
    """Store with the default state."""
    return DashboardStore()


class TestUpdate:
    """Tests for patch merging."""

    def test_initial_state(self, store: DashboardStore) -> None:
        """Nothing is selected and all filters are open at start."""
        assert store.selection.county_key is None
        assert store.selection.provider_key is None
        assert store.filters.top_n == 10
        assert store.filters.ownership_filter == frozenset()
        assert store.filters.search_text == ""

    def test_partial_patch_keeps_other_fields(self, store: DashboardStore) -> None:
        """Only the fields named in a patch change."""
        store.update(county_key="26081")
        store.update(provider_key="260123")

        assert store.selection.county_key == "26081"
        assert store.selection.provider_key == "260123"
        assert store.filters.top_n == 10

    def test_states_are_immutable_snapshots(self, store: DashboardStore) -> None:
        """An update creates a new state rather than mutating the old one."""
        before = store.state

        after = store.update(top_n=5)

        assert before is not after
        assert before.filters.top_n == 10
        assert after.filters.top_n == 5

    def test_provider_need_not_match_county(self, store: DashboardStore) -> None:
        """County and provider are independent fields."""
        store.update(county_key="39035", provider_key="230038")

        assert store.state.selection.county_key == "39035"
        assert store.state.selection.provider_key == "230038"

    def test_clearing_with_none(self, store: DashboardStore) -> None:
        """Passing None clears a field."""
        store.update(county_key="26081")
        store.update(county_key=None)

        assert store.selection.county_key is None

    def test_unknown_field_rejected(self, store: DashboardStore) -> None:
        """Unknown fields raise and nothing is applied."""
        with pytest.raises(ValueError, match="Unknown state fields"):
            store.update(county_key="26081", colour="red")

        assert store.selection.county_key is None


class TestTopN:
    """Tests for top_n validation."""

    @pytest.mark.parametrize(
        "requested,expected",
        [(0, 1), (-3, 1), (1, 1), (25, 25), (50, 50), (51, 50), (1000, 50), (7.0, 7)],
    )
    def test_clamp_top_n(self, requested: object, expected: int) -> None:
        """Out-of-range values are clamped into 1-50."""
        assert clamp_top_n(requested) == expected

    @pytest.mark.parametrize("requested", [2.5, "ten", None, True])
    def test_non_integer_rejected(self, requested: object) -> None:
        """Non-integers are rejected."""
        with pytest.raises(ValueError, match="top_n must be an integer"):
            clamp_top_n(requested)

    def test_update_clamps(self, store: DashboardStore) -> None:
        """The stored value is the clamped one."""
        store.update(top_n=500)

        assert store.filters.top_n == 50

    def test_rejected_update_is_atomic(self, store: DashboardStore) -> None:
        """A rejected patch applies nothing and notifies no one."""
        received: list[DashboardState] = []
        store.subscribe(received.append)

        with pytest.raises(ValueError):
            store.update(county_key="26081", top_n=2.5)

        assert store.selection.county_key is None
        assert received == []


class TestListeners:
    """Tests for change notification."""

    def test_listener_receives_new_state(self, store: DashboardStore) -> None:
        """Listeners are called synchronously with the new snapshot."""
        received: list[DashboardState] = []
        store.subscribe(received.append)

        new_state = store.update(search_text="Mercy")

        assert received == [new_state]

    def test_unsubscribe(self, store: DashboardStore) -> None:
        """An unsubscribed listener is no longer called."""
        received: list[DashboardState] = []
        unsubscribe = store.subscribe(received.append)

        store.update(top_n=3)
        unsubscribe()
        store.update(top_n=4)

        assert len(received) == 1
        unsubscribe()  # Second call is harmless

    def test_listener_sees_state_already_applied(self, store: DashboardStore) -> None:
        """store.state already holds the new snapshot during notification."""
        seen: list[str | None] = []
        store.subscribe(lambda _state: seen.append(store.selection.county_key))

        store.update(county_key="26163")

        assert seen == ["26163"]


class TestFilterNormalization:
    """Tests for filter value normalization."""

    def test_search_text_casefolded(self, store: DashboardStore) -> None:
        """Search text is stripped and case-folded."""
        store.update(search_text="  Mercy HEALTH ")

        assert store.filters.search_text == "mercy health"

    def test_normalize_search_text_none(self) -> None:
        """None becomes an empty search."""
        assert normalize_search_text(None) == ""

    def test_ownership_filter_frozenset(self, store: DashboardStore) -> None:
        """Ownership filters are stored as frozensets without blanks."""
        store.update(ownership_filter=["Proprietary", "", "Proprietary"])

        assert store.filters.ownership_filter == frozenset({"Proprietary"})

    def test_single_category_string_kept_whole(self, store: DashboardStore) -> None:
        """A bare string is one category, not a set of characters."""
        store.update(ownership_filter="Proprietary")

        assert store.filters.ownership_filter == frozenset({"Proprietary"})

    def test_normalize_ownership_filter_none(self) -> None:
        """None becomes an empty filter."""
        assert normalize_ownership_filter(None) == frozenset()


class TestSelectionHelpers:
    """Tests for interaction shortcuts."""

    def test_select_county_clears_provider(self, store: DashboardStore) -> None:
        """Choosing a county on the map resets the hospital."""
        store.update(county_key="26081", provider_key="230038")

        store.select_county("39035")

        assert store.selection.county_key == "39035"
        assert store.selection.provider_key is None

    def test_select_hospital_sets_both(self, store: DashboardStore) -> None:
        """Choosing a hospital also selects its county."""
        store.select_hospital(HospitalRecord("360180", "Cleveland Clinic", "OH", "39035"))

        assert store.selection.county_key == "39035"
        assert store.selection.provider_key == "360180"

    def test_clear_selection_keeps_filters(self, store: DashboardStore) -> None:
        """Clearing the selection leaves filters alone."""
        store.update(county_key="26081", top_n=3)

        store.clear_selection()

        assert store.selection.county_key is None
        assert store.filters.top_n == 3
