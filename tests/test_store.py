"""
Timeline Store Tests

Tests verify:
- State codes are assigned 0, 1, 2, ... in first-seen order across entities
- The watermark is the minimum timestamp regardless of registration order
- A rejected timestamp or non-string field leaves the store untouched
- Converting into a cursor consumes the store
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from statemap import CalendarTime, EmissionCursor, TimelineStore
from statemap.config import Settings
from statemap.errors import InvalidTimestamp, MalformedInput, StoreConsumed

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T0_NS = 1_704_067_200 * 1_000_000_000


@pytest.fixture
def store():
    return TimelineStore("test", host="db01", entity_kind="Host")


class TestStateCodes:
    """Test state registry code assignment."""

    def test_codes_follow_first_appearance(self, store):
        store.register_event("h1", "idle", T0)
        store.register_event("h2", "busy", T0)
        store.register_event("h1", "busy", T0)
        store.register_event("h3", "wait", T0)
        assert store.states == {"idle": 0, "busy": 1, "wait": 2}

    def test_codes_are_independent_of_entity(self, store):
        """The entity that introduces a state does not matter."""
        store.register_event("h2", "s1", T0)
        store.register_event("h1", "s2", T0)
        store.register_event("h1", "s1", T0)
        assert store.states == {"s1": 0, "s2": 1}

    def test_states_view_is_a_copy(self, store):
        store.register_event("h1", "s1", T0)
        view = store.states
        view["s2"] = 99
        assert store.states == {"s1": 0}


class TestWatermark:
    """Test the earliest-timestamp watermark."""

    def test_empty_store_has_no_watermark(self, store):
        assert store.watermark is None

    def test_first_event_sets_watermark(self, store):
        store.register_event("h1", "s1", T0)
        assert store.watermark == T0_NS

    @pytest.mark.parametrize("offsets", [
        [0, 5, 10],
        [10, 5, 0],
        [5, 0, 10],
    ])
    def test_watermark_is_minimum_in_any_order(self, offsets):
        store = TimelineStore("order")
        for i, seconds in enumerate(offsets):
            store.register_event(f"h{i}", "s", T0 + timedelta(seconds=seconds))
        assert store.watermark == T0_NS

    def test_sub_second_precision(self, store):
        store.register_event("h1", "s1", CalendarTime(year=2024, month=1, day=1, nanosecond=900))
        store.register_event("h1", "s1", CalendarTime(year=2024, month=1, day=1, nanosecond=7))
        assert store.watermark == T0_NS + 7


class TestRegistration:
    """Test entity bookkeeping and atomic failure."""

    def test_entities_created_lazily(self, store):
        assert store.entities == ()
        store.register_event("h1", "s1", T0)
        store.register_event("h2", "s1", T0)
        store.register_event("h1", "s2", T0)
        assert set(store.entities) == {"h1", "h2"}
        assert store.event_count == 3

    def test_invalid_timestamp_leaves_store_untouched(self, store):
        store.register_event("h1", "s1", T0)

        with pytest.raises(InvalidTimestamp):
            store.register_event("h2", "new-state", CalendarTime(year=2024, month=2, day=30))

        assert store.states == {"s1": 0}
        assert store.entities == ("h1",)
        assert store.watermark == T0_NS
        assert store.event_count == 1

    @pytest.mark.parametrize("entity, state_name, tag", [
        ("h2", "s2", 5),
        (42, "s2", None),
        ("h2", 7, None),
    ])
    def test_non_string_fields_leave_store_untouched(self, store, entity, state_name, tag):
        """An earlier timestamp in a rejected call must not move the watermark."""
        store.register_event("h1", "s1", T0 + timedelta(seconds=10))

        with pytest.raises(MalformedInput):
            store.register_event(entity, state_name, T0, tag=tag)

        assert store.states == {"s1": 0}
        assert store.entities == ("h1",)
        assert store.watermark == T0_NS + 10 * 1_000_000_000
        assert store.event_count == 1

    def test_minimum_offset_is_zero_after_rejected_call(self, store):
        store.register_event("h1", "s1", T0 + timedelta(seconds=10))
        with pytest.raises(MalformedInput):
            store.register_event("h2", "s2", T0, tag=5)
        store.register_event("h1", "s2", T0 + timedelta(seconds=12))

        lines = list(store.into_cursor())
        header = json.loads(lines[0])
        offsets = [int(json.loads(line)["time"]) for line in lines[1:]]

        assert header["states"] == {
            "s1": {"color": None, "value": 0},
            "s2": {"color": None, "value": 1},
        }
        assert offsets == [0, 2 * 1_000_000_000]

    def test_header_metadata_is_kept_verbatim(self):
        cursor = TimelineStore("Title", host="host-1", entity_kind="CPU").into_cursor()
        header = cursor.header
        assert header.title == "Title"
        assert header.host == "host-1"
        assert header.entity_kind == "CPU"
        assert header.start == []

    def test_from_settings(self):
        config = Settings(
            STATEMAP_TITLE="from env",
            STATEMAP_HOST="box",
            STATEMAP_ENTITY_KIND="Disk",
        )
        header = TimelineStore.from_settings(config).into_cursor().header
        assert (header.title, header.host, header.entity_kind) == ("from env", "box", "Disk")


class TestConsumption:
    """Test the builder -> cursor ownership transfer."""

    def test_into_cursor_returns_cursor(self, store):
        store.register_event("h1", "s1", T0)
        assert isinstance(store.into_cursor(), EmissionCursor)
        assert store.consumed

    def test_register_after_conversion_fails(self, store):
        store.into_cursor()
        with pytest.raises(StoreConsumed):
            store.register_event("h1", "s1", T0)

    def test_second_conversion_fails(self, store):
        store.into_cursor()
        with pytest.raises(StoreConsumed):
            store.into_cursor()

    def test_views_fail_after_conversion(self, store):
        store.into_cursor()
        with pytest.raises(StoreConsumed):
            store.watermark
        with pytest.raises(StoreConsumed):
            store.states

    def test_iterating_store_consumes_it(self, store):
        store.register_event("h1", "s1", T0)
        lines = list(store)
        assert len(lines) == 2
        assert store.consumed

    def test_from_store_consumes(self, store):
        cursor = EmissionCursor.from_store(store)
        assert isinstance(cursor, EmissionCursor)
        assert store.consumed
