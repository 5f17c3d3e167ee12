"""Tests for store lookup."""

import pytest

from pizza_agent.errors import RemoteSystemError, StoreLookupError
from pizza_agent.models import Store, WaitRange
from pizza_agent.stores import find_nearby_stores, parse_store, rank_stores, summarize_store


class TestParseStore:
    """Store-locator entries map onto Store."""

    def test_fields(self, raw_stores):
        store = parse_store(raw_stores[0])
        assert store.store_id == "4336"
        assert store.address == "2 Portola Plaza, Monterey, CA 93940"
        assert store.is_open and store.is_online_capable
        assert store.allows_delivery and store.allows_carryout
        assert store.delivery_wait == WaitRange(min=20, max=30)
        assert store.distance == 1.2

    def test_missing_waits_and_distance(self, raw_stores):
        """Absent wait estimates and distances stay None."""
        store = parse_store(raw_stores[4])
        assert store.delivery_wait is None
        assert store.carryout_wait is None
        assert store.distance is None

    def test_string_distance(self, raw_stores):
        assert parse_store(raw_stores[5]).distance == 1.2


class TestRankStores:
    """Only open, online-capable stores are kept, nearest first."""

    def test_filters_and_sorts(self, raw_stores):
        ranked = rank_stores([parse_store(raw) for raw in raw_stores])
        assert [s.store_id for s in ranked] == ["1001", "4336", "6006", "5005"]

    def test_ties_keep_input_order(self):
        """Equal distances keep the provider's order."""
        stores = [
            Store(store_id=sid, is_open=True, is_online_capable=True, distance=2.0)
            for sid in ("b", "a", "c")
        ]
        assert [s.store_id for s in rank_stores(stores)] == ["b", "a", "c"]

    def test_missing_distance_sorts_last(self):
        stores = [
            Store(store_id="far", is_open=True, is_online_capable=True),
            Store(store_id="near", is_open=True, is_online_capable=True, distance=5.0),
        ]
        assert [s.store_id for s in rank_stores(stores)] == ["near", "far"]


class TestSummarizeStore:
    def test_renders_waits_and_distance(self, raw_stores):
        summary = summarize_store(parse_store(raw_stores[0]))
        assert summary.estimated_delivery_time == "20-30 min"
        assert summary.estimated_carryout_time == "10-15 min"
        assert summary.distance == "1.2 miles"

    def test_unknown_waits(self, raw_stores):
        summary = summarize_store(parse_store(raw_stores[4])).to_dict()
        assert summary["estimated_delivery_time"] == "Unknown"
        assert summary["estimated_carryout_time"] == "Unknown"
        assert "distance" not in summary


class TestFindNearbyStores:
    """find_nearby_stores() against the fake client."""

    def test_records_ranked_stores(self, session, client):
        """The session keeps the filtered, sorted list."""
        result = find_nearby_stores(session, client, "2 Portola Plaza, Monterey, CA 93940")
        ids = [s.store_id for s in result.stores]
        assert ids == ["1001", "4336", "6006", "5005"]
        assert [s.store_id for s in session.stores] == ids
        assert client.called("find_stores") == [("2 Portola Plaza, Monterey, CA 93940",)]

    def test_blank_address(self, session, client):
        with pytest.raises(StoreLookupError):
            find_nearby_stores(session, client, "   ")
        assert client.calls == []

    def test_rejection_raises_lookup_error(self, session, client):
        """A geocoding rejection is reported as a lookup failure."""
        client.reject("find_stores", "Could not locate address")
        with pytest.raises(StoreLookupError, match="Failed to find nearby stores"):
            find_nearby_stores(session, client, "nowhere")
        assert session.stores == ()

    def test_system_fault_raises(self, session, client):
        client.fail("find_stores")
        with pytest.raises(RemoteSystemError, match="connection reset"):
            find_nearby_stores(session, client, "2 Portola Plaza, Monterey, CA")

    def test_no_orderable_stores(self, session, client, raw_stores):
        """Only closed or phone-only stores nearby gives an empty list."""
        client.respond("find_stores", [raw_stores[2], raw_stores[3]])
        result = find_nearby_stores(session, client, "2 Portola Plaza, Monterey, CA")
        assert result.stores == []
