"""Tests for snapshot persistence."""
import json
import logging

from itinerary_app.models.trip import AppState, Coordinates, ItineraryItem, Location, Trip
from itinerary_app.services.persistence import (
    STORAGE_KEY,
    LocalStorage,
    MemoryStorage,
    load_state,
    save_state,
)
from itinerary_app.services.store import TripStore


def sample_state() -> AppState:
    item = ItineraryItem(
        id="i1",
        type="travel",
        travel_type="ferry",
        title="Naples → Capri",
        start_date="2024-05-04T09:30:00+02:00",
        price="€25",
        coordinates=Coordinates(lat=40.55, lng=14.24),
        created_at="2024-04-01T09:00:00+00:00",
    )
    trip = Trip(id="t1", name="Italy", start_date="2024-05-01", items=[item], created_at="2024-04-01T09:00:00+00:00")
    location = Location(id="l1", name="Da Michele", category="restaurant", address="Naples")
    return AppState(trips=[trip], locations=[location], active_trip="t1")


class TestLoadState:
    """Reading the snapshot."""

    def test_missing_key(self):
        """No snapshot means the empty state."""
        state = load_state(MemoryStorage())

        assert state == AppState()

    def test_corrupt_json(self, caplog):
        """Unparseable data is logged and replaced by the empty state."""
        storage = MemoryStorage({STORAGE_KEY: "{\"trips\": ["})

        with caplog.at_level(logging.ERROR):
            state = load_state(storage)

        assert state == AppState()
        assert "Failed to load saved data" in caplog.text

    def test_wrong_shape(self):
        """Valid JSON of the wrong shape also falls back."""
        storage = MemoryStorage({STORAGE_KEY: json.dumps({"trips": "not a list"})})

        assert load_state(storage) == AppState()

    def test_dangling_active_trip(self):
        """An active trip that no longer exists is dropped on load."""
        storage = MemoryStorage({STORAGE_KEY: json.dumps({"trips": [], "locations": [], "activeTrip": "gone"})})

        assert load_state(storage).active_trip is None


class TestSaveState:
    """Writing the snapshot."""

    def test_round_trip(self):
        """load_state(save_state(state)) gives the same state back."""
        storage = MemoryStorage()
        state = sample_state()

        save_state(storage, state)

        assert load_state(storage).model_dump() == state.model_dump()

    def test_snapshot_uses_camel_case(self):
        """The stored JSON keeps the browser client's key names."""
        storage = MemoryStorage()

        save_state(storage, sample_state())
        data = json.loads(storage.get_item(STORAGE_KEY))

        assert set(data) == {"trips", "locations", "activeTrip"}
        item = data["trips"][0]["items"][0]
        assert item["travelType"] == "ferry"
        assert item["startDate"] == "2024-05-04T09:30:00+02:00"
        assert item["coordinates"] == {"lat": 40.55, "lng": 14.24}

    def test_overwrites_previous_value(self):
        """Last write wins."""
        storage = MemoryStorage()
        save_state(storage, sample_state())

        save_state(storage, AppState())

        assert load_state(storage).model_dump() == AppState().model_dump()


class TestLocalStorage:
    """File-backed storage."""

    def test_file_round_trip(self, tmp_path):
        """Values survive a new storage object over the same directory."""
        storage = LocalStorage(tmp_path / "data")
        save_state(storage, sample_state())

        reopened = LocalStorage(tmp_path / "data")

        assert load_state(reopened).model_dump() == sample_state().model_dump()

    def test_missing_and_removed(self, tmp_path):
        """Absent keys read as None, removal is idempotent."""
        storage = LocalStorage(tmp_path)

        assert storage.get_item(STORAGE_KEY) is None
        storage.set_item(STORAGE_KEY, "{}")
        storage.remove_item(STORAGE_KEY)
        storage.remove_item(STORAGE_KEY)
        assert storage.get_item(STORAGE_KEY) is None

    def test_undecodable_file(self, tmp_path, caplog):
        """A snapshot file that is not UTF-8 falls back to the empty state."""
        (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b'{"trips": [\xff\xfe')

        with caplog.at_level(logging.ERROR):
            store = TripStore(LocalStorage(tmp_path))

        assert store.state == AppState()
        assert "Failed to load saved data" in caplog.text
