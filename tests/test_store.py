"""Tests for the trip store and its reducer."""
import itertools
import json

import pytest
from pydantic import ValidationError

from itinerary_app.config import Settings
from itinerary_app.models.actions import CreateTrip, DeleteTrip, SetActiveTrip, UpdateTrip
from itinerary_app.models.trip import AppState, ItemType, LocationCategory, TravelType, Trip
from itinerary_app.services.persistence import STORAGE_KEY, MemoryStorage
from itinerary_app.services.store import TripStore, open_store, reduce
from itinerary_app.services.views import group_by_calendar_day


def make_store(storage=None) -> TripStore:
    counter = itertools.count(1)
    return TripStore(
        storage or MemoryStorage(),
        clock=lambda: "2024-04-01T09:00:00+00:00",
        id_factory=lambda: f"id-{next(counter)}",
    )


class TestTrips:
    """Trip creation, update, deletion and the active pointer."""

    def test_create_and_get(self):
        """A created trip is returned by get_trip with the given fields."""
        store = make_store()

        trip = store.create_trip("Italy", "", "2024-05-01", "2024-05-10")
        fetched = store.get_trip(trip.id)

        assert fetched is not None
        assert fetched.name == "Italy"
        assert fetched.description == ""
        assert fetched.start_date == "2024-05-01"
        assert fetched.end_date == "2024-05-10"
        assert fetched.items == []
        assert fetched.created_at == "2024-04-01T09:00:00+00:00"

    def test_ids_are_unique(self):
        """Default id generation never repeats."""
        store = TripStore(MemoryStorage())

        ids = {store.create_trip(f"Trip {n}").id for n in range(20)}

        assert len(ids) == 20

    def test_create_sets_active_trip(self):
        """The newest trip becomes the active one."""
        store = make_store()

        store.create_trip("First")
        second = store.create_trip("Second")

        assert store.active_trip_id == second.id
        assert store.get_active_trip() == second

    def test_empty_name_is_ignored(self):
        """Blank names create nothing."""
        store = make_store()

        assert store.create_trip("") is None
        assert store.create_trip("   ") is None
        assert store.trips == []

    def test_update_merges_fields(self):
        """Only the given fields change; camelCase keys are accepted."""
        store = make_store()
        trip = store.create_trip("Italy", "Spring", "2024-05-01", "2024-05-10")

        store.update_trip({"id": trip.id, "name": "Italia", "endDate": "2024-05-12"})

        updated = store.get_trip(trip.id)
        assert updated.name == "Italia"
        assert updated.end_date == "2024-05-12"
        assert updated.description == "Spring"
        assert updated.created_at == trip.created_at

    def test_update_unknown_trip_is_noop(self):
        """Stale ids leave the state unchanged."""
        store = make_store()
        store.create_trip("Italy")
        before = store.state

        store.update_trip({"id": "missing", "name": "Ghost"})

        assert store.state == before

    def test_update_with_blank_name_is_rejected(self):
        """Validation errors surface before the state changes."""
        store = make_store()
        trip = store.create_trip("Italy")

        with pytest.raises(ValidationError):
            store.update_trip({"id": trip.id, "name": ""})

        assert store.get_trip(trip.id).name == "Italy"

    def test_update_with_whitespace_name_is_rejected(self):
        """A whitespace-only name is as blank on update as on create."""
        store = make_store()
        trip = store.create_trip("Italy")

        with pytest.raises(ValidationError):
            store.update_trip({"id": trip.id, "name": "   "})

        assert store.get_trip(trip.id).name == "Italy"
        assert store.create_trip("   ") is None

    def test_delete_clears_active_trip(self):
        """Deleting the active trip resets the pointer."""
        store = make_store()
        trip = store.create_trip("Italy")
        store.add_itinerary_item(trip.id, {"type": "stay", "title": "Hotel Roma"})

        store.delete_trip(trip.id)

        assert store.get_trip(trip.id) is None
        assert store.active_trip_id is None

    def test_delete_other_trip_keeps_active(self):
        """Deleting a different trip leaves the pointer alone."""
        store = make_store()
        first = store.create_trip("First")
        second = store.create_trip("Second")

        store.delete_trip(first.id)

        assert store.active_trip_id == second.id

    def test_set_active_trip(self):
        """Known ids are accepted, unknown ids ignored, None clears."""
        store = make_store()
        first = store.create_trip("First")
        store.create_trip("Second")

        store.set_active_trip(first.id)
        assert store.active_trip_id == first.id

        store.set_active_trip("missing")
        assert store.active_trip_id == first.id

        store.set_active_trip(None)
        assert store.active_trip_id is None
        assert store.get_active_trip() is None

    def test_get_missing_trip(self):
        """Lookups of unknown ids return None."""
        store = make_store()

        assert store.get_trip("nope") is None
        assert store.get_active_trip() is None


class TestItineraryItems:
    """Item operations inside a trip."""

    def test_add_item_scenario(self):
        """A stay added to a new trip shows up grouped under its day."""
        store = make_store()
        trip = store.create_trip("Italy", "", "2024-05-01", "2024-05-10")

        item = store.add_itinerary_item(trip.id, {
            "type": "stay",
            "title": "Hotel Roma",
            "startDate": "2024-05-01T14:00:00Z",
        })

        items = store.get_trip(trip.id).items
        assert len(items) == 1
        assert items[0].id == item.id
        assert items[0].type == ItemType.STAY
        groups = group_by_calendar_day(items)
        assert list(groups) == ["2024-05-01"]
        assert groups["2024-05-01"] == [item]

    def test_add_to_unknown_trip(self):
        """Items need an existing trip."""
        store = make_store()

        assert store.add_itinerary_item("missing", {"type": "stay", "title": "x"}) is None

    def test_supplied_id_is_replaced(self):
        """The store always assigns ids and timestamps itself."""
        store = make_store()
        trip = store.create_trip("Italy")

        item = store.add_itinerary_item(trip.id, {
            "id": "mine",
            "createdAt": "1999-01-01",
            "type": "activity",
            "title": "Colosseum",
        })

        assert item.id != "mine"
        assert item.created_at == "2024-04-01T09:00:00+00:00"

    def test_travel_type_only_for_travel(self):
        """Non-travel items never keep a travel type."""
        store = make_store()
        trip = store.create_trip("Italy")

        train = store.add_itinerary_item(trip.id, {"type": "travel", "travelType": "train", "title": "Frecciarossa"})
        stay = store.add_itinerary_item(trip.id, {"type": "stay", "travelType": "train", "title": "Hotel"})

        assert train.travel_type == TravelType.TRAIN
        assert stay.travel_type is None

    def test_update_item(self):
        """Item updates merge into the matching item only."""
        store = make_store()
        trip = store.create_trip("Italy")
        first = store.add_itinerary_item(trip.id, {"type": "activity", "title": "Vatican"})
        second = store.add_itinerary_item(trip.id, {"type": "activity", "title": "Forum"})

        store.update_itinerary_item(trip.id, {"id": first.id, "price": "€30", "coordinates": {"lat": 41.9, "lng": 12.45}})

        updated = store.get_trip(trip.id)
        assert updated.get_item(first.id).price == "€30"
        assert updated.get_item(first.id).coordinates.lat == 41.9
        assert updated.get_item(first.id).title == "Vatican"
        assert updated.get_item(second.id) == second

    def test_delete_item(self):
        """Deleting removes only that item."""
        store = make_store()
        trip = store.create_trip("Italy")
        keep = store.add_itinerary_item(trip.id, {"type": "stay", "title": "Hotel"})
        gone = store.add_itinerary_item(trip.id, {"type": "activity", "title": "Tour"})

        store.delete_itinerary_item(trip.id, gone.id)

        assert [i.id for i in store.get_trip(trip.id).items] == [keep.id]


class TestLocations:
    """Wishlist location operations."""

    def test_add_update_delete(self):
        """Locations live outside trips."""
        store = make_store()

        location = store.add_location({"name": "Roscioli", "category": "restaurant"})
        assert store.get_location(location.id).category == LocationCategory.RESTAURANT

        store.update_location({"id": location.id, "notes": "Book ahead"})
        assert store.get_location(location.id).notes == "Book ahead"
        assert store.get_location(location.id).name == "Roscioli"

        store.delete_location(location.id)
        assert store.locations == []

    def test_unknown_category_rejected(self):
        """The category set is closed."""
        store = make_store()

        with pytest.raises(ValidationError):
            store.add_location({"name": "Somewhere", "category": "casino"})


class TestReducer:
    """The pure reducing function."""

    def test_reduce_does_not_mutate(self):
        """The input state is left intact."""
        trip = Trip(id="t1", name="Italy")
        state = reduce(AppState(), CreateTrip(trip=trip))

        after = reduce(state, DeleteTrip(trip_id="t1"))

        assert [t.id for t in state.trips] == ["t1"]
        assert state.active_trip == "t1"
        assert after.trips == []
        assert after.active_trip is None

    def test_reduce_is_deterministic(self):
        """Same state and action, same result."""
        state = reduce(AppState(), CreateTrip(trip=Trip(id="t1", name="Italy")))
        action = UpdateTrip(trip_id="t1", changes={"description": "Rome and Florence"})

        assert reduce(state, action) == reduce(state, action)

    def test_set_active_unknown_trip(self):
        """The reducer itself refuses dangling pointers."""
        state = reduce(AppState(), CreateTrip(trip=Trip(id="t1", name="Italy")))

        assert reduce(state, SetActiveTrip(trip_id="t2")) is state

    def test_unknown_action(self):
        """Anything outside the action set is a programming error."""
        with pytest.raises(TypeError):
            reduce(AppState(), object())


class TestStorePersistence:
    """The store writes through to storage and reads back on start."""

    def test_every_change_is_saved(self):
        """The snapshot follows each mutation."""
        storage = MemoryStorage()
        store = make_store(storage)

        trip = store.create_trip("Italy", "", "2024-05-01")
        saved = json.loads(storage.get_item(STORAGE_KEY))
        assert saved["activeTrip"] == trip.id
        assert saved["trips"][0]["startDate"] == "2024-05-01"

        store.delete_trip(trip.id)
        saved = json.loads(storage.get_item(STORAGE_KEY))
        assert saved == {"trips": [], "locations": [], "activeTrip": None}

    def test_reload_from_storage(self):
        """A new store over the same storage sees the same state."""
        storage = MemoryStorage()
        store = make_store(storage)
        trip = store.create_trip("Italy")
        store.add_itinerary_item(trip.id, {"type": "travel", "travelType": "flight", "title": "FCO"})
        store.add_location({"name": "Pantheon", "category": "sight", "coordinates": {"lat": 41.8986, "lng": 12.4769}})

        reopened = make_store(storage)

        assert reopened.state.model_dump() == store.state.model_dump()

    def test_corrupt_snapshot_starts_empty(self):
        """Unreadable data is replaced by the empty state."""
        storage = MemoryStorage({STORAGE_KEY: "{not json"})

        store = make_store(storage)

        assert store.state == AppState()

    def test_open_store_uses_storage_dir(self, tmp_path):
        """open_store reads and writes under the configured directory."""
        config = Settings(storage_dir=str(tmp_path / "data"))

        trip = open_store(config).create_trip("Italy")

        assert (tmp_path / "data" / f"{STORAGE_KEY}.json").exists()
        assert open_store(config).get_trip(trip.id).name == "Italy"
